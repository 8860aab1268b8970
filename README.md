# kafkastate

Plain-Python data structures for Kafka client state. The package has no
dependencies beyond the standard library.

- `kafkastate.statistics`: typed parsing of the JSON statistics document that
  Kafka clients emit periodically: `Statistics`, `Topic`, `Partition`,
  `ConsumerGroup`, `ExactlyOnceSemantics` and `parse_statistics`.
- `kafkastate.broker_stats`: per-broker statistics: `Broker`, `Window`,
  `TopicPartition`, and `StatisticsError`, raised for malformed documents.
- `kafkastate.topic_partition_list`: `Offset` values with the usual
  raw-integer encoding, and `TopicPartitionList`, an ordered list of
  topic/partition/offset/metadata entries (`TopicPartitionListElem`).
- `kafkastate.util`: `Timeout`, and the time helpers `millis_to_epoch` and
  `current_time_millis`.

## Installation

```
pip install kafkastate
```

## Parsing statistics

```python
from kafkastate.statistics import parse_statistics

stats = parse_statistics(json_text)   # str or bytes
print(stats.name, stats.client_type, stats.msg_cnt)
for name, broker in stats.brokers.items():
    print(name, broker.state, broker.rtt.p99 if broker.rtt else None)
for topic in stats.topics.values():
    for partition_id, partition in topic.partitions.items():
        print(topic.topic, partition_id, partition.consumer_lag)
```

`Statistics.from_json` does the same as `parse_statistics`, and every class
has a `from_dict` for an already decoded object. The JSON key `type` becomes
`Statistics.client_type`; partition keys become integers. `cgrp`, `eos`, and
the broker fields `wakeups`, `connects`, `disconnects`, `int_latency`,
`outbuf_latency`, `rtt` and `throttle` are `None` when absent.

A document that is not valid JSON, lacks a required field, or holds a value of
the wrong type or out of range for its field raises `StatisticsError` (a
`ValueError`).

## Offsets and topic partition lists

```python
from kafkastate.topic_partition_list import Offset, TopicPartitionList

tpl = TopicPartitionList()
tpl.add_partition_offset("events", 0, Offset.at(42))
tpl.add_partition_range("events", 1, 3)   # partitions 1, 2 and 3
tpl.set_all_offsets(Offset.BEGINNING)

elem = tpl.find_partition("events", 0)
elem.set_metadata("checkpoint")

print(len(tpl), tpl.to_topic_map())
print(Offset.tail(10).to_raw())   # -2010
print(Offset.from_raw(-2010))     # OffsetTail(10)
print(Offset.at(-1).to_raw())     # None
```

`Offset` has the logical values `BEGINNING`, `END`, `STORED` and `INVALID`,
plus `Offset.at(n)` and `Offset.tail(n)`. New entries start at
`Offset.INVALID`; `add_topic_unassigned` adds an entry with partition -1.

`TopicPartitionList` supports `len()`, iteration, `==` (same entries
regardless of order), `copy()`, `elements()`, `elements_for_topic()` and
`from_topic_map()` / `to_topic_map()`.

An offset with no raw form raises `SetPartitionOffsetError` with code
`"InvalidArgument"`; setting the offset of a topic and partition not in the
list raises it with code `"UnknownPartition"`. Both errors derive from
`KafkaError`. `TopicPartitionListElem.check_error()` raises
`OffsetFetchError` when the entry carries a non-zero error code.

## Timeouts and time

```python
from datetime import datetime, timedelta, timezone
from kafkastate.util import Timeout, millis_to_epoch

t = Timeout.after(timedelta(seconds=5))
print(t.as_millis())                        # 5000
print(Timeout.never().as_millis())          # -1
print(Timeout.from_value(None).is_never)    # True
print((t - Timeout.after(timedelta(seconds=2))).as_millis())   # 3000

print(millis_to_epoch(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)))  # 1000
```

Subtracting `Timeout.never()` raises `ValueError`; a never-ending timeout
minus a finite one stays never-ending. Timeouts order with never as the
largest. `millis_to_epoch` treats a naive datetime as UTC and gives 0 for times
before the epoch; `current_time_millis()` returns the current time.

## What this package does not do

It does not connect to Kafka brokers, produce or consume messages, or collect
statistics itself. It parses statistics documents you already have and models
offsets, partition lists and timeouts as plain in-memory values.