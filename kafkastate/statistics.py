"""Client statistics: the top-level document with its topics, partitions and groups."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from kafkastate.broker_stats import (
    _I32,
    _I64,
    _U64,
    Broker,
    StatisticsError,
    Window,
    _as_mapping,
    _bool,
    _check_int,
    _get,
    _int,
    _map,
    _nested,
    _opt_nested,
    _str,
)

__all__ = [
    "Partition",
    "Topic",
    "ConsumerGroup",
    "ExactlyOnceSemantics",
    "Statistics",
    "parse_statistics",
]

_PARTITION_KEY = re.compile(r"[+-]?[0-9]+")


def _partition_id(key: Any, context: str) -> int:
    if not isinstance(key, str) or not _PARTITION_KEY.fullmatch(key):
        raise StatisticsError(f"{context}: invalid partition key {key!r}")
    return _check_int(int(key), _I32, context, key)


@dataclass
class Partition:
    """Per-partition statistics."""

    partition: int = 0
    broker: int = 0
    leader: int = 0
    desired: bool = False
    unknown: bool = False
    msgq_cnt: int = 0
    msgq_bytes: int = 0
    xmit_msgq_cnt: int = 0
    xmit_msgq_bytes: int = 0
    fetchq_cnt: int = 0
    fetchq_size: int = 0
    fetch_state: str = ""
    query_offset: int = 0
    next_offset: int = 0
    app_offset: int = 0
    stored_offset: int = 0
    committed_offset: int = 0
    eof_offset: int = 0
    lo_offset: int = 0
    hi_offset: int = 0
    ls_offset: int = 0
    consumer_lag: int = 0
    consumer_lag_stored: int = 0
    txmsgs: int = 0
    txbytes: int = 0
    rxmsgs: int = 0
    rxbytes: int = 0
    msgs: int = 0
    rx_ver_drops: int = 0
    msgs_inflight: int = 0
    next_ack_seq: int = 0
    next_err_seq: int = 0
    acked_msgid: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Partition:
        """Build partition statistics from their decoded JSON object."""
        context = "partition"
        values = _as_mapping(data, context)

        def i32(key: str) -> int:
            return _int(values, key, context, _I32)

        def i64(key: str) -> int:
            return _int(values, key, context, _I64)

        def u64(key: str) -> int:
            return _int(values, key, context, _U64)

        return cls(
            partition=i32("partition"),
            broker=i32("broker"),
            leader=i32("leader"),
            desired=_bool(values, "desired", context),
            unknown=_bool(values, "unknown", context),
            msgq_cnt=i64("msgq_cnt"),
            msgq_bytes=u64("msgq_bytes"),
            xmit_msgq_cnt=i64("xmit_msgq_cnt"),
            xmit_msgq_bytes=u64("xmit_msgq_bytes"),
            fetchq_cnt=i64("fetchq_cnt"),
            fetchq_size=u64("fetchq_size"),
            fetch_state=_str(values, "fetch_state", context),
            query_offset=i64("query_offset"),
            next_offset=i64("next_offset"),
            app_offset=i64("app_offset"),
            stored_offset=i64("stored_offset"),
            committed_offset=i64("committed_offset"),
            eof_offset=i64("eof_offset"),
            lo_offset=i64("lo_offset"),
            hi_offset=i64("hi_offset"),
            ls_offset=i64("ls_offset"),
            consumer_lag=i64("consumer_lag"),
            consumer_lag_stored=i64("consumer_lag_stored"),
            txmsgs=u64("txmsgs"),
            txbytes=u64("txbytes"),
            rxmsgs=u64("rxmsgs"),
            rxbytes=u64("rxbytes"),
            msgs=u64("msgs"),
            rx_ver_drops=u64("rx_ver_drops"),
            msgs_inflight=i64("msgs_inflight"),
            next_ack_seq=i64("next_ack_seq"),
            next_err_seq=i64("next_err_seq"),
            acked_msgid=u64("acked_msgid"),
        )


@dataclass
class Topic:
    """Per-topic statistics."""

    topic: str = ""
    metadata_age: int = 0
    batchsize: Window = field(default_factory=Window)
    batchcnt: Window = field(default_factory=Window)
    partitions: dict[int, Partition] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Topic:
        """Build topic statistics from their decoded JSON object."""
        context = "topic"
        values = _as_mapping(data, context)
        raw_partitions = _as_mapping(
            _get(values, "partitions", context), f"{context}.partitions"
        )
        partitions = {
            _partition_id(key, f"{context}.partitions"): Partition.from_dict(value)
            for key, value in raw_partitions.items()
        }
        return cls(
            topic=_str(values, "topic", context),
            metadata_age=_int(values, "metadata_age", context, _I64),
            batchsize=_nested(values, "batchsize", context, Window.from_dict),
            batchcnt=_nested(values, "batchcnt", context, Window.from_dict),
            partitions=partitions,
        )


@dataclass
class ConsumerGroup:
    """Consumer group manager statistics."""

    state: str = ""
    stateage: int = 0
    join_state: str = ""
    rebalance_age: int = 0
    rebalance_cnt: int = 0
    rebalance_reason: str = ""
    assignment_size: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> ConsumerGroup:
        """Build consumer group statistics from their decoded JSON object."""
        context = "cgrp"
        values = _as_mapping(data, context)
        return cls(
            state=_str(values, "state", context),
            stateage=_int(values, "stateage", context, _I64),
            join_state=_str(values, "join_state", context),
            rebalance_age=_int(values, "rebalance_age", context, _I64),
            rebalance_cnt=_int(values, "rebalance_cnt", context, _I64),
            rebalance_reason=_str(values, "rebalance_reason", context),
            assignment_size=_int(values, "assignment_size", context, _I32),
        )


@dataclass
class ExactlyOnceSemantics:
    """Exactly-once semantics and idempotent producer statistics."""

    idemp_state: str = ""
    idemp_stateage: int = 0
    txn_state: str = ""
    txn_stateage: int = 0
    txn_may_enq: bool = False
    producer_id: int = 0
    producer_epoch: int = 0
    epoch_cnt: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> ExactlyOnceSemantics:
        """Build exactly-once statistics from their decoded JSON object."""
        context = "eos"
        values = _as_mapping(data, context)
        return cls(
            idemp_state=_str(values, "idemp_state", context),
            idemp_stateage=_int(values, "idemp_stateage", context, _I64),
            txn_state=_str(values, "txn_state", context),
            txn_stateage=_int(values, "txn_stateage", context, _I64),
            txn_may_enq=_bool(values, "txn_may_enq", context),
            producer_id=_int(values, "producer_id", context, _I64),
            producer_epoch=_int(values, "producer_epoch", context, _I64),
            epoch_cnt=_int(values, "epoch_cnt", context, _I64),
        )


@dataclass
class Statistics:
    """Overall client statistics."""

    name: str = ""
    client_id: str = ""
    client_type: str = ""
    ts: int = 0
    time: int = 0
    age: int = 0
    replyq: int = 0
    msg_cnt: int = 0
    msg_size: int = 0
    msg_max: int = 0
    msg_size_max: int = 0
    tx: int = 0
    tx_bytes: int = 0
    rx: int = 0
    rx_bytes: int = 0
    txmsgs: int = 0
    txmsg_bytes: int = 0
    rxmsgs: int = 0
    rxmsg_bytes: int = 0
    simple_cnt: int = 0
    metadata_cache_cnt: int = 0
    brokers: dict[str, Broker] = field(default_factory=dict)
    topics: dict[str, Topic] = field(default_factory=dict)
    cgrp: ConsumerGroup | None = None
    eos: ExactlyOnceSemantics | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Statistics:
        """Build statistics from the decoded JSON document."""
        context = "statistics"
        values = _as_mapping(data, context)

        def i64(key: str) -> int:
            return _int(values, key, context, _I64)

        def u64(key: str) -> int:
            return _int(values, key, context, _U64)

        return cls(
            name=_str(values, "name", context),
            client_id=_str(values, "client_id", context),
            client_type=_str(values, "type", context),
            ts=i64("ts"),
            time=i64("time"),
            age=i64("age"),
            replyq=i64("replyq"),
            msg_cnt=u64("msg_cnt"),
            msg_size=u64("msg_size"),
            msg_max=u64("msg_max"),
            msg_size_max=u64("msg_size_max"),
            tx=i64("tx"),
            tx_bytes=i64("tx_bytes"),
            rx=i64("rx"),
            rx_bytes=i64("rx_bytes"),
            txmsgs=i64("txmsgs"),
            txmsg_bytes=i64("txmsg_bytes"),
            rxmsgs=i64("rxmsgs"),
            rxmsg_bytes=i64("rxmsg_bytes"),
            simple_cnt=i64("simple_cnt"),
            metadata_cache_cnt=i64("metadata_cache_cnt"),
            brokers=_map(
                values, "brokers", context, lambda _n, value: Broker.from_dict(value)
            ),
            topics=_map(
                values, "topics", context, lambda _n, value: Topic.from_dict(value)
            ),
            cgrp=_opt_nested(values, "cgrp", ConsumerGroup.from_dict),
            eos=_opt_nested(values, "eos", ExactlyOnceSemantics.from_dict),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> Statistics:
        """Parse statistics from a JSON document."""
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StatisticsError(f"invalid statistics JSON: {exc}") from exc
        return cls.from_dict(data)


def parse_statistics(text: str | bytes) -> Statistics:
    """Parse a JSON statistics document."""
    return Statistics.from_json(text)