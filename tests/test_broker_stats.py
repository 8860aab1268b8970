import copy
import dataclasses

import pytest

from kafkastate.broker_stats import Broker, StatisticsError, TopicPartition, Window


def _window(**values):
    keys = [
        "min", "max", "avg", "sum", "stddev", "p50", "p75", "p90",
        "p95", "p99", "p99_99", "outofrange", "hdrsize", "cnt",
    ]
    return dict(zip(keys, values["numbers"]))


INT_LATENCY = _window(
    numbers=[2, 9193, 605, 874202325, 1080, 319, 481, 1135, 3023, 5919, 9087, 0, 15472, 1443154]
)
OUTBUF_LATENCY = _window(
    numbers=[1, 308, 22, 107311, 21, 22, 29, 36, 44, 111, 309, 0, 11376, 4740]
)
RTT = _window(
    numbers=[94, 3279, 237, 1124867, 198, 193, 245, 329, 393, 1183, 3279, 0, 13424, 4739]
)
THROTTLE = _window(numbers=[0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 17520, 4739])

REQ = {
    "Produce": 31307,
    "Offset": 0,
    "Metadata": 2,
    "FindCoordinator": 0,
    "SaslHandshake": 0,
    "ApiVersion": 2,
    "InitProducerId": 0,
    "AddPartitionsToTxn": 0,
    "AddOffsetsToTxn": 0,
    "EndTxn": 0,
    "TxnOffsetCommit": 0,
    "SaslAuthenticate": 0,
}

BROKER = {
    "name": "localhost:9092/0",
    "nodeid": 0,
    "nodename": "localhost:9092",
    "source": "configured",
    "state": "UP",
    "stateage": 8005652,
    "outbuf_cnt": 0,
    "outbuf_msg_cnt": 0,
    "waitresp_cnt": 1,
    "waitresp_msg_cnt": 126,
    "tx": 31311,
    "txbytes": 463869957,
    "txerrs": 0,
    "txretries": 0,
    "txidle": 5,
    "req_timeouts": 0,
    "rx": 31310,
    "rxbytes": 1753668,
    "rxerrs": 0,
    "rxcorriderrs": 0,
    "rxpartial": 0,
    "rxidle": 5,
    "zbuf_grow": 0,
    "buf_grow": 0,
    "wakeups": 131568,
    "connects": 1,
    "disconnects": 0,
    "int_latency": INT_LATENCY,
    "outbuf_latency": OUTBUF_LATENCY,
    "rtt": RTT,
    "throttle": THROTTLE,
    "req": REQ,
    "toppars": {
        "test-0": {"topic": "test", "partition": 0},
        "test-1": {"topic": "test", "partition": 1},
        "test-2": {"topic": "test", "partition": 2},
    },
}


@pytest.fixture
def broker_data():
    return copy.deepcopy(BROKER)


def test_window_round_trip():
    window = Window.from_dict(INT_LATENCY)
    assert dataclasses.asdict(window) == INT_LATENCY


def test_window_pinned_values():
    window = Window.from_dict(RTT)
    assert window.min == 94
    assert window.p99_99 == 3279
    assert window.cnt == 4739


def test_window_missing_field():
    data = dict(RTT)
    del data["p99_99"]
    with pytest.raises(StatisticsError, match="p99_99"):
        Window.from_dict(data)


def test_window_rejects_float():
    data = dict(RTT, avg=237.5)
    with pytest.raises(StatisticsError, match="avg"):
        Window.from_dict(data)


def test_window_rejects_non_object():
    with pytest.raises(StatisticsError):
        Window.from_dict([1, 2, 3])


def test_topic_partition_from_dict():
    tp = TopicPartition.from_dict({"topic": "test", "partition": 2})
    assert tp == TopicPartition(topic="test", partition=2)


def test_topic_partition_partition_out_of_i32_range():
    with pytest.raises(StatisticsError, match="partition"):
        TopicPartition.from_dict({"topic": "test", "partition": 2**31})


def test_topic_partition_topic_must_be_string():
    with pytest.raises(StatisticsError, match="topic"):
        TopicPartition.from_dict({"topic": 5, "partition": 0})


def test_broker_example(broker_data):
    broker = Broker.from_dict(broker_data)
    assert broker.name == "localhost:9092/0"
    assert broker.nodename == "localhost:9092"
    assert broker.state == "UP"
    assert broker.req == REQ
    assert broker.wakeups == 131568
    assert broker.rtt == Window.from_dict(RTT)
    assert broker.toppars["test-1"] == TopicPartition("test", 1)
    assert set(broker.toppars) == {"test-0", "test-1", "test-2"}


def test_broker_scalar_fields_match_input(broker_data):
    broker = Broker.from_dict(broker_data)
    as_dict = dataclasses.asdict(broker)
    for key, value in broker_data.items():
        assert as_dict[key] == value


def test_broker_optional_fields_may_be_absent(broker_data):
    for key in ("wakeups", "connects", "disconnects", "int_latency",
                "outbuf_latency", "rtt", "throttle"):
        del broker_data[key]
    broker = Broker.from_dict(broker_data)
    assert broker.wakeups is None
    assert broker.connects is None
    assert broker.rtt is None
    assert broker.throttle is None


def test_broker_optional_fields_may_be_null(broker_data):
    broker_data["connects"] = None
    broker_data["outbuf_latency"] = None
    broker = Broker.from_dict(broker_data)
    assert broker.connects is None
    assert broker.outbuf_latency is None


def test_broker_ignores_unknown_fields(broker_data):
    broker_data["something_new"] = {"x": 1}
    assert Broker.from_dict(broker_data) == Broker.from_dict(BROKER)


@pytest.mark.parametrize("key", ["name", "tx", "req", "toppars", "buf_grow"])
def test_broker_missing_required_field(broker_data, key):
    del broker_data[key]
    with pytest.raises(StatisticsError, match=key):
        Broker.from_dict(broker_data)


def test_broker_unsigned_counter_rejects_negative(broker_data):
    broker_data["txbytes"] = -1
    with pytest.raises(StatisticsError, match="txbytes"):
        Broker.from_dict(broker_data)


def test_broker_signed_counter_accepts_negative(broker_data):
    broker_data["txidle"] = -1
    assert Broker.from_dict(broker_data).txidle == -1


def test_broker_rejects_bool_as_integer(broker_data):
    broker_data["stateage"] = True
    with pytest.raises(StatisticsError, match="stateage"):
        Broker.from_dict(broker_data)


def test_broker_req_values_must_be_integers(broker_data):
    broker_data["req"]["Produce"] = "many"
    with pytest.raises(StatisticsError, match="Produce"):
        Broker.from_dict(broker_data)


def test_broker_nested_window_error_propagates(broker_data):
    del broker_data["throttle"]["hdrsize"]
    with pytest.raises(StatisticsError, match="hdrsize"):
        Broker.from_dict(broker_data)


def test_statistics_error_is_value_error():
    with pytest.raises(ValueError):
        Broker.from_dict("not an object")


def test_defaults_are_empty():
    broker = Broker()
    assert broker.req == {}
    assert broker.toppars == {}
    assert broker.int_latency is None
    assert dataclasses.asdict(Window()) == {f: 0 for f in INT_LATENCY}