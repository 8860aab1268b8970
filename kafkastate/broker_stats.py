"""Per-broker statistics and the rolling windows they carry."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, TypeVar

__all__ = ["StatisticsError", "Window", "TopicPartition", "Broker"]

_T = TypeVar("_T")

_I32 = (-(2**31), 2**31 - 1)
_I64 = (-(2**63), 2**63 - 1)
_U64 = (0, 2**64 - 1)


class StatisticsError(ValueError):
    """Raised when a statistics document does not have the expected shape."""


def _as_mapping(data: Any, context: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise StatisticsError(
            f"{context}: expected an object, got {type(data).__name__}"
        )
    return data


def _get(data: Mapping[str, Any], key: str, context: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise StatisticsError(f"{context}: missing field '{key}'") from None


def _check_int(value: Any, bounds: tuple[int, int], context: str, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise StatisticsError(
            f"{context}: field '{key}' must be an integer, got {type(value).__name__}"
        )
    low, high = bounds
    if not low <= value <= high:
        raise StatisticsError(
            f"{context}: field '{key}' value {value} is out of range {low}..{high}"
        )
    return value


def _int(
    data: Mapping[str, Any], key: str, context: str, bounds: tuple[int, int] = _I64
) -> int:
    return _check_int(_get(data, key, context), bounds, context, key)


def _opt_int(
    data: Mapping[str, Any], key: str, context: str, bounds: tuple[int, int] = _I64
) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    return _check_int(value, bounds, context, key)


def _str(data: Mapping[str, Any], key: str, context: str) -> str:
    value = _get(data, key, context)
    if not isinstance(value, str):
        raise StatisticsError(
            f"{context}: field '{key}' must be a string, got {type(value).__name__}"
        )
    return value


def _bool(data: Mapping[str, Any], key: str, context: str) -> bool:
    value = _get(data, key, context)
    if not isinstance(value, bool):
        raise StatisticsError(
            f"{context}: field '{key}' must be a boolean, got {type(value).__name__}"
        )
    return value


def _nested(
    data: Mapping[str, Any], key: str, context: str, convert: Callable[[Any], _T]
) -> _T:
    return convert(_get(data, key, context))


def _opt_nested(
    data: Mapping[str, Any], key: str, convert: Callable[[Any], _T]
) -> _T | None:
    value = data.get(key)
    if value is None:
        return None
    return convert(value)


def _map(
    data: Mapping[str, Any],
    key: str,
    context: str,
    convert: Callable[[str, Any], _T],
) -> dict[str, _T]:
    raw = _as_mapping(_get(data, key, context), f"{context}.{key}")
    return {name: convert(name, value) for name, value in raw.items()}


@dataclass
class Window:
    """Rolling window statistics, sampled estimates from an HDR histogram."""

    min: int = 0
    max: int = 0
    avg: int = 0
    sum: int = 0
    cnt: int = 0
    stddev: int = 0
    hdrsize: int = 0
    p50: int = 0
    p75: int = 0
    p90: int = 0
    p95: int = 0
    p99: int = 0
    p99_99: int = 0
    outofrange: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Window:
        """Build a window from its decoded JSON object."""
        context = "window"
        values = _as_mapping(data, context)
        return cls(**{f.name: _int(values, f.name, context) for f in fields(cls)})


@dataclass
class TopicPartition:
    """A topic and partition specifier."""

    topic: str = ""
    partition: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> TopicPartition:
        """Build a topic/partition pair from its decoded JSON object."""
        context = "topic partition"
        values = _as_mapping(data, context)
        return cls(
            topic=_str(values, "topic", context),
            partition=_int(values, "partition", context, _I32),
        )


@dataclass
class Broker:
    """Per-broker statistics."""

    name: str = ""
    nodeid: int = 0
    nodename: str = ""
    source: str = ""
    state: str = ""
    stateage: int = 0
    outbuf_cnt: int = 0
    outbuf_msg_cnt: int = 0
    waitresp_cnt: int = 0
    waitresp_msg_cnt: int = 0
    tx: int = 0
    txbytes: int = 0
    txerrs: int = 0
    txretries: int = 0
    txidle: int = 0
    req_timeouts: int = 0
    rx: int = 0
    rxbytes: int = 0
    rxerrs: int = 0
    rxcorriderrs: int = 0
    rxpartial: int = 0
    rxidle: int = 0
    req: dict[str, int] = field(default_factory=dict)
    zbuf_grow: int = 0
    buf_grow: int = 0
    wakeups: int | None = None
    connects: int | None = None
    disconnects: int | None = None
    int_latency: Window | None = None
    outbuf_latency: Window | None = None
    rtt: Window | None = None
    throttle: Window | None = None
    toppars: dict[str, TopicPartition] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Broker:
        """Build broker statistics from their decoded JSON object."""
        context = "broker"
        values = _as_mapping(data, context)

        def i64(key: str) -> int:
            return _int(values, key, context, _I64)

        def u64(key: str) -> int:
            return _int(values, key, context, _U64)

        return cls(
            name=_str(values, "name", context),
            nodeid=_int(values, "nodeid", context, _I32),
            nodename=_str(values, "nodename", context),
            source=_str(values, "source", context),
            state=_str(values, "state", context),
            stateage=i64("stateage"),
            outbuf_cnt=i64("outbuf_cnt"),
            outbuf_msg_cnt=i64("outbuf_msg_cnt"),
            waitresp_cnt=i64("waitresp_cnt"),
            waitresp_msg_cnt=i64("waitresp_msg_cnt"),
            tx=u64("tx"),
            txbytes=u64("txbytes"),
            txerrs=u64("txerrs"),
            txretries=u64("txretries"),
            txidle=i64("txidle"),
            req_timeouts=u64("req_timeouts"),
            rx=u64("rx"),
            rxbytes=u64("rxbytes"),
            rxerrs=u64("rxerrs"),
            rxcorriderrs=u64("rxcorriderrs"),
            rxpartial=u64("rxpartial"),
            rxidle=i64("rxidle"),
            req=_map(
                values,
                "req",
                context,
                lambda name, value: _check_int(value, _I64, f"{context}.req", name),
            ),
            zbuf_grow=u64("zbuf_grow"),
            buf_grow=u64("buf_grow"),
            wakeups=_opt_int(values, "wakeups", context, _U64),
            connects=_opt_int(values, "connects", context, _I64),
            disconnects=_opt_int(values, "disconnects", context, _I64),
            int_latency=_opt_nested(values, "int_latency", Window.from_dict),
            outbuf_latency=_opt_nested(values, "outbuf_latency", Window.from_dict),
            rtt=_opt_nested(values, "rtt", Window.from_dict),
            throttle=_opt_nested(values, "throttle", Window.from_dict),
            toppars=_map(
                values,
                "toppars",
                context,
                lambda _name, value: TopicPartition.from_dict(value),
            ),
        )