"""Topics, partitions and offsets, and lists of them."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

__all__ = [
    "KafkaError",
    "SetPartitionOffsetError",
    "OffsetFetchError",
    "OffsetKind",
    "Offset",
    "TopicPartitionListElem",
    "TopicPartitionList",
]

PARTITION_UNASSIGNED = -1

_OFFSET_BEGINNING = -2
_OFFSET_END = -1
_OFFSET_STORED = -1000
_OFFSET_INVALID = -1001
_OFFSET_TAIL_BASE = -2000

_INVALID_ARGUMENT = "InvalidArgument"
_UNKNOWN_PARTITION = "UnknownPartition"

_DEFAULT_CAPACITY = 5


class KafkaError(Exception):
    """Base class for errors raised by this package's Kafka structures."""


class SetPartitionOffsetError(KafkaError):
    """Raised when an offset cannot be set on a partition."""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Failed to set partition offset: {code}")


class OffsetFetchError(KafkaError):
    """Raised when an entry of a list carries an offset fetch error."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Offset fetch error: {code}")


class OffsetKind(Enum):
    """The kinds of Kafka offset."""

    BEGINNING = "Beginning"
    END = "End"
    STORED = "Stored"
    INVALID = "Invalid"
    OFFSET = "Offset"
    OFFSET_TAIL = "OffsetTail"


_VALUED_KINDS = frozenset({OffsetKind.OFFSET, OffsetKind.OFFSET_TAIL})


@dataclass(frozen=True)
class Offset:
    """A Kafka offset: a logical position, an absolute offset or one from the end.

    Negative absolute or tail values can be built but have no raw form.
    """

    kind: OffsetKind
    value: int = 0

    BEGINNING: ClassVar[Offset]
    END: ClassVar[Offset]
    STORED: ClassVar[Offset]
    INVALID: ClassVar[Offset]

    def __post_init__(self) -> None:
        if self.kind not in _VALUED_KINDS and self.value != 0:
            raise ValueError(f"{self.kind.value} offsets carry no value")

    @classmethod
    def at(cls, value: int) -> Offset:
        """A specific offset to consume from."""
        return cls(OffsetKind.OFFSET, value)

    @classmethod
    def tail(cls, value: int) -> Offset:
        """An offset relative to the end of the partition."""
        return cls(OffsetKind.OFFSET_TAIL, value)

    @classmethod
    def from_raw(cls, raw_offset: int) -> Offset:
        """Decode the integer representation of an offset."""
        if raw_offset == _OFFSET_BEGINNING:
            return cls.BEGINNING
        if raw_offset == _OFFSET_END:
            return cls.END
        if raw_offset == _OFFSET_STORED:
            return cls.STORED
        if raw_offset == _OFFSET_INVALID:
            return cls.INVALID
        if raw_offset <= _OFFSET_TAIL_BASE:
            return cls.tail(_OFFSET_TAIL_BASE - raw_offset)
        return cls.at(raw_offset)

    def to_raw(self) -> int | None:
        """The integer representation, or ``None`` if there is none."""
        if self.kind is OffsetKind.BEGINNING:
            return _OFFSET_BEGINNING
        if self.kind is OffsetKind.END:
            return _OFFSET_END
        if self.kind is OffsetKind.STORED:
            return _OFFSET_STORED
        if self.kind is OffsetKind.INVALID:
            return _OFFSET_INVALID
        if self.kind is OffsetKind.OFFSET:
            return self.value if self.value >= 0 else None
        return _OFFSET_TAIL_BASE - self.value if self.value > 0 else None

    def __repr__(self) -> str:
        if self.kind in _VALUED_KINDS:
            return f"{self.kind.value}({self.value})"
        return self.kind.value


Offset.BEGINNING = Offset(OffsetKind.BEGINNING)
Offset.END = Offset(OffsetKind.END)
Offset.STORED = Offset(OffsetKind.STORED)
Offset.INVALID = Offset(OffsetKind.INVALID)


def _raw_or_raise(offset: Offset) -> int:
    raw = offset.to_raw()
    if raw is None:
        raise SetPartitionOffsetError(_INVALID_ARGUMENT)
    return raw


class TopicPartitionListElem:
    """One entry of a topic partition list."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        topic: str,
        partition: int,
        *,
        offset: Offset = Offset.INVALID,
        metadata: str = "",
        error_code: int = 0,
    ) -> None:
        self._topic = topic
        self._partition = partition
        self._raw_offset = _raw_or_raise(offset)
        self._metadata = metadata
        self._error_code = error_code

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def partition(self) -> int:
        return self._partition

    @property
    def offset(self) -> Offset:
        return Offset.from_raw(self._raw_offset)

    @property
    def metadata(self) -> str:
        return self._metadata

    @property
    def error_code(self) -> int:
        return self._error_code

    def check_error(self) -> None:
        """Raise the error recorded for this entry, if there is one."""
        if self._error_code != 0:
            raise OffsetFetchError(self._error_code)

    def set_offset(self, offset: Offset) -> None:
        """Set the offset; offsets without a raw form are rejected."""
        self._raw_offset = _raw_or_raise(offset)

    def set_metadata(self, metadata: str) -> None:
        """Set the metadata associated with the entry."""
        if not isinstance(metadata, str):
            raise TypeError(f"metadata must be a string, got {type(metadata).__name__}")
        self._metadata = metadata

    def _copy(self) -> TopicPartitionListElem:
        elem = TopicPartitionListElem(self._topic, self._partition)
        elem._raw_offset = self._raw_offset
        elem._metadata = self._metadata
        elem._error_code = self._error_code
        return elem

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TopicPartitionListElem):
            return NotImplemented
        return (
            self.topic == other.topic
            and self.partition == other.partition
            and self.offset == other.offset
            and self.metadata == other.metadata
        )

    def __repr__(self) -> str:
        return (
            f"{self.topic}/{self.partition}: offset={self.offset!r} "
            f"metadata={json.dumps(self.metadata, ensure_ascii=False)}"
        )


class TopicPartitionList:
    """A list of topics and partitions with optional offsets."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, capacity: int = _DEFAULT_CAPACITY) -> None:
        if capacity < 0:
            raise ValueError("capacity cannot be negative")
        self._capacity = capacity
        self._elems: list[TopicPartitionListElem] = []

    @classmethod
    def from_topic_map(
        cls, topic_map: Mapping[tuple[str, int], Offset]
    ) -> TopicPartitionList:
        """Build a list from a mapping of (topic, partition) to offset."""
        tpl = cls(len(topic_map))
        for (topic, partition), offset in topic_map.items():
            tpl.add_partition_offset(topic, partition, offset)
        return tpl

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._elems)

    def __iter__(self) -> Iterator[TopicPartitionListElem]:
        return iter(self._elems)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TopicPartitionList):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(
            elem == other.find_partition(elem.topic, elem.partition)
            for elem in self._elems
        )

    def __repr__(self) -> str:
        return "TPL {" + "; ".join(repr(elem) for elem in self._elems) + "}"

    def copy(self) -> TopicPartitionList:
        """An independent copy of the list and its entries."""
        tpl = TopicPartitionList(self._capacity)
        tpl._elems = [elem._copy() for elem in self._elems]
        return tpl

    __copy__ = copy

    def _append(self, elem: TopicPartitionListElem) -> None:
        if len(self._elems) >= self._capacity:
            self._capacity = max(self._capacity * 2, len(self._elems) + 1)
        self._elems.append(elem)

    def add_topic_unassigned(self, topic: str) -> TopicPartitionListElem:
        """Add a topic with unassigned partitions."""
        return self.add_partition(topic, PARTITION_UNASSIGNED)

    def add_partition(self, topic: str, partition: int) -> TopicPartitionListElem:
        """Add a topic and partition; the new entry is returned."""
        elem = TopicPartitionListElem(topic, partition)
        self._append(elem)
        return elem

    def add_partition_range(
        self, topic: str, start_partition: int, stop_partition: int
    ) -> None:
        """Add partitions ``start_partition`` to ``stop_partition`` inclusive."""
        for partition in range(start_partition, stop_partition + 1):
            self.add_partition(topic, partition)

    def set_partition_offset(self, topic: str, partition: int, offset: Offset) -> None:
        """Set the offset of an entry already in the list."""
        raw = _raw_or_raise(offset)
        elem = self.find_partition(topic, partition)
        if elem is None:
            raise SetPartitionOffsetError(_UNKNOWN_PARTITION)
        elem._raw_offset = raw

    def add_partition_offset(self, topic: str, partition: int, offset: Offset) -> None:
        """Add a topic and partition with the given offset."""
        self.add_partition(topic, partition)
        self.set_partition_offset(topic, partition, offset)

    def find_partition(self, topic: str, partition: int) -> TopicPartitionListElem | None:
        """The first entry for the topic and partition, or ``None``."""
        return next(
            (
                elem
                for elem in self._elems
                if elem.topic == topic and elem.partition == partition
            ),
            None,
        )

    def set_all_offsets(self, offset: Offset) -> None:
        """Set every entry to the given offset."""
        for elem in self._elems:
            elem.set_offset(offset)

    def elements(self) -> list[TopicPartitionListElem]:
        """All entries of the list."""
        return list(self._elems)

    def elements_for_topic(self, topic: str) -> list[TopicPartitionListElem]:
        """The entries that belong to ``topic``."""
        return [elem for elem in self._elems if elem.topic == topic]

    def to_topic_map(self) -> dict[tuple[str, int], Offset]:
        """A mapping of (topic, partition) to offset."""
        return {(elem.topic, elem.partition): elem.offset for elem in self._elems}