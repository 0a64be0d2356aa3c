"""Server-side HBase filters and their wire encoding."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable

from ..wire import MessageWriter
from .comparator import Comparator, PBComparator

FILTER_PATH = "org.apache.hadoop.hbase.filter."


class ListOperator(IntEnum):
    """How the members of a FilterList are combined."""

    MUST_PASS_ALL = 1
    MUST_PASS_ONE = 2


class CompareType(IntEnum):
    """Comparison applied by compare-based filters."""

    LESS = 0
    LESS_OR_EQUAL = 1
    EQUAL = 2
    NOT_EQUAL = 3
    GREATER_OR_EQUAL = 4
    GREATER = 5
    NO_OP = 6


@dataclass(frozen=True)
class PBFilter:
    """A filter in its wire form: a Java class name plus its serialized body."""

    name: str
    serialized_filter: bytes


class Filter(ABC):
    """Something that can be encoded as a server-side filter."""

    @abstractmethod
    def construct_pb_filter(self) -> PBFilter:
        """Return the filter encoded for the wire."""


def _pb_filter(kind: str, payload: bytes) -> PBFilter:
    return PBFilter(name=FILTER_PATH + kind, serialized_filter=payload)


def _require(value, field_name: str, message: str) -> None:
    if value is None:
        raise ValueError(f"required field {message}.{field_name} not set")


def _encode_pb_filter(pb_filter: PBFilter) -> bytes:
    _require(pb_filter.name, "name", "Filter")
    return (
        MessageWriter()
        .add_string(1, pb_filter.name)
        .add_bytes(2, pb_filter.serialized_filter)
        .to_bytes()
    )


def _encode_comparator(comparator: PBComparator) -> bytes:
    _require(comparator.name, "name", "Comparator")
    return (
        MessageWriter()
        .add_string(1, comparator.name)
        .add_bytes(2, comparator.serialized_comparator)
        .to_bytes()
    )


def _to_pb_filter(value: Filter | PBFilter) -> PBFilter:
    if isinstance(value, Filter):
        return value.construct_pb_filter()
    return value


def _to_pb_comparator(value: Comparator | PBComparator) -> PBComparator:
    if isinstance(value, Comparator):
        return value.construct_pb_comparator()
    return value


def _repeated_bytes(writer: MessageWriter, number: int, values: Iterable[bytes | None]) -> None:
    for value in values:
        writer.add_bytes(number, b"" if value is None else value)


@dataclass
class BytesBytesPair:
    """A pair of byte strings, as used by FuzzyRowFilter."""

    first: bytes | None
    second: bytes | None


def _encode_pair(pair: BytesBytesPair) -> bytes:
    _require(pair.first, "first", "BytesBytesPair")
    _require(pair.second, "second", "BytesBytesPair")
    return MessageWriter().add_bytes(1, pair.first).add_bytes(2, pair.second).to_bytes()


class FilterList(Filter):
    """A list of filters combined with a ListOperator."""

    def __init__(self, operator: ListOperator | int, *filters: Filter) -> None:
        self.operator = operator
        self.filters: list[PBFilter] = []
        self.add_filters(*filters)

    def add_filters(self, *args: Filter) -> None:
        """Encode and append the given filters."""
        self.filters.extend(f.construct_pb_filter() for f in args)

    def construct_pb_filter(self) -> PBFilter:
        if int(self.operator) not in {op.value for op in ListOperator}:
            raise ValueError("invalid operator specified")
        writer = MessageWriter().add_varint(1, int(self.operator))
        for pb_filter in self.filters:
            writer.add_message(2, _encode_pb_filter(pb_filter))
        return _pb_filter("FilterList", writer.to_bytes())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterList):
            return NotImplemented
        return int(self.operator) == int(other.operator) and self.filters == other.filters

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"FilterList(operator={self.operator!r}, filters={self.filters!r})"


@dataclass
class ColumnCountGetFilter(Filter):
    limit: int

    def construct_pb_filter(self) -> PBFilter:
        _require(self.limit, "limit", "ColumnCountGetFilter")
        return _pb_filter("ColumnCountGetFilter", MessageWriter().add_varint(1, self.limit).to_bytes())


@dataclass
class ColumnPaginationFilter(Filter):
    limit: int
    offset: int
    column_offset: bytes | None = None

    def construct_pb_filter(self) -> PBFilter:
        _require(self.limit, "limit", "ColumnPaginationFilter")
        payload = (
            MessageWriter()
            .add_varint(1, self.limit)
            .add_varint(2, self.offset)
            .add_bytes(3, self.column_offset)
            .to_bytes()
        )
        return _pb_filter("ColumnPaginationFilter", payload)


@dataclass
class ColumnPrefixFilter(Filter):
    prefix: bytes | None

    def construct_pb_filter(self) -> PBFilter:
        _require(self.prefix, "prefix", "ColumnPrefixFilter")
        return _pb_filter("ColumnPrefixFilter", MessageWriter().add_bytes(1, self.prefix).to_bytes())


@dataclass
class ColumnRangeFilter(Filter):
    min_column: bytes | None
    max_column: bytes | None
    min_column_inclusive: bool
    max_column_inclusive: bool

    def construct_pb_filter(self) -> PBFilter:
        payload = (
            MessageWriter()
            .add_bytes(1, self.min_column)
            .add_bool(2, self.min_column_inclusive)
            .add_bytes(3, self.max_column)
            .add_bool(4, self.max_column_inclusive)
            .to_bytes()
        )
        return _pb_filter("ColumnRangeFilter", payload)


@dataclass
class CompareFilter(Filter):
    compare_op: CompareType | int
    comparator: Comparator | PBComparator | None

    def __post_init__(self) -> None:
        if self.comparator is not None:
            self.comparator = _to_pb_comparator(self.comparator)

    def _message(self) -> bytes:
        _require(self.compare_op, "compare_op", "CompareFilter")
        writer = MessageWriter().add_varint(1, int(self.compare_op))
        if self.comparator is not None:
            writer.add_message(2, _encode_comparator(self.comparator))
        return writer.to_bytes()

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("CompareFilter", self._message())


def _compare_filter_payload(compare_filter: CompareFilter | None, message: str) -> bytes:
    _require(compare_filter, "compare_filter", message)
    return MessageWriter().add_message(1, compare_filter._message()).to_bytes()


@dataclass
class DependentColumnFilter(Filter):
    compare_filter: CompareFilter | None
    column_family: bytes | None
    column_qualifier: bytes | None
    drop_dependent_column: bool

    def construct_pb_filter(self) -> PBFilter:
        _require(self.compare_filter, "compare_filter", "DependentColumnFilter")
        payload = (
            MessageWriter()
            .add_message(1, self.compare_filter._message())
            .add_bytes(2, self.column_family)
            .add_bytes(3, self.column_qualifier)
            .add_bool(4, self.drop_dependent_column)
            .to_bytes()
        )
        return _pb_filter("DependentColumnFilter", payload)


@dataclass
class FamilyFilter(Filter):
    compare_filter: CompareFilter | None

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter(
            "FamilyFilter", _compare_filter_payload(self.compare_filter, "FamilyFilter")
        )


def _wrapped_payload(wrapped: PBFilter | None, message: str) -> bytes:
    _require(wrapped, "filter", message)
    return MessageWriter().add_message(1, _encode_pb_filter(wrapped)).to_bytes()


@dataclass
class Wrapper(Filter):
    filter: Filter | PBFilter

    def __post_init__(self) -> None:
        self.filter = _to_pb_filter(self.filter)

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("FilterWrapper", _wrapped_payload(self.filter, "FilterWrapper"))


@dataclass
class FirstKeyOnlyFilter(Filter):
    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("FirstKeyOnlyFilter", b"")


@dataclass
class FirstKeyValueMatchingQualifiersFilter(Filter):
    qualifiers: list[bytes] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.qualifiers = list(self.qualifiers or [])

    def construct_pb_filter(self) -> PBFilter:
        writer = MessageWriter()
        _repeated_bytes(writer, 1, self.qualifiers)
        return _pb_filter("FirstKeyValueMatchingQualifiersFilter", writer.to_bytes())


@dataclass
class FuzzyRowFilter(Filter):
    fuzzy_keys_data: list[BytesBytesPair] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.fuzzy_keys_data = list(self.fuzzy_keys_data or [])

    def construct_pb_filter(self) -> PBFilter:
        writer = MessageWriter()
        for pair in self.fuzzy_keys_data:
            writer.add_message(1, _encode_pair(pair))
        return _pb_filter("FuzzyRowFilter", writer.to_bytes())


@dataclass
class InclusiveStopFilter(Filter):
    stop_row_key: bytes | None

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter(
            "InclusiveStopFilter", MessageWriter().add_bytes(1, self.stop_row_key).to_bytes()
        )


@dataclass
class KeyOnlyFilter(Filter):
    len_as_val: bool

    def construct_pb_filter(self) -> PBFilter:
        _require(self.len_as_val, "len_as_val", "KeyOnlyFilter")
        return _pb_filter("KeyOnlyFilter", MessageWriter().add_bool(1, self.len_as_val).to_bytes())


@dataclass
class MultipleColumnPrefixFilter(Filter):
    sorted_prefixes: list[bytes] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.sorted_prefixes = list(self.sorted_prefixes or [])

    def construct_pb_filter(self) -> PBFilter:
        writer = MessageWriter()
        _repeated_bytes(writer, 1, self.sorted_prefixes)
        return _pb_filter("MultipleColumnPrefixFilter", writer.to_bytes())


@dataclass
class PageFilter(Filter):
    page_size: int

    def construct_pb_filter(self) -> PBFilter:
        _require(self.page_size, "page_size", "PageFilter")
        return _pb_filter("PageFilter", MessageWriter().add_varint(1, self.page_size).to_bytes())


@dataclass
class PrefixFilter(Filter):
    prefix: bytes | None

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("PrefixFilter", MessageWriter().add_bytes(1, self.prefix).to_bytes())


@dataclass
class QualifierFilter(Filter):
    compare_filter: CompareFilter | None

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter(
            "QualifierFilter", _compare_filter_payload(self.compare_filter, "QualifierFilter")
        )


@dataclass
class RandomRowFilter(Filter):
    chance: float

    def construct_pb_filter(self) -> PBFilter:
        _require(self.chance, "chance", "RandomRowFilter")
        return _pb_filter("RandomRowFilter", MessageWriter().add_float(1, self.chance).to_bytes())


@dataclass
class RowFilter(Filter):
    compare_filter: CompareFilter | None

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("RowFilter", _compare_filter_payload(self.compare_filter, "RowFilter"))


@dataclass
class SingleColumnValueFilter(Filter):
    column_family: bytes | None
    column_qualifier: bytes | None
    compare_op: CompareType | int
    comparator: Comparator | PBComparator
    filter_if_missing: bool
    latest_version_only: bool

    def __post_init__(self) -> None:
        self.comparator = _to_pb_comparator(self.comparator)

    def _message(self) -> bytes:
        _require(self.compare_op, "compare_op", "SingleColumnValueFilter")
        _require(self.comparator, "comparator", "SingleColumnValueFilter")
        return (
            MessageWriter()
            .add_bytes(1, self.column_family)
            .add_bytes(2, self.column_qualifier)
            .add_varint(3, int(self.compare_op))
            .add_message(4, _encode_comparator(self.comparator))
            .add_bool(5, self.filter_if_missing)
            .add_bool(6, self.latest_version_only)
            .to_bytes()
        )

    def construct_pb(self) -> bytes:
        """Validate the compare operation and return the encoded message."""
        if int(self.compare_op) not in {op.value for op in CompareType}:
            raise ValueError("invalid compare operation specified")
        return self._message()

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("SingleColumnValueFilter", self._message())


@dataclass
class SingleColumnValueExcludeFilter(Filter):
    single_column_value_filter: SingleColumnValueFilter | None

    def construct_pb_filter(self) -> PBFilter:
        _require(
            self.single_column_value_filter,
            "single_column_value_filter",
            "SingleColumnValueExcludeFilter",
        )
        payload = MessageWriter().add_message(1, self.single_column_value_filter._message())
        return _pb_filter("SingleColumnValueExcludeFilter", payload.to_bytes())


@dataclass
class SkipFilter(Filter):
    filter: Filter | PBFilter

    def __post_init__(self) -> None:
        self.filter = _to_pb_filter(self.filter)

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("SkipFilter", _wrapped_payload(self.filter, "SkipFilter"))


@dataclass
class TimestampsFilter(Filter):
    timestamps: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.timestamps = list(self.timestamps or [])

    def construct_pb_filter(self) -> PBFilter:
        payload = MessageWriter().add_packed_varints(1, self.timestamps).to_bytes()
        return _pb_filter("TimestampsFilter", payload)


@dataclass
class ValueFilter(Filter):
    compare_filter: CompareFilter | None

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter(
            "ValueFilter", _compare_filter_payload(self.compare_filter, "ValueFilter")
        )


@dataclass
class WhileMatchFilter(Filter):
    filter: Filter | PBFilter

    def __post_init__(self) -> None:
        self.filter = _to_pb_filter(self.filter)

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("WhileMatchFilter", _wrapped_payload(self.filter, "WhileMatchFilter"))


@dataclass
class AllFilter(Filter):
    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("FilterAllFilter", b"")


@dataclass
class RowRange(Filter):
    start_row: bytes | None
    stop_row: bytes | None
    start_row_inclusive: bool
    stop_row_inclusive: bool

    def _message(self) -> bytes:
        return (
            MessageWriter()
            .add_bytes(1, self.start_row)
            .add_bool(2, self.start_row_inclusive)
            .add_bytes(3, self.stop_row)
            .add_bool(4, self.stop_row_inclusive)
            .to_bytes()
        )

    def construct_pb_filter(self) -> PBFilter:
        return _pb_filter("RowRange", self._message())


@dataclass
class MultiRowRangeFilter(Filter):
    row_range_list: list[RowRange] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.row_range_list = list(self.row_range_list or [])

    def construct_pb_filter(self) -> PBFilter:
        writer = MessageWriter()
        for row_range in self.row_range_list:
            writer.add_message(1, row_range._message())
        return _pb_filter("MultiRowRangeFilter", writer.to_bytes())