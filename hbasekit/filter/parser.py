"""Parser for the textual HBase filter language subset."""

from __future__ import annotations

import re
from typing import Callable

from .comparator import (
    BinaryComparator,
    BinaryPrefixComparator,
    ByteArrayComparable,
    Comparator,
    NullComparator,
    RegexStringComparator,
    SubstringComparator,
)
from .filters import (
    CompareFilter,
    CompareType,
    Filter,
    FilterList,
    ListOperator,
    PrefixFilter,
    SingleColumnValueFilter,
    ValueFilter,
)

FILTER_RE = re.compile(r"FILTER\((\d+)\)", re.ASCII)
FILTER_WRAP_RE = re.compile(r"\(\s*(FILTER\((\d+)\))\s*\)", re.ASCII)
LIST_FILTERS_RE = re.compile(r"FILTER\(\d+\)(?:\s+(AND|OR)\s+FILTER\(\d+\))+", re.ASCII)
ROW_PREFIX_RE = re.compile(r"PrefixFilter\s*\(\s*'(\w+)'\s*\)", re.ASCII)
VALUE_FILTER_RE = re.compile(
    r"ValueFilter\s*\(\s*([=<>])\s*,\s*'(\w+):(.*?)'\s*\)", re.ASCII
)
SINGLE_COLUMN_VALUE_FILTER_RE = re.compile(
    r"SingleColumnValueFilter\s*\('(\w+)'\s*,\s*'(\w+)'\s*,\s*([=<>])\s*,\s*'(\w+):(.*?)'"
    r"(?:\s*,\s*((?i:true|false))\s*,\s*((?i:true|false)))?\s*\)",
    re.ASCII,
)

COMPARE_OPS: dict[str, CompareType] = {
    "=": CompareType.EQUAL,
    "!=": CompareType.NOT_EQUAL,
    "<": CompareType.LESS,
    "<=": CompareType.LESS_OR_EQUAL,
    ">": CompareType.GREATER,
    ">=": CompareType.LESS_OR_EQUAL,
}

MATCH_TYPES: dict[str, Callable[[str], Comparator]] = {
    "binary": lambda s: BinaryComparator(ByteArrayComparable(s.encode("utf-8"))),
    "binaryprefix": lambda s: BinaryPrefixComparator(ByteArrayComparable(s.encode("utf-8"))),
    "null": lambda s: NullComparator(),
    "regexstring": lambda s: RegexStringComparator(s, 0, "", ""),
    "substring": lambda s: SubstringComparator(s),
}


class FilterParseError(ValueError):
    """Raised when a filter string cannot be parsed."""


def _lookup(op: str, match_type: str) -> tuple[CompareType, Callable[[str], Comparator]]:
    if op not in COMPARE_OPS:
        raise FilterParseError(f"unsupported operator: {op}")
    if match_type not in MATCH_TYPES:
        raise FilterParseError(f"unsupported Comparator: {match_type}")
    return COMPARE_OPS[op], MATCH_TYPES[match_type]


class Parser:
    """Turns filter expressions such as ``PrefixFilter('a') AND ...`` into filters."""

    def __init__(self) -> None:
        self._filters: list[Filter] = []

    def _add(self, new_filter: Filter) -> str:
        self._filters.append(new_filter)
        return f"FILTER({len(self._filters) - 1})"

    def _parse_list(self, text: str, operator: ListOperator) -> str:
        members = [self._filters[int(m.group(1))] for m in FILTER_RE.finditer(text)]
        return self._add(FilterList(operator, *members))

    def parse(self, filter_str: str) -> Filter:
        """Parse ``filter_str`` and return the filter it describes."""
        for match in list(ROW_PREFIX_RE.finditer(filter_str)):
            placeholder = self._add(PrefixFilter(match.group(1).encode("utf-8")))
            filter_str = filter_str.replace(match.group(0), placeholder, 1)

        for match in list(VALUE_FILTER_RE.finditer(filter_str)):
            op, match_type, value = match.group(1, 2, 3)
            compare_op, make_comparator = _lookup(op, match_type)
            new_filter = ValueFilter(CompareFilter(compare_op, make_comparator(value)))
            filter_str = filter_str.replace(match.group(0), self._add(new_filter), 1)

        for match in list(SINGLE_COLUMN_VALUE_FILTER_RE.finditer(filter_str)):
            family, qualifier, op, match_type, value = match.group(1, 2, 3, 4, 5)
            filter_if_missing, latest_version_only = False, True
            if match.group(6):
                filter_if_missing = match.group(6).lower() == "true"
                latest_version_only = match.group(7).lower() == "true"
            compare_op, make_comparator = _lookup(op, match_type)
            new_filter = SingleColumnValueFilter(
                family.encode("utf-8"),
                qualifier.encode("utf-8"),
                compare_op,
                make_comparator(value),
                filter_if_missing,
                latest_version_only,
            )
            filter_str = filter_str.replace(match.group(0), self._add(new_filter), 1)

        while (wrap := FILTER_WRAP_RE.search(filter_str)) is not None:
            filter_str = filter_str.replace(wrap.group(0), wrap.group(1), 1)

        while (listed := LIST_FILTERS_RE.search(filter_str)) is not None:
            operator = (
                ListOperator.MUST_PASS_ALL
                if listed.group(1) == "AND"
                else ListOperator.MUST_PASS_ONE
            )
            placeholder = self._parse_list(listed.group(0), operator)
            filter_str = filter_str.replace(listed.group(0), placeholder, 1)
            wrap = FILTER_WRAP_RE.search(filter_str)
            if wrap is not None:
                filter_str = filter_str.replace(wrap.group(0), wrap.group(1), 1)

        found = FILTER_RE.search(filter_str)
        if found is not None:
            return self._filters[int(found.group(1))]
        raise FilterParseError("unable to Parse filter: " + filter_str)