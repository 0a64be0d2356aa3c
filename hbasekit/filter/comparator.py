"""Comparators used by HBase compare filters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum

from ..wire import MessageWriter

COMPARATOR_PATH = "org.apache.hadoop.hbase.filter."


class BitwiseOp(IntEnum):
    """Bitwise operation applied by a BitComparator."""

    AND = 1
    OR = 2
    XOR = 3


@dataclass(frozen=True)
class PBComparator:
    """A comparator in its wire form: a Java class name plus its serialized body."""

    name: str
    serialized_comparator: bytes


class Comparator(ABC):
    """Something that can be encoded as a server-side comparator."""

    @abstractmethod
    def construct_pb_comparator(self) -> PBComparator:
        """Return the comparator encoded for the wire."""


def _pb(kind: str, payload: bytes) -> PBComparator:
    return PBComparator(name=COMPARATOR_PATH + kind, serialized_comparator=payload)


@dataclass(frozen=True)
class ByteArrayComparable:
    """The byte value that several comparators compare against."""

    value: bytes | None = None

    def serialize(self) -> bytes:
        return MessageWriter().add_bytes(1, self.value).to_bytes()


def _comparable_payload(comparable: ByteArrayComparable) -> bytes:
    return MessageWriter().add_message(1, comparable.serialize()).to_bytes()


@dataclass(frozen=True)
class BinaryComparator(Comparator):
    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("BinaryComparator", _comparable_payload(self.comparable))


@dataclass(frozen=True)
class LongComparator(Comparator):
    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("LongComparator", _comparable_payload(self.comparable))


@dataclass(frozen=True)
class BinaryPrefixComparator(Comparator):
    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("BinaryPrefixComparator", _comparable_payload(self.comparable))


@dataclass(frozen=True)
class BitComparator(Comparator):
    bitwise_op: int
    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        if int(self.bitwise_op) not in {op.value for op in BitwiseOp}:
            raise ValueError("Invalid bitwise operator specified")
        payload = (
            MessageWriter()
            .add_message(1, self.comparable.serialize())
            .add_varint(2, int(self.bitwise_op))
            .to_bytes()
        )
        return _pb("BitComparator", payload)


@dataclass(frozen=True)
class NullComparator(Comparator):
    def construct_pb_comparator(self) -> PBComparator:
        return _pb("NullComparator", b"")


@dataclass(frozen=True)
class RegexStringComparator(Comparator):
    pattern: str
    pattern_flags: int = 0
    charset: str = ""
    engine: str = ""

    def construct_pb_comparator(self) -> PBComparator:
        payload = (
            MessageWriter()
            .add_string(1, self.pattern)
            .add_varint(2, self.pattern_flags)
            .add_string(3, self.charset)
            .add_string(4, self.engine)
            .to_bytes()
        )
        return _pb("RegexStringComparator", payload)


@dataclass(frozen=True)
class SubstringComparator(Comparator):
    substr: str

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("SubstringComparator", MessageWriter().add_string(1, self.substr).to_bytes())