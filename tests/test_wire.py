import struct

import pytest
from hypothesis import given, strategies as st

from hbasekit.wire import (
    WIRE_FIXED32,
    WIRE_LEN,
    WIRE_VARINT,
    MessageWriter,
    encode_varint,
    parse_fields,
)


def test_encode_varint_known_values():
    assert encode_varint(0) == b"\x00"
    assert encode_varint(300) == b"\xac\x02"


def test_varint_field_worked_example():
    assert MessageWriter().add_varint(1, 150).to_bytes() == b"\x08\x96\x01"


def test_negative_varint_is_ten_bytes():
    encoded = encode_varint(-1)
    assert len(encoded) == 10
    data = MessageWriter().add_varint(2, -1).to_bytes()
    assert parse_fields(data) == [(2, WIRE_VARINT, (1 << 64) - 1)]


def test_varint_out_of_range():
    with pytest.raises(ValueError):
        encode_varint(1 << 64)


@given(st.integers(min_value=0, max_value=(1 << 64) - 1), st.integers(1, 1000))
def test_varint_round_trip(value, number):
    data = MessageWriter().add_varint(number, value).to_bytes()
    assert parse_fields(data) == [(number, WIRE_VARINT, value)]


@given(st.binary(max_size=300), st.text(max_size=50))
def test_bytes_and_string_round_trip(blob, text):
    data = MessageWriter().add_bytes(1, blob).add_string(2, text).to_bytes()
    assert parse_fields(data) == [(1, WIRE_LEN, blob), (2, WIRE_LEN, text.encode("utf-8"))]


def test_none_values_are_skipped():
    writer = MessageWriter()
    writer.add_bytes(1, None).add_varint(2, None).add_string(3, None)
    writer.add_bool(4, None).add_float(5, None).add_message(6, None)
    writer.add_packed_varints(7, None).add_packed_varints(8, [])
    assert writer.to_bytes() == b""


def test_empty_bytes_are_present():
    assert parse_fields(MessageWriter().add_bytes(3, b"").to_bytes()) == [(3, WIRE_LEN, b"")]


def test_bool_and_float():
    data = MessageWriter().add_bool(1, True).add_bool(2, False).add_float(3, 0.5).to_bytes()
    fields = parse_fields(data)
    assert fields[0] == (1, WIRE_VARINT, 1)
    assert fields[1] == (2, WIRE_VARINT, 0)
    number, wire_type, raw = fields[2]
    assert (number, wire_type) == (3, WIRE_FIXED32)
    assert struct.unpack("<f", raw)[0] == 0.5


def test_nested_message():
    inner = MessageWriter().add_bytes(1, b"x")
    outer = MessageWriter().add_message(1, inner).to_bytes()
    assert parse_fields(outer) == [(1, WIRE_LEN, inner.to_bytes())]
    assert parse_fields(parse_fields(outer)[0][2]) == [(1, WIRE_LEN, b"x")]


def test_packed_varints():
    values = [1, 300, 5]
    data = MessageWriter().add_packed_varints(1, values).to_bytes()
    [(number, wire_type, payload)] = parse_fields(data)
    assert (number, wire_type) == (1, WIRE_LEN)
    assert payload == b"".join(encode_varint(v) for v in values)


def test_field_order_is_call_order():
    data = MessageWriter().add_varint(5, 1).add_varint(1, 2).to_bytes()
    assert [f[0] for f in parse_fields(data)] == [5, 1]


@pytest.mark.parametrize("data", [b"\x0a\x05ab", b"\x08", b"\x0d\x00", b"\x0b"])
def test_parse_rejects_bad_input(data):
    with pytest.raises(ValueError):
        parse_fields(data)


def test_invalid_field_number():
    with pytest.raises(ValueError):
        MessageWriter().add_varint(0, 1)