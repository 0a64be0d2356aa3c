"""Snappy block compression used for HBase cell blocks."""

from __future__ import annotations

from .codec import Codec

# Buffer length used by the Hadoop snappy codec (256 KiB) minus snappy overhead.
SNAPPY_CHUNK_LEN = 256 * 1024 * 5 // 6 - 32

_MAX_BLOCK_SIZE = 65536
_MIN_NON_LITERAL_BLOCK_SIZE = 17
_MAX_DECODED_LEN = 0xFFFFFFFF

_TAG_LITERAL = 0
_TAG_COPY1 = 1
_TAG_COPY2 = 2
_TAG_COPY4 = 3


class SnappyError(ValueError):
    """Raised when snappy input cannot be decoded."""


def _corrupt() -> SnappyError:
    return SnappyError("snappy: corrupt input")


def _uvarint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _read_uvarint(data: bytes) -> tuple[int, int]:
    """Return the decoded varint and the number of bytes it used."""
    value = 0
    for count, byte in enumerate(data[:10]):
        value |= (byte & 0x7F) << (7 * count)
        if byte < 0x80:
            return value, count + 1
    raise _corrupt()


def _emit_literal(literal: bytes) -> bytes:
    n = len(literal) - 1
    if n < 60:
        header = bytes([n << 2 | _TAG_LITERAL])
    elif n < 1 << 8:
        header = bytes([60 << 2]) + n.to_bytes(1, "little")
    elif n < 1 << 16:
        header = bytes([61 << 2]) + n.to_bytes(2, "little")
    elif n < 1 << 24:
        header = bytes([62 << 2]) + n.to_bytes(3, "little")
    else:
        header = bytes([63 << 2]) + n.to_bytes(4, "little")
    return header + literal


def _copy2(offset: int, length: int) -> bytes:
    return bytes([(length - 1) << 2 | _TAG_COPY2]) + offset.to_bytes(2, "little")


def _emit_copy(offset: int, length: int) -> bytes:
    parts = []
    while length >= 68:
        parts.append(_copy2(offset, 64))
        length -= 64
    if length > 64:
        parts.append(_copy2(offset, 60))
        length -= 60
    if length >= 12 or offset >= 2048:
        parts.append(_copy2(offset, length))
    else:
        parts.append(
            bytes([(offset >> 8) << 5 | (length - 4) << 2 | _TAG_COPY1, offset & 0xFF])
        )
    return b"".join(parts)


def _compress_block(block: bytes) -> bytes:
    if len(block) < _MIN_NON_LITERAL_BLOCK_SIZE:
        return _emit_literal(block)
    out = []
    table: dict[bytes, int] = {}
    literal_start = 0
    pos = 0
    limit = len(block) - 4
    while pos <= limit:
        key = block[pos:pos + 4]
        candidate = table.get(key)
        table[key] = pos
        if candidate is None:
            pos += 1
            continue
        length = 4
        while pos + length < len(block) and block[candidate + length] == block[pos + length]:
            length += 1
        if literal_start < pos:
            out.append(_emit_literal(block[literal_start:pos]))
        out.append(_emit_copy(pos - candidate, length))
        pos += length
        literal_start = pos
    if literal_start < len(block):
        out.append(_emit_literal(block[literal_start:]))
    return b"".join(out)


def compress(src: bytes) -> bytes:
    """Compress ``src`` into a single snappy block."""
    src = bytes(src)
    blocks = (
        _compress_block(src[start:start + _MAX_BLOCK_SIZE])
        for start in range(0, len(src), _MAX_BLOCK_SIZE)
    )
    return _uvarint(len(src)) + b"".join(blocks)


def decompress(src: bytes) -> bytes:
    """Decompress a snappy block, raising SnappyError if it is corrupt."""
    src = bytes(src)
    expected, pos = _read_uvarint(src)
    if expected > _MAX_DECODED_LEN:
        raise _corrupt()
    out = bytearray()
    while pos < len(src):
        tag = src[pos]
        kind = tag & 0x03
        if kind == _TAG_LITERAL:
            n = tag >> 2
            if n < 60:
                pos += 1
            else:
                extra = n - 59
                if pos + 1 + extra > len(src):
                    raise _corrupt()
                n = int.from_bytes(src[pos + 1:pos + 1 + extra], "little")
                pos += 1 + extra
            n += 1
            if n > len(src) - pos or n > expected - len(out):
                raise _corrupt()
            out += src[pos:pos + n]
            pos += n
            continue

        if kind == _TAG_COPY1:
            if pos + 2 > len(src):
                raise _corrupt()
            length = 4 + ((tag >> 2) & 0x07)
            offset = (tag & 0xE0) << 3 | src[pos + 1]
            pos += 2
        elif kind == _TAG_COPY2:
            if pos + 3 > len(src):
                raise _corrupt()
            length = 1 + (tag >> 2)
            offset = int.from_bytes(src[pos + 1:pos + 3], "little")
            pos += 3
        else:
            if pos + 5 > len(src):
                raise _corrupt()
            length = 1 + (tag >> 2)
            offset = int.from_bytes(src[pos + 1:pos + 5], "little")
            pos += 5

        if offset <= 0 or offset > len(out) or length > expected - len(out):
            raise _corrupt()
        window = out[len(out) - offset:]
        repeats = -(-length // offset)
        out += (window * repeats)[:length]

    if len(out) != expected:
        raise _corrupt()
    return bytes(out)


class SnappyCodec(Codec):
    """Codec that compresses cell blocks with snappy."""

    def encode(self, src: bytes, dst: bytes = b"") -> tuple[bytes, int]:
        chunk = compress(src)
        return bytes(dst) + chunk, len(chunk)

    def decode(self, src: bytes, dst: bytes = b"") -> tuple[bytes, int]:
        chunk = decompress(src)
        return bytes(dst) + chunk, len(chunk)

    def chunk_len(self) -> int:
        return SNAPPY_CHUNK_LEN

    def cell_block_compressor_class(self) -> str:
        return "org.apache.hadoop.io.compress.SnappyCodec"