"""Compression codecs for chunks of Hadoop sequence-file style cell blocks."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Codec(ABC):
    """Encodes and decodes chunks of cell block data."""

    @abstractmethod
    def encode(self, src: bytes, dst: bytes = b"") -> tuple[bytes, int]:
        """Compress ``src``, append it to ``dst`` and return (result, compressed size)."""

    @abstractmethod
    def decode(self, src: bytes, dst: bytes = b"") -> tuple[bytes, int]:
        """Decompress ``src``, append it to ``dst`` and return (result, decoded size)."""

    @abstractmethod
    def chunk_len(self) -> int:
        """Maximum size of a chunk for this codec."""

    @abstractmethod
    def cell_block_compressor_class(self) -> str:
        """Full Java class name of the matching compressor on the server side."""


def new_codec(name: str) -> Codec:
    """Return the codec called ``name``; only "snappy" is supported."""
    if name == "snappy":
        from .snappy import SnappyCodec

        return SnappyCodec()
    raise ValueError("unknown compression codec")