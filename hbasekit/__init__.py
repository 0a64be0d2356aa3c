"""Building blocks for HBase clients: filters, filter parser, region caches, compression and wire helpers."""

__version__ = "0.1.0"