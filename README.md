# hbasekit

Building blocks for HBase clients written in Python:

- **Filters and comparators** (`hbasekit.filter.filters`, `hbasekit.filter.comparator`):
  the HBase scan filters and comparators, each able to produce its wire form
  (`PBFilter` / `PBComparator`: a Java class name plus the protobuf-encoded body
  that a region server expects).
- **Filter expression parser** (`hbasekit.filter.parser`): turns strings such as
  `PrefixFilter('age') AND ( ValueFilter(=,'substring:18') OR PrefixFilter('x') )`
  into filter objects.
- **Region caches** (`hbasekit.caches`): a key → region cache ordered by region
  name that resolves overlapping regions by age, and a client → regions cache.
- **Compression** (`hbasekit.compression`): a pure-Python snappy codec for
  HBase cell blocks.
- **Wire helpers** (`hbasekit.wire`): `MessageWriter` for building protobuf
  messages field by field, `encode_varint`, and `parse_fields` for splitting a
  serialized message into its fields.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Filters

```python
from hbasekit.filter.comparator import SubstringComparator
from hbasekit.filter.filters import (
    CompareFilter, CompareType, FilterList, ListOperator, PrefixFilter, ValueFilter,
)

flt = FilterList(
    ListOperator.MUST_PASS_ALL,
    PrefixFilter(b"user-"),
    ValueFilter(CompareFilter(CompareType.EQUAL, SubstringComparator("18"))),
)
pb = flt.construct_pb_filter()
print(pb.name)               # org.apache.hadoop.hbase.filter.FilterList
print(pb.serialized_filter)  # protobuf-encoded FilterList
```

Filters given to `FilterList`, `Wrapper`, `SkipFilter` and `WhileMatchFilter`
are encoded when they are added. An unknown list operator or bitwise operator
raises `ValueError` when the wire form is built, and
`SingleColumnValueFilter.construct_pb()` raises `ValueError` for an unknown
compare operation.

## Parsing filter expressions

```python
from hbasekit.filter.parser import FilterParseError, Parser

flt = Parser().parse("PrefixFilter('age') OR ValueFilter(=,'substring:18')")

try:
    Parser().parse("PrefixFilter")
except FilterParseError as exc:
    print(exc)   # unable to Parse filter: PrefixFilter
```

Supported terms are `PrefixFilter`, `ValueFilter` and `SingleColumnValueFilter`,
combined with `AND`, `OR` and parentheses. Comparator types are `binary`,
`binaryprefix`, `null`, `regexstring` and `substring`. `FilterParseError` is a
subclass of `ValueError`.

## Compression

```python
from hbasekit.compression.codec import new_codec

codec = new_codec("snappy")
out, size = codec.encode(b"test", b"")
data, n = codec.decode(out, b"")
assert data == b"test"
```

`encode` and `decode` append their result to `dst` and return the combined
bytes together with the size of the newly produced chunk. `new_codec` raises
`ValueError` for unknown codec names; corrupt input to `decode` raises
`SnappyError` (a `ValueError`).

## Region caches

`RegionInfo` describes a region of a table (id, namespace, table, name, start
and stop keys) and `RegionClient` stands for a region-server connection by
address.

`KeyRegionCache` keeps regions ordered by region name (table, then start key,
then id; see `compare_region_names`). `put` returns the overlapping regions and
whether the new region was inserted; it inserts only when no region with the
same name is cached and every overlap is older, and it then removes those
overlaps and marks them dead. `get` returns the `(name, region)` pair just
before a search key built with `create_region_search_key`, or `(None, None)`.
`delete` removes a region and marks it dead.

`ClientRegionCache` tracks which regions each client serves: `put` reuses the
client already registered for an address or creates one, `client_down` forgets
a client and returns its regions, and `close_all` marks every region
unavailable and closes every client. Both caches provide `debug_info` for
inspection.

## What this package does not do

It does not connect to anything. There is no ZooKeeper lookup, no region-server
or master connection, no RPC layer, no get/put/scan client and no administrative
operations; `RegionClient.close` only records that the client was closed. The
filters, comparators and caches are meant to be used by code that supplies
those parts.