import json

import pytest

from hbasekit.caches import (
    ClientRegionCache,
    KeyRegionCache,
    RegionClient,
    RegionInfo,
    compare_region_names,
    create_region_search_key,
    fully_qualified_table,
    is_region_overlap,
)

SUFFIX = b"1234567890042.56f833d5569a27c7a43fbf547b4924a4."


def _three_regions():
    r1 = RegionInfo(1, None, b"test", b"test,," + SUFFIX, b"", b"foo")
    r2 = RegionInfo(2, None, b"test", b"test,foo," + SUFFIX, b"foo", b"gohbase")
    r3 = RegionInfo(3, None, b"test", b"test,gohbase," + SUFFIX, b"gohbase", b"")
    return r1, r2, r3


def test_debug_state_sanity():
    keys = KeyRegionCache()
    clients = ClientRegionCache()
    reg_client = RegionClient("regionserver:1")
    for region in _three_regions():
        overlaps, replaced = keys.put(region)
        assert replaced is True
        assert overlaps == []
        region.client = reg_client
        assert clients.put("regionserver:1", region, lambda: reg_client) is reg_client

    region_map = {}
    client_map = {}
    client_cache = clients.debug_info(region_map, client_map)
    key_cache = keys.debug_info(region_map)

    assert len(client_map) == 1
    assert len(region_map) == 3
    assert len(key_cache) == 3
    assert len(client_cache) == 1
    assert sorted(key_cache) == [
        "test,," + SUFFIX.decode(),
        "test,foo," + SUFFIX.decode(),
        "test,gohbase," + SUFFIX.decode(),
    ]
    state = json.loads(json.dumps({"KeyRegionCache": key_cache, "ClientRegionCache": client_cache}))
    assert len(state["ClientRegionCache"]) == 1


def test_region_discovery():
    keys = KeyRegionCache()
    assert keys.get(create_region_search_key(b"test", b"theKey")) == (None, None)
    region = RegionInfo(0, None, b"test", b"test,," + SUFFIX, None, None)
    keys.put(region)
    name, found = keys.get(create_region_search_key(b"test", b"theKey"))
    assert found is region
    assert name == b"test,," + SUFFIX
    assert keys.get(create_region_search_key(b"notfound", b"theKey")) == (None, None)


def test_get_picks_region_with_preceding_start_key():
    keys = KeyRegionCache()
    r1, r2, r3 = _three_regions()
    for region in (r3, r1, r2):
        keys.put(region)
    assert keys.get(create_region_search_key(b"test", b"fz"))[1] is r2
    assert keys.get(create_region_search_key(b"test", b"a"))[1] is r1
    assert keys.get(create_region_search_key(b"test", b"zzz"))[1] is r3


def test_get_exact_match_raises():
    keys = KeyRegionCache()
    r1, _, _ = _three_regions()
    keys.put(r1)
    with pytest.raises(RuntimeError):
        keys.get(r1.name)


def test_put_same_name_returns_existing():
    keys = KeyRegionCache()
    r1, _, _ = _three_regions()
    keys.put(r1)
    twin = RegionInfo(1, None, b"test", r1.name, b"", b"foo")
    overlaps, replaced = keys.put(twin)
    assert replaced is False
    assert overlaps == [r1]
    assert len(keys) == 1


def test_put_replaces_older_overlaps():
    keys = KeyRegionCache()
    olds = _three_regions()
    for region in olds:
        keys.put(region)
    merged = RegionInfo(10, None, b"test", b"test,a,10", b"a", b"h")
    overlaps, replaced = keys.put(merged)
    assert replaced is True
    assert overlaps == list(olds)
    assert all(region.dead for region in olds)
    assert len(keys) == 1
    assert keys.get(create_region_search_key(b"test", b"b"))[1] is merged


def test_put_keeps_younger_overlap():
    keys = KeyRegionCache()
    whole = RegionInfo(5, None, b"test", b"test,,5", b"", b"")
    keys.put(whole)
    stale = RegionInfo(1, None, b"test", b"test,a,1", b"a", b"b")
    overlaps, replaced = keys.put(stale)
    assert replaced is False
    assert overlaps == [whole]
    assert len(keys) == 1
    assert whole.dead is False


def test_get_overlaps_other_table_is_ignored():
    keys = KeyRegionCache()
    for region in _three_regions():
        keys.put(region)
    other = RegionInfo(9, None, b"zeta", b"zeta,,9", b"", b"")
    assert keys.get_overlaps(other) == []


def test_delete():
    keys = KeyRegionCache()
    r1, _, _ = _three_regions()
    keys.put(r1)
    assert keys.delete(r1) is True
    assert r1.dead is True
    assert keys.delete(r1) is False
    assert len(keys) == 0


def test_compare_region_names():
    assert compare_region_names(b"a,,1", b"a,\x00,1") < 0
    assert compare_region_names(b"table,,1", b"table,,:") < 0
    assert compare_region_names(b"tab,z,1", b"table,,1") < 0
    assert compare_region_names(b"t,b,1", b"t,a,9") > 0
    assert compare_region_names(b"t,a,1", b"t,a,1") == 0


def test_fully_qualified_table():
    plain = RegionInfo(0, None, b"test", b"test,,1", b"", b"")
    spaced = RegionInfo(0, b"hbase", b"meta", b"hbase:meta,,1", b"", b"")
    assert fully_qualified_table(plain) == b"test"
    assert fully_qualified_table(spaced) == b"hbase:meta"


def test_create_region_search_key():
    assert create_region_search_key(b"test", b"key") == b"test,key,:"


def test_is_region_overlap():
    r1, r2, r3 = _three_regions()
    assert is_region_overlap(r1, r2) is False
    assert is_region_overlap(r2, r3) is False
    wide = RegionInfo(7, None, b"test", b"test,e,7", b"e", b"")
    assert is_region_overlap(r1, wide) is True
    assert is_region_overlap(r3, wide) is True
    other = RegionInfo(7, b"ns", b"test", b"ns:test,e,7", b"e", b"")
    assert is_region_overlap(r3, other) is False


def test_client_cache_put_reuses_client():
    clients = ClientRegionCache()
    created = []

    def factory():
        client = RegionClient("host:1")
        created.append(client)
        return client

    r1, r2, _ = _three_regions()
    first = clients.put("host:1", r1, factory)
    second = clients.put("host:1", r2, factory)
    assert first is second
    assert len(created) == 1
    assert list(clients.regions[first]) == [r1, r2]


def test_client_cache_delete():
    clients = ClientRegionCache()
    client = RegionClient("host:1")
    r1, _, _ = _three_regions()
    r1.client = client
    clients.put("host:1", r1, lambda: client)
    clients.delete(r1)
    assert r1.client is None
    assert clients.regions[client] == {}


def test_client_cache_close_all():
    clients = ClientRegionCache()
    client = RegionClient("host:1")
    r1, _, _ = _three_regions()
    r1.client = client
    clients.put("host:1", r1, lambda: client)
    clients.close_all()
    assert client.closed is True
    assert r1.available is False
    assert r1.client is None


def test_client_down():
    clients = ClientRegionCache()
    client = RegionClient("host:1")
    r1, r2, _ = _three_regions()
    clients.put("host:1", r1, lambda: client)
    clients.put("host:1", r2, lambda: client)
    assert clients.client_down(client) == {r1, r2}
    assert client not in clients.regions
    assert clients.client_down(client) == set()