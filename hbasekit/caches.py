"""Region caches: key to region, and region server client to regions."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from sortedcontainers import SortedDict

_log = logging.getLogger(__name__)


@dataclass(eq=False)
class RegionClient:
    """A connection to a region server, identified by its address."""

    addr: str
    closed: bool = field(default=False, init=False)

    def close(self) -> None:
        self.closed = True


@dataclass(eq=False)
class RegionInfo:
    """A region of a table, compared and hashed by identity."""

    id: int
    namespace: bytes | None
    table: bytes
    name: bytes
    start_key: bytes | None
    stop_key: bytes | None
    client: RegionClient | None = None
    available: bool = True
    dead: bool = False

    def __post_init__(self) -> None:
        self.namespace = bytes(self.namespace or b"")
        self.table = bytes(self.table or b"")
        self.name = bytes(self.name or b"")
        self.start_key = bytes(self.start_key or b"")
        self.stop_key = bytes(self.stop_key or b"")

    def mark_unavailable(self) -> bool:
        """Mark the region unavailable; return True if it was available."""
        if not self.available:
            return False
        self.available = False
        return True

    def mark_available(self) -> None:
        self.available = True

    def mark_dead(self) -> None:
        """Tell anyone establishing this region that they can give up."""
        self.dead = True


def _name_sort_key(name: bytes) -> tuple[bytes, bytes, bytes, bytes]:
    name = bytes(name)
    first = name.find(b",")
    if first < 0:
        return name, b"", b"", name
    last = name.rfind(b",")
    if last == first:
        return name[:first], b"", name[first + 1:], name
    return name[:first], name[first + 1:last], name[last + 1:], name


def compare_region_names(a: bytes, b: bytes) -> int:
    """Compare region names by table, then start key, then region id.

    Returns a negative number, zero or a positive number.
    """
    ka, kb = _name_sort_key(a), _name_sort_key(b)
    return (ka > kb) - (ka < kb)


def fully_qualified_table(region: RegionInfo) -> bytes:
    """Return ``namespace:table``, or the bare table in the default namespace."""
    if not region.namespace:
        return region.table
    return region.namespace + b":" + region.table


def create_region_search_key(table: bytes, key: bytes) -> bytes:
    """Build the key that sorts just after every region of ``table`` starting at ``key``."""
    return bytes(table) + b"," + bytes(key or b"") + b",:"


def is_region_overlap(reg_a: RegionInfo, reg_b: RegionInfo) -> bool:
    """Whether two regions of the same table cover intersecting key ranges."""
    return (
        (reg_a.namespace or b"") == (reg_b.namespace or b"")
        and reg_a.table == reg_b.table
        and (not reg_b.stop_key or reg_a.start_key < reg_b.stop_key)
        and (not reg_a.stop_key or reg_a.stop_key > reg_b.start_key)
    )


def _pointer(obj: object) -> str:
    return f"{id(obj):#x}"


class ClientRegionCache:
    """Maps each region server client to the regions it serves."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._lock = threading.RLock()
        self._logger = logger or _log
        self.regions: dict[RegionClient, dict[RegionInfo, None]] = {}

    def put(
        self, addr: str, region: RegionInfo, new_client: Callable[[], RegionClient]
    ) -> RegionClient:
        """Associate ``region`` with the client for ``addr``, creating it if needed."""
        with self._lock:
            for existing, regions in self.regions.items():
                if existing.addr == addr:
                    regions.setdefault(region, None)
                    self._logger.debug("region client is already in client's cache: %s", existing)
                    return existing
            client = new_client()
            self.regions[client] = {region: None}
        self._logger.info("added new region client: %s", client)
        return client

    def delete(self, region: RegionInfo) -> None:
        """Detach ``region`` from its client."""
        with self._lock:
            client = region.client
            if client is not None:
                region.client = None
                regions = self.regions.get(client)
                if regions is not None:
                    regions.pop(region, None)

    def close_all(self) -> None:
        """Mark every region unavailable and close every client."""
        with self._lock:
            for client, regions in self.regions.items():
                for region in regions:
                    region.mark_unavailable()
                    region.client = None
                client.close()

    def client_down(self, client: RegionClient) -> set[RegionInfo]:
        """Forget ``client`` and return the regions it was serving."""
        with self._lock:
            regions = self.regions.pop(client, None)
        if regions is None:
            return set()
        self._logger.info("removed region client: %s", client)
        return set(regions)

    def debug_info(
        self, regions: dict[str, RegionInfo], clients: dict[str, RegionClient]
    ) -> dict[str, list[str]]:
        """Fill ``regions`` and ``clients`` by identity and return client -> region ids."""
        result: dict[str, list[str]] = {}
        with self._lock:
            for client, infos in self.regions.items():
                client_id = _pointer(client)
                clients[client_id] = client
                region_ids = []
                for info in infos:
                    info_id = _pointer(info)
                    region_ids.append(info_id)
                    regions[info_id] = info
                result[client_id] = region_ids
        return result


class KeyRegionCache:
    """Regions ordered by region name, for lookup by row key."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._lock = threading.Lock()
        self._logger = logger or _log
        self._regions: SortedDict = SortedDict(_name_sort_key)

    def __len__(self) -> int:
        return len(self._regions)

    def get(self, key: bytes) -> tuple[bytes | None, RegionInfo | None]:
        """Return the (name, region) just before search ``key``, or (None, None)."""
        key = bytes(key)
        with self._lock:
            if key in self._regions:
                raise RuntimeError(f"got exact match for region search key {key!r}")
            index = self._regions.bisect_left(key)
            if index == 0:
                return None, None
            return self._regions.peekitem(index - 1)

    def debug_info(self, regions: dict[str, RegionInfo]) -> dict[str, str]:
        """Fill ``regions`` by identity and return region name -> region id."""
        with self._lock:
            items = list(self._regions.items())
        result: dict[str, str] = {}
        for name, region in items:
            region_id = _pointer(region)
            regions[region_id] = region
            result[name.decode("utf-8", "replace")] = region_id
        return result

    def get_overlaps(self, region: RegionInfo) -> list[RegionInfo]:
        """Return cached regions whose ranges intersect ``region``'s range."""
        if not self._regions:
            return []
        key = create_region_search_key(fully_qualified_table(region), region.start_key)
        if key in self._regions:
            raise RuntimeError(f"found a region with exact name as the search key {key!r}")
        start = max(self._regions.bisect_left(key) - 1, 0)

        overlaps: list[RegionInfo] = []
        first = self._regions.peekitem(start)[1]
        if is_region_overlap(first, region):
            overlaps.append(first)
        for name in self._regions.islice(start + 1):
            candidate = self._regions[name]
            if not is_region_overlap(candidate, region):
                break
            overlaps.append(candidate)
        return overlaps

    def put(self, region: RegionInfo) -> tuple[list[RegionInfo], bool]:
        """Insert ``region`` unless a same-named or younger overlapping region is cached.

        Returns the overlapping regions and whether ``region`` was inserted; older
        overlaps are removed and marked dead.
        """
        with self._lock:
            existing = self._regions.get(region.name)
            if existing is not None:
                self._logger.debug("region is already in cache: %s", region)
                return [existing], False
            overlaps = self.get_overlaps(region)
            if any(o.id > region.id for o in overlaps):
                self._logger.debug(
                    "region is already in cache: %s, overlaps: %s", region, overlaps
                )
                return overlaps, False
            self._regions[region.name] = region
            for overlap in overlaps:
                self._regions.pop(overlap.name, None)
                overlap.mark_dead()
        self._logger.info("added new region: %s, overlaps: %s", region, overlaps)
        return overlaps, True

    def delete(self, region: RegionInfo) -> bool:
        """Remove ``region``; return whether it was cached."""
        with self._lock:
            removed = self._regions.pop(region.name, None) is not None
        region.mark_dead()
        self._logger.debug("removed region: %s", region)
        return removed