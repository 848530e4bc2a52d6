"""
Append-only location cache and its YAML persistence.

The cache file maps each what3words identifier to its coordinates:

    filled.count.soap:
      latitude: 51.520847
      longitude: -0.195521

Entries are only ever added. The file is read once at the start of a build
and rewritten in full once at the end, so a failed run leaves every entry
from earlier runs on disk.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import yaml

from src.errors import CacheCorrupt, WriteFailure
from src.utils.files import atomic_write
from src.utils.geo_utils import Coordinate, coordinate_problem

logger = logging.getLogger(__name__)


class LocationCache:
    """Geocode -> Coordinate mapping that only grows."""

    def __init__(self, entries: Optional[Mapping[str, Coordinate]] = None):
        self._entries: Dict[str, Coordinate] = dict(entries or {})
        self._lock = threading.Lock()

    def get(self, geocode: str) -> Optional[Coordinate]:
        return self._entries.get(geocode)

    def add(self, geocode: str, coord: Coordinate) -> Coordinate:
        """
        Insert a coordinate unless the geocode is already cached.

        Returns:
            The coordinate now stored for the geocode. An existing entry
            always wins over the new one.
        """
        with self._lock:
            return self._entries.setdefault(geocode, coord)

    def items(self) -> Iterator[Tuple[str, Coordinate]]:
        return iter(sorted(self._entries.items()))

    def to_dict(self) -> Dict[str, Coordinate]:
        return dict(self._entries)

    def __contains__(self, geocode: object) -> bool:
        return geocode in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocationCache):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"LocationCache({len(self._entries)} entries)"


def _parse_coordinate(geocode: str, raw: Any) -> Coordinate:
    if isinstance(raw, Mapping):
        lat, lon = raw.get("latitude"), raw.get("longitude")
    elif isinstance(raw, list) and len(raw) == 2:
        lat, lon = raw
    else:
        raise CacheCorrupt("parse location cache", geocode, "expected {latitude, longitude}")

    problem = coordinate_problem(lat, lon)
    if problem:
        raise CacheCorrupt("parse location cache", geocode, problem)
    return Coordinate(latitude=float(lat), longitude=float(lon))


def serialize(cache: LocationCache) -> str:
    """Render the whole cache as YAML, sorted by geocode for clean diffs."""
    payload = {
        geocode: {"latitude": coord.latitude, "longitude": coord.longitude}
        for geocode, coord in cache.items()
    }
    return yaml.safe_dump(payload, sort_keys=True, default_flow_style=False, allow_unicode=True)


def deserialize(text: str, source: str = "<string>") -> LocationCache:
    """
    Parse YAML produced by :func:`serialize`.

    Raises:
        CacheCorrupt: If the text is not a mapping of geocodes to coordinates.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CacheCorrupt("parse location cache", source, str(e)) from e

    if raw is None:
        return LocationCache()
    if not isinstance(raw, Mapping):
        raise CacheCorrupt("parse location cache", source, "expected a mapping at top level")

    entries = {}
    for geocode, value in raw.items():
        if not isinstance(geocode, str):
            raise CacheCorrupt("parse location cache", source, f"non-string key {geocode!r}")
        entries[geocode] = _parse_coordinate(geocode, value)
    return LocationCache(entries)


class PersistentLocationStore:
    """Loads and saves a :class:`LocationCache` at a fixed path."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> LocationCache:
        """
        Read the cache file, or start empty if there is none.

        Raises:
            CacheCorrupt: If the file exists but can't be read or parsed.
                The file is left untouched so no earlier lookups are lost.
        """
        if not self.path.exists():
            logger.info(f"No location cache at {self.path}, starting empty")
            return LocationCache()

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheCorrupt("read location cache", str(self.path), str(e)) from e

        cache = deserialize(text, source=str(self.path))
        logger.info(f"Loaded {len(cache)} cached locations from {self.path}")
        return cache

    def save(self, cache: LocationCache) -> None:
        """
        Write the full cache, replacing the file only once the write succeeds.

        Raises:
            WriteFailure: On any disk error.
        """
        text = serialize(cache)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(self.path, text)
        except OSError as e:
            raise WriteFailure("save location cache", str(self.path), str(e)) from e

        logger.info(f"Saved {len(cache)} locations to {self.path}")
