"""
Build satellite map images from map specs.

A run:
1. Resolves every geocode referenced by every map (fail-fast).
2. Saves the location cache once, in full.
3. For each map, plans the viewport, builds the Static Maps URL and
   downloads it through the content-addressed cache.
4. Optionally copies the results into an output directory.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from src.errors import MapPrepError, WriteFailure
from src.geocoding import GeoResolver
from src.location_store import PersistentLocationStore
from src.map_spec import MapSpec, referenced_geocodes
from src.static_maps import GoogleStaticMaps
from src.utils.cache import ContentAddressedCache

logger = logging.getLogger(__name__)


@dataclass
class MapBuildResult:
    """A built map and where its image lives."""
    map_id: str
    title: str
    path: Path
    width_px: int
    height_px: int
    markers: int
    published_path: Optional[Path] = None


@dataclass
class BuildReport:
    results: List[MapBuildResult] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    lookups: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


class MapBuilder:
    """Sequences resolution, persistence, planning and download for a set of maps."""

    def __init__(
        self,
        store: PersistentLocationStore,
        resolver: GeoResolver,
        static_maps: GoogleStaticMaps,
        downloader: ContentAddressedCache,
    ):
        self.store = store
        self.resolver = resolver
        self.static_maps = static_maps
        self.downloader = downloader

    def resolve_locations(self, maps: List[MapSpec], max_workers: int = 1) -> int:
        """
        Resolve every referenced geocode, then persist the cache once.

        Nothing is saved if any lookup fails, so the file on disk keeps its
        previous contents.

        Returns:
            Number of API lookups made.
        """
        before = self.resolver.lookups
        geocodes = referenced_geocodes(maps)
        logger.info(f"Resolving {len(geocodes)} distinct locations ({len(self.resolver.cache)} cached)")
        self.resolver.resolve_all(geocodes, max_workers=max_workers)
        self.store.save(self.resolver.cache)
        return self.resolver.lookups - before

    def build_map(self, spec: MapSpec) -> MapBuildResult:
        request = self.static_maps.prepare(spec, self.resolver.cache)
        url = self.static_maps.url(request)
        path = self.downloader.fetch_or_get(spec.id, url)
        return MapBuildResult(
            map_id=spec.id,
            title=spec.title,
            path=path,
            width_px=request.size.width_px,
            height_px=request.size.height_px,
            markers=len(request.markers),
        )

    def build(self, maps: List[MapSpec], keep_going: bool = False, max_workers: int = 1) -> BuildReport:
        """
        Build every map.

        Args:
            maps: Map specs to build.
            keep_going: Record per-map failures in the report and continue
                instead of raising. Location resolution is always fail-fast.
            max_workers: Parallel geocode lookups.

        Raises:
            MapPrepError: Any resolution failure, and any map failure unless
                ``keep_going`` is set.
        """
        report = BuildReport()
        report.lookups = self.resolve_locations(maps, max_workers=max_workers)

        for spec in maps:
            try:
                result = self.build_map(spec)
            except MapPrepError as e:
                if not keep_going:
                    raise
                logger.error(f"Map {spec.id} failed: {e}")
                report.failures[spec.id] = str(e)
                continue
            report.results.append(result)
            logger.info(f"Built map {spec.id} ({result.width_px}x{result.height_px}) at {result.path}")

        return report


def publish(report: BuildReport, output_dir: Path) -> List[Path]:
    """
    Copy each built image to ``output_dir/{map_id}{suffix}``.

    Raises:
        WriteFailure: If a copy fails.
    """
    published = []
    for result in report.results:
        target = output_dir / f"{result.map_id}{result.path.suffix}"
        try:
            shutil.copyfile(result.path, target)
        except OSError as e:
            raise WriteFailure("copy map into place", str(target), str(e)) from e
        result.published_path = target
        published.append(target)
        logger.info(f"map: {result.map_id} as {target}")
    return published
