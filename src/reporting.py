"""
Build reports: a CSV/JSON record of each run plus a console summary.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

import pandas as pd

from src.location_store import LocationCache
from src.map_builder import BuildReport

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "map_id", "title", "status", "width_px", "height_px",
    "markers", "cache_path", "published_path", "error",
]


def report_to_dataframe(report: BuildReport) -> pd.DataFrame:
    """One row per map, built or failed."""
    records = []
    for r in report.results:
        records.append({
            "map_id": r.map_id,
            "title": r.title,
            "status": "built",
            "width_px": r.width_px,
            "height_px": r.height_px,
            "markers": r.markers,
            "cache_path": str(r.path),
            "published_path": str(r.published_path) if r.published_path else "",
            "error": "",
        })
    for map_id, error in report.failures.items():
        records.append({
            "map_id": map_id,
            "title": "",
            "status": "failed",
            "width_px": None,
            "height_px": None,
            "markers": None,
            "cache_path": "",
            "published_path": "",
            "error": error,
        })
    return pd.DataFrame(records, columns=REPORT_COLUMNS)


def save_build_report(report: BuildReport, report_dir: Path) -> Tuple[Path, Path]:
    """
    Save the run report to CSV and JSON.

    Returns:
        Tuple of (csv_path, json_path).
    """
    df = report_to_dataframe(report)

    csv_path = report_dir / "build_report.csv"
    json_path = report_dir / "build_report.json"

    df.to_csv(csv_path, index=False)
    df.to_json(json_path, orient="records", indent=2)

    logger.info(f"Saved report for {len(df)} maps to {csv_path}")
    return csv_path, json_path


def print_summary(report: BuildReport, cache: LocationCache) -> None:
    """Print a summary of the run."""
    print(f"\n{'=' * 60}")
    print("MAP PREP RESULTS")
    print(f"{'=' * 60}")
    print(f"Locations cached:     {len(cache)}")
    print(f"  looked up this run: {report.lookups}")
    print(f"Maps built:           {len(report.results)}")
    print(f"Maps failed:          {len(report.failures)}")

    if len(cache):
        print("\nAll locations:")
        for geocode, coord in cache.items():
            print(f"  {geocode:<30} {coord.latitude:.6f},{coord.longitude:.6f}")

    if report.results:
        print("\nMaps:")
        for r in report.results:
            target = r.published_path or r.path
            print(f"  {r.map_id:<20} {r.width_px}x{r.height_px}  {target}")

    if report.failures:
        print("\nFailed maps:")
        for map_id, error in report.failures.items():
            print(f"  {map_id:<20} {error}")
    print(f"{'=' * 60}\n")
