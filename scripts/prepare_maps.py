#!/usr/bin/env python3
"""
Prepare satellite maps from what3words map specs.

Usage:
    python scripts/prepare_maps.py
    python scripts/prepare_maps.py --map-dir maps --output-dir site/img/maps
    python scripts/prepare_maps.py --workers 4 --keep-going

Needs WHAT3WORDS_API_KEY and GOOGLE_MAPS_API_KEY in the environment or .env.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

import config
from src.errors import MapPrepError
from src.geocoding import GeoResolver, What3WordsClient
from src.location_store import PersistentLocationStore
from src.map_builder import MapBuilder, publish
from src.map_spec import load_maps_from_dir
from src.reporting import print_summary, save_build_report
from src.static_maps import GoogleStaticMaps
from src.utils.cache import ContentAddressedCache

logger = logging.getLogger("prepare_maps")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Map Prep: what3words map specs to satellite images")
    parser.add_argument("--map-dir", type=Path, default=config.MAPS_DIR,
                        help="Directory containing map *.yaml files")
    parser.add_argument("--location-file", type=Path, default=config.LOCATION_FILE,
                        help="Location cache file (safe to source control)")
    parser.add_argument("--download-dir", type=Path, default=config.DOWNLOAD_DIR,
                        help="Download cache directory (do not source control)")
    parser.add_argument("--output-dir", type=Path, default=config.OUTPUT_DIR,
                        help="Where final maps are copied, ready to be used")
    parser.add_argument("--report-dir", type=Path, default=config.REPORT_DIR,
                        help="Where build_report.csv/json are written")
    parser.add_argument("--workers", type=int, default=config.RESOLVE_WORKERS,
                        help="Parallel location lookups (default: %(default)s)")
    parser.add_argument("--keep-going", action="store_true",
                        help="Continue past failed maps and report them at the end")
    parser.add_argument("--no-report", action="store_true",
                        help="Skip writing build_report.csv/json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def run(args: argparse.Namespace) -> int:
    logger.info(f"Reading maps from {args.map_dir}")
    logger.info(f"Location file at {args.location_file}")
    logger.info(f"Downloading files to {args.download_dir}")
    logger.info(f"Outputting final files to {args.output_dir}")
    if not args.no_report:
        logger.info(f"Writing build report to {args.report_dir}")

    maps = load_maps_from_dir(args.map_dir)

    # Credentials are checked before any network call.
    w3w = What3WordsClient(config.WHAT3WORDS_API_KEY)
    static_maps = GoogleStaticMaps(config.GOOGLE_MAPS_API_KEY)

    for d in [args.location_file.parent, args.download_dir, args.output_dir]:
        d.mkdir(parents=True, exist_ok=True)

    store = PersistentLocationStore(args.location_file)
    resolver = GeoResolver(w3w, store.load())
    downloader = ContentAddressedCache(args.download_dir, ext=config.MAP_FORMAT)
    builder = MapBuilder(store, resolver, static_maps, downloader)

    report = builder.build(maps, keep_going=args.keep_going, max_workers=args.workers)
    publish(report, args.output_dir)

    if not args.no_report:
        args.report_dir.mkdir(parents=True, exist_ok=True)
        save_build_report(report, args.report_dir)
    print_summary(report, resolver.cache)

    if report.failures:
        logger.error(f"{len(report.failures)} maps failed: {', '.join(sorted(report.failures))}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=config.LOG_FORMAT,
        datefmt=config.LOG_DATE_FORMAT,
    )

    start = time.time()
    try:
        status = run(args)
    except MapPrepError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Done in {time.time() - start:.0f}s")
    return status


if __name__ == "__main__":
    sys.exit(main())
