"""Tests for build reports."""

import json
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.location_store import LocationCache
from src.map_builder import BuildReport, MapBuildResult
from src.reporting import REPORT_COLUMNS, print_summary, report_to_dataframe, save_build_report
from src.utils.geo_utils import Coordinate


def make_report(tmp_path):
    report = BuildReport(lookups=3)
    report.results.append(MapBuildResult(
        map_id="walk", title="Walk", path=tmp_path / "walk-abc.png",
        width_px=2500, height_px=1250, markers=2,
    ))
    report.failures["broken"] = "derive marker label failed for 'broken:a': title is empty"
    return report


def test_dataframe_rows(tmp_path):
    df = report_to_dataframe(make_report(tmp_path))

    assert list(df.columns) == REPORT_COLUMNS
    assert list(df["map_id"]) == ["walk", "broken"]
    assert list(df["status"]) == ["built", "failed"]
    assert df.iloc[0]["width_px"] == 2500
    assert "title is empty" in df.iloc[1]["error"]


def test_empty_report_has_columns():
    df = report_to_dataframe(BuildReport())
    assert df.empty
    assert list(df.columns) == REPORT_COLUMNS


def test_save_build_report(tmp_path):
    csv_path, json_path = save_build_report(make_report(tmp_path), tmp_path)

    assert csv_path.exists()
    assert len(pd.read_csv(csv_path)) == 2
    records = json.loads(json_path.read_text())
    assert records[0]["map_id"] == "walk"
    assert records[1]["status"] == "failed"


def test_print_summary(tmp_path, capsys):
    cache = LocationCache({"index.home.raft": Coordinate(51.5, -0.2)})
    print_summary(make_report(tmp_path), cache)
    out = capsys.readouterr().out

    assert "Maps built:           1" in out
    assert "index.home.raft" in out
    assert "broken" in out
