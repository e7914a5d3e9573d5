"""Tests for report aggregation and file export."""
import csv
import json
from datetime import date, datetime

import pytest

from tally.errors import UnsupportedExportFormat
from tally.services.export import export_report
from tally.services.reporting import build_report
from tally.services.timekeeping import get_date_range


@pytest.fixture
def week_of_sessions(make_session):
    make_session(start_time=datetime(2024, 1, 16, 14, 0), end_time=datetime(2024, 1, 16, 15, 0), status="completed", total_seconds=3600, project="api")
    make_session(start_time=datetime(2024, 1, 15, 9, 0), end_time=datetime(2024, 1, 15, 9, 30), status="completed", total_seconds=1800, project="api", note='said "hi", left')
    make_session(start_time=datetime(2024, 1, 15, 13, 0), end_time=datetime(2024, 1, 15, 13, 10), status="completed", total_seconds=600)
    make_session(start_time=datetime(2024, 1, 22, 9, 0), end_time=datetime(2024, 1, 22, 10, 0), status="completed", total_seconds=3600)
    make_session(start_time=datetime(2024, 1, 17, 9, 0))


def test_week_report_totals_and_groups(store, week_of_sessions):
    report = build_report(store, "week", get_date_range("week", date(2024, 1, 15)))

    assert report.grouped
    assert report.session_count == 3
    assert report.total_seconds == 6000
    assert report.total_hours == 1.67
    assert [s.start_time for s in report.sessions] == sorted(s.start_time for s in report.sessions)
    assert [(d.day, d.total_seconds, d.session_count) for d in report.days] == [
        (date(2024, 1, 15), 2400, 2),
        (date(2024, 1, 16), 3600, 1),
    ]


def test_daily_report_is_not_grouped(store, week_of_sessions):
    report = build_report(store, "today", get_date_range("today", date(2024, 1, 15)))

    assert not report.grouped
    assert report.session_count == 2
    assert report.label == "Today"


def test_empty_report(store):
    report = build_report(store, "today", get_date_range("today", date(2024, 1, 15)))
    assert report.sessions == []
    assert report.total_seconds == 0
    assert report.days == []


def test_export_json(store, clock, tmp_path, week_of_sessions):
    report = build_report(store, "week", get_date_range("week", date(2024, 1, 15)))

    path = export_report(report, "json", tmp_path, clock)

    assert path.name == "tally-report-This-Week-20240115090000.json"
    data = json.loads(path.read_text())
    assert data["period"] == "This Week"
    assert data["totalSeconds"] == 6000
    first = data["sessions"][0]
    assert first["start"] == "2024-01-15T09:00:00"
    assert first["duration"] == "30m 0s"
    assert first["durationSeconds"] == 1800
    assert first["project"] == "api"


def test_export_csv_quotes_fields(store, clock, tmp_path, week_of_sessions):
    report = build_report(store, "week", get_date_range("week", date(2024, 1, 15)))

    path = export_report(report, "csv", tmp_path / "out", clock)

    with path.open(newline="") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == ["Start", "End", "Duration", "Project", "Tag", "Note"]
    assert rows[1] == ["2024-01-15T09:00:00", "2024-01-15T09:30:00", "30m 0s", "api", "", 'said "hi", left']
    assert len(rows) == 4


def test_export_rejects_unknown_format(store, clock, tmp_path):
    report = build_report(store, "today", get_date_range("today", date(2024, 1, 15)))
    with pytest.raises(UnsupportedExportFormat):
        export_report(report, "xml", tmp_path, clock)
