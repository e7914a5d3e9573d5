from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path

from ..errors import UnsupportedExportFormat
from ..schemas.report import Report
from .timekeeping import Clock, format_duration

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")
CSV_HEADERS = ["Start", "End", "Duration", "Project", "Tag", "Note"]


def export_filename(report: Report, fmt: str, clock: Clock) -> str:
    label = re.sub(r"\s+", "-", report.label.replace(",", ""))
    return f"tally-report-{label}-{clock.now():%Y%m%d%H%M%S}.{fmt}"


def _json_payload(report: Report) -> dict:
    return {
        "period": report.label,
        "sessions": [
            {
                "start": s.start_time.isoformat(),
                "end": s.end_time.isoformat() if s.end_time else None,
                "duration": format_duration(s.total_seconds or 0),
                "durationSeconds": s.total_seconds,
                "project": s.project,
                "tag": s.tag,
                "note": s.note,
            }
            for s in report.sessions
        ],
        "totalSeconds": report.total_seconds,
    }


def export_report(report: Report, fmt: str, directory: Path, clock: Clock) -> Path:
    fmt = fmt.lower()
    if fmt not in EXPORT_FORMATS:
        raise UnsupportedExportFormat(fmt)

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(report, fmt, clock)
    if fmt == "json":
        path.write_text(json.dumps(_json_payload(report), indent=2), encoding="utf-8")
    else:
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(CSV_HEADERS)
            for s in report.sessions:
                writer.writerow(
                    [
                        s.start_time.isoformat(),
                        s.end_time.isoformat() if s.end_time else "",
                        format_duration(s.total_seconds or 0),
                        s.project or "",
                        s.tag or "",
                        s.note or "",
                    ]
                )
    logger.info("Exported %s sessions to %s", report.session_count, path)
    return path
