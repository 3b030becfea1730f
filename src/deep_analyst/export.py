"""Download helpers for report content."""

import re
from typing import NamedTuple

from .models import ResearchReport

MEDIA_TYPES = {
    "md": "text/markdown",
    "txt": "text/plain",
}

_UNSAFE = re.compile(r"[^A-Za-z0-9]")


class ExportedFile(NamedTuple):
    filename: str
    media_type: str
    data: bytes


def report_filename(query: str, fmt: str) -> str:
    return f"{_UNSAFE.sub('_', query).lower()}.{fmt}"


def export_report(report: ResearchReport, fmt: str) -> ExportedFile:
    if fmt not in MEDIA_TYPES:
        raise ValueError(f"Unsupported export format: {fmt!r}")
    return ExportedFile(
        filename=report_filename(report.query, fmt),
        media_type=MEDIA_TYPES[fmt],
        data=report.content.encode("utf-8"),
    )
