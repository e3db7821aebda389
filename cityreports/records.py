"""Fixed-size binary report records kept in a district's reports file."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import Iterable, List

FIELD_SIZE = 64
REPORTS_FILE = "reports.dat"

# id, inspector, lat, lon, category, severity, timestamp, description
_LAYOUT = struct.Struct("<i64sff64siq64s")
RECORD_SIZE = _LAYOUT.size


def _encode(text: str) -> bytes:
    return text.encode("utf-8")[:FIELD_SIZE]


def _decode(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


@dataclass
class Report:
    """One inspection report as stored on disk."""

    id: int
    inspector: str
    severity: int
    timestamp: int
    description: str = ""
    category: str = "General"
    lat: float = 0.0
    lon: float = 0.0

    def pack(self) -> bytes:
        """Serialise the report into its fixed-size binary record."""
        try:
            return _LAYOUT.pack(
                self.id,
                _encode(self.inspector),
                self.lat,
                self.lon,
                _encode(self.category),
                self.severity,
                self.timestamp,
                _encode(self.description),
            )
        except struct.error as exc:
            raise ValueError(f"report cannot be packed: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> "Report":
        """Build a report from one binary record."""
        if len(data) != RECORD_SIZE:
            raise ValueError(
                f"record must be {RECORD_SIZE} bytes, got {len(data)}"
            )
        (report_id, inspector, lat, lon, category,
         severity, timestamp, description) = _LAYOUT.unpack(data)
        return cls(
            id=report_id,
            inspector=_decode(inspector),
            severity=severity,
            timestamp=timestamp,
            description=_decode(description),
            category=_decode(category),
            lat=lat,
            lon=lon,
        )


def read_reports(path: str | os.PathLike) -> List[Report]:
    """Read every complete record from a reports file."""
    with open(path, "rb") as stream:
        reports = []
        for chunk in iter(lambda: stream.read(RECORD_SIZE), b""):
            if len(chunk) < RECORD_SIZE:
                break
            reports.append(Report.unpack(chunk))
        return reports


def write_reports(path: str | os.PathLike, reports: Iterable[Report]) -> None:
    """Replace the contents of a reports file with the given reports."""
    data = b"".join(report.pack() for report in reports)
    with open(path, "wb") as stream:
        stream.write(data)


def append_report(path: str | os.PathLike, report: Report) -> None:
    """Append one report to a reports file, creating it if needed."""
    data = report.pack()
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o664)
    with os.fdopen(fd, "ab") as stream:
        stream.write(data)