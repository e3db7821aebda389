"""District and report management from the command line."""

from __future__ import annotations

import contextlib
import operator
import os
import re
import shutil
import signal
import stat
import sys
import time
from dataclasses import dataclass
from typing import IO, List, Optional, Tuple

from cityreports.records import REPORTS_FILE, Report, append_report, read_reports, write_reports

CONFIG_FILE = "district.cfg"
LOG_FILE = "logged_district"
SNAPSHOT_FILE = "snapshot.txt"
PID_FILES = (".monitor_pid", "./.monitor_pid")
USAGE = "Usage: ./city_manager --role <r> --user <u> <cmd> <args>"

_COMPARISONS = {
    "==": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}

_CONDITION_RE = re.compile(r"([^:]+):([^:]+):\s*(\S+)")

_PERMISSION_BITS = (
    (stat.S_IRUSR, "r"), (stat.S_IWUSR, "w"), (stat.S_IXUSR, "x"),
    (stat.S_IRGRP, "r"), (stat.S_IWGRP, "w"), (stat.S_IXGRP, "x"),
    (stat.S_IROTH, "r"), (stat.S_IWOTH, "w"), (stat.S_IXOTH, "x"),
)


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def format_permissions(mode: int) -> str:
    """Render a mode as an ls-style permission string."""
    kind = "d" if stat.S_ISDIR(mode) else "-"
    return kind + "".join(ch if mode & bit else "-" for bit, ch in _PERMISSION_BITS)


@dataclass(frozen=True)
class Condition:
    """A filter of the form field:op:value."""

    field: str
    op: str
    value: str

    def matches(self, report: Report) -> bool:
        """Tell whether a report passes this filter."""
        if self.field == "severity":
            compare = _COMPARISONS.get(self.op)
            if compare is not None:
                return compare(report.severity, _atoi(self.value))
        if self.field == "category":
            return report.category == self.value
        return True


def parse_condition(text: str) -> Optional[Condition]:
    """Parse "field:op:value", or return None if it does not fit."""
    match = _CONDITION_RE.match(text)
    if match is None:
        return None
    return Condition(*match.groups())


def add_district(name: str) -> None:
    """Create a district directory with its config and log files."""
    os.mkdir(name, 0o750)
    for filename in (CONFIG_FILE, LOG_FILE):
        with contextlib.suppress(OSError):
            os.close(os.open(f"{name}/{filename}",
                             os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o640))
    print(f"District {name} initialized.")


def read_monitor_pid() -> Optional[int]:
    """Return the monitor's PID from its PID file, or None."""
    for path in PID_FILES:
        try:
            with open(path, "rb") as stream:
                raw = stream.read(63)
        except OSError:
            continue
        if not raw:
            continue
        pid = _atoi(raw.decode("ascii", errors="replace"))
        if pid > 0:
            return pid
    return None


def append_log(district: str, message: str) -> None:
    """Append a message to the district's log, ignoring failures."""
    try:
        fd = os.open(f"{district}/{LOG_FILE}",
                     os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o644)
    except OSError:
        return
    with os.fdopen(fd, "a", encoding="utf-8") as stream:
        stream.write(message)


def notify_monitor_and_log(district: str, report_id: int) -> str:
    """Signal the monitor about a new report and log the outcome."""
    pid = read_monitor_pid()
    if pid is None:
        message = (f"[NOTICE] Report {report_id} added, but monitor could not be "
                   "informed: PID file not found or invalid.\n")
    else:
        try:
            os.kill(pid, signal.SIGUSR1)
        except OSError as exc:
            reason = os.strerror(exc.errno) if exc.errno else str(exc)
            message = (f"[NOTICE] Report {report_id} added, but monitor could not be "
                       f"informed (PID {pid}): {reason}.\n")
        else:
            message = (f"[NOTICE] Report {report_id} added and monitor notified "
                       f"via PID {pid}.\n")
    append_log(district, message)
    return message


def add_report(district: str, user: str, severity: int, description: str) -> Report:
    """Append a new report to a district and notify the monitor."""
    path = f"{district}/{REPORTS_FILE}"
    link_path = f"link_{district}"
    now = int(time.time())
    report = Report(id=now, inspector=user, severity=severity,
                    timestamp=now, description=description)
    append_report(path, report)

    with contextlib.suppress(OSError):
        os.unlink(link_path)
    with contextlib.suppress(OSError):
        os.symlink(path, link_path)
    print(f"Report added. ID: {report.id} (Symlink: {link_path})")

    notify_monitor_and_log(district, report.id)
    return report


def list_reports(district: str, filter_str: Optional[str] = None) -> List[Report]:
    """Print a district's reports, optionally filtered; return those shown."""
    path = f"{district}/{REPORTS_FILE}"
    try:
        info = os.stat(path)
        reports = read_reports(path)
    except OSError:
        print(f"No reports in {district}")
        return []

    condition = parse_condition(filter_str) if filter_str else None
    print(f"File: {REPORTS_FILE} | Permissions: {format_permissions(info.st_mode)}"
          f" | Size: {info.st_size}")
    shown = [r for r in reports if condition is None or condition.matches(r)]
    for report in shown:
        print(f"[{report.id}] Cat: {report.category} | Sev: {report.severity}"
              f" | Desc: {report.description}")
    return shown


def remove_report(district: str, report_id: int) -> bool:
    """Delete every report with the given id; return whether any was found."""
    path = f"{district}/{REPORTS_FILE}"
    try:
        reports = read_reports(path)
    except OSError:
        return False
    kept = [r for r in reports if r.id != report_id]
    if len(kept) == len(reports):
        return False
    write_reports(path, kept)
    print(f"Report {report_id} deleted.")
    return True


def remove_district(district: str) -> bool:
    """Remove a district tree and its active-reports link."""
    removed = True
    try:
        if os.path.isdir(district) and not os.path.islink(district):
            shutil.rmtree(district)
        elif os.path.lexists(district):
            os.remove(district)
    except OSError:
        removed = False

    with contextlib.suppress(OSError):
        os.unlink(f"active_reports-{district}")

    if removed:
        print(f"District {district} removed.")
    else:
        print(f"Failed to remove district {district}.")
    return removed


def create_snapshot(directory: str, stream: IO[str]) -> None:
    """Write path, size, permission bits and mtime of every entry, recursively."""
    try:
        with os.scandir(directory) as entries:
            names = [entry.name for entry in entries]
    except OSError:
        return
    for name in names:
        path = f"{directory}/{name}"
        try:
            info = os.lstat(path)
        except OSError:
            continue
        stream.write(f"{path} {info.st_size} {info.st_mode & 0o777:o} "
                     f"{int(info.st_mtime)}\n")
        if stat.S_ISDIR(info.st_mode):
            create_snapshot(path, stream)


def _parse_snapshot_line(line: str) -> Optional[Tuple[str, int, int, int]]:
    parts = line.split()
    if len(parts) < 4:
        return None
    try:
        return parts[0], int(parts[1]), int(parts[2], 8), int(parts[3])
    except ValueError:
        return None


def update_snapshot(snap_path: str) -> List[Tuple[str, str]]:
    """Compare a snapshot with the filesystem; report missing and modified paths."""
    try:
        stream = open(snap_path, encoding="utf-8", errors="surrogateescape")
    except OSError:
        return []
    changes = []
    with stream:
        for line in stream:
            entry = _parse_snapshot_line(line)
            if entry is None:
                continue
            path, size, mode, mtime = entry
            try:
                info = os.lstat(path)
            except OSError:
                print(f"[MISSING]: {path}")
                changes.append(("MISSING", path))
                continue
            if (info.st_size != size or (info.st_mode & 0o777) != mode
                    or int(info.st_mtime) != mtime):
                print(f"[MODIFIED]: {path}")
                changes.append(("MODIFIED", path))
    return changes


_MANAGER_ONLY = {"--add-district", "--remove-report", "--remove-district", "remove_district"}
_ARG_COUNTS = {
    "--add-district": 1,
    "--report": 3,
    "--list": 1,
    "--remove-report": 2,
    "--remove-district": 1,
    "remove_district": 1,
}


def _dispatch(cmd: str, rest: List[str], role: str, user: str) -> int:
    if cmd in _MANAGER_ONLY and role != "manager":
        print("Invalid command or insufficient permissions.")
        return 0
    if len(rest) < _ARG_COUNTS.get(cmd, 0):
        print(USAGE)
        return 1

    if cmd == "--add-district":
        try:
            add_district(rest[0])
        except OSError as exc:
            print(f"Error creating district: {exc.strerror}", file=sys.stderr)
    elif cmd == "--report":
        try:
            add_report(rest[0], user, _atoi(rest[1]), rest[2])
        except OSError as exc:
            print(f"File error: {exc.strerror}", file=sys.stderr)
    elif cmd == "--list":
        list_reports(rest[0], rest[1] if len(rest) > 1 else None)
    elif cmd == "--remove-report":
        remove_report(rest[0], _atoi(rest[1]))
    elif cmd == "--snapshot":
        try:
            with open(SNAPSHOT_FILE, "w", encoding="utf-8") as stream:
                create_snapshot(".", stream)
        except OSError:
            return 0
        print("Snapshot saved.")
    elif cmd == "--update":
        update_snapshot(SNAPSHOT_FILE)
    elif cmd in ("--remove-district", "remove_district"):
        remove_district(rest[0])
    else:
        print("Invalid command or insufficient permissions.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the manager command line; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    role: Optional[str] = None
    user: Optional[str] = None
    op_index: Optional[int] = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--role", "--user"):
            i += 1
            value = args[i] if i < len(args) else None
            if arg == "--role":
                role = value
            else:
                user = value
        else:
            op_index = i
            break
        i += 1

    if role is None or user is None or op_index is None:
        print(USAGE)
        return 1
    return _dispatch(args[op_index], args[op_index + 1:], role, user)


if __name__ == "__main__":
    sys.exit(main())