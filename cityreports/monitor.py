"""Monitor process that announces new reports when signalled."""

from __future__ import annotations

import os
import re
import signal
import sys
import threading
from typing import IO, List, Optional

PID_FILE = "./.monitor_pid"
NEW_REPORT_NOTICE = "NOTICE:A new report has been added.\n"


def format_message(kind: str, message: str) -> str:
    """Format one protocol line of the form KIND:message."""
    return f"{kind}:{message}\n"


def _emit(out: IO[str], kind: str, message: str) -> None:
    out.write(format_message(kind, message))
    out.flush()


def read_existing_monitor_pid(path: str = PID_FILE) -> Optional[int]:
    """Return the PID recorded in the PID file, or None if absent or invalid."""
    try:
        with open(path, "rb") as stream:
            raw = stream.read(63)
    except OSError:
        return None
    if not raw:
        return None
    match = re.match(r"\s*([+-]?\d+)", raw.decode("ascii", errors="replace"))
    pid = int(match.group(1)) if match else 0
    return pid if pid > 0 else None


def run_monitor(path: str = PID_FILE, out: Optional[IO[str]] = None) -> int:
    """Register as the monitor and wait for signals until interrupted.

    SIGUSR1 announces a new report; SIGINT stops the monitor, which then
    deletes its PID file. Returns the exit status.
    """
    out = sys.stdout if out is None else out

    existing = read_existing_monitor_pid(path)
    if existing is not None:
        _emit(out, "ERROR", f"Monitor already running with PID {existing}")
        return 1

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
    except OSError:
        _emit(out, "ERROR", "Failed to create PID file")
        return 1
    with os.fdopen(fd, "w", encoding="ascii") as stream:
        stream.write(f"{os.getpid()}\n")

    _emit(out, "INFO", "Monitor process started")
    _emit(out, "INFO", "PID written to .monitor_pid")
    _emit(out, "INFO", "Waiting for signals...")

    stop = threading.Event()

    def on_interrupt(signum, frame):
        stop.set()

    def on_new_report(signum, frame):
        out.write(NEW_REPORT_NOTICE)
        out.flush()

    previous: List[tuple] = []
    try:
        for signum, handler, name in (
            (signal.SIGINT, on_interrupt, "SIGINT"),
            (signal.SIGUSR1, on_new_report, "SIGUSR1"),
        ):
            try:
                previous.append((signum, signal.signal(signum, handler)))
            except (OSError, ValueError):
                _emit(out, "ERROR", f"Failed to set {name} handler")
                return 1

        while not stop.wait(1.0):
            pass
    finally:
        for signum, handler in reversed(previous):
            signal.signal(signum, handler)

    try:
        os.unlink(path)
    except OSError:
        _emit(out, "ERROR", "Failed to remove PID file")
        return 1
    _emit(out, "EXIT", "PID file deleted successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the monitor in the current directory."""
    return run_monitor(PID_FILE, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())