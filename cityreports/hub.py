"""Interactive hub that starts the monitor and collects workload scores."""

from __future__ import annotations

import os
import re
import subprocess
import sys
import threading
from typing import IO, List, Optional, Sequence, Tuple

MAX_DISTRICT = 128
MAX_LINE = 1024
ENDED_NOTICE = "MONITOR HUB: monitor ended.\n"
PROMPT = "city_hub> "

MONITOR_COMMAND = (sys.executable, "-m", "cityreports.monitor")
SCORER_COMMAND = (sys.executable, "-m", "cityreports.scorer")


def directory_exists(path: str) -> bool:
    """Tell whether the path names an existing directory."""
    return os.path.isdir(path)


def relay_monitor_output(stream: IO[bytes], out: IO[str]) -> int:
    """Copy the monitor's lines to out, flagging lines that end the monitor.

    Returns how many end-of-monitor notices were written.
    """
    ended = 0
    for raw in stream:
        line = raw[:MAX_LINE - 1]
        out.write(line.decode("utf-8", errors="replace"))
        if raw.endswith(b"\n") and line.startswith((b"EXIT:", b"ERROR:")):
            out.write(ENDED_NOTICE)
            ended += 1
        out.flush()
    return ended


def _spawn(command: Sequence[str]) -> subprocess.Popen:
    return subprocess.Popen(list(command), stdout=subprocess.PIPE)


def run_hub_monitor(command: Optional[Sequence[str]] = None,
                    out: Optional[IO[str]] = None) -> int:
    """Run the monitor, relay its output until it ends; return its exit status."""
    command = MONITOR_COMMAND if command is None else command
    out = sys.stdout if out is None else out
    try:
        process = _spawn(command)
    except OSError as exc:
        print(f"{command[0]}: {exc.strerror or exc}", file=sys.stderr)
        return 127
    with process.stdout:
        relay_monitor_output(process.stdout, out)
    return process.wait()


def start_monitor_command(command: Optional[Sequence[str]] = None) -> Optional[threading.Thread]:
    """Start the monitor in the background; return the relaying thread."""
    command = MONITOR_COMMAND if command is None else command
    out = sys.stdout
    try:
        process = _spawn(command)
    except OSError as exc:
        print(f"{command[0]}: {exc.strerror or exc}", file=sys.stderr)
        return None

    def relay() -> None:
        with process.stdout:
            relay_monitor_output(process.stdout, out)
        process.wait()

    thread = threading.Thread(target=relay, name="monitor-hub", daemon=True)
    thread.start()
    print(f"Monitor hub started as PID {process.pid}")
    return thread


def calculate_scores_command(districts: Sequence[str],
                             command: Optional[Sequence[str]] = None) -> List[Tuple[str, int]]:
    """Run the scorer for every existing district and print a combined report.

    Returns (district, exit status) for each district that was scored.
    """
    if not districts:
        print("Usage: calculate_scores <district1> [district2 ...]")
        return []
    command = SCORER_COMMAND if command is None else command

    started: List[Tuple[str, Optional[subprocess.Popen]]] = []
    for district in districts:
        if not directory_exists(district):
            print(f"Warning: district '{district}' does not exist. Skipping.")
            continue
        try:
            process: Optional[subprocess.Popen] = _spawn([*command, district])
        except OSError as exc:
            print(f"{command[0]}: {exc.strerror or exc}", file=sys.stderr)
            process = None
        started.append((district[:MAX_DISTRICT - 1], process))

    if not started:
        print("No valid districts to score.")
        return []

    results: List[Tuple[str, int]] = []
    print("--- Combined workload report ---")
    for name, process in started:
        print(f"District: {name}")
        if process is None:
            status = 127
        else:
            with process.stdout:
                output = process.stdout.read()
            sys.stdout.write(output.decode("utf-8", errors="replace"))
            returncode = process.wait()
            status = returncode if returncode >= 0 else -1
        if status != 0:
            print(f"(Scorer for district {name} exited with status {status})")
        print("---")
        sys.stdout.flush()
        results.append((name, status))
    return results


def main(argv: Optional[List[str]] = None) -> int:
    """Read hub commands from standard input until exit or end of input."""
    while True:
        print(PROMPT, end="", flush=True)
        line = sys.stdin.readline()
        if not line:
            break
        if line.endswith("\n"):
            line = line[:-1]
        tokens = [token for token in re.split(r"[ \t]+", line) if token]
        if not tokens:
            continue

        cmd = tokens[0]
        if cmd == "start_monitor":
            start_monitor_command()
        elif cmd == "calculate_scores":
            calculate_scores_command(tokens[1:MAX_DISTRICT + 1])
        elif cmd in ("quit", "exit"):
            break
        else:
            print(f"Unknown command: {cmd}")
            print("Available commands: start_monitor, calculate_scores <districts>, exit")
    return 0


if __name__ == "__main__":
    sys.exit(main())