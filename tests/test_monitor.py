import io
import os
import signal
import threading

import pytest

from cityreports.monitor import (
    NEW_REPORT_NOTICE,
    format_message,
    main,
    read_existing_monitor_pid,
    run_monitor,
)


def test_format_message():
    assert format_message("INFO", "Monitor process started") == "INFO:Monitor process started\n"


def test_format_message_round_trip():
    line = format_message("ERROR", "a:b")
    kind, _, rest = line.rstrip("\n").partition(":")
    assert (kind, rest) == ("ERROR", "a:b")


@pytest.mark.parametrize("content", [b"", b"0\n", b"-5\n", b"abc\n"])
def test_read_existing_pid_invalid(tmp_path, content):
    path = tmp_path / "pid"
    path.write_bytes(content)
    assert read_existing_monitor_pid(str(path)) is None


def test_read_existing_pid_missing(tmp_path):
    assert read_existing_monitor_pid(str(tmp_path / "missing")) is None


def test_read_existing_pid_valid(tmp_path):
    path = tmp_path / "pid"
    path.write_text("4321\n")
    assert read_existing_monitor_pid(str(path)) == 4321


def test_run_monitor_refuses_when_running(tmp_path):
    path = tmp_path / "pid"
    path.write_text("4321\n")
    out = io.StringIO()
    assert run_monitor(str(path), out) == 1
    assert out.getvalue() == "ERROR:Monitor already running with PID 4321\n"
    assert path.read_text() == "4321\n"


def test_run_monitor_cannot_create_pid_file(tmp_path):
    out = io.StringIO()
    path = tmp_path / "missing_dir" / "pid"
    assert run_monitor(str(path), out) == 1
    assert out.getvalue() == "ERROR:Failed to create PID file\n"


def _schedule(delay, action):
    timer = threading.Timer(delay, action)
    timer.start()
    return timer


def test_run_monitor_signals(tmp_path):
    path = tmp_path / "pid"
    out = io.StringIO()
    seen = []

    def notify():
        seen.append(path.read_text())
        os.kill(os.getpid(), signal.SIGUSR1)

    timers = [
        _schedule(0.2, notify),
        _schedule(0.6, lambda: os.kill(os.getpid(), signal.SIGINT)),
    ]
    status = run_monitor(str(path), out)
    for timer in timers:
        timer.join()

    assert status == 0
    assert seen == [f"{os.getpid()}\n"]
    assert not path.exists()
    assert out.getvalue().splitlines() == [
        "INFO:Monitor process started",
        "INFO:PID written to .monitor_pid",
        "INFO:Waiting for signals...",
        NEW_REPORT_NOTICE.rstrip("\n"),
        "EXIT:PID file deleted successfully",
    ]


def test_run_monitor_restores_sigint_handler(tmp_path):
    before = signal.getsignal(signal.SIGINT)
    timer = _schedule(0.2, lambda: os.kill(os.getpid(), signal.SIGINT))
    status = run_monitor(str(tmp_path / "pid"), io.StringIO())
    timer.join()
    assert status == 0
    assert signal.getsignal(signal.SIGINT) == before


def test_run_monitor_pid_file_removed_externally(tmp_path):
    path = tmp_path / "pid"
    out = io.StringIO()

    def remove_and_stop():
        path.unlink()
        os.kill(os.getpid(), signal.SIGINT)

    timer = _schedule(0.3, remove_and_stop)
    status = run_monitor(str(path), out)
    timer.join()
    assert status == 1
    assert out.getvalue().splitlines()[-1] == "ERROR:Failed to remove PID file"


def test_main_reports_existing_monitor(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".monitor_pid").write_text("4321\n")
    assert main([]) == 1
    assert capsys.readouterr().out == "ERROR:Monitor already running with PID 4321\n"