import pytest

from cityreports.records import Report, write_reports
from cityreports.scorer import MAX_INSPECTORS, main, score_report, workload_scores


def _report(inspector, severity, report_id=1):
    return Report(id=report_id, inspector=inspector, severity=severity, timestamp=1)


@pytest.fixture
def district(tmp_path):
    path = tmp_path / "north"
    path.mkdir()
    return path


def test_scores_are_summed_in_first_seen_order(district):
    write_reports(district / "reports.dat",
                  [_report("alice", 3), _report("bob", 2), _report("alice", 5)])
    scores = workload_scores(str(district))
    assert scores == {"alice": 3 + 5, "bob": 2}
    assert list(scores) == ["alice", "bob"]


def test_inspector_limit(district):
    write_reports(district / "reports.dat",
                  [_report(f"i{n}", 1, n) for n in range(MAX_INSPECTORS + 10)])
    scores = workload_scores(str(district))
    assert len(scores) == MAX_INSPECTORS
    assert f"i{MAX_INSPECTORS}" not in scores


def test_missing_file_raises(district):
    with pytest.raises(FileNotFoundError):
        workload_scores(str(district))


def test_score_report_missing(district):
    name = str(district)
    assert score_report(name) == (
        f"No reports found for district {name} or cannot open {name}/reports.dat\n"
    )


def test_score_report_empty(district):
    (district / "reports.dat").write_bytes(b"")
    assert score_report(str(district)) == (
        f"No inspectors with workload in district {district}.\n"
    )


def test_score_report_lines(district):
    write_reports(district / "reports.dat", [_report("alice", 3), _report("bob", 2)])
    assert score_report(str(district)).splitlines() == [
        "Inspector: alice, Workload Score: 3",
        "Inspector: bob, Workload Score: 2",
    ]


def test_main_wrong_arguments(capsys):
    assert main([]) == 1
    assert capsys.readouterr().err == "Usage: scorer <district>\n"


def test_main_prints_report(district, capsys):
    write_reports(district / "reports.dat", [_report("alice", 4)])
    assert main([str(district)]) == 0
    assert capsys.readouterr().out == "Inspector: alice, Workload Score: 4\n"