"""Per-inspector workload scores for a district."""

from __future__ import annotations

import sys
from typing import Dict, List, Optional

from cityreports.records import REPORTS_FILE, read_reports

MAX_INSPECTORS = 256


def workload_scores(district: str) -> Dict[str, int]:
    """Sum report severities per inspector, in order of first appearance."""
    scores: Dict[str, int] = {}
    for report in read_reports(f"{district}/{REPORTS_FILE}"):
        if report.inspector in scores:
            scores[report.inspector] += report.severity
        elif len(scores) < MAX_INSPECTORS:
            scores[report.inspector] = report.severity
    return scores


def score_report(district: str) -> str:
    """Return the text of the workload report for a district."""
    path = f"{district}/{REPORTS_FILE}"
    try:
        scores = workload_scores(district)
    except OSError:
        return f"No reports found for district {district} or cannot open {path}\n"
    if not scores:
        return f"No inspectors with workload in district {district}.\n"
    return "".join(
        f"Inspector: {name}, Workload Score: {score}\n" for name, score in scores.items()
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Print the workload report for the district named on the command line."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("Usage: scorer <district>", file=sys.stderr)
        return 1
    sys.stdout.write(score_report(args[0]))
    return 0


if __name__ == "__main__":
    sys.exit(main())