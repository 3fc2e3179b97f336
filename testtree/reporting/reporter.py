"""Report generation for assembled test trees.

Turns the root TestNode into a nested report dict and writes it as JSON
or YAML. Each node carries its status, timing, captured output, subtree
status counts and node count.
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any

import yaml

from testtree.analysis.assembler import TestNode


class Reporter:
    """Generates JSON and YAML reports from a test tree."""

    def __init__(
        self,
        root: TestNode,
        include_output: bool = True,
        source: str | None = None,
    ) -> None:
        self.root = root
        self.include_output = include_output
        self.source = source

    def generate_report(self) -> dict[str, Any]:
        """Generate the report data structure.

        Returns:
            Dictionary representing the full report, suitable for JSON
            or YAML serialization.
        """
        now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()

        report: dict[str, Any] = {
            "generated_at": now,
            "summary": self._compute_summary(),
        }
        if self.source is not None:
            report["source"] = self.source
        report["run"] = self._format_node(self.root)

        return {"report": report}

    def write_report(self, path: Path) -> None:
        """Write the report as a JSON file.

        Args:
            path: File path to write the JSON report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(report, f, indent=2)
            f.write("\n")

    def write_yaml_report(self, path: Path) -> None:
        """Write the report as a YAML file.

        Args:
            path: File path to write the YAML report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(report, f, sort_keys=False, allow_unicode=True)

    def format_summary(self) -> str:
        """One-line human-readable summary of the run."""
        summary = self._compute_summary()
        line = (
            f"{summary['status'].upper()}: {summary['total']} tests, "
            f"{summary['pass']} passed, {summary['fail']} failed, "
            f"{summary['skip']} skipped"
        )
        if summary["no_status"]:
            line += f", {summary['no_status']} without status"
        return line + f" ({summary['elapsed_seconds']:.3f}s)"

    def _compute_summary(self) -> dict[str, Any]:
        """Compute summary counts over the root's children.

        The root's own status is the run outcome, not a test, so it is
        left out of the counts.
        """
        children = self.root.children
        counts = {"fail": 0, "pass": 0, "skip": 0}
        for child in children:
            for key, n in child.calc_stats().items():
                counts[key] += n
        no_status = sum(1 for c in children if c.status is None)

        return {
            "total": len(children),
            "pass": counts["pass"],
            "fail": counts["fail"],
            "skip": counts["skip"],
            "no_status": no_status,
            "elapsed_seconds": round(self.root.elapsed_seconds, 3),
            "status": aggregate_status([c.status for c in children]),
        }

    def _format_node(self, node: TestNode) -> dict[str, Any]:
        """Format one node and its children for the report."""
        entry: dict[str, Any] = {
            "name": node.name,
            "package": node.package,
            "time": node.time.isoformat() if node.time is not None else None,
            "status": node.status,
            "elapsed_seconds": round(node.elapsed_seconds, 3),
        }

        # Include output only if non-empty
        if self.include_output and node.output:
            entry["output"] = node.output

        entry["stats"] = dict(node.calc_stats())
        entry["count"] = node.count()
        entry["children"] = [self._format_node(c) for c in node.children]
        return entry


def aggregate_status(statuses: list[str | None]) -> str:
    """Compute the aggregated status of a set of tests.

    Tests without a status are ignored.

    Args:
        statuses: Status of each test (``None`` for unterminated tests).

    Returns:
        ``"fail"`` if any test failed, ``"pass"`` if any passed,
        ``"skip"`` if all were skipped, ``"no_tests"`` otherwise.
    """
    active = [s for s in statuses if s is not None]
    if not active:
        return "no_tests"
    if "fail" in active:
        return "fail"
    if "pass" in active:
        return "pass"
    return "skip"
