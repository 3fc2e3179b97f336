"""Entry point for building test reports from event streams.

Reads a newline-delimited JSON test event stream (a file or stdin),
assembles the report tree, prints a one-line summary, and optionally
writes a JSON or YAML report.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from testtree.analysis.assembler import TestNode, parse
from testtree.config import ReportConfig
from testtree.errors import ParseError
from testtree.reporting.reporter import Reporter

EXIT_OK = 0
EXIT_TEST_FAILURE = 1
EXIT_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Build a hierarchical test report from a JSON test event stream"
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Path to the event stream file (default: stdin)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the report file",
    )
    parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default=None,
        help="Report format (default: from config, else json)",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to the JSON report config file",
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        default=False,
        help="Store --format and --no-output in --config-file before reporting",
    )
    parser.add_argument(
        "--no-output",
        action="store_true",
        default=False,
        help="Omit captured test output from the report",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print each assembled test to stderr",
    )
    return parser.parse_args(argv)


def _trace_node(node: TestNode) -> None:
    parts = [p for p in (node.package, node.name or "(run)", node.status or "-") if p]
    print("assembled: " + " ".join(parts), file=sys.stderr)


def _parse_input(
    args: argparse.Namespace, warnings: list[str],
) -> TestNode:
    trace = _trace_node if args.verbose else None
    if args.input is None:
        return parse(sys.stdin.buffer, warnings=warnings, trace=trace)
    with open(args.input, "rb") as f:
        return parse(f, warnings=warnings, trace=trace)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = ReportConfig(args.config_file)
    if args.save_config:
        if args.config_file is None:
            print("Error: --save-config requires --config-file", file=sys.stderr)
            return EXIT_ERROR
        config.set_config(
            format=args.format,
            include_output=False if args.no_output else None,
        )
        config.save()
        print(f"Config saved to {args.config_file}")

    warnings: list[str] = []
    try:
        root = _parse_input(args, warnings)
    except FileNotFoundError:
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return EXIT_ERROR
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    for warning in warnings:
        print(f"warning: {warning}", file=sys.stderr)

    include_output = config.include_output and not args.no_output
    source = str(args.input) if args.input is not None else None
    reporter = Reporter(root, include_output=include_output, source=source)
    print(reporter.format_summary())

    if args.output:
        fmt = args.format or config.format
        if fmt == "yaml":
            reporter.write_yaml_report(args.output)
        else:
            reporter.write_report(args.output)
        print(f"Report written to {args.output}")

    if config.fail_on_test_failure and root.calc_stats()["fail"] > 0:
        return EXIT_TEST_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
