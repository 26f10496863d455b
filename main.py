"""Command-line entry point.

Prints ``USED;TOTAL;UTIL`` as the first line of stdout, e.g. ``1.5;8.0;65`` or
``N/A;8.0;N/A``. Optional modes append more output after that line.
"""

import argparse
import sys
from typing import List, Optional

from vramprobe.config import init_logging
from vramprobe.formatter import format_display, format_line
from vramprobe.metrics import render_metrics
from vramprobe.probe import collect_snapshot
from vramprobe.schemas import ProbeReport


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vramprobe",
        description="Report GPU VRAM usage, capacity and utilization from OS instrumentation.",
    )
    parser.add_argument(
        "--table",
        action="store_true",
        help="print a human-readable summary after the USED;TOTAL;UTIL line",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="print diagnostic notes to stderr",
    )
    parser.add_argument(
        "--format",
        choices=("line", "json", "prometheus"),
        default="line",
        help="extra output after the first line (default: line only)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging()

    result = collect_snapshot()

    print(format_line(result))

    if args.table:
        print()
        print(format_display(result))

    if args.format == "json":
        print(ProbeReport.from_result(result).model_dump_json(indent=2))
    elif args.format == "prometheus":
        sys.stdout.write(render_metrics(result).decode("utf-8"))

    if args.verbose:
        for note in result.notes:
            print(f"WARNING: {' '.join(str(note).split())}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
