"""Print the build identifier of the running interpreter.

Examples:
    # Plain identifier
    python -m build_id

    # Report with the evidence used, plus stage fallbacks on stderr
    python -m build_id --json --verbose
"""

from __future__ import annotations

import argparse
import json
import sys

from build_id.accessor import get_build_report
from build_id.common.logging import configure_logging


def _parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments.

    Args:
        argv: Raw command-line arguments excluding executable name.

    Returns:
        argparse.Namespace: Parsed CLI options.
    """
    parser = argparse.ArgumentParser(
        prog="python -m build_id",
        description="Print a UUID identifying the build of the running binary.",
    )
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Log identity stage decisions.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the build identifier CLI.

    Args:
        argv: Optional CLI args; defaults to ``sys.argv[1:]``.

    Returns:
        int: Process exit code.
    """
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(verbose=args.verbose)

    report = get_build_report()
    if args.json:
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        print(report.identifier)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
