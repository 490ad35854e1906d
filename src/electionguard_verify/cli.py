#!/usr/bin/env python
"""Command line entry point for verifying an election record.

Usage examples:
    eg-verify verify election_record.json
    eg-verify verify election_record.json --workers 4 --json
"""
import argparse
import sys
from multiprocessing.pool import Pool
from typing import List, Optional

from .config import LOG_LEVELS, get_log_level, get_worker_count
from .errors import FormatError
from .logs import configure_logging, log_error
from .report import VerificationReport
from .schema import Record
from .serialize import load_record
from .verify import verify_election

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_UNREADABLE = 2


def _run(record: Record, workers: int) -> VerificationReport:
    if workers <= 1:
        return verify_election(record)
    with Pool(workers) as pool:
        return verify_election(record, pool)


def _positive_int(value: str) -> int:
    try:
        workers = int(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from error
    if workers < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {workers}")
    return workers


def verify(path: str, workers: int, as_json: bool) -> int:
    try:
        record = load_record(path)
    except (FormatError, OSError) as error:
        log_error("cannot read election record %s: %s", path, error)
        print(f"Error: {error}", file=sys.stderr)
        return EXIT_UNREADABLE

    report = _run(record, workers)
    print(report.to_json() if as_json else report.to_text())
    return EXIT_VALID if report.is_valid else EXIT_INVALID


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="eg-verify", description="Verify an ElectionGuard election record."
    )
    sub = p.add_subparsers(dest="cmd")
    v = sub.add_parser("verify", help="verify a JSON election record")
    v.add_argument("record", help="path to the election record")
    v.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="worker processes for ballot verification (default: $EG_VERIFY_WORKERS or 1)",
    )
    v.add_argument("--json", action="store_true", help="print the report as JSON")
    v.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="logging level (default: $EG_VERIFY_LOG_LEVEL or WARNING)",
    )
    return p


def main(argv: Optional[List[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    if args.cmd != "verify":
        p.print_help()
        return EXIT_UNREADABLE

    try:
        log_level = args.log_level or get_log_level()
        workers = args.workers if args.workers is not None else get_worker_count()
    except ValueError as error:
        p.error(str(error))

    configure_logging(log_level)
    return verify(args.record, workers, args.json)


if __name__ == "__main__":
    sys.exit(main())
