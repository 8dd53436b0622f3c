"""
Entry point for the telemetry-harness command.

Subcommands:
- replay – validate a recorded telemetry dump against a set of tests
"""
import argparse
import asyncio
import json
import sys
from typing import List, Optional, Tuple

from telemetry_harness.agent.engine import TestValidation
from telemetry_harness.agent.expectations import load_expectations
from telemetry_harness.analyzers.logger_config import setup_logger
from telemetry_harness.models.expectation import TestCase
from telemetry_harness.telemetry.ingestion import load_jsonl

logger = setup_logger()


def load_tests(path: str) -> List[Tuple[TestCase, Optional[str]]]:
    """ Read tests as (TestCase, explicit correlation id) pairs. """
    with open(path, "r") as f:
        entries = json.load(f)
    if not isinstance(entries, list):
        raise ValueError(f"{path} must contain a JSON list of tests.")

    tests = []
    for entry in entries:
        if not isinstance(entry, dict) or "path" not in entry:
            raise ValueError(f"Every test in {path} needs a 'path': {entry!r}")
        tests.append((TestCase.of(entry["path"], entry.get("steps", [])), entry.get("correlationId")))
    return tests


async def replay(args: argparse.Namespace) -> bool:
    store = load_jsonl(args.telemetry)
    validation = TestValidation(store, load_expectations(args.expectations))

    passed = True
    for test, correlation_id in load_tests(args.tests):
        if not await validation.validate_test(test, correlation_id):
            passed = False

    if args.perf_counter:
        if not await validation.validate_perf_counters(args.perf_counter, args.min_count):
            passed = False

    logger.info(f"{validation.failed_count} validation(s) failed.")
    return passed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="telemetry-harness")
    parser.add_argument("--log-level", default=None, help="Logging level (default: HARNESS_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser("replay", help="Validate a recorded telemetry dump")
    replay_parser.add_argument("--telemetry", required=True, help="JSON-lines file of telemetry envelopes")
    replay_parser.add_argument("--tests", required=True, help="JSON list of {path, steps, correlationId?}")
    replay_parser.add_argument("--expectations", required=True, help="JSON object of step expectations")
    replay_parser.add_argument("--perf-counter", action="append", default=[],
                               help="Metric name that must appear at least --min-count times")
    replay_parser.add_argument("--min-count", type=int, default=1)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        logger.setLevel(args.log_level.upper())
        for handler in logger.handlers:
            handler.setLevel(args.log_level.upper())

    if args.command == "replay":
        return 0 if asyncio.run(replay(args)) else 1
    return 2


if __name__ == "__main__":
    sys.exit(main())
