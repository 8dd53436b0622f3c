"""
Drives the application under test and validates what it reported.

For every test the runner issues one GET on the TestApp, waits for the
collector to receive the telemetry, then validates each test against the
store. Network errors are not retried: a test whose request failed is
reported failed without validation.
"""
import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import requests

from telemetry_harness import config
from telemetry_harness.agent.engine import TestValidation
from telemetry_harness.analyzers.logger_config import setup_logger
from telemetry_harness.models.expectation import TestCase

logger = setup_logger()


@dataclass
class RunReport:
    results: List[Tuple[TestCase, bool]] = field(default_factory=list)
    perf_counters_passed: Optional[bool] = None

    @property
    def passed(self) -> bool:
        return all(ok for _, ok in self.results) and self.perf_counters_passed is not False


class TestRunner:
    # not a pytest test class
    __test__ = False

    def __init__(self, validation: TestValidation, base_url: str = config.APP_URL,
                 session: Optional[requests.Session] = None, timeout: float = config.HTTP_TIMEOUT,
                 sleep=asyncio.sleep):
        self.validation = validation
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self._sleep = sleep

    def issue_request(self, test: TestCase) -> bool:
        """ Call the TestApp endpoint for a test; True on HTTP 200. """
        url = self.base_url + test.path
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"Request to {url} returned HTTP {response.status_code}")
            return False
        return True

    async def run_async(self, tests: Sequence[TestCase], settle_seconds: float = config.SETTLE_SECONDS,
                        perf_counters: Optional[Sequence[str]] = None, min_count: int = 1) -> RunReport:
        report = RunReport()
        loop = asyncio.get_running_loop()

        # requests is blocking; keep the loop free for a collector sharing it
        issued = [await loop.run_in_executor(None, self.issue_request, test) for test in tests]

        logger.info(f"Waiting {settle_seconds}s for telemetry to arrive...")
        await self._sleep(settle_seconds)

        for test, request_ok in zip(tests, issued):
            if not request_ok:
                report.results.append((test, False))
                continue
            report.results.append((test, await self.validation.validate_test(test)))

        if perf_counters:
            report.perf_counters_passed = await self.validation.validate_perf_counters(perf_counters, min_count)

        passed_count = sum(1 for _, ok in report.results if ok)
        logger.info(f"{passed_count}/{len(report.results)} tests passed.")
        return report

    def run(self, tests: Sequence[TestCase], **kwargs) -> RunReport:
        return asyncio.run(self.run_async(tests, **kwargs))
