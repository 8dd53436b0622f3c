"""
Validation entry points used by the test runner:
- validate_test: resolves a test's correlation id and matches its steps
- validate_perf_counters: checks counter telemetry across the whole store

Both resolve to a boolean. Telemetry mismatches are logged and reported as
False; only an unknown step name escapes, since it means the test itself is
wrong. The store and the expectation table are injected and only read.
"""
from typing import Optional, Sequence

from telemetry_harness.agent.expectations import ExpectationTable
from telemetry_harness.analyzers.counters import validate_counters
from telemetry_harness.analyzers.logger_config import log_scope, log_success, setup_logger
from telemetry_harness.analyzers.step_matcher import match_steps
from telemetry_harness.models.expectation import TestCase
from telemetry_harness.telemetry.correlator import CorrelationError, resolve_correlation_id
from telemetry_harness.telemetry.ingestion import TelemetryStore

logger = setup_logger()


class TestValidation:
    # not a pytest test class
    __test__ = False

    def __init__(self, store: TelemetryStore, expectations: ExpectationTable):
        self.store = store
        self.expectations = expectations
        self.failed_count = 0

    def _report(self, passed: bool, silent: bool = False) -> bool:
        if not silent:
            if passed:
                log_success(logger, "Test PASSED!")
            else:
                logger.error("Test FAILED!")
        if not passed:
            self.failed_count += 1
        return passed

    def _validate_test(self, test: TestCase, correlation_id: Optional[str]) -> bool:
        try:
            correlation_id = resolve_correlation_id(self.store, test, correlation_id)
        except CorrelationError as e:
            logger.error(f"FAILED EXPECTATION - {e}")
            return False

        return match_steps(self.store, correlation_id, test.steps, self.expectations).passed

    async def validate_test(self, test: TestCase, correlation_id: Optional[str] = None,
                            silent: bool = False) -> bool:
        with log_scope(logger, f"Validating test {test.path}...", silent=silent):
            passed = self._validate_test(test, correlation_id)
            return self._report(passed, silent=silent)

    async def validate_perf_counters(self, metric_types: Sequence[str], expected_each: int) -> bool:
        with log_scope(logger, "Validating performance counters..."):
            logger.info(
                f"Expecting {expected_each} instance(s) each of all "
                f"{len(metric_types)} performance counters"
            )
            result = validate_counters(self.store, metric_types, expected_each)
            return self._report(result.passed)
