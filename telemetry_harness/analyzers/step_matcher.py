"""
Consumes the telemetry of one correlated operation against the ordered steps
of a test.

Each step takes the first remaining item that has the expected type, reports
the operation's derived parent id, passes the base validator and satisfies the
step's verifier. A taken item is removed from the working copy so it can never
satisfy a second step. The test passes when every step found its item and no
more than MAX_RESIDUAL_ITEMS items are left over.

The store itself is never modified: each pass works on its own copy.
"""
import json
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from telemetry_harness import config
from telemetry_harness.analyzers.base import base_validator
from telemetry_harness.analyzers.logger_config import setup_logger
from telemetry_harness.models.expectation import Expectation
from telemetry_harness.models.telemetry import TelemetryItem, derive_parent_id

logger = setup_logger()


@dataclass
class MatchResult:
    correlation_id: str
    matched: List[str] = field(default_factory=list)
    missing_steps: List[str] = field(default_factory=list)
    residual: List[TelemetryItem] = field(default_factory=list)
    max_residual: int = config.MAX_RESIDUAL_ITEMS

    @property
    def has_unexpected_residual(self) -> bool:
        return len(self.residual) > self.max_residual

    @property
    def passed(self) -> bool:
        return not self.missing_steps and not self.has_unexpected_residual

    def __bool__(self) -> bool:
        return self.passed


def _is_candidate(item: TelemetryItem, expectation: Expectation, parent_id: str) -> bool:
    if item.type != expectation.expected_type or item.parent_id != parent_id:
        return False
    if not base_validator(item):
        return False
    try:
        return bool(expectation.verifier(item))
    except Exception as e:
        # malformed payloads count as a non-match
        logger.debug(f"Verifier raised {type(e).__name__} on {item.type}: {e}")
        return False


def find_item(dataset: List[TelemetryItem], expectation: Expectation,
              correlation_id: str) -> Optional[TelemetryItem]:
    """ Remove and return the first item satisfying the expectation, None if there is none. """
    parent_id = derive_parent_id(correlation_id)
    for i, item in enumerate(dataset):
        if _is_candidate(item, expectation, parent_id):
            return dataset.pop(i)
    return None


def match_steps(store, correlation_id: str, steps: Sequence[str], expectations) -> MatchResult:
    """ Match every step of a test against the items correlated to ``correlation_id``. """
    dataset = list(store.get_by_correlation_id(correlation_id))
    result = MatchResult(correlation_id=correlation_id)

    for step in steps:
        # unknown steps are a broken test definition and propagate
        expectation = expectations.lookup(step)
        if expectation.expects_nothing:
            result.matched.append(step)
            continue

        if find_item(dataset, expectation, correlation_id) is not None:
            result.matched.append(step)
        else:
            logger.error(
                f"FAILED EXPECTATION - Could not find expected {expectation.expected_type.value} "
                f"child telemetry for rule {step}!"
            )
            result.missing_steps.append(step)

    result.residual = dataset
    if result.has_unexpected_residual:
        logger.error("FAILED EXPECTATION - Unexpected child telemetry item(s)!")
        logger.error(json.dumps([item.to_dict() for item in dataset], indent=2, default=str))

    return result
