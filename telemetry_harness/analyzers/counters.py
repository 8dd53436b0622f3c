"""
Checks that performance counters were reported often enough.

Counting runs over every metric item in the store, not a single correlated
operation: counters are emitted on a timer, outside any request.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import pandas as pd

from telemetry_harness.analyzers.logger_config import setup_logger
from telemetry_harness.models.telemetry import TelemetryType

logger = setup_logger()


@dataclass
class CounterResult:
    expected_each: int
    counts: Dict[str, int] = field(default_factory=dict)
    deficits: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.deficits

    def __bool__(self) -> bool:
        return self.passed


def count_metric_names(store) -> pd.Series:
    """ Occurrences of each first-metric name across all metric telemetry. """
    names = [item.payload.first_metric_name for item in store.get_by_type(TelemetryType.METRIC)]
    # malformed metrics carry no usable name and are not counted
    names = [name for name in names if isinstance(name, str)]
    return pd.Series(names, dtype="object").value_counts()


def validate_counters(store, metric_types: Sequence[str], expected_each_at_least: int) -> CounterResult:
    tally = count_metric_names(store)
    result = CounterResult(expected_each=expected_each_at_least)

    for metric_type in metric_types:
        count = int(tally.get(metric_type, 0))
        result.counts[metric_type] = count
        if count < expected_each_at_least:
            logger.error(f"FAILED EXPECTATION - {metric_type} appeared {count} times!")
            result.deficits.append(metric_type)

    return result
