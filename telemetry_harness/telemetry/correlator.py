"""
Finds the correlation id governing the operation a test triggered.

The runner requests ``test.path`` on the TestApp; the SDK reports that call
as a request named "GET <path>", whose operation id is the root every child
item points back to.
"""
from typing import Optional

from telemetry_harness.models.expectation import TestCase
from telemetry_harness.models.telemetry import TelemetryItem, TelemetryType


class CorrelationError(Exception):
    """No usable correlation id could be derived for a test."""


class CorrelationNotFound(CorrelationError):
    pass


class MissingOperationId(CorrelationError):
    pass


def find_request_matching_path(store, path: str) -> Optional[TelemetryItem]:
    """ First request telemetry (store order) named "GET <path>". """
    request_name = "GET " + path
    for item in store.get_by_type(TelemetryType.REQUEST):
        if item.name == request_name:
            return item
    return None


def resolve_correlation_id(store, test: TestCase, explicit_id: Optional[str] = None) -> str:
    if explicit_id:
        return explicit_id

    request = find_request_matching_path(store, test.path)
    if request is None:
        raise CorrelationNotFound("Could not find request telemetry for test!")
    if not request.operation_id:
        raise MissingOperationId("Could not find operation id in request telemetry!")

    return request.operation_id
