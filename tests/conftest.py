import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("HARNESS_LOG_FILE", "")

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from telemetry_harness.agent.expectations import ExpectationTable
from telemetry_harness.models.expectation import Expectation
from telemetry_harness.models.telemetry import TelemetryType
from telemetry_harness.telemetry.ingestion import TelemetryStore


def envelope(base_type, base_data=None, operation_id="abc", parent_id="|abc.",
             app_version="1.0.0", sdk_version="node:1.2.3"):
    """Application Insights envelope as the collector receives it."""
    tags = {}
    if operation_id is not None:
        tags["ai.operation.id"] = operation_id
    if parent_id is not None:
        tags["ai.operation.parentId"] = parent_id
    if app_version is not None:
        tags["ai.application.ver"] = app_version
    if sdk_version is not None:
        tags["ai.internal.sdkVersion"] = sdk_version
    return {"data": {"baseType": base_type, "baseData": base_data or {}}, "tags": tags}


def request_envelope(path, operation_id="abc"):
    return envelope("RequestData", {"name": "GET " + path, "url": "http://localhost" + path},
                    operation_id=operation_id, parent_id=None)


def metric_envelope(name, value=1.0):
    return envelope("MetricData", {"metrics": [{"name": name, "value": value}]},
                    operation_id=None, parent_id=None)


@pytest.fixture
def expectations():
    return ExpectationTable({
        "dependency": Expectation(TelemetryType.DEPENDENCY),
        "http_dependency": Expectation(
            TelemetryType.DEPENDENCY,
            lambda item: item.payload.dependency_type == "HTTP",
        ),
        "custom_event": Expectation(TelemetryType.EVENT, lambda item: item.name == "TestEvent"),
        "nothing": Expectation(None),
    })


@pytest.fixture
def store():
    """Store holding a '/test' request and one HTTP dependency under it."""
    return TelemetryStore([
        request_envelope("/test"),
        envelope("RemoteDependencyData", {"name": "GET /", "type": "HTTP", "target": "bing.com"}),
    ])
