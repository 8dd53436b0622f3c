"""
Defines the telemetry records the harness validates:
- the kinds of telemetry an Application Insights SDK emits
- one payload structure per kind (the envelope's ``baseData``)
- the TelemetryItem wrapper carrying correlation and build tags

These models are the contract between ingestion and the validators.
Parsing is tolerant: a partial envelope yields None fields, never an exception.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

OPERATION_ID_TAG = "ai.operation.id"
PARENT_ID_TAG = "ai.operation.parentId"
APP_VERSION_TAG = "ai.application.ver"
SDK_VERSION_TAG = "ai.internal.sdkVersion"


class TelemetryType(str, Enum):
    REQUEST = "RequestData"
    DEPENDENCY = "RemoteDependencyData"
    METRIC = "MetricData"
    EVENT = "EventData"
    MESSAGE = "MessageData"
    EXCEPTION = "ExceptionData"

    @classmethod
    def parse(cls, value: Any) -> Optional["TelemetryType"]:
        """ Map a baseType string to a TelemetryType, None when unknown. """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class RequestPayload:
    name: Optional[str] = None
    url: Optional[str] = None
    response_code: Optional[str] = None
    success: Optional[bool] = None
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DependencyPayload:
    name: Optional[str] = None
    data: Optional[str] = None
    target: Optional[str] = None
    dependency_type: Optional[str] = None
    result_code: Optional[str] = None
    success: Optional[bool] = None
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricPoint:
    name: Optional[str]
    value: Optional[float]


@dataclass(frozen=True)
class MetricPayload:
    metrics: List[MetricPoint] = field(default_factory=list)
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def first_metric_name(self) -> Optional[str]:
        name = self.metrics[0].name if self.metrics else None
        return name if isinstance(name, str) else None


@dataclass(frozen=True)
class EventPayload:
    name: Optional[str] = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GenericPayload:
    """Message, exception and unknown payloads: only the raw fields."""

    fields: Mapping[str, Any] = field(default_factory=dict)


Payload = Union[RequestPayload, DependencyPayload, MetricPayload, EventPayload, GenericPayload]


def derive_parent_id(correlation_id: str) -> str:
    """ Parent id reported by every child item of an operation. """
    return "|" + correlation_id + "."


def correlation_key(operation_id: Optional[str]) -> Optional[str]:
    """ Correlation id of an operation id, accepting both bare and '|id.suffix' forms. """
    if not isinstance(operation_id, str) or not operation_id:
        return None
    if operation_id.startswith("|"):
        return operation_id[1:].split(".", 1)[0] or None
    return operation_id


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _parse_metrics(raw_metrics: Any) -> List[MetricPoint]:
    points = []
    if not isinstance(raw_metrics, list):
        return points
    for metric in raw_metrics:
        metric = _as_mapping(metric)
        points.append(MetricPoint(name=metric.get("name"), value=metric.get("value")))
    return points


def parse_payload(telemetry_type: Optional[TelemetryType], base_data: Any) -> Payload:
    fields = dict(_as_mapping(base_data))

    if telemetry_type is TelemetryType.REQUEST:
        return RequestPayload(
            name=fields.get("name"),
            url=fields.get("url"),
            response_code=fields.get("responseCode"),
            success=fields.get("success"),
            fields=fields,
        )
    if telemetry_type is TelemetryType.DEPENDENCY:
        return DependencyPayload(
            name=fields.get("name"),
            data=fields.get("data"),
            target=fields.get("target"),
            dependency_type=fields.get("type"),
            result_code=fields.get("resultCode"),
            success=fields.get("success"),
            fields=fields,
        )
    if telemetry_type is TelemetryType.METRIC:
        return MetricPayload(metrics=_parse_metrics(fields.get("metrics")), fields=fields)
    if telemetry_type is TelemetryType.EVENT:
        return EventPayload(
            name=fields.get("name"),
            properties=dict(_as_mapping(fields.get("properties"))),
            fields=fields,
        )
    return GenericPayload(fields=fields)


@dataclass(frozen=True)
class TelemetryItem:
    type: Optional[TelemetryType]
    operation_id: Optional[str]
    parent_id: Optional[str]
    application_version: Optional[str]
    sdk_version: Optional[str]
    payload: Payload
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def correlation_id(self) -> Optional[str]:
        return correlation_key(self.operation_id)

    @property
    def name(self) -> Optional[str]:
        """ Display name of the payload when it has one. """
        return getattr(self.payload, "name", None)

    @classmethod
    def from_envelope(cls, envelope: Mapping[str, Any]) -> "TelemetryItem":
        """ Build an item from an Application Insights envelope dict. """
        if not isinstance(envelope, Mapping):
            raise ValueError(f"Telemetry envelope must be a mapping, got {type(envelope).__name__}")

        data = _as_mapping(envelope.get("data"))
        tags = _as_mapping(envelope.get("tags"))
        telemetry_type = TelemetryType.parse(data.get("baseType"))

        return cls(
            type=telemetry_type,
            operation_id=_as_str(tags.get(OPERATION_ID_TAG)),
            parent_id=_as_str(tags.get(PARENT_ID_TAG)),
            application_version=_as_str(tags.get(APP_VERSION_TAG)),
            sdk_version=_as_str(tags.get(SDK_VERSION_TAG)),
            payload=parse_payload(telemetry_type, data.get("baseData")),
            raw=dict(envelope),
        )

    def to_dict(self) -> Dict[str, Any]:
        """ Original envelope, used for diagnostic dumps. """
        return dict(self.raw)
