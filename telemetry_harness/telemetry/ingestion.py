"""
In-memory telemetry store fed by the collector.

Every received envelope is kept twice:
- partitioned by telemetry type
- indexed by the correlation id of its operation

Handles replay mode: a JSON-lines dump of envelopes can be loaded back into a
store and validated offline. Validators only read from the store.
"""
import json
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from telemetry_harness.analyzers.logger_config import setup_logger
from telemetry_harness.models.telemetry import TelemetryItem, TelemetryType

logger = setup_logger()


class TelemetryStore:
    def __init__(self, envelopes: Iterable[Mapping[str, Any]] = ()):
        self._by_type: Dict[TelemetryType, List[TelemetryItem]] = defaultdict(list)
        self._by_correlation: Dict[str, List[TelemetryItem]] = defaultdict(list)
        self._count = 0
        self.extend(envelopes)

    def __len__(self) -> int:
        return self._count

    def add(self, envelope: Mapping[str, Any]) -> TelemetryItem:
        """ Parse one envelope and index it by type and correlation id. """
        item = envelope if isinstance(envelope, TelemetryItem) else TelemetryItem.from_envelope(envelope)

        if item.type is not None:
            self._by_type[item.type].append(item)
        if item.correlation_id is not None:
            self._by_correlation[item.correlation_id].append(item)
        self._count += 1
        return item

    def extend(self, envelopes: Iterable[Mapping[str, Any]]) -> None:
        for envelope in envelopes:
            self.add(envelope)

    def get_by_type(self, telemetry_type: TelemetryType) -> Tuple[TelemetryItem, ...]:
        return tuple(self._by_type.get(TelemetryType(telemetry_type), ()))

    def get_by_correlation_id(self, correlation_id: str) -> Tuple[TelemetryItem, ...]:
        return tuple(self._by_correlation.get(correlation_id, ()))

    def correlation_ids(self) -> List[str]:
        return list(self._by_correlation)

    def clear(self) -> None:
        self._by_type.clear()
        self._by_correlation.clear()
        self._count = 0


def load_jsonl(path: str) -> TelemetryStore:
    """ Load a JSON-lines dump of telemetry envelopes into a new store. """
    store = TelemetryStore()

    with open(path, "r") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                envelope = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping invalid JSON line {line_no} in {path}: {e}")
                continue
            if not isinstance(envelope, dict):
                logger.warning(f"Skipping non-object line {line_no} in {path}")
                continue
            store.add(envelope)

    logger.info(f"Loaded {len(store)} telemetry items from {path}.")
    return store
