"""
Table of what each named step is expected to emit.

Tables are usually built in code with verifier callables; ``from_dict`` builds
one from JSON where each step lists baseData fields that must match exactly.
An unknown step name is a broken test definition and raises.
"""
import json
from typing import Any, Dict, Mapping, Optional

from telemetry_harness.models.expectation import Expectation, Verifier
from telemetry_harness.models.telemetry import TelemetryItem, TelemetryType


class UnknownStepError(KeyError):
    pass


def fields_equal(expected: Mapping[str, Any]) -> Verifier:
    """ Verifier requiring each baseData field to equal the expected value. """
    expected = dict(expected)

    def verifier(item: TelemetryItem) -> bool:
        fields = item.payload.fields
        return all(key in fields and fields[key] == value for key, value in expected.items())

    return verifier


class ExpectationTable:
    def __init__(self, expectations: Optional[Mapping[str, Expectation]] = None):
        self._expectations: Dict[str, Expectation] = dict(expectations or {})

    def __contains__(self, step: str) -> bool:
        return step in self._expectations

    def __len__(self) -> int:
        return len(self._expectations)

    def register(self, step: str, expectation: Expectation) -> None:
        self._expectations[step] = expectation

    def lookup(self, step: str) -> Expectation:
        try:
            return self._expectations[step]
        except KeyError:
            raise UnknownStepError(f"No expectation defined for step {step!r}") from None

    @classmethod
    def from_dict(cls, definitions: Mapping[str, Mapping[str, Any]]) -> "ExpectationTable":
        table = cls()
        for step, entry in definitions.items():
            if not isinstance(entry, Mapping):
                raise ValueError(f"Expectation for step {step!r} must be an object.")

            type_name = entry.get("type")
            expected_type = None
            if type_name is not None:
                expected_type = TelemetryType.parse(type_name)
                if expected_type is None:
                    raise ValueError(f"Unknown telemetry type {type_name!r} for step {step!r}.")

            table.register(step, Expectation(expected_type, fields_equal(entry.get("match") or {})))
        return table


def load_expectations(path: str) -> ExpectationTable:
    with open(path, "r") as f:
        definitions = json.load(f)
    if not isinstance(definitions, dict):
        raise ValueError(f"{path} must contain a JSON object of step expectations.")
    return ExpectationTable.from_dict(definitions)
