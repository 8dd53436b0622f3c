"""
Declarative description of a functional test:
- a TestCase names the path the runner requests and its ordered steps
- an Expectation says which telemetry one step must produce

Steps are matched independently against the remaining pool; their order
only decides which step gets the first qualifying item.
"""
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple

from telemetry_harness.models.telemetry import TelemetryItem, TelemetryType

Verifier = Callable[[TelemetryItem], bool]


def accept_any(item: TelemetryItem) -> bool:
    return True


@dataclass(frozen=True)
class Expectation:
    expected_type: Optional[TelemetryType]
    verifier: Verifier = accept_any

    @property
    def expects_nothing(self) -> bool:
        return self.expected_type is None


@dataclass(frozen=True)
class TestCase:
    path: str
    steps: Tuple[str, ...] = field(default_factory=tuple)

    # not a pytest test class
    __test__ = False

    def __post_init__(self):
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def request_name(self) -> str:
        return "GET " + self.path

    @classmethod
    def of(cls, path: str, steps: Sequence[str]) -> "TestCase":
        return cls(path=path, steps=tuple(steps))
