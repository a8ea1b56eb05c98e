from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Severity(IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    # Untrustworthy data outranks a known critical condition.
    UNKNOWN = 3


@dataclass(frozen=True)
class AggregationResult:
    severity: Severity
    summary: str = ""

    @property
    def exit_code(self) -> int:
        return int(self.severity)
