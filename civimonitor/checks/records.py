from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from civimonitor.models import AggregationConfig

REQUIRED_KEYS: tuple[str, ...] = ("title", "message", "name")


def missing_keys(record: Any, required: tuple[str, ...] = REQUIRED_KEYS) -> list[str]:
    """Required field names absent from ``record``, in ``required`` order.

    Anything that is not a mapping is missing every required field.
    """
    if not isinstance(record, Mapping):
        return list(required)
    return [key for key in required if key not in record]


def severity_id(record: Mapping[str, Any]) -> int:
    raw = record.get("severity_id")
    if isinstance(raw, int):
        return raw
    # Flooring keeps comparisons against integer thresholds exact, "3.5" included.
    try:
        return math.floor(float(raw))
    except (TypeError, ValueError, OverflowError):
        return 0


def is_visible(record: Mapping[str, Any]) -> bool:
    raw = record.get("is_visible")
    if isinstance(raw, str):
        return raw.strip() not in {"", "0"}
    return bool(raw)


def is_excluded(record: Any, config: AggregationConfig) -> bool:
    if not isinstance(record, Mapping):
        return False
    name = record.get("name")
    return isinstance(name, str) and name in config.excluded_names


def is_reportable(record: Mapping[str, Any], config: AggregationConfig) -> bool:
    """Visibility and threshold filters, applied after exclusion and validation."""
    if not is_visible(record) and not config.show_hidden:
        return False
    if severity_id(record) < config.warning_threshold:
        return False
    return True
