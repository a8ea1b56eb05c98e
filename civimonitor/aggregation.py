from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from civimonitor.checks.records import (
    is_excluded,
    is_reportable,
    missing_keys,
    severity_id,
)
from civimonitor.checks.results import AggregationResult, Severity
from civimonitor.formatting import format_check, format_missing_keys, join_summary
from civimonitor.models import AggregationConfig, ResponsePayload

logger = logging.getLogger(__name__)

NO_VALUES_MESSAGE = "Unknown error - no values returned from CiviCRM"


def unknown_error() -> AggregationResult:
    return AggregationResult(severity=Severity.UNKNOWN, summary=NO_VALUES_MESSAGE)


def aggregate(records: Iterable[Any], config: AggregationConfig) -> AggregationResult:
    """Fold check records into one severity and one summary line.

    Records are taken in order. Name exclusion runs before validation, so an
    excluded record never produces a missing-keys complaint.
    """
    fragments: list[str] = []
    max_severity = Severity.OK

    for record in records:
        if is_excluded(record, config):
            continue

        missing = missing_keys(record)
        if missing:
            logger.warning("Check record is missing keys: %s", ", ".join(missing))
            fragments.append(format_missing_keys(missing))
            max_severity = max(max_severity, Severity.UNKNOWN)
            continue

        if not is_reportable(record, config):
            continue

        fragments.append(format_check(record["title"], record["message"]))
        level = severity_id(record)
        if level >= config.warning_threshold:
            max_severity = max(max_severity, Severity.WARNING)
        if level >= config.critical_threshold:
            max_severity = max(max_severity, Severity.CRITICAL)

    return AggregationResult(severity=max_severity, summary=join_summary(fragments))


def interpret_response(
    raw: Mapping[str, Any] | None, config: AggregationConfig
) -> AggregationResult:
    """Turn a decoded System.check response into the probe's final decision.

    ``None`` or anything that is not a JSON object stands for a transport or
    decode failure.
    """
    if not isinstance(raw, Mapping):
        return unknown_error()

    payload = ResponsePayload.model_validate(dict(raw))
    if payload.is_error:
        logger.info("Remote reported an error: %s", payload.error_message)
        return AggregationResult(
            severity=Severity.CRITICAL, summary=payload.error_message or ""
        )

    try:
        values = payload.check_values()
    except ValidationError as exc:
        logger.warning("Unexpected values in response: %s", exc)
        return unknown_error()
    if values is None:
        return unknown_error()

    result = aggregate(values, config)
    logger.debug(
        "Aggregated %d records into severity %s", len(values), result.severity.name
    )
    return result
