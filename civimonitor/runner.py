from __future__ import annotations

import logging

from civimonitor.aggregation import interpret_response, unknown_error
from civimonitor.checks.results import AggregationResult
from civimonitor.clients.civicrm_client import CiviCRMClientError, fetch_check_payload
from civimonitor.endpoints import resolve_request
from civimonitor.models import AggregationConfig, ProbeTarget

logger = logging.getLogger(__name__)


def run_once(target: ProbeTarget, config: AggregationConfig) -> AggregationResult:
    """Query one site's status checks and reduce them to a single result.

    A single attempt is made; any transport failure is final.
    """
    request = resolve_request(target)
    try:
        payload = fetch_check_payload(request, timeout_s=target.timeout_s)
    except CiviCRMClientError as exc:
        logger.warning("System.check request to %s failed: %s", target.hostname, exc)
        return unknown_error()

    result = interpret_response(payload, config)
    logger.debug("%s: %s", target.hostname, result.severity.name)
    return result
