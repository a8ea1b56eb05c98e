from __future__ import annotations

import logging
from typing import Any

import requests

from civimonitor.endpoints import CheckRequest

logger = logging.getLogger(__name__)


class CiviCRMClientError(RuntimeError):
    pass


def fetch_check_payload(request: CheckRequest, *, timeout_s: float) -> dict[str, Any]:
    logger.debug("POST %s", request.url)
    try:
        resp = requests.post(
            request.url,
            data=request.data,
            headers=request.headers,
            timeout=timeout_s,
        )
    except requests.Timeout as exc:
        raise CiviCRMClientError(f"CiviCRM API timed out after {timeout_s}s") from exc
    except requests.ConnectionError as exc:
        raise CiviCRMClientError(
            f"CiviCRM API connection error: {exc.__class__.__name__}: {exc}"
        ) from exc
    except requests.RequestException as exc:
        raise CiviCRMClientError(
            f"Failed to reach CiviCRM API: {exc.__class__.__name__}: {exc}"
        ) from exc

    if resp.status_code >= 400:
        snippet = resp.text[:240].replace("\n", "\\n")
        raise CiviCRMClientError(
            f"CiviCRM API returned HTTP {resp.status_code}: {snippet}"
        )

    try:
        payload = resp.json()
    except ValueError as exc:
        snippet = resp.text[:240].replace("\n", "\\n")
        raise CiviCRMClientError(f"CiviCRM API returned invalid JSON: {snippet}") from exc

    if not isinstance(payload, dict):
        raise CiviCRMClientError("CiviCRM API payload is not a JSON object")
    return payload
