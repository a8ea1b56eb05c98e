"""Command-line entry point for monitoring supervisors (Nagios, Icinga).

Prints one summary line on stdout and exits with the severity:
0 OK, 1 WARNING, 2 CRITICAL, 3 UNKNOWN.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from civimonitor.checks.results import AggregationResult, Severity
from civimonitor.config import settings
from civimonitor.endpoints import ProbeConfigError
from civimonitor.models import AggregationConfig, ProbeProfile, ProbeTarget
from civimonitor.profile import load_profile
from civimonitor.runner import run_once

logger = logging.getLogger(__name__)

REQUIRED_ARGUMENTS = ("hostname", "protocol", "site-key", "api-key")


class ProbeArgumentParser(argparse.ArgumentParser):
    # argparse exits 2 on bad usage, which a supervisor would read as CRITICAL.
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(int(Severity.UNKNOWN), f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = ProbeArgumentParser(
        prog="civimonitor",
        description="Run CiviCRM's System.check remotely and report a supervisor status.",
    )
    parser.add_argument("--hostname", help="Host serving the CiviCRM site")
    parser.add_argument("--protocol", help="http or https")
    parser.add_argument("--site-key", help="CiviCRM site key (or CIVICRM_SITE_KEY)")
    parser.add_argument("--api-key", help="API key with system.check permission (or CIVICRM_API_KEY)")
    parser.add_argument("--cms", help="drupal, drupal8, wordpress, joomla or backdrop")
    parser.add_argument("--rest-path", help="REST endpoint path, overrides --cms")
    parser.add_argument("--api-version", type=int, choices=(3, 4), help="CiviCRM API generation (default 4)")
    parser.add_argument("--show-hidden", help="0 hides checks hidden in the Status Console")
    parser.add_argument("--warning-threshold", type=int, help="severity_id reported as WARNING (default 2)")
    parser.add_argument("--critical-threshold", type=int, help="severity_id reported as CRITICAL (default 4)")
    parser.add_argument("--exclude", help="Comma-separated check names to ignore")
    parser.add_argument("--include-disabled", help="1 also runs checks marked inactive")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--config", type=Path, help="YAML probe profile")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def parse_flag(value: Optional[str]) -> Optional[bool]:
    """Anything but an empty string or "0" switches a flag on."""
    if value is None:
        return None
    return value.strip() not in {"", "0"}


def split_names(value: Optional[str]) -> Optional[list[str]]:
    if value is None:
        return None
    return [name.strip() for name in value.split(",") if name.strip()]


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def build_probe(
    args: argparse.Namespace, profile: Optional[ProbeProfile] = None
) -> tuple[ProbeTarget, AggregationConfig]:
    profile = profile or ProbeProfile()

    fields = {
        "hostname": _first(args.hostname, profile.hostname),
        "protocol": _first(args.protocol, profile.protocol),
        "site-key": _first(args.site_key, profile.site_key, settings.CIVICRM_SITE_KEY),
        "api-key": _first(args.api_key, profile.api_key, settings.CIVICRM_API_KEY),
    }
    missing = [name for name in REQUIRED_ARGUMENTS if not fields[name]]
    if missing:
        raise ProbeConfigError(
            "You are missing the following required arguments: " + " ".join(missing)
        )
    if fields["protocol"] not in {"http", "https"}:
        raise ProbeConfigError('"protocol" argument must be "http" or "https"')

    try:
        target = ProbeTarget(
            hostname=fields["hostname"],
            protocol=fields["protocol"],
            site_key=fields["site-key"],
            api_key=fields["api-key"],
            api_version=_first(args.api_version, profile.api_version, 4),
            cms=_first(args.cms, profile.cms),
            rest_path=_first(args.rest_path, profile.rest_path),
            include_disabled=_first(
                parse_flag(args.include_disabled), profile.include_disabled, False
            ),
            timeout_s=_first(
                args.timeout, profile.timeout_s, settings.CIVIMONITOR_TIMEOUT_SECONDS
            ),
            user_agent=settings.CIVIMONITOR_USER_AGENT,
        )
        config = AggregationConfig(
            show_hidden=_first(parse_flag(args.show_hidden), profile.show_hidden, True),
            warning_threshold=_first(args.warning_threshold, profile.warning_threshold, 2),
            critical_threshold=_first(args.critical_threshold, profile.critical_threshold, 4),
            excluded_names=frozenset(_first(split_names(args.exclude), profile.exclude)),
        )
    except ValidationError as exc:
        raise ProbeConfigError(f"Invalid probe settings: {exc}") from exc
    return target, config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        profile = load_profile(args.config) if args.config else None
        target, config = build_probe(args, profile)
        result = run_once(target, config)
    except ProbeConfigError as exc:
        logger.debug("Probe configuration rejected: %s", exc)
        result = AggregationResult(severity=Severity.UNKNOWN, summary=str(exc))

    print(result.summary)
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
