from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from civimonitor.endpoints import ProbeConfigError
from civimonitor.models import ProbeProfile


def load_profile(path: Path) -> ProbeProfile:
    if not path.exists():
        raise ProbeConfigError(f"Missing probe profile at {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ProbeConfigError(f"Cannot read probe profile {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ProbeConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ProbeConfigError(f"Probe profile {path} must be a mapping")

    # Profiles may use the same dashed spelling as the command line.
    data = {str(k).replace("-", "_"): v for k, v in data.items()}
    if isinstance(data.get("exclude"), str):
        data["exclude"] = data["exclude"].split(",")

    try:
        return ProbeProfile.model_validate(data)
    except ValidationError as exc:
        raise ProbeConfigError(f"Invalid probe profile {path}: {exc}") from exc
