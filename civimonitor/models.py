from __future__ import annotations

from typing import Any, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

Protocol = Literal["http", "https"]
ApiVersion = Literal[3, 4]

_CHECK_VALUES = TypeAdapter(Optional[List[Any]])


class AggregationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    show_hidden: bool = True
    warning_threshold: int = 2
    critical_threshold: int = 4
    excluded_names: FrozenSet[str] = Field(default_factory=frozenset)


class ResponsePayload(BaseModel):
    """Decoded body of a System.check call.

    ``values`` stays raw until ``check_values`` is called; API v3 may return a
    mapping keyed by check id, which is flattened in insertion order.
    """

    model_config = ConfigDict(extra="allow")

    is_error: bool = False
    error_message: Optional[str] = None
    values: Any = None

    @field_validator("is_error", mode="before")
    @classmethod
    def _loose_flag(cls, v: Any) -> bool:
        # PHP truthiness: "0" and "" are false, any other string is true.
        if isinstance(v, str):
            return v not in {"", "0"}
        return bool(v)

    @field_validator("error_message", mode="before")
    @classmethod
    def _stringify_error(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def check_values(self) -> Optional[List[Any]]:
        """The check records, validated only once the error flag is known to be clear.

        Raises ``ValidationError`` when ``values`` is neither a list nor a mapping.
        """
        raw = self.values
        if isinstance(raw, dict):
            raw = list(raw.values())
        return _CHECK_VALUES.validate_python(raw)


class ProbeTarget(BaseModel):
    hostname: str = Field(..., min_length=1)
    protocol: Protocol
    site_key: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1)
    api_version: ApiVersion = 4
    cms: Optional[str] = None
    rest_path: Optional[str] = None
    include_disabled: bool = False
    timeout_s: float = Field(default=30.0, gt=0)
    user_agent: str = "CiviMonitor"

    @field_validator("cms", mode="before")
    @classmethod
    def _lower_cms(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @field_validator("rest_path", mode="before")
    @classmethod
    def _strip_path(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip("/ ") or None
        return v


class ProbeProfile(BaseModel):
    """Settings read from a YAML profile; every field is optional."""

    model_config = ConfigDict(extra="forbid")

    hostname: Optional[str] = None
    protocol: Optional[str] = None
    site_key: Optional[str] = None
    api_key: Optional[str] = None
    api_version: Optional[ApiVersion] = None
    cms: Optional[str] = None
    rest_path: Optional[str] = None
    include_disabled: Optional[bool] = None
    timeout_s: Optional[float] = None
    show_hidden: Optional[bool] = None
    warning_threshold: Optional[int] = None
    critical_threshold: Optional[int] = None
    exclude: List[str] = Field(default_factory=list)
