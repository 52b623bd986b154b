"""
Rule configuration models for Stagebot.

Defines the cascade document (RuleConfig) and the checks it carries.
The YAML schema uses snake_case keys; unknown keys are ignored so that
documents written for newer versions still load.
"""

import re
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Severity(str, Enum):
    """Severity levels for checks."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _normalize_severity(value: Any) -> Any:
    # Documents authored for the IDE tooling use "Warning", "Error", ...
    if isinstance(value, str):
        return value.strip().lower()
    return value


# =============================================================================
# Pattern payloads (tagged on "type")
# =============================================================================


class MetricsPattern(BaseModel):
    """Metric threshold, e.g. cyclomatic complexity above 10."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["metrics"] = "metrics"
    metric: str = Field(..., description="Metric name")
    threshold: float = Field(..., description="Threshold the metric is compared against")
    comparison: Literal["gt", "ge", "lt", "le"] = Field(default="gt")

    @model_validator(mode="before")
    @classmethod
    def _lift_value(cls, data: Any) -> Any:
        # YAML form: {type: metrics, value: {metric: ..., threshold: ...}}
        if isinstance(data, dict) and isinstance(data.get("value"), dict):
            lifted = {k: v for k, v in data.items() if k != "value"}
            lifted.update(data["value"])
            return lifted
        return data

    def is_violated(self, measured: float) -> bool:
        if self.comparison == "gt":
            return measured > self.threshold
        if self.comparison == "ge":
            return measured >= self.threshold
        if self.comparison == "lt":
            return measured < self.threshold
        return measured <= self.threshold


class RegexPattern(BaseModel):
    """Regular expression matched against added lines."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["regex"] = "regex"
    value: str = Field(..., description="Regular expression")

    @field_validator("value")
    @classmethod
    def _must_compile(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regex {value!r}: {e}") from e
        return value

    def matches(self, text: str) -> bool:
        return re.search(self.value, text) is not None


class ListPattern(BaseModel):
    """Static list of literal substrings."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["list"] = "list"
    value: list[str] = Field(default_factory=list)

    def matches(self, text: str) -> bool:
        return any(item in text for item in self.value)


class InspectPattern(BaseModel):
    """Directive handed to a language-aware inspector."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["inspect"] = "inspect"
    value: str = Field(..., description="Inspection directive name")


PatternPayload = Annotated[
    Union[MetricsPattern, RegexPattern, ListPattern, InspectPattern],
    Field(discriminator="type"),
]

_PATTERN_TYPE_ALIASES = {"roslyn-inspect": "inspect"}


# =============================================================================
# Checks
# =============================================================================


class Check(BaseModel):
    """A single named file-level rule with severity and a matching directive."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default="", description="Stable identifier used for cascade matching")
    applies_to: list[str] = Field(default_factory=list, description="Extensions or path globs")
    severity: Severity = Field(default=Severity.WARNING)
    description: str = Field(default="")
    guidance: str = Field(default="")
    scope: Literal["file", "pr", "both"] = Field(default="file")
    pattern: Optional[PatternPayload] = Field(None)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value)

    @field_validator("applies_to", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("severity", mode="before")
    @classmethod
    def _severity(cls, value: Any) -> Any:
        return _normalize_severity(value)

    @field_validator("pattern", mode="before")
    @classmethod
    def _pattern_type(cls, value: Any) -> Any:
        if isinstance(value, dict) and isinstance(value.get("type"), str):
            kind = value["type"].strip().lower()
            value = {**value, "type": _PATTERN_TYPE_ALIASES.get(kind, kind)}
        return value


class PrCheck(BaseModel):
    """A pull-request level check (title, description, size, labels, branch)."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default="")
    severity: Severity = Field(default=Severity.WARNING)
    description: str = Field(default="")
    guidance: str = Field(default="")
    type: str = Field(default="", description="title_pattern, max_files, required_labels, ...")
    value: Any = Field(None, description="Shape depends on type")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _severity(cls, value: Any) -> Any:
        return _normalize_severity(value)


class RuleConfig(BaseModel):
    """
    One layer of the configuration cascade.

    The same shape is used for the embedded baseline, central standards,
    repository overrides and the merged result.
    """

    model_config = ConfigDict(extra="ignore")

    version: int = Field(default=1)
    include_paths: list[str] = Field(default_factory=list)
    exclude_paths: list[str] = Field(default_factory=list)
    checks: list[Check] = Field(default_factory=list)
    pr_checks: list[PrCheck] = Field(default_factory=list)
    inherit_central_standards: bool = Field(
        default=True,
        description="If false, this layer replaces the lower layers entirely",
    )

    @field_validator("include_paths", "exclude_paths", "checks", "pr_checks", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        # "checks:" with no entries parses to None
        return [] if value is None else value

    @field_validator("version", mode="before")
    @classmethod
    def _none_version(cls, value: Any) -> Any:
        return 1 if value is None else value


class ResolvedConfig(BaseModel):
    """Effective configuration plus the layers that contributed to it."""

    config: RuleConfig
    layers: list[Literal["embedded", "central", "repo"]] = Field(default_factory=list)


class ConfigResolveRequest(BaseModel):
    """Caller-supplied cascade documents (YAML text)."""

    central_yaml: Optional[str] = Field(
        None, description="Central standards; the configured location is used when omitted"
    )
    repo_yaml: Optional[str] = Field(None, description="Repository override document")
