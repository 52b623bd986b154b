"""
Platform models for Stagebot.

Defines the normalized pull request view consumed by PR-level checks
and the result each check produces.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from .rules import Severity


class PRMetadata(BaseModel):
    """
    Normalized pull request metadata.

    Provides a platform-agnostic view of a pull request so PR-level
    checks do not depend on any one git host's payload shape.
    """

    model_config = ConfigDict(frozen=True)  # Immutable after creation

    pr_number: str = Field(default="", description="Pull request number")
    title: str = Field(default="", description="PR title")
    description: str = Field(default="", description="PR body")
    author: str = Field(default="", description="PR author username")
    source_branch: str = Field(default="", description="Source branch name")
    target_branch: str = Field(default="", description="Target branch name")
    labels: list[str] = Field(default_factory=list)
    files_changed: list[str] = Field(default_factory=list)
    total_additions: int = Field(default=0, ge=0)
    total_deletions: int = Field(default=0, ge=0)
    url: str = Field(default="")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PrCheckResult(BaseModel):
    """Outcome of a single PR-level check."""

    check_id: str = Field(default="")
    severity: Severity = Field(default=Severity.WARNING)
    message: str = Field(default="")
    guidance: str = Field(default="")
    passed: bool = Field(default=True)


class PrChecksRequest(BaseModel):
    """Request to evaluate PR-level checks of a resolved configuration."""

    pr: PRMetadata
    central_yaml: str | None = Field(None, description="Central standards override")
    repo_yaml: str | None = Field(None, description="Repository config document")
