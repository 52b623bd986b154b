"""
Feedback models for Stagebot Team Learning.

Defines data structures for the team learning loop: raw feedback
submissions, stored feedback events, and the learned patterns and
statistics derived from them.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FeedbackRequest(BaseModel):
    """
    Feedback submitted on a single AI review suggestion.

    Fields are loosely typed on purpose: structural validation happens in
    services.validation so that every problem is reported at once instead
    of failing on the first missing field. Accepts both snake_case and
    camelCase keys (the IDE client posts camelCase).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    file_extension: Optional[str] = Field(None, description="File extension, e.g. '.cs'")
    rule: Optional[str] = Field(None, description="Rule category (LOGIC, STYLE, SECURITY, ...)")
    code_snippet: Optional[str] = Field(None, description="The code that was reviewed")
    suggestion: Optional[str] = Field(None, description="The AI's suggestion")
    issue_hash: Optional[str] = Field(None, description="Hash identifying the suggestion instance")
    is_helpful: bool = Field(default=False, description="Whether the suggestion was helpful")
    reason: Optional[str] = Field(None, description="Why it was (not) helpful")
    correction: Optional[str] = Field(None, description="User's correction, if any")
    contributor: Optional[str] = Field(None, description="Who submitted the feedback")
    repository: Optional[str] = Field(None, description="Repository name for context")


class FeedbackEvent(BaseModel):
    """
    A stored feedback item.

    Table design:
    - partition_key = lower-cased file extension (fast queries by file type)
    - row_key = unique uuid4 (no conflicts on concurrent inserts)

    Events are immutable once stored.
    """

    model_config = ConfigDict(frozen=True)

    partition_key: str = Field(..., description="Lower-cased file extension")
    row_key: str = Field(default="", description="Unique identifier, assigned by the store")
    rule: str = Field(..., description="Rule category")
    code_snippet: str = Field(default="", description="Reviewed code (store-truncated)")
    suggestion: str = Field(default="", description="AI suggestion (store-truncated)")
    issue_hash: str = Field(..., description="Hash of the suggestion for grouping")
    is_helpful: bool = Field(default=False, description="Whether the user found it helpful")
    reason: Optional[str] = Field(None, description="Stated reason")
    correction: Optional[str] = Field(None, description="Correction, if provided")
    contributor: str = Field(default="", description="Submitter username/alias")
    repository: str = Field(default="", description="Repository name")
    feedback_timestamp: Optional[datetime] = Field(None, description="Set by the store on insert")

    @property
    def file_extension(self) -> str:
        return self.partition_key


class FeedbackSubmitted(BaseModel):
    """Confirmation returned after a feedback event has been stored."""

    id: str = Field(..., description="Generated row key")
    message: str = Field(default="Feedback recorded successfully")


class FewShotExample(BaseModel):
    """A sampled historical instance of a pattern used for few-shot prompting."""

    code_snippet: str = Field(default="", description="Snippet, truncated to 500 chars")
    original_suggestion: str = Field(default="", description="The AI's original suggestion")
    was_helpful: bool = Field(default=False)
    correction: Optional[str] = None
    reason: Optional[str] = None


class LearnedPattern(BaseModel):
    """
    A distinct (rule, extension, issue) combination observed across feedback.

    Recomputed on every query; never persisted.
    """

    pattern_key: str = Field(..., description="rule|extension|issue_hash")
    rule: str
    file_extension: str
    total_occurrences: int = Field(..., ge=0)
    helpful_count: int = Field(..., ge=0)
    not_helpful_count: int = Field(..., ge=0)
    accuracy: float = Field(..., ge=0.0, le=100.0, description="Helpful percentage, 1 decimal")
    examples: list[FewShotExample] = Field(default_factory=list, max_length=3)


class PatternsResponse(BaseModel):
    """Learned patterns for one extension plus the unfiltered feedback count."""

    patterns: list[LearnedPattern] = Field(default_factory=list)
    total_feedback_count: int = Field(default=0, ge=0)


class ContributorStat(BaseModel):
    """Contributor leaderboard entry."""

    name: str
    feedback_count: int = Field(..., ge=0)


class GlobalStats(BaseModel):
    """Unconditional summary of the whole feedback corpus."""

    total_feedback: int = Field(default=0, ge=0)
    helpful_count: int = Field(default=0, ge=0)
    not_helpful_count: int = Field(default=0, ge=0)
    helpful_rate: float = Field(default=0.0, ge=0.0, le=100.0)
    unique_patterns: int = Field(default=0, ge=0)
    unique_contributors: int = Field(default=0, ge=0)
    by_extension: dict[str, int] = Field(default_factory=dict)
    top_contributors: list[ContributorStat] = Field(default_factory=list)
