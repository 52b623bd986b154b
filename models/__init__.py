"""
Models package for Stagebot Team Learning.

Exports all Pydantic models for API contracts and data validation.
"""

# Feedback models (team learning loop)
from .feedback import (
    ContributorStat,
    FeedbackEvent,
    FeedbackRequest,
    FeedbackSubmitted,
    FewShotExample,
    GlobalStats,
    LearnedPattern,
    PatternsResponse,
)

# Platform models (PR metadata for PR-level checks)
from .platform import PRMetadata, PrCheckResult, PrChecksRequest

# Rule models (configuration cascade)
from .rules import (
    Check,
    ConfigResolveRequest,
    InspectPattern,
    ListPattern,
    MetricsPattern,
    PrCheck,
    RegexPattern,
    ResolvedConfig,
    RuleConfig,
    Severity,
)

__all__ = [
    # Feedback
    "FeedbackRequest",
    "FeedbackEvent",
    "FeedbackSubmitted",
    "FewShotExample",
    "LearnedPattern",
    "PatternsResponse",
    "ContributorStat",
    "GlobalStats",
    # Platform
    "PRMetadata",
    "PrCheckResult",
    "PrChecksRequest",
    # Rules
    "Severity",
    "MetricsPattern",
    "RegexPattern",
    "ListPattern",
    "InspectPattern",
    "Check",
    "PrCheck",
    "RuleConfig",
    "ResolvedConfig",
    "ConfigResolveRequest",
]
