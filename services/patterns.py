"""
Pattern aggregation for the team learning loop.

Turns the feedback events of one file extension into ranked learned
patterns that a review engine can inject as few-shot guidance.
Pure functions; the caller supplies an already-materialized partition.
"""

from collections.abc import Iterable

from models.feedback import FeedbackEvent, FewShotExample, LearnedPattern, PatternsResponse
from services.validation import EXAMPLE_SNIPPET_LENGTH, truncate_if_needed

MAX_EXAMPLES = 3


def pattern_key(event: FeedbackEvent) -> str:
    """Grouping key: rule|extension|issue_hash (exact match on all three)."""
    return f"{event.rule}|{event.partition_key}|{event.issue_hash}"


def accuracy_percent(helpful: int, total: int) -> float:
    """Helpful percentage rounded to one decimal; 0 for an empty group."""
    if total <= 0:
        return 0.0
    return round(helpful / total * 100, 1)


def group_by_pattern(events: Iterable[FeedbackEvent]) -> dict[str, list[FeedbackEvent]]:
    """Group events by pattern key, preserving first-seen and member order."""
    groups: dict[str, list[FeedbackEvent]] = {}
    for event in events:
        groups.setdefault(pattern_key(event), []).append(event)
    return groups


def _to_example(event: FeedbackEvent) -> FewShotExample:
    return FewShotExample(
        code_snippet=truncate_if_needed(event.code_snippet, EXAMPLE_SNIPPET_LENGTH) or "",
        original_suggestion=event.suggestion,
        was_helpful=event.is_helpful,
        correction=event.correction,
        reason=event.reason,
    )


def build_pattern(key: str, members: list[FeedbackEvent], extension: str) -> LearnedPattern:
    """Score one group. Examples are its first members, in group order."""
    helpful = sum(1 for e in members if e.is_helpful)
    total = len(members)

    return LearnedPattern(
        pattern_key=key,
        rule=members[0].rule if members else "",
        file_extension=extension,
        total_occurrences=total,
        helpful_count=helpful,
        not_helpful_count=total - helpful,
        accuracy=accuracy_percent(helpful, total),
        examples=[_to_example(e) for e in members[:MAX_EXAMPLES]],
    )


def aggregate_patterns(
    events: list[FeedbackEvent],
    extension: str,
    min_occurrences: int = 2,
    max_results: int = 15,
    min_accuracy: float = 0.0,
) -> PatternsResponse:
    """
    Group, score, filter and rank the feedback for one extension.

    Algorithm:
        1. Group events by pattern key
        2. Drop groups smaller than min_occurrences
        3. Score each group (counts, accuracy)
        4. Drop groups below min_accuracy
        5. Sort by accuracy desc, then occurrences desc; keep max_results

    Args:
        events: Every feedback event of the extension's partition
        extension: Lower-cased file extension
        min_occurrences: Minimum group size
        max_results: Maximum number of patterns returned
        min_accuracy: Minimum accuracy percentage

    Returns:
        PatternsResponse with ranked patterns and the unfiltered event count
    """
    patterns = [
        build_pattern(key, members, extension)
        for key, members in group_by_pattern(events).items()
        if len(members) >= min_occurrences
    ]

    patterns = [p for p in patterns if p.accuracy >= min_accuracy]

    # sorted() is stable, so equal groups keep first-seen order
    patterns.sort(key=lambda p: (p.accuracy, p.total_occurrences), reverse=True)

    return PatternsResponse(
        patterns=patterns[:max_results],
        total_feedback_count=len(events),
    )


# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "accuracy_percent",
    "aggregate_patterns",
    "build_pattern",
    "group_by_pattern",
    "pattern_key",
]
