"""
Global statistics over the full feedback corpus.
"""

from collections import Counter

from models.feedback import ContributorStat, FeedbackEvent, GlobalStats
from services.patterns import accuracy_percent, pattern_key

TOP_CONTRIBUTORS = 5


def compute_stats(events: list[FeedbackEvent]) -> GlobalStats:
    """
    Summarize every feedback event in a single pass.

    Contributors with an empty name are excluded from the distinct count
    and the leaderboard. Leaderboard ties keep first-encountered order.

    Args:
        events: All feedback events across all partitions

    Returns:
        GlobalStats
    """
    helpful = 0
    patterns: set[str] = set()
    by_extension: dict[str, int] = {}
    # Counter preserves insertion order, most_common() is stable on ties
    contributors: Counter[str] = Counter()

    for event in events:
        if event.is_helpful:
            helpful += 1
        patterns.add(pattern_key(event))
        by_extension[event.partition_key] = by_extension.get(event.partition_key, 0) + 1
        if event.contributor:
            contributors[event.contributor] += 1

    total = len(events)

    return GlobalStats(
        total_feedback=total,
        helpful_count=helpful,
        not_helpful_count=total - helpful,
        helpful_rate=accuracy_percent(helpful, total),
        unique_patterns=len(patterns),
        unique_contributors=len(contributors),
        by_extension=by_extension,
        top_contributors=[
            ContributorStat(name=name, feedback_count=count)
            for name, count in contributors.most_common(TOP_CONTRIBUTORS)
        ],
    )


__all__ = ["compute_stats"]
