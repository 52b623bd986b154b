"""
Unit Tests: Learned pattern aggregation

Tests for grouping feedback by (rule, extension, issue hash), scoring
accuracy, filtering, ranking and few-shot example selection.
"""

import os

# Add project root to path for imports
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from services.patterns import accuracy_percent, aggregate_patterns, group_by_pattern, pattern_key
from tests.fixtures import helpful_split, make_event


class TestPatternKey:
    """Test suite for pattern grouping keys."""

    def test_key_joins_rule_extension_and_hash(self):
        assert pattern_key(make_event(rule="SECURITY", extension=".ts", issue_hash="h9")) == "SECURITY|.ts|h9"

    def test_grouping_requires_exact_match_on_all_parts(self):
        events = [
            make_event(rule="LOGIC", issue_hash="h1"),
            make_event(rule="logic", issue_hash="h1"),
            make_event(rule="LOGIC", issue_hash="h2"),
            make_event(rule="LOGIC", issue_hash="h1"),
        ]

        groups = group_by_pattern(events)

        assert list(groups) == ["LOGIC|.cs|h1", "logic|.cs|h1", "LOGIC|.cs|h2"]
        assert len(groups["LOGIC|.cs|h1"]) == 2


class TestAccuracy:
    """Test suite for accuracy_percent()."""

    @pytest.mark.parametrize(
        "helpful,total,expected",
        [(3, 4, 75.0), (1, 3, 33.3), (2, 3, 66.7), (0, 5, 0.0), (5, 5, 100.0), (0, 0, 0.0)],
    )
    def test_rounded_to_one_decimal(self, helpful, total, expected):
        assert accuracy_percent(helpful, total) == expected

    @pytest.mark.parametrize("total", range(1, 51))
    def test_monotonic_and_bounded_for_every_split(self, total):
        """
        GIVEN a fixed group size
        WHEN helpful rises from 0 to the whole group
        THEN accuracy never decreases and stays within 0..100
        """
        scores = [accuracy_percent(helpful, total) for helpful in range(total + 1)]

        assert scores == sorted(scores)
        assert all(0.0 <= score <= 100.0 for score in scores)
        assert scores[0] == 0.0
        assert scores[-1] == 100.0


class TestAggregatePatterns:
    """Test suite for aggregate_patterns()."""

    def test_three_of_four_helpful_scores_75(self):
        """
        GIVEN four events for one pattern, three helpful
        WHEN aggregated with default bounds
        THEN one pattern with accuracy 75.0 and counts 4/3/1 is returned
        """
        events = helpful_split(3, 1)

        response = aggregate_patterns(events, extension=".cs")

        assert response.total_feedback_count == 4
        assert len(response.patterns) == 1
        pattern = response.patterns[0]
        assert pattern.pattern_key == "LOGIC|.cs|abc123"
        assert pattern.total_occurrences == 4
        assert pattern.helpful_count == 3
        assert pattern.not_helpful_count == 1
        assert pattern.accuracy == 75.0

    def test_min_accuracy_excludes_pattern(self):
        response = aggregate_patterns(helpful_split(3, 1), extension=".cs", min_accuracy=80)

        assert response.patterns == []
        assert response.total_feedback_count == 4

    def test_groups_below_min_occurrences_dropped(self):
        events = helpful_split(2, 0, issue_hash="pair") + [make_event(issue_hash="single")]

        response = aggregate_patterns(events, extension=".cs", min_occurrences=2)

        assert [p.pattern_key for p in response.patterns] == ["LOGIC|.cs|pair"]
        assert response.total_feedback_count == 3

    def test_sorted_by_accuracy_then_occurrences(self):
        events = (
            helpful_split(1, 1, issue_hash="half")  # 50.0, 2
            + helpful_split(4, 0, issue_hash="big")  # 100.0, 4
            + helpful_split(2, 0, issue_hash="small")  # 100.0, 2
            + helpful_split(3, 3, issue_hash="half-big")  # 50.0, 6
        )

        response = aggregate_patterns(events, extension=".cs")

        assert [p.pattern_key.split("|")[2] for p in response.patterns] == [
            "big",
            "small",
            "half-big",
            "half",
        ]

    def test_full_ties_keep_first_seen_order(self):
        events = helpful_split(2, 0, issue_hash="first") + helpful_split(2, 0, issue_hash="second")

        response = aggregate_patterns(events, extension=".cs")

        assert [p.pattern_key for p in response.patterns] == ["LOGIC|.cs|first", "LOGIC|.cs|second"]

    def test_max_results_truncates_after_sorting(self):
        events = helpful_split(1, 1, issue_hash="low") + helpful_split(2, 0, issue_hash="high")

        response = aggregate_patterns(events, extension=".cs", max_results=1)

        assert [p.pattern_key for p in response.patterns] == ["LOGIC|.cs|high"]

    def test_examples_are_first_three_members_with_clipped_snippets(self):
        """
        GIVEN five events for one pattern with long snippets
        WHEN aggregated
        THEN the first three members become examples, snippets clipped to 500 chars
        """
        events = [
            make_event(row_key=f"r{i}", code_snippet=f"{i}" * 800, is_helpful=i % 2 == 0,
                       correction="use await" if i == 1 else None)
            for i in range(5)
        ]

        pattern = aggregate_patterns(events, extension=".cs").patterns[0]

        assert len(pattern.examples) == 3
        assert [e.code_snippet[0] for e in pattern.examples] == ["0", "1", "2"]
        assert all(len(e.code_snippet) == 500 for e in pattern.examples)
        assert pattern.examples[0].was_helpful is True
        assert pattern.examples[1].correction == "use await"
        assert pattern.examples[1].original_suggestion == "Check Foo() for null"

    def test_counts_always_add_up(self):
        events = (
            helpful_split(3, 2, issue_hash="a")
            + helpful_split(0, 4, issue_hash="b")
            + helpful_split(7, 1, issue_hash="c")
        )

        for pattern in aggregate_patterns(events, extension=".cs").patterns:
            assert pattern.helpful_count + pattern.not_helpful_count == pattern.total_occurrences
            assert 0.0 <= pattern.accuracy <= 100.0

    def test_raising_min_occurrences_never_adds_patterns(self):
        events = (
            helpful_split(1, 0, issue_hash="one")
            + helpful_split(1, 1, issue_hash="two")
            + helpful_split(2, 1, issue_hash="three")
            + helpful_split(3, 2, issue_hash="five")
        )

        previous = None
        for min_occurrences in range(1, 7):
            keys = {
                p.pattern_key
                for p in aggregate_patterns(events, extension=".cs", min_occurrences=min_occurrences).patterns
            }
            if previous is not None:
                assert keys <= previous
            previous = keys

        assert previous == set()

    def test_empty_partition(self):
        response = aggregate_patterns([], extension=".go")
        assert response.patterns == []
        assert response.total_feedback_count == 0
