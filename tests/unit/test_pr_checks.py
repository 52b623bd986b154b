"""
Unit Tests: PrCheckEvaluator

Tests for PR-level checks (title, description, size, labels, branch).
"""

import os

# Add project root to path for imports
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from models.platform import PRMetadata
from models.rules import PrCheck, RuleConfig, Severity
from services.pr_checks import PrCheckEvaluator


@pytest.fixture
def evaluator() -> PrCheckEvaluator:
    return PrCheckEvaluator()


@pytest.fixture
def sample_pr() -> PRMetadata:
    return PRMetadata(
        pr_number="42",
        title="feat(api): add learned patterns endpoint",
        description="Adds GET /v1/patterns returning ranked patterns for one extension.",
        author="alice",
        source_branch="feature/patterns-endpoint",
        target_branch="main",
        labels=["enhancement", "needs-review"],
        files_changed=["main.py", "services/patterns.py"],
        total_additions=120,
        total_deletions=30,
    )


def _check(check_type: str, value=None, **kwargs) -> PrCheck:
    return PrCheck(id=f"pr-{check_type}", type=check_type, value=value, **kwargs)


class TestPrCheckEvaluator:
    """Test suite for PrCheckEvaluator."""

    @pytest.mark.parametrize(
        "check_type,value",
        [
            ("title_pattern", r"^(feat|fix|chore)(\(.+\))?:"),
            ("description_required", None),
            ("description_min_length", 20),
            ("max_files", 5),
            ("max_lines", 200),
            ("required_labels", ["Enhancement", "bug"]),
            ("forbidden_labels", "do-not-merge, wip"),
            ("branch_pattern", r"^(feature|bugfix)/"),
        ],
    )
    def test_passing_checks(self, evaluator, sample_pr, check_type, value):
        result = evaluator.evaluate_check(_check(check_type, value), sample_pr)

        assert result.passed is True
        assert result.check_id == f"pr-{check_type}"

    def test_title_mismatch_fails_with_description(self, evaluator, sample_pr):
        pr = sample_pr.model_copy(update={"title": "Added stuff"})
        check = _check("title_pattern", r"^feat:", description="Use conventional commits.", severity="error")

        result = evaluator.evaluate_check(check, pr)

        assert result.passed is False
        assert result.severity == Severity.ERROR
        assert "Added stuff" in result.message
        assert result.message.endswith("Use conventional commits.")

    def test_size_limits_use_defaults(self, evaluator, sample_pr):
        pr = sample_pr.model_copy(update={"total_additions": 450, "total_deletions": 60})

        result = evaluator.evaluate_check(_check("max_lines"), pr)

        assert result.passed is False
        assert "510 lines" in result.message

    def test_short_description_fails(self, evaluator, sample_pr):
        pr = sample_pr.model_copy(update={"description": "  fix  "})

        result = evaluator.evaluate_check(_check("description_min_length"), pr)

        assert result.passed is False
        assert "(3 chars)" in result.message

    def test_forbidden_label_fails(self, evaluator, sample_pr):
        pr = sample_pr.model_copy(update={"labels": ["WIP"]})

        result = evaluator.evaluate_check(_check("forbidden_labels", ["wip", "do-not-merge"]), pr)

        assert result.passed is False
        assert "wip" in result.message

    def test_unknown_type_passes(self, evaluator, sample_pr):
        result = evaluator.evaluate_check(_check("commit_signoff"), sample_pr)

        assert result.passed is True
        assert result.message == "Unknown check type: commit_signoff"

    def test_bad_value_fails_evaluation(self, evaluator, sample_pr):
        result = evaluator.evaluate_check(_check("max_files", "lots"), sample_pr)

        assert result.passed is False
        assert result.message.startswith("Check evaluation failed:")

    def test_invalid_regex_fails_evaluation(self, evaluator, sample_pr):
        result = evaluator.evaluate_check(_check("branch_pattern", "("), sample_pr)

        assert result.passed is False

    def test_evaluate_runs_every_pr_check(self, evaluator, sample_pr):
        config = RuleConfig(pr_checks=[_check("max_files", 1), _check("description_required")])

        results = evaluator.evaluate(config, sample_pr)

        assert [(r.check_id, r.passed) for r in results] == [
            ("pr-max_files", False),
            ("pr-description_required", True),
        ]
