"""
Evaluates PR-level checks of an effective rule configuration against
pull request metadata.
"""

import re
from typing import Any

from loguru import logger

from models.platform import PRMetadata, PrCheckResult
from models.rules import PrCheck, RuleConfig


def _parse_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [s.strip() for s in re.split(r"[,;]", str(value)) if s.strip()]


class PrCheckEvaluator:
    """
    Evaluates PR checks (title format, description, size limits, labels,
    branch naming). Unknown check types pass; a check that raises while
    evaluating fails with the error as its message.
    """

    def evaluate(self, config: RuleConfig, pr: PRMetadata) -> list[PrCheckResult]:
        """Evaluate all PR checks of config against the given metadata."""
        return [self.evaluate_check(check, pr) for check in config.pr_checks]

    def evaluate_check(self, check: PrCheck, pr: PRMetadata) -> PrCheckResult:
        handler = getattr(self, f"_check_{check.type.strip().lower()}", None) if check.type else None

        if handler is None:
            passed, message = True, f"Unknown check type: {check.type}"
        else:
            try:
                passed, message = handler(check, pr)
            except (ValueError, TypeError, re.error) as e:
                logger.warning(f"PR check {check.id} failed to evaluate: {e}")
                passed, message = False, f"Check evaluation failed: {e}"

        return PrCheckResult(
            check_id=check.id,
            severity=check.severity,
            guidance=check.guidance,
            passed=passed,
            message=message,
        )

    # -------------------------------------------------------------------------
    # Check handlers: (check, pr) -> (passed, message)
    # -------------------------------------------------------------------------

    def _check_title_pattern(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        pattern = str(check.value or "")
        if re.search(pattern, pr.title, re.IGNORECASE):
            return True, "PR title matches required pattern"
        return False, f"PR title '{pr.title}' does not match pattern '{pattern}'. {check.description}".rstrip()

    def _check_description_required(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        if pr.description.strip():
            return True, "PR has a description"
        return False, "PR description is required. Please add a meaningful description explaining the changes."

    def _check_description_min_length(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        min_length = int(check.value if check.value is not None else 50)
        actual = len(pr.description.strip())
        if actual >= min_length:
            return True, f"PR description meets minimum length ({actual} chars)"
        return False, f"PR description is too short ({actual} chars). Minimum required: {min_length} chars."

    def _check_max_files(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        max_files = int(check.value if check.value is not None else 20)
        count = len(pr.files_changed)
        if count <= max_files:
            return True, f"PR has {count} files (limit: {max_files})"
        return False, (
            f"PR has too many files ({count}). Maximum allowed: {max_files}. "
            "Consider splitting into smaller PRs."
        )

    def _check_max_lines(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        max_lines = int(check.value if check.value is not None else 500)
        total = pr.total_additions + pr.total_deletions
        if total <= max_lines:
            return True, f"PR has {total} changed lines (limit: {max_lines})"
        return False, (
            f"PR is too large ({total} lines changed). Maximum: {max_lines}. "
            "Consider splitting into smaller PRs."
        )

    def _check_required_labels(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        required = _parse_string_list(check.value)
        labels = {label.casefold() for label in pr.labels}
        if any(r.casefold() in labels for r in required):
            return True, "PR has required labels"
        return False, f"PR must have at least one of these labels: {', '.join(required)}"

    def _check_forbidden_labels(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        labels = {label.casefold() for label in pr.labels}
        found = [f for f in _parse_string_list(check.value) if f.casefold() in labels]
        if not found:
            return True, "PR has no forbidden labels"
        return False, f"PR has forbidden labels: {', '.join(found)}. Remove these before merging."

    def _check_branch_pattern(self, check: PrCheck, pr: PRMetadata) -> tuple[bool, str]:
        pattern = str(check.value or "")
        if re.search(pattern, pr.source_branch, re.IGNORECASE):
            return True, "Branch name follows naming convention"
        return False, (
            f"Branch '{pr.source_branch}' does not match pattern '{pattern}'. {check.description}"
        ).rstrip()


__all__ = ["PrCheckEvaluator"]
