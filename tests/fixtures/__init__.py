"""
Test fixtures package for Stagebot Team Learning tests.

This package contains shared test fixtures used across unit, contract,
and integration tests.
"""

from .feedback_events import helpful_split, make_event, store_row, valid_feedback_body
from .rule_documents import CENTRAL_YAML, MALFORMED_YAML, REPO_NO_INHERIT_YAML, REPO_YAML
from .standards_records import standards_row

__all__ = [
    "CENTRAL_YAML",
    "MALFORMED_YAML",
    "REPO_NO_INHERIT_YAML",
    "REPO_YAML",
    "helpful_split",
    "make_event",
    "standards_row",
    "store_row",
    "valid_feedback_body",
]
