"""
Structural validation and normalization of feedback submissions.

Validation reports every problem at once (a list of field-level
messages). Normalization lower-cases the extension and clips long text
fields to the store's per-field ceiling. No I/O happens here.
"""

from typing import Any, Optional

from pydantic import ValidationError

from models.feedback import FeedbackEvent, FeedbackRequest

ELLIPSIS = "..."

# Field length limits
MAX_EXTENSION_LENGTH = 20
MAX_RULE_LENGTH = 100
MAX_ISSUE_HASH_LENGTH = 64
MAX_TEXT_LENGTH = 64000
MAX_REASON_LENGTH = 1000
MAX_CONTRIBUTOR_LENGTH = 100
MAX_REPOSITORY_LENGTH = 200

# Few-shot snippets are clipped further when returned
EXAMPLE_SNIPPET_LENGTH = 500


class FeedbackValidationError(ValueError):
    """Raised when a submission or query fails structural validation."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


def truncate_if_needed(value: Optional[str], max_length: int) -> Optional[str]:
    """
    Clip a string to max_length characters, ending in an ellipsis.

    The result is exactly max_length characters long when clipping
    happens. None and short strings are returned unchanged.

    Example:
        >>> truncate_if_needed("abcdefgh", 6)
        'abc...'
    """
    if not value or len(value) <= max_length:
        return value

    return value[: max_length - len(ELLIPSIS)] + ELLIPSIS


def _check_length(errors: list[str], name: str, value: Optional[str], limit: int) -> None:
    if value is not None and len(value) > limit:
        errors.append(f"{name} must not exceed {limit} characters")


def validate_feedback(request: FeedbackRequest) -> list[str]:
    """
    Validate a feedback submission.

    Args:
        request: Raw submission

    Returns:
        All error messages in field order; empty when the submission is valid
    """
    errors: list[str] = []

    if not request.file_extension:
        errors.append("fileExtension is required")
    else:
        if not request.file_extension.startswith("."):
            errors.append("fileExtension must start with '.'")
        _check_length(errors, "fileExtension", request.file_extension, MAX_EXTENSION_LENGTH)

    if not request.rule:
        errors.append("rule is required")
    else:
        _check_length(errors, "rule", request.rule, MAX_RULE_LENGTH)

    _check_length(errors, "codeSnippet", request.code_snippet, MAX_TEXT_LENGTH)
    _check_length(errors, "suggestion", request.suggestion, MAX_TEXT_LENGTH)

    if not request.issue_hash:
        errors.append("issueHash is required")
    else:
        _check_length(errors, "issueHash", request.issue_hash, MAX_ISSUE_HASH_LENGTH)

    _check_length(errors, "reason", request.reason, MAX_REASON_LENGTH)
    _check_length(errors, "correction", request.correction, MAX_TEXT_LENGTH)
    _check_length(errors, "contributor", request.contributor, MAX_CONTRIBUTOR_LENGTH)
    _check_length(errors, "repository", request.repository, MAX_REPOSITORY_LENGTH)

    return errors


def normalize_feedback(request: FeedbackRequest, field_ceiling: int) -> FeedbackEvent:
    """
    Build the storable event from a valid submission.

    The row key and timestamp are left for the store to assign.

    Args:
        request: Submission that passed validate_feedback
        field_ceiling: Store's per-field character ceiling
    """
    return FeedbackEvent(
        partition_key=request.file_extension.lower(),
        rule=request.rule,
        code_snippet=truncate_if_needed(request.code_snippet, field_ceiling) or "",
        suggestion=truncate_if_needed(request.suggestion, field_ceiling) or "",
        issue_hash=request.issue_hash,
        is_helpful=request.is_helpful,
        reason=request.reason,
        correction=truncate_if_needed(request.correction, field_ceiling),
        contributor=request.contributor or "",
        repository=request.repository or "",
    )


def prepare_feedback(request: FeedbackRequest, field_ceiling: int) -> FeedbackEvent:
    """
    Validate then normalize a submission.

    Returns:
        Normalized FeedbackEvent

    Raises:
        FeedbackValidationError: Carrying every validation problem
    """
    errors = validate_feedback(request)
    if errors:
        raise FeedbackValidationError(errors)
    return normalize_feedback(request, field_ceiling)


def validate_pattern_query(
    extension: Optional[str],
    min_occurrences: int,
    max_results: int,
    min_accuracy: float,
) -> str:
    """
    Validate patterns query parameters.

    Returns:
        The lower-cased extension

    Raises:
        FeedbackValidationError: If the extension is missing or a bound is out of range
    """
    errors: list[str] = []
    if not extension:
        errors.append("Query parameter 'ext' is required")
    if min_occurrences < 1:
        errors.append("minOccurrences must be a positive integer")
    if max_results < 1:
        errors.append("maxResults must be a positive integer")
    if not 0 <= min_accuracy <= 100:
        errors.append("minAccuracy must be between 0 and 100")

    if errors:
        raise FeedbackValidationError(errors)
    return extension.lower()


# Request-level sections of a pydantic error location
_LOCATION_SECTIONS = ("body", "query", "path", "header")


def _error_field(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in _LOCATION_SECTIONS]
    return ".".join(parts) or loc[0]


def request_error_messages(errors: list[dict[str, Any]]) -> list[str]:
    """
    Format type errors raised by request parsing as "<field>: <message>".

    Example:
        >>> request_error_messages([{"loc": ("query", "minOccurrences"), "msg": "Input should be a valid integer"}])
        ['minOccurrences: Input should be a valid integer']
    """
    return [f"{_error_field(tuple(e['loc']))}: {e['msg']}" for e in errors]


def feedback_body_errors(body: dict[str, Any], invalid_fields: set[str]) -> list[str]:
    """
    Structural errors in the well-typed part of a feedback body.

    Used when some fields failed type parsing, so that a submission with
    a mistyped field and a missing required field reports both.

    Args:
        body: Raw JSON body
        invalid_fields: Keys that already failed type parsing
    """
    typed = {key: value for key, value in body.items() if key not in invalid_fields}
    try:
        request = FeedbackRequest.model_validate(typed)
    except ValidationError:
        return []

    return [m for m in validate_feedback(request) if m.split(" ", 1)[0] not in invalid_fields]


# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "EXAMPLE_SNIPPET_LENGTH",
    "FeedbackValidationError",
    "feedback_body_errors",
    "normalize_feedback",
    "prepare_feedback",
    "request_error_messages",
    "truncate_if_needed",
    "validate_feedback",
    "validate_pattern_query",
]
