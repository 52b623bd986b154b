"""
Feedback Service for the team learning loop.

Orchestrates the three feedback operations:
1. submit: validate -> normalize -> append
2. get_patterns: scan one extension's partition -> aggregate patterns
3. get_stats: scan every partition -> compute statistics

Every query reads a fresh snapshot; nothing is cached between calls.
"""

from loguru import logger

from models.feedback import FeedbackRequest, FeedbackSubmitted, GlobalStats, PatternsResponse
from repositories.feedback import FeedbackRepository
from services.patterns import aggregate_patterns
from services.stats import compute_stats
from services.validation import FeedbackValidationError, prepare_feedback, validate_pattern_query
from utils.config import Config
from utils.metrics import (
    feedback_submitted_total,
    feedback_validation_failures_total,
    patterns_query_duration_seconds,
    patterns_returned,
    stats_query_duration_seconds,
)


class FeedbackService:
    """
    Service for processing feedback and deriving learned patterns.

    Coordinates validation, the feedback repository and the pure
    aggregation functions.
    """

    def __init__(self, repository: FeedbackRepository, config: Config):
        """
        Initialize feedback service.

        Args:
            repository: Feedback event store
            config: Application configuration
        """
        self.repository = repository
        self.config = config

    def submit(self, request: FeedbackRequest) -> FeedbackSubmitted:
        """
        Validate and store one feedback submission.

        Args:
            request: Raw submission

        Returns:
            FeedbackSubmitted carrying the generated id

        Raises:
            FeedbackValidationError: With every structural problem found
            StoreError: If the store rejects the insert
        """
        try:
            event = prepare_feedback(request, self.config.STORE_FIELD_MAX_CHARS)
        except FeedbackValidationError as e:
            feedback_validation_failures_total.inc()
            logger.bind(status="invalid").info(f"Rejected feedback: {e.errors}")
            raise

        self.repository.ensure_table()
        stored = self.repository.append(event)

        feedback_submitted_total.labels(
            extension=stored.partition_key,
            helpful=str(stored.is_helpful).lower(),
        ).inc()

        return FeedbackSubmitted(id=stored.row_key)

    def get_patterns(
        self,
        extension: str | None,
        min_occurrences: int | None = None,
        max_results: int | None = None,
        min_accuracy: float = 0.0,
    ) -> PatternsResponse:
        """
        Learned patterns for one file extension.

        Args:
            extension: File extension (required, case-insensitive)
            min_occurrences: Minimum group size (config default when None)
            max_results: Maximum patterns (config default when None)
            min_accuracy: Minimum accuracy percentage

        Raises:
            FeedbackValidationError: If a parameter is missing or out of range
            StoreError: If the partition cannot be read
        """
        if min_occurrences is None:
            min_occurrences = self.config.DEFAULT_MIN_OCCURRENCES
        if max_results is None:
            max_results = self.config.DEFAULT_MAX_RESULTS

        ext = validate_pattern_query(extension, min_occurrences, max_results, min_accuracy)

        logger.bind(extension=ext).info(f"Getting patterns for extension: {ext}")

        with patterns_query_duration_seconds.labels(extension=ext).time():
            self.repository.ensure_table()
            events = self.repository.query_by_partition(ext)
            response = aggregate_patterns(
                events,
                extension=ext,
                min_occurrences=min_occurrences,
                max_results=max_results,
                min_accuracy=min_accuracy,
            )

        patterns_returned.observe(len(response.patterns))
        return response

    def get_stats(self) -> GlobalStats:
        """
        Statistics over the whole feedback corpus.

        Raises:
            StoreError: If the table cannot be read
        """
        logger.info("Getting learning statistics")

        with stats_query_duration_seconds.time():
            self.repository.ensure_table()
            events = self.repository.query_all()
            return compute_stats(events)


# =============================================================================
# Module Exports
# =============================================================================
__all__ = ["FeedbackService"]
