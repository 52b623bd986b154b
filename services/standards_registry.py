"""
Standards Registry: hosting of the central standards document.

Administrators publish new versions of the organization-wide rule
document; the cascade (and any other consumer) reads the current one
from GET /v1/standards. Until something is published, the embedded
defaults are served as version 0.
"""

from loguru import logger

from models.rules import RuleConfig
from models.standards import (
    StandardsDocument,
    StandardsHistoryEntry,
    StandardsRecord,
    StandardsUpdateRequest,
)
from repositories.standards import StandardsRepository
from utils.embedded_standards import get_defaults
from utils.metrics import standards_updates_total
from utils.rule_loader import ConfigLoadError, dump_rule_config, parse_rule_config

INVALID_VERSION_MESSAGE = (
    "Invalid version format. Use 'current', 'latest', a number (e.g. '1'), or 'v1' format."
)


class StandardsRequestError(ValueError):
    """Raised when a standards request is malformed (HTTP 400)."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class StandardsVersionNotFound(LookupError):
    """Raised when the requested standards version does not exist (HTTP 404)."""

    def __init__(self, version: str):
        super().__init__(f"Version '{version}' not found")
        self.version = version


def parse_version(version: str) -> int | None:
    """
    Parse a version selector.

    Returns:
        None for "current"/"latest", else the version number

    Raises:
        StandardsRequestError: For anything else

    Example:
        >>> parse_version("v3"), parse_version("3"), parse_version("Latest")
        (3, 3, None)
    """
    selector = version.strip().lower()
    if selector in ("current", "latest"):
        return None

    digits = selector[1:] if selector.startswith("v") else selector
    if not digits.isdecimal():
        raise StandardsRequestError([INVALID_VERSION_MESSAGE])
    return int(digits)


def _to_document(record: StandardsRecord, parsed: RuleConfig | None = None) -> StandardsDocument:
    if parsed is None:
        try:
            parsed = parse_rule_config(record.yaml_content, source=f"standards v{record.version}")
        except ConfigLoadError as e:
            # Stored before a schema change; still served verbatim
            logger.bind(layer="central").warning(f"Stored standards no longer parse: {e}")

    return StandardsDocument(
        yaml_content=record.yaml_content,
        version=record.version,
        updated_by=record.updated_by,
        change_description=record.change_description,
        updated_at=record.updated_at,
        parsed_config=parsed,
    )


class StandardsRegistry:
    """Service for reading and publishing hosted standards versions."""

    def __init__(self, repository: StandardsRepository):
        self.repository = repository

    def current(self) -> StandardsDocument:
        """The live standards, or the embedded defaults as version 0."""
        record = self.repository.get_current()
        if record is not None:
            return _to_document(record)

        logger.debug("No standards published, serving embedded defaults")
        defaults = get_defaults()
        return StandardsDocument(
            yaml_content=dump_rule_config(defaults),
            version=0,
            updated_by="system",
            parsed_config=defaults,
        )

    def get_version(self, version: str) -> StandardsDocument:
        """
        Fetch one version by selector ("current", "latest", "3" or "v3").

        Raises:
            StandardsRequestError: If the selector is malformed
            StandardsVersionNotFound: If no such version is stored
        """
        number = parse_version(version)
        if number is None:
            record = self.repository.get_current()
        else:
            record = self.repository.get_version(number)

        if record is None:
            raise StandardsVersionNotFound(version)
        return _to_document(record)

    def history(self) -> list[StandardsHistoryEntry]:
        """Every stored version without its body, newest first."""
        return [
            StandardsHistoryEntry(
                version=record.version,
                row_key=record.row_key,
                updated_by=record.updated_by,
                change_description=record.change_description,
                updated_at=record.updated_at,
                is_current=record.is_current,
            )
            for record in self.repository.list_history()
        ]

    def publish(self, request: StandardsUpdateRequest) -> StandardsDocument:
        """
        Validate and publish a new standards version.

        Raises:
            StandardsRequestError: If the YAML is missing or does not parse
            StoreError: If the store rejects the write
        """
        if not request.yaml_content:
            standards_updates_total.labels(outcome="rejected").inc()
            raise StandardsRequestError(["yamlContent is required"])

        try:
            parsed = parse_rule_config(request.yaml_content, source="standards update")
        except ConfigLoadError as e:
            standards_updates_total.labels(outcome="rejected").inc()
            logger.bind(layer="central", status="invalid").info(f"Rejected standards update: {e}")
            raise StandardsRequestError([f"Invalid YAML: {e}"]) from e

        record = self.repository.save(
            request.yaml_content,
            updated_by=request.updated_by or "unknown",
            change_description=request.change_description or "",
        )
        standards_updates_total.labels(outcome="published").inc()

        return _to_document(record, parsed)


# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "StandardsRegistry",
    "StandardsRequestError",
    "StandardsVersionNotFound",
    "parse_version",
]
