"""
Rule configuration loading utilities.

This module parses YAML rule documents into RuleConfig models and
discovers the repository-local document. It performs no merging; see
services.config_cascade for that.
"""

import os
import uuid

import yaml
from loguru import logger
from pydantic import ValidationError

from models.rules import RuleConfig

# Repository-local config locations, in priority order (first found wins)
CONFIG_PATHS = (
    ".config/stagebot/PullRequestAssistant.yaml",
    ".config/stagebot/stagebot.yaml",
    ".stagebot.yaml",
    "stagebot.yaml",
)


class ConfigLoadError(Exception):
    """Raised when a rule document cannot be read or parsed."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message if source is None else f"{source}: {message}")
        self.source = source


def assign_missing_ids(config: RuleConfig) -> RuleConfig:
    """
    Give every anonymous check a fresh random identifier.

    Checks without an author-supplied id can therefore never be matched
    against (or overridden by) a check in another cascade layer, even one
    with an identical description. The ids are never reused; do not make
    them deterministic.

    Args:
        config: Freshly parsed configuration

    Returns:
        Copy of the configuration with every check and PR check identified
    """
    checks = [
        c if c.id else c.model_copy(update={"id": uuid.uuid4().hex})
        for c in config.checks
    ]
    pr_checks = [
        c if c.id else c.model_copy(update={"id": uuid.uuid4().hex})
        for c in config.pr_checks
    ]
    return config.model_copy(update={"checks": checks, "pr_checks": pr_checks})


def parse_rule_config(content: str, source: str | None = None) -> RuleConfig:
    """
    Parse a YAML rule document.

    Args:
        content: Raw YAML text
        source: Path or URL the text came from (for error messages)

    Returns:
        RuleConfig with missing check ids filled in. An empty document
        yields a default RuleConfig.

    Raises:
        ConfigLoadError: If the YAML is malformed or does not match the schema
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"invalid YAML: {e}", source) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"expected a mapping at document root, got {type(data).__name__}", source
        )

    try:
        config = RuleConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError(f"schema mismatch: {e}", source) from e

    return assign_missing_ids(config)


def load_rule_config(path: str) -> RuleConfig:
    """
    Load a rule document from disk.

    Raises:
        ConfigLoadError: If the file cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigLoadError(f"cannot read file: {e}", path) from e

    return parse_rule_config(content, source=path)


def find_repo_config_path(repository_root: str) -> str | None:
    """Return the first existing candidate config path under the root, if any."""
    for relative_path in CONFIG_PATHS:
        full_path = os.path.join(repository_root, relative_path)
        if os.path.isfile(full_path):
            return full_path
    return None


def discover_repo_config(repository_root: str | None) -> RuleConfig | None:
    """
    Load the repository-local rule document.

    Candidate locations are searched in CONFIG_PATHS order and the first
    one found is "the" repo document; other candidates are ignored.

    Returns:
        RuleConfig, or None when the repository has no config

    Raises:
        ConfigLoadError: If the discovered document is unreadable or malformed
    """
    if not repository_root:
        return None

    path = find_repo_config_path(repository_root)
    if path is None:
        logger.debug(f"No rule config found in repo: {repository_root}")
        return None

    config = load_rule_config(path)
    logger.bind(layer="repo").info(f"Loaded repo config from {path}")
    return config


def dump_rule_config(config: RuleConfig) -> str:
    """Serialize a RuleConfig back to YAML (snake_case keys)."""
    data = config.model_dump(mode="json", exclude_none=True)
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "CONFIG_PATHS",
    "ConfigLoadError",
    "assign_missing_ids",
    "discover_repo_config",
    "dump_rule_config",
    "find_repo_config_path",
    "load_rule_config",
    "parse_rule_config",
]
