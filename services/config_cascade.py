"""
Configuration cascade resolution.

Merges rule configuration layers by stable check identifier:

    embedded defaults -> central standards -> repository overrides

Each merge is a pure function; loading the documents is the caller's job
(see services.standards).
"""

from typing import TypeVar

from loguru import logger

from models.rules import Check, PrCheck, RuleConfig

_C = TypeVar("_C", Check, PrCheck)


def _merge_by_id(base: list[_C], override: list[_C]) -> list[_C]:
    """
    Keyed union: override entries replace base entries sharing an id.

    Ids compare case-insensitively. Replaced entries keep the base
    position; new override entries are appended in their own order.
    """
    merged: dict[str, _C] = {}
    for check in base:
        merged[check.id.casefold()] = check
    for check in override:
        merged[check.id.casefold()] = check
    return list(merged.values())


def _union(base: list[str], override: list[str]) -> list[str]:
    return list(dict.fromkeys([*base, *override]))


def merge_configs(base: RuleConfig, override: RuleConfig) -> RuleConfig:
    """
    Merge two layers; the override wins for duplicates.

    Rules:
        - version: max of both
        - inherit_central_standards: taken from the override
        - include_paths: override's list if non-empty, else base's (never unioned)
        - exclude_paths: de-duplicated union
        - checks / pr_checks: keyed union by id

    Args:
        base: Lower layer
        override: Higher layer

    Returns:
        A new RuleConfig; neither input is modified
    """
    return RuleConfig(
        version=max(base.version, override.version),
        inherit_central_standards=override.inherit_central_standards,
        include_paths=list(override.include_paths or base.include_paths),
        exclude_paths=_union(base.exclude_paths, override.exclude_paths),
        checks=_merge_by_id(base.checks, override.checks),
        pr_checks=_merge_by_id(base.pr_checks, override.pr_checks),
    )


def resolve_cascade(
    embedded: RuleConfig,
    central: RuleConfig | None = None,
    repo: RuleConfig | None = None,
) -> RuleConfig:
    """
    Resolve the effective configuration from up to three layers.

    Absent layers are skipped. A repo layer with
    inherit_central_standards=False is returned as-is, discarding the
    lower layers at this final step.

    Args:
        embedded: Built-in baseline (always present)
        central: Organization-wide standards, if loaded
        repo: Repository-local document, if found

    Returns:
        Effective RuleConfig
    """
    config = embedded

    if central is not None:
        config = merge_configs(config, central)
        logger.bind(layer="central").debug("Merged central standards")

    if repo is not None:
        if not repo.inherit_central_standards:
            logger.bind(layer="repo").info("Repo config disables inheritance, using it alone")
            return repo
        config = merge_configs(config, repo)
        logger.bind(layer="repo").debug("Merged repo-specific config")

    logger.debug(f"Effective config: {len(config.checks)} checks, {len(config.pr_checks)} PR checks")
    return config


__all__ = ["merge_configs", "resolve_cascade"]
