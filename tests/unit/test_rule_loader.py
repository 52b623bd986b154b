"""
Unit Tests: Rule document loading

Tests for YAML parsing into RuleConfig, anonymous check ids, and
repository config discovery order.
"""

import os

# Add project root to path for imports
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from models.rules import InspectPattern, MetricsPattern, Severity
from tests.fixtures import CENTRAL_YAML, MALFORMED_YAML, REPO_YAML
from utils.rule_loader import (
    CONFIG_PATHS,
    ConfigLoadError,
    discover_repo_config,
    dump_rule_config,
    find_repo_config_path,
    load_rule_config,
    parse_rule_config,
)


def _write(root, relative_path: str, content: str) -> None:
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestParseRuleConfig:
    """Test suite for parse_rule_config()."""

    def test_parses_checks_and_normalizes_severity(self):
        config = parse_rule_config(CENTRAL_YAML, source="central.yaml")

        assert config.version == 2
        assert config.checks[0].id == "sec-001"
        assert config.checks[0].severity == Severity.WARNING
        assert isinstance(config.checks[1].pattern, InspectPattern)
        assert config.pr_checks[0].type == "title_pattern"

    def test_metrics_pattern_value_lifted(self):
        config = parse_rule_config(REPO_YAML)

        pattern = config.checks[1].pattern
        assert isinstance(pattern, MetricsPattern)
        assert pattern.metric == "cyclomatic_complexity"
        assert pattern.threshold == 10
        assert pattern.is_violated(11)
        assert not pattern.is_violated(10)

    def test_anonymous_checks_get_fresh_ids(self):
        first = parse_rule_config(REPO_YAML)
        second = parse_rule_config(REPO_YAML)

        assert len(first.checks[1].id) == 32
        assert first.checks[1].id != second.checks[1].id
        assert first.checks[0].id == "SEC-001"

    def test_empty_document_yields_defaults(self):
        config = parse_rule_config("")

        assert config.version == 1
        assert config.checks == []
        assert config.inherit_central_standards is True

    def test_null_sections_become_empty_lists(self):
        config = parse_rule_config("version:\nchecks:\nexclude_paths:\n")

        assert config.version == 1
        assert config.checks == []
        assert config.exclude_paths == []

    def test_unknown_keys_ignored(self):
        config = parse_rule_config("version: 1\nfuture_setting: true\n")
        assert config.version == 1

    def test_malformed_yaml_raises(self):
        with pytest.raises(ConfigLoadError) as exc_info:
            parse_rule_config(MALFORMED_YAML, source="broken.yaml")

        assert exc_info.value.source == "broken.yaml"
        assert "invalid YAML" in str(exc_info.value)

    def test_non_mapping_root_raises(self):
        with pytest.raises(ConfigLoadError, match="expected a mapping"):
            parse_rule_config("- just\n- a list\n")

    def test_schema_mismatch_raises(self):
        with pytest.raises(ConfigLoadError, match="schema mismatch"):
            parse_rule_config("checks:\n  - id: x\n    pattern:\n      type: regex\n      value: '('\n")


class TestRepoDiscovery:
    """Test suite for repository config discovery."""

    def test_no_config_returns_none(self, tmp_path):
        assert find_repo_config_path(str(tmp_path)) is None
        assert discover_repo_config(str(tmp_path)) is None

    def test_no_root_returns_none(self):
        assert discover_repo_config(None) is None

    def test_first_candidate_wins(self, tmp_path):
        """
        GIVEN a repository with both .stagebot.yaml and the primary config path
        WHEN discovering the repo config
        THEN the primary path is used and the other candidate is ignored
        """
        _write(tmp_path, ".stagebot.yaml", "checks:\n  - id: dot-file\n")
        _write(tmp_path, CONFIG_PATHS[0], "checks:\n  - id: primary\n")

        config = discover_repo_config(str(tmp_path))

        assert [c.id for c in config.checks] == ["primary"]

    @pytest.mark.parametrize("relative_path", CONFIG_PATHS)
    def test_every_candidate_is_discovered(self, tmp_path, relative_path):
        _write(tmp_path, relative_path, "version: 4\n")

        assert find_repo_config_path(str(tmp_path)) == str(tmp_path / relative_path)

    def test_malformed_repo_config_raises(self, tmp_path):
        _write(tmp_path, "stagebot.yaml", MALFORMED_YAML)

        with pytest.raises(ConfigLoadError):
            discover_repo_config(str(tmp_path))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="cannot read file"):
            load_rule_config(str(tmp_path / "nope.yaml"))


class TestDumpRuleConfig:
    """Test suite for dump_rule_config()."""

    def test_dump_is_parseable_and_keeps_ids(self):
        config = parse_rule_config(CENTRAL_YAML)

        reparsed = parse_rule_config(dump_rule_config(config))

        assert [c.id for c in reparsed.checks] == ["sec-001", "org-100"]
        assert reparsed.checks[1].pattern.type == "inspect"
