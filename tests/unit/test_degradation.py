"""
Unit Tests: Graceful degradation

Tests for the cascade layer fallback decorator and store health checks.
"""

import os

# Add project root to path for imports
import sys
from unittest.mock import MagicMock

import httpx
import pytest
from prometheus_client import REGISTRY

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from models.rules import RuleConfig
from utils.degradation import HealthStatus, check_store_health, get_health_status, with_layer_fallback
from utils.rule_loader import ConfigLoadError


def _layer_loads(layer: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "stagebot_config_layer_loads_total",
        {"layer": layer, "outcome": outcome},
    )
    return value or 0.0


class TestWithLayerFallback:
    """Test suite for with_layer_fallback()."""

    def test_successful_load_passes_through(self):
        @with_layer_fallback("repo")
        def load():
            return RuleConfig(version=5)

        before = _layer_loads("repo", "loaded")

        assert load().version == 5
        assert _layer_loads("repo", "loaded") == before + 1

    def test_absent_layer_counted(self):
        @with_layer_fallback("repo")
        def load():
            return None

        before = _layer_loads("repo", "absent")

        assert load() is None
        assert _layer_loads("repo", "absent") == before + 1

    @pytest.mark.parametrize(
        "error",
        [
            ConfigLoadError("invalid YAML", "central.yaml"),
            FileNotFoundError("central.yaml"),
            httpx.ConnectError("refused"),
        ],
    )
    def test_load_failure_becomes_absent(self, error):
        """
        GIVEN a central loader that fails
        WHEN called through the fallback decorator
        THEN None is returned, the failure counted and standards marked degraded
        """
        @with_layer_fallback("central")
        def load():
            raise error

        before = _layer_loads("central", "failed")

        assert load() is None
        assert _layer_loads("central", "failed") == before + 1
        assert get_health_status().standards_healthy is False

    def test_programming_errors_propagate(self):
        @with_layer_fallback("central")
        def load():
            raise KeyError("bug")

        with pytest.raises(KeyError):
            load()

    def test_preserves_function_metadata(self):
        @with_layer_fallback("repo")
        def load_repo_layer():
            """Docstring."""

        assert load_repo_layer.__name__ == "load_repo_layer"
        assert load_repo_layer.__doc__ == "Docstring."


class TestCheckStoreHealth:
    """Test suite for check_store_health()."""

    def test_healthy_store(self, mock_supabase_client):
        assert check_store_health(mock_supabase_client, table="feedback") is True
        mock_supabase_client.table.assert_called_with("feedback")
        assert get_health_status().store_healthy is True

    def test_unreachable_store(self):
        client = MagicMock()
        client.table.return_value.select.return_value.limit.return_value.execute.side_effect = RuntimeError("down")

        assert check_store_health(client) is False
        assert get_health_status().store_healthy is False

    def test_missing_client(self):
        assert check_store_health(None) is False


class TestHealthStatus:
    """Test suite for HealthStatus."""

    def test_as_dict(self):
        status = HealthStatus()
        status.set_standards_health(False)

        body = status.as_dict()

        assert body["store"] == "healthy"
        assert body["central_standards"] == "degraded"
        assert isinstance(body["last_check"], float)
