"""
Standards Service for the configuration cascade.

Loads the three cascade layers and resolves the effective rule set:

1. Embedded defaults (always present)
2. Central organization-wide standards (file path or http(s) URL)
3. Repository-local config (first discovered candidate)

A layer that cannot be loaded is treated as absent; resolution never
fails because of a broken layer.
"""

from collections.abc import Callable

import httpx
from loguru import logger

from models.rules import ResolvedConfig, RuleConfig
from services.config_cascade import resolve_cascade
from utils.degradation import with_layer_fallback
from utils.embedded_standards import get_defaults
from utils.rule_loader import ConfigLoadError, discover_repo_config, load_rule_config, parse_rule_config


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


class StandardsService:
    """
    Service resolving effective rule configuration for a repository.

    The central standards location is an explicit constructor argument,
    resolved once by utils.config.Config; there is no process-wide
    mutable path.
    """

    def __init__(
        self,
        central_location: str | None = None,
        http_client: httpx.Client | None = None,
        embedded_provider: Callable[[], RuleConfig] = get_defaults,
        request_headers: dict[str, str] | None = None,
    ):
        """
        Initialize standards service.

        Args:
            central_location: Path or URL of the central standards document
            http_client: Client used when central_location is a URL; carries
                any authentication headers the caller needs
            embedded_provider: Factory for the baseline layer
            request_headers: Extra headers for the central URL request (e.g. X-Api-Key)
        """
        self.central_location = central_location
        self.http_client = http_client
        self.embedded_provider = embedded_provider
        self.request_headers = request_headers or {}

    # -------------------------------------------------------------------------
    # Layer loading
    # -------------------------------------------------------------------------

    @with_layer_fallback("central")
    def load_central(self) -> RuleConfig | None:
        """Load central standards, or None if unconfigured or unavailable."""
        if not self.central_location:
            return None

        if _is_url(self.central_location):
            config = parse_rule_config(self._fetch(self.central_location), source=self.central_location)
        else:
            config = load_rule_config(self.central_location)

        logger.bind(layer="central").info(f"Loaded central standards from {self.central_location}")
        return config

    @with_layer_fallback("repo")
    def load_repo(self, repository_root: str | None) -> RuleConfig | None:
        """Load the repository config, or None if absent or unreadable."""
        return discover_repo_config(repository_root)

    def _fetch(self, url: str) -> str:
        """
        Fetch a central standards document over HTTP.

        Accepts either raw YAML or a JSON envelope carrying the YAML under
        "yamlContent" / "yaml_content".
        """
        client = self.http_client or httpx.Client(timeout=10.0)
        try:
            response = client.get(url, headers=self.request_headers)
            response.raise_for_status()
        finally:
            if self.http_client is None:
                client.close()

        if "json" in response.headers.get("content-type", ""):
            try:
                body = response.json()
            except ValueError as e:
                raise ConfigLoadError(f"invalid JSON response: {e}", url) from e
            if not isinstance(body, dict):
                raise ConfigLoadError("JSON response is not an object", url)

            content = body.get("yamlContent") or body.get("yaml_content")
            if not content:
                raise ConfigLoadError("response has no YAML content", url)
            return content

        return response.text

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def get_merged_config(self, repository_root: str | None = None) -> ResolvedConfig:
        """
        Resolve embedded -> central -> repo for a local checkout.

        Args:
            repository_root: Repository working tree, or None for no repo layer

        Returns:
            ResolvedConfig with the effective config and contributing layers
        """
        central = self.load_central()
        repo = self.load_repo(repository_root)
        return self._resolve(central, repo)

    def resolve_documents(
        self,
        central_yaml: str | None = None,
        repo_yaml: str | None = None,
    ) -> ResolvedConfig:
        """
        Resolve from caller-supplied YAML documents.

        A missing document falls back to the configured central location
        (central) or to no layer (repo). Malformed documents are treated as
        absent.
        """
        central = (
            self._parse_layer("central", central_yaml)
            if central_yaml is not None
            else self.load_central()
        )
        repo = self._parse_layer("repo", repo_yaml) if repo_yaml is not None else None
        return self._resolve(central, repo)

    def _parse_layer(self, layer: str, content: str) -> RuleConfig | None:
        @with_layer_fallback(layer)
        def parse() -> RuleConfig:
            return parse_rule_config(content, source=f"<{layer}>")

        return parse()

    def _resolve(self, central: RuleConfig | None, repo: RuleConfig | None) -> ResolvedConfig:
        embedded = self.embedded_provider()
        config = resolve_cascade(embedded, central, repo)

        if repo is not None and not repo.inherit_central_standards:
            layers = ["repo"]
        else:
            layers = ["embedded"]
            if central is not None:
                layers.append("central")
            if repo is not None:
                layers.append("repo")

        logger.bind(status="resolved").info(
            f"Resolved rule config from layers {layers}: {len(config.checks)} checks"
        )
        return ResolvedConfig(config=config, layers=layers)


# =============================================================================
# Module Exports
# =============================================================================
__all__ = ["StandardsService"]
