import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

DEFAULT_CENTRAL_STANDARDS_PATH = str(
    Path.home() / ".config" / "stagebot" / "central-standards.yaml"
)


class Config:
    """
    Centralized configuration loader using python-dotenv.

    Loads all environment variables from .env file and provides
    typed access throughout the application. Values are resolved once
    here and passed down as plain data; nothing below this layer reads
    the environment.
    """

    # Feedback store (Supabase)
    SUPABASE_URL: str | None
    SUPABASE_KEY: str | None
    FEEDBACK_TABLE: str
    STORE_FIELD_MAX_CHARS: int

    # Patterns query defaults
    DEFAULT_MIN_OCCURRENCES: int
    DEFAULT_MAX_RESULTS: int

    # Rule configuration cascade
    CENTRAL_STANDARDS_PATH: str | None
    CENTRAL_STANDARDS_API_KEY: str | None

    # Hosted standards (served from /v1/standards)
    STANDARDS_TABLE: str
    STANDARDS_ID: str

    # Optional shared secret for the HTTP API
    API_KEY: str | None

    def __init__(
        self,
        config_file: str | None = None,
        require_store: bool = True,
    ) -> None:
        """
        Load configuration from .env file.

        Args:
            config_file: Optional path to custom .env file
            require_store: Whether Supabase settings are mandatory (False for CLI use)

        Raises:
            ValueError: If required variables are missing or numeric settings are invalid
        """
        load_dotenv(config_file)

        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")
        self.FEEDBACK_TABLE = os.getenv("FEEDBACK_TABLE", "feedback")

        # 64 KB per property with UTF-16 payloads leaves room for ~32K chars
        self.STORE_FIELD_MAX_CHARS = self._get_int("STORE_FIELD_MAX_CHARS", 30000)

        self.DEFAULT_MIN_OCCURRENCES = self._get_int("DEFAULT_MIN_OCCURRENCES", 2)
        self.DEFAULT_MAX_RESULTS = self._get_int("DEFAULT_MAX_RESULTS", 15)

        # Central standards: explicit env override, then default search path
        central = os.getenv("STAGEBOT_CENTRAL_STANDARDS")
        if central:
            self.CENTRAL_STANDARDS_PATH = central
        elif os.path.exists(DEFAULT_CENTRAL_STANDARDS_PATH):
            self.CENTRAL_STANDARDS_PATH = DEFAULT_CENTRAL_STANDARDS_PATH
        else:
            self.CENTRAL_STANDARDS_PATH = None
            logger.debug("No central standards configured, cascade uses embedded + repo only")

        # Sent as X-Api-Key when the central location is another Stagebot instance
        self.CENTRAL_STANDARDS_API_KEY = os.getenv("STAGEBOT_CENTRAL_STANDARDS_API_KEY") or None

        self.STANDARDS_TABLE = os.getenv("STANDARDS_TABLE", "standards")
        self.STANDARDS_ID = os.getenv("STANDARDS_ID", "central")

        self.API_KEY = os.getenv("API_KEY") or None

        self._require_store = require_store
        self._validate()

    @property
    def central_request_headers(self) -> dict[str, str]:
        """Headers for fetching central standards from a URL."""
        if self.CENTRAL_STANDARDS_API_KEY:
            return {"X-Api-Key": self.CENTRAL_STANDARDS_API_KEY}
        return {}

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got {raw!r}")

    def _validate(self) -> None:
        """Validate required configuration is present."""
        if self._require_store:
            if not self.SUPABASE_URL:
                raise ValueError("SUPABASE_URL is required")

            if not self.SUPABASE_KEY:
                raise ValueError("SUPABASE_SERVICE_KEY (or SUPABASE_KEY) is required")

        if self.STORE_FIELD_MAX_CHARS < 4:
            raise ValueError("STORE_FIELD_MAX_CHARS must be at least 4")

        if self.DEFAULT_MIN_OCCURRENCES < 1 or self.DEFAULT_MAX_RESULTS < 1:
            raise ValueError("DEFAULT_MIN_OCCURRENCES and DEFAULT_MAX_RESULTS must be positive")
