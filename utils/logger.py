import inspect
import json
import logging
import os
import sys
import threading
from typing import Any

from loguru import logger

# Bound context keys copied into the JSON log line
_STRUCTURED_FIELDS = ("request_id", "extension", "row_key", "layer", "status", "latency_ms")

# stdlib loggers re-routed through loguru
_ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "supabase")

# Client libraries whose per-request chatter is muted
_QUIET_MODULES = ("httpcore", "httpx", "hpack", "postgrest", "gotrue", "storage3")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green>"
    " | <level>{level: <8}</level>"
    " | <cyan>{name}:{line}</cyan>"
    " | {extra[layer]}{extra[extension]}"
    " - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Route stdlib logging (uvicorn, supabase) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real caller
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def serialize_record(record: dict[str, Any]) -> str:
    """
    Convert a log record to a single JSON line.

    Context bound with logger.bind(extension=..., row_key=..., layer=...)
    is carried into the output so feedback and cascade events can be
    correlated.
    """
    log_data = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "file": record["file"].name,
        "line": record["line"],
    }

    extra = record.get("extra", {})
    for key in _STRUCTURED_FIELDS:
        # Console defaults are empty strings; only real context goes to JSON
        if extra.get(key) in (None, ""):
            continue
        log_data[key] = int(extra[key]) if key == "latency_ms" else extra[key]

    return json.dumps(log_data, default=str)


def structured_formatter(record: dict[str, Any]) -> str:
    # loguru treats the returned string as a template; keep JSON out of it
    record["extra"]["serialized"] = serialize_record(record)
    return "{extra[serialized]}\n"


_setup_lock = threading.Lock()


def quiet_client_libraries() -> None:
    for module in _QUIET_MODULES:
        logger.disable(module)


def _route_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _ROUTED_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = []
        stdlib_logger.propagate = True


def setup_logging(log_dir: str | None = None, level: str | None = None) -> None:
    """
    Configure loguru sinks for the service.

    Console output is human-readable; the file sink (LOG_DIR/app.log)
    holds one JSON object per line for ingestion.

    Args:
        log_dir: Directory for app.log (defaults to LOG_DIR or ./logs)
        level: Console level (defaults to LOG_LEVEL or INFO)
    """
    with _setup_lock:
        _route_stdlib_logging()

        logger.remove()
        logger.configure(extra={"layer": "", "extension": ""})
        quiet_client_libraries()

        logger.add(
            sink=sys.stdout,
            format=CONSOLE_FORMAT,
            level=level or os.getenv("LOG_LEVEL", "INFO"),
        )

        logger.add(
            sink=os.path.join(log_dir or os.getenv("LOG_DIR", "./logs"), "app.log"),
            format=structured_formatter,
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            compression="zip",
        )
