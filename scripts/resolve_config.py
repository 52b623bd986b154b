#!/usr/bin/env python3
"""
Print the effective rule configuration for a repository checkout.

Resolves embedded defaults -> central standards -> repository config
and writes the merged document to stdout as YAML.

Usage:
    python scripts/resolve_config.py /path/to/repo
    python scripts/resolve_config.py /path/to/repo --central https://standards.example.com/api/standards

Exit codes: 0 (resolved), 1 (bad arguments or configuration)
"""

import argparse
import os
import sys
from pathlib import Path

from loguru import logger

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.standards import StandardsService  # noqa: E402
from utils.config import Config  # noqa: E402
from utils.rule_loader import dump_rule_config  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resolve the effective Stagebot rule configuration for a repository",
    )
    parser.add_argument("repository_root", help="Repository working tree to search for a config")
    parser.add_argument(
        "--central",
        default=None,
        help="Central standards path or URL (defaults to STAGEBOT_CENTRAL_STANDARDS)",
    )
    parser.add_argument(
        "--show-layers",
        action="store_true",
        help="Prefix the output with a comment listing the contributing layers",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if not os.path.isdir(args.repository_root):
        logger.error(f"Not a directory: {args.repository_root}")
        return 1

    # Logs go to stderr so stdout carries only the YAML document
    logger.remove()
    logger.add(sys.stderr, level=os.getenv("LOG_LEVEL", "WARNING"))

    try:
        config = Config(require_store=False)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    service = StandardsService(
        central_location=args.central or config.CENTRAL_STANDARDS_PATH,
        request_headers=config.central_request_headers,
    )
    resolved = service.get_merged_config(args.repository_root)

    if args.show_layers:
        sys.stdout.write(f"# layers: {', '.join(resolved.layers)}\n")

    sys.stdout.write(dump_rule_config(resolved.config))
    return 0


if __name__ == "__main__":
    sys.exit(main())
