"""Runtime boot helpers for PromptVault.

Updates:
  v0.1.1 - 2026-10-14 - Accept a fallback level from settings.
  v0.1.0 - 2026-10-09 - Extract logging configuration helpers.
"""

from __future__ import annotations

import logging
import logging.config
from configparser import Error as ConfigParserError
from pathlib import Path

DEFAULT_LOGGING_CONFIG = Path("config/logging.conf")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(logging_conf_path: Path | None = None, level: str = "INFO") -> None:
    """Configure logging using *logging_conf_path* when available."""
    path = logging_conf_path or DEFAULT_LOGGING_CONFIG
    if path.exists():
        try:
            logging.config.fileConfig(path, disable_existing_loggers=False)
            return
        except (ConfigParserError, KeyError, ValueError) as exc:  # pragma: no cover
            logging.getLogger("prompt_vault.runtime").warning(
                "Ignoring invalid logging configuration %s: %s", path, exc
            )
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
