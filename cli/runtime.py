"""Runtime boot helpers for the ffcraft CLI.

Updates:
  v0.2.0 - 2026-10-12 - Add verbose level selection and silence LiteLLM by default.
  v0.1.0 - 2026-10-02 - Logging configuration helpers.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

DEFAULT_LOGGING_CONFIG = Path("config/logging.conf")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(logging_conf_path: Path | None, *, verbose: bool = False) -> None:
    """Configure logging using *logging_conf_path* when available."""
    path = logging_conf_path or DEFAULT_LOGGING_CONFIG
    if path.exists():
        try:
            logging.config.fileConfig(path, disable_existing_loggers=False)
            return
        except (OSError, ValueError, KeyError, RuntimeError) as exc:
            logging.getLogger("ffcraft.runtime").warning(
                "Ignoring unusable logging config %s: %s", path, exc
            )
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def configure_litellm_logging(enabled: bool) -> None:
    """Enable or disable upstream LiteLLM library logs."""
    litellm_loggers = (
        logging.getLogger("litellm"),
        logging.getLogger("LiteLLM"),
        logging.getLogger("LiteLLM Router"),
    )
    for litellm_logger in litellm_loggers:
        litellm_logger.propagate = True
        if enabled:
            litellm_logger.disabled = False
            litellm_logger.setLevel(logging.NOTSET)
        else:
            litellm_logger.disabled = True
            litellm_logger.setLevel(logging.CRITICAL)


__all__ = ["DEFAULT_LOGGING_CONFIG", "LOG_FORMAT", "configure_litellm_logging", "setup_logging"]
