"""Application entry point for ffcraft.

Updates:
  v0.3.0 - 2026-10-14 - Pass settings to every handler and map store failures to exit codes.
  v0.2.0 - 2026-10-09 - Honour --state-dir and --verbose before loading settings.
  v0.1.0 - 2026-10-02 - Wire settings, services and CLI commands.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from cli.commands import COMMAND_SPECS, EXIT_IO, EXIT_SETTINGS
from cli.parser import parse_args
from cli.runtime import configure_litellm_logging, setup_logging
from config import SettingsError, load_settings
from core import StateWriteError, build_services


def main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint that wires settings, services, and CLI commands."""
    args = parse_args(argv)
    setup_logging(args.logging_config, verbose=args.verbose)
    configure_litellm_logging(args.verbose)

    logger = logging.getLogger("ffcraft.main")
    try:
        settings = load_settings(state_dir=args.state_dir)
    except SettingsError as exc:
        logger.error("Failed to load settings: %s", exc)
        print(f"Configuration error: {exc}")
        return EXIT_SETTINGS

    spec = COMMAND_SPECS[args.command]
    services = None
    if spec.requires_services:
        try:
            services = build_services(settings)
        except (StateWriteError, OSError) as exc:
            logger.error("Failed to initialise services: %s", exc)
            return EXIT_IO
    return spec.handler(settings, services, args, logger)


if __name__ == "__main__":
    raise SystemExit(main())
