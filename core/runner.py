"""Run generated command lines in the user's shell.

Updates:
  v0.1.0 - 2026-09-30 - Execute commands with inherited stdio and report exit codes.
"""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger("ffcraft.runner")


def run_command(command: str) -> int:
    """Execute *command* through the shell and return its exit status."""
    if not command.strip():
        raise ValueError("Cannot execute an empty command")
    logger.info("Executing: %s", command)
    completed = subprocess.run(command, shell=True, check=False)
    if completed.returncode != 0:
        logger.warning("Command exited with code %d", completed.returncode)
    return completed.returncode


__all__ = ["run_command"]
