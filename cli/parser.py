"""Argument parser for the ffcraft CLI.

Updates:
  v0.3.1 - 2026-10-18 - Add history --copy, --run and --reuse entry actions.
  v0.3.0 - 2026-10-13 - Add preset subcommands and shared generation flags.
  v0.2.0 - 2026-10-09 - Add history management flags.
  v0.1.0 - 2026-10-02 - Generate, init and config commands.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from config import PROVIDERS
from models import Difficulty


def _add_generation_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-p",
        "--provider",
        type=str.lower,
        choices=PROVIDERS,
        default=None,
        help="AI provider to use (defaults to the configured provider).",
    )
    parser.add_argument(
        "-m",
        "--model",
        default=None,
        help="Provider-specific model name (defaults to the configured model).",
    )
    parser.add_argument(
        "-c",
        "--copy",
        dest="copy",
        action="store_true",
        default=None,
        help="Copy the generated command to the clipboard.",
    )
    parser.add_argument(
        "--no-copy",
        dest="copy",
        action="store_false",
        help="Do not copy, even when auto-copy is enabled.",
    )
    parser.add_argument(
        "-e",
        "--execute",
        action="store_true",
        help="Execute the generated command in the shell.",
    )


def _add_history_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    history_parser = subparsers.add_parser(
        "history",
        help="Browse and manage command history.",
    )
    actions = history_parser.add_mutually_exclusive_group()
    actions.add_argument("-l", "--list", action="store_true", help="List recent commands.")
    actions.add_argument("-f", "--favorites", action="store_true", help="Show favorite commands.")
    actions.add_argument(
        "--most-used",
        action="store_true",
        help="Show commands requested more than once.",
    )
    actions.add_argument(
        "-s",
        "--search",
        metavar="QUERY",
        help="Search prompts, commands and tags.",
    )
    actions.add_argument("-t", "--tag", metavar="TAG", help="Filter by tag.")
    actions.add_argument("--category", metavar="CATEGORY", help="Filter by category.")
    actions.add_argument("--stats", action="store_true", help="Show statistics.")
    actions.add_argument("--clear", action="store_true", help="Clear all history (requires --yes).")
    actions.add_argument(
        "--prune",
        metavar="DAYS",
        type=int,
        help="Remove entries older than DAYS days.",
    )
    actions.add_argument(
        "--export",
        choices=("json", "csv"),
        help="Export history as JSON or CSV.",
    )
    actions.add_argument(
        "--import",
        dest="import_path",
        metavar="PATH",
        type=Path,
        help="Import entries from a JSON export.",
    )
    actions.add_argument("--favorite", metavar="ID", help="Toggle the favorite flag of an entry.")
    actions.add_argument(
        "--add-tags",
        nargs=2,
        metavar=("ID", "TAGS"),
        help="Add comma-separated TAGS to an entry.",
    )
    actions.add_argument(
        "--set-category",
        nargs=2,
        metavar=("ID", "CATEGORY"),
        help="Set (or clear with an empty string) the category of an entry.",
    )
    actions.add_argument("--delete", metavar="ID", help="Delete an entry.")
    actions.add_argument("--show", metavar="ID", help="Show full details of an entry.")
    actions.add_argument(
        "--copy",
        dest="copy_id",
        metavar="ID",
        help="Copy the command of an entry to the clipboard.",
    )
    actions.add_argument(
        "--run",
        dest="run_id",
        metavar="ID",
        help="Execute the command of an entry in the shell.",
    )
    actions.add_argument(
        "--reuse",
        dest="reuse_id",
        metavar="ID",
        help="Print the generate invocation for the prompt of an entry.",
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum entries for --list and --most-used (default: 20).",
    )
    history_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Destination for --export (defaults to ffcraft-history-<date>.<format>).",
    )
    history_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm destructive operations such as --clear.",
    )


def _add_preset_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    preset_parser = subparsers.add_parser("preset", help="Browse, render and manage presets.")
    preset_commands = preset_parser.add_subparsers(dest="preset_command", required=True)

    list_parser = preset_commands.add_parser("list", help="List presets.")
    list_parser.add_argument("--category", default=None, help="Only presets in CATEGORY.")
    list_parser.add_argument("--common", action="store_true", help="Only commonly used presets.")

    preset_commands.add_parser("categories", help="List preset categories.")

    search_parser = preset_commands.add_parser("search", help="Search presets.")
    search_parser.add_argument("query", help="Text matched against names, descriptions and tags.")

    show_parser = preset_commands.add_parser("show", help="Show a preset and its parameters.")
    show_parser.add_argument("preset_id", help="Preset identifier.")

    for name, help_text in (
        ("render", "Render a preset prompt without calling a provider."),
        ("use", "Render a preset prompt and generate a command from it."),
    ):
        render_parser = preset_commands.add_parser(name, help=help_text)
        render_parser.add_argument("preset_id", help="Preset identifier.")
        render_parser.add_argument(
            "--set",
            dest="assignments",
            action="append",
            metavar="NAME=VALUE",
            default=None,
            help="Parameter value (repeatable).",
        )
        if name == "use":
            _add_generation_flags(render_parser)

    add_parser = preset_commands.add_parser("add", help="Create a custom preset.")
    add_parser.add_argument("--name", required=True)
    add_parser.add_argument("--category", required=True)
    add_parser.add_argument("--prompt", required=True, help="Template text with {placeholders}.")
    add_parser.add_argument("--description", default="")
    add_parser.add_argument("--tag", dest="tags", action="append", default=None)
    add_parser.add_argument("--example", dest="examples", action="append", default=None)
    add_parser.add_argument(
        "--difficulty",
        choices=[difficulty.value for difficulty in Difficulty],
        default=Difficulty.INTERMEDIATE.value,
    )
    add_parser.add_argument("--common", action="store_true", help="Mark as commonly used.")
    add_parser.add_argument(
        "--parameters",
        type=Path,
        default=None,
        help="JSON file holding the parameter definitions.",
    )

    delete_parser = preset_commands.add_parser("delete", help="Delete a custom preset.")
    delete_parser.add_argument("preset_id", help="Custom preset identifier.")

    export_parser = preset_commands.add_parser("export", help="Export built-in and custom presets.")
    export_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Destination file (defaults to ffcraft-presets-<date>.json).",
    )

    import_parser = preset_commands.add_parser("import", help="Import custom presets from JSON.")
    import_parser.add_argument("path", type=Path, help="Exported presets file.")


def build_parser() -> argparse.ArgumentParser:
    """Return the configured top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="ffcraft",
        description="Generate ffmpeg commands from plain-language descriptions.",
    )
    parser.add_argument(
        "--logging-config",
        type=Path,
        default=None,
        help="Path to logging configuration file (INI format)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed logs, including provider library output.",
    )
    parser.add_argument(
        "--state-dir",
        type=Path,
        default=None,
        help="Directory holding config.json, .env, history.json and presets.json.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Generate an ffmpeg command.")
    generate_parser.add_argument("prompt", nargs="+", help="Description of the ffmpeg task.")
    _add_generation_flags(generate_parser)

    init_parser = subparsers.add_parser("init", help="Write a sample configuration file.")
    init_parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite an existing configuration file.",
    )

    config_parser = subparsers.add_parser("config", help="Configure API keys and defaults.")
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show the resolved configuration (keys are masked).",
    )
    for provider in PROVIDERS:
        config_parser.add_argument(
            f"--{provider}",
            metavar="KEY",
            default=None,
            help=f"Store the {provider} API key.",
        )
    config_parser.add_argument(
        "--default-provider",
        type=str.lower,
        choices=PROVIDERS,
        default=None,
    )
    config_parser.add_argument(
        "--default-model",
        default=None,
        help="Set the default model for the default provider.",
    )
    config_parser.add_argument(
        "--auto-copy",
        metavar="true|false",
        default=None,
        help="Enable or disable automatic clipboard copy.",
    )

    _add_history_parser(subparsers)
    _add_preset_parser(subparsers)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments for the ffcraft launcher."""
    return build_parser().parse_args(argv)


__all__ = ["build_parser", "parse_args"]
