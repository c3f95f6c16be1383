"""CLI command handlers for ffcraft.

Updates:
  v0.4.1 - 2026-10-18 - Copy, execute or reuse stored history entries.
  v0.4.0 - 2026-10-14 - Add preset subcommands sharing the generate pipeline.
  v0.3.0 - 2026-10-11 - Add history management handlers.
  v0.2.0 - 2026-10-08 - Store API keys in the state directory .env file.
  v0.1.0 - 2026-10-02 - Generate, init and config handlers.
"""

from __future__ import annotations

import argparse
import json
import logging
import shlex
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from config import (
    DEFAULT_MODELS,
    DEFAULT_PROVIDER,
    PROVIDERS,
    persist_settings_to_config,
    store_api_key,
)
from core import (
    ClipboardError,
    GenerationError,
    PresetNotFoundError,
    PresetParameterError,
    StateWriteError,
    StoreValidationError,
    copy_to_clipboard,
    run_command,
)
from core.parameters import missing_required, validate_parameter_values

from .settings_summary import print_settings_summary
from .utils import (
    default_export_path,
    parse_assignments,
    parse_bool,
    print_and_log,
    render_history_entries,
    render_history_entry,
    render_preset,
    render_preset_list,
)

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from config import FfcraftSettings
    from core.factory import AppServices
else:  # pragma: no cover - runtime placeholders for type-only imports
    FfcraftSettings = AppServices = object

CommandHandler = Callable[
    [FfcraftSettings, AppServices | None, argparse.Namespace, logging.Logger], int
]

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_SETTINGS = 2
EXIT_STORE = 4
EXIT_IO = 5


@dataclass(frozen=True)
class CommandSpec:
    """Metadata for dispatching CLI command handlers."""

    handler: CommandHandler
    requires_services: bool = True


def _require_services(services: AppServices | None, command: str) -> AppServices:
    if services is None:
        raise ValueError(f"Services are required for the {command} command.")
    return services


def _read_text(path: Path) -> str:
    try:
        return path.expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Unable to read {path}: {exc}") from exc


def _write_text(path: Path, content: str) -> Path:
    resolved = path.expanduser()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(content, encoding="utf-8")
    return resolved


# ---------------------------------------------------------------------- #
# generate
# ---------------------------------------------------------------------- #
def _generate_and_record(
    settings: FfcraftSettings,
    services: AppServices,
    args: argparse.Namespace,
    logger: logging.Logger,
    prompt: str,
    *,
    category: str | None = None,
) -> int:
    """Generate a command for *prompt*, record the attempt, then copy/execute."""
    provider = getattr(args, "provider", None)
    model = getattr(args, "model", None)
    try:
        generated = services.generator.generate(prompt, provider=provider, model=model)
    except GenerationError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to generate command: {exc}")
        failed_provider = provider or settings.default_provider
        failed_model = model or settings.model_for(failed_provider)
        try:
            services.history.add(
                prompt,
                "",
                failed_provider,
                failed_model,
                category=category,
                error=str(exc),
            )
        except StateWriteError as write_error:
            logger.error("Unable to record failed attempt: %s", write_error)
        return EXIT_FAILURE

    print(f"Prompt: {prompt}")
    print(f"Command: {generated.command}")
    try:
        services.history.add(
            prompt,
            generated.command,
            generated.provider,
            generated.model,
            category=category,
        )
    except StateWriteError as exc:
        print_and_log(logger, logging.WARNING, f"Command not saved to history: {exc}")

    copy_flag = getattr(args, "copy", None)
    should_copy = bool(copy_flag) or (copy_flag is None and settings.auto_copy)
    if should_copy:
        try:
            copy_to_clipboard(generated.command)
        except ClipboardError as exc:
            print_and_log(logger, logging.WARNING, f"Failed to copy to clipboard: {exc}")
        else:
            print("Command copied to clipboard")

    if getattr(args, "execute", False):
        print("Executing command...")
        return_code = run_command(generated.command)
        if return_code != 0:
            print_and_log(logger, logging.ERROR, f"Command exited with code {return_code}")
            return EXIT_FAILURE
    return EXIT_OK


def run_generate(
    settings: FfcraftSettings,
    services: AppServices | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    services = _require_services(services, "generate")
    prompt = " ".join(args.prompt).strip()
    if not prompt:
        print_and_log(logger, logging.ERROR, "A description of the ffmpeg task is required.")
        return EXIT_FAILURE
    if not settings.has_any_api_key():
        print_and_log(
            logger,
            logging.WARNING,
            "No API keys configured. Run `ffcraft config --openai YOUR_KEY` "
            "or set OPENAI_API_KEY.",
        )
    return _generate_and_record(settings, services, args, logger, prompt)


# ---------------------------------------------------------------------- #
# init / config
# ---------------------------------------------------------------------- #
def sample_config() -> dict[str, object]:
    """Return the non-secret configuration written by ``ffcraft init``."""
    return {
        "default_provider": DEFAULT_PROVIDER,
        **{f"{provider}_model": DEFAULT_MODELS[provider] for provider in PROVIDERS},
        "auto_copy": True,
    }


def run_init(
    settings: FfcraftSettings,
    services: AppServices | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    del services
    config_path = settings.config_path
    if config_path.exists() and not getattr(args, "force", False):
        print_and_log(
            logger,
            logging.WARNING,
            f"Configuration file already exists: {config_path}\n"
            "Use --force to overwrite the existing configuration.",
        )
        return EXIT_FAILURE
    try:
        _write_text(config_path, json.dumps(sample_config(), indent=2) + "\n")
    except OSError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to create configuration file: {exc}")
        return EXIT_IO
    print_and_log(logger, logging.INFO, f"Created configuration file: {config_path}")
    print(
        "\n".join(
            [
                "",
                "Next steps:",
                "  1. Store API keys (kept in " + str(settings.env_path) + "):",
                *(f"     ffcraft config --{provider} YOUR_KEY" for provider in PROVIDERS),
                "  2. Review the configuration: ffcraft config --show",
                '  3. Generate a command: ffcraft generate "convert video.mp4 to gif"',
            ]
        )
    )
    return EXIT_OK


def run_config(
    settings: FfcraftSettings,
    services: AppServices | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    del services
    if getattr(args, "show", False):
        print_settings_summary(settings)
        return EXIT_OK

    updated = False
    try:
        for provider in PROVIDERS:
            key = getattr(args, provider, None)
            if key:
                variable = store_api_key(provider, key, settings.env_path)
                print(f"Stored {provider} API key as {variable} in {settings.env_path}")
                updated = True

        updates: dict[str, object] = {}
        default_provider = settings.default_provider
        if args.default_provider:
            default_provider = args.default_provider
            updates["default_provider"] = default_provider
        if args.default_model:
            updates[f"{default_provider}_model"] = args.default_model.strip()
            print(f"Set default model for {default_provider}: {args.default_model.strip()}")
        if args.auto_copy is not None:
            try:
                auto_copy = parse_bool(args.auto_copy)
            except ValueError as exc:
                print_and_log(logger, logging.ERROR, str(exc))
                return EXIT_SETTINGS
            updates["auto_copy"] = auto_copy
            print(f"Auto-copy {'enabled' if auto_copy else 'disabled'}")
        if updates:
            path = persist_settings_to_config(updates, settings.config_path)
            print(f"Configuration saved to {path}")
            updated = True
    except ValueError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_SETTINGS
    except OSError as exc:
        print_and_log(logger, logging.ERROR, f"Failed to save configuration: {exc}")
        return EXIT_IO

    if not updated:
        print("No configuration changes made. Use --help to see available options.")
    return EXIT_OK


# ---------------------------------------------------------------------- #
# history
# ---------------------------------------------------------------------- #
def _run_history_mutation(
    services: AppServices,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int | None:
    history = services.history
    if args.clear:
        if not args.yes:
            print_and_log(logger, logging.WARNING, "Refusing to clear history without --yes.")
            return EXIT_FAILURE
        count = len(history)
        history.clear()
        print_and_log(logger, logging.INFO, f"History cleared ({count} entries removed)")
        return EXIT_OK
    if args.prune is not None:
        removed = history.clear_old_entries(args.prune)
        print(f"Removed {removed} entries older than {args.prune} days")
        return EXIT_OK
    if args.favorite:
        result = history.toggle_favorite(args.favorite)
        if not result.found:
            print_and_log(logger, logging.ERROR, f"History entry {args.favorite} not found")
            return EXIT_STORE
        state = "added to" if result.is_favorite else "removed from"
        print(f"Entry {args.favorite} {state} favorites")
        return EXIT_OK
    if args.add_tags:
        entry_id, raw_tags = args.add_tags
        tags = [tag.strip() for tag in raw_tags.split(",") if tag.strip()]
        if not history.add_tags(entry_id, tags):
            print_and_log(logger, logging.ERROR, f"History entry {entry_id} not found")
            return EXIT_STORE
        print("Tags updated")
        return EXIT_OK
    if args.set_category:
        entry_id, category = args.set_category
        if not history.set_category(entry_id, category):
            print_and_log(logger, logging.ERROR, f"History entry {entry_id} not found")
            return EXIT_STORE
        print("Category updated")
        return EXIT_OK
    if args.delete:
        if not history.delete(args.delete):
            print_and_log(logger, logging.ERROR, f"History entry {args.delete} not found")
            return EXIT_STORE
        print("Command deleted")
        return EXIT_OK
    if args.import_path is not None:
        imported = history.import_history(_read_text(args.import_path))
        print_and_log(logger, logging.INFO, f"Imported {imported} entries from {args.import_path}")
        return EXIT_OK
    return None


def _run_history_entry_action(
    services: AppServices,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    """Copy, execute or reuse a stored entry without touching the history."""
    entry_id = args.copy_id or args.run_id or args.reuse_id
    entry = services.history.get(entry_id)
    if entry is None:
        print_and_log(logger, logging.ERROR, f"History entry {entry_id} not found")
        return EXIT_STORE
    if args.reuse_id:
        print(f"Prompt: {entry.prompt}")
        print(f"Run: ffcraft generate {shlex.quote(entry.prompt)}")
        return EXIT_OK
    if not entry.command:
        print_and_log(
            logger, logging.ERROR, f"History entry {entry_id} has no command (failed attempt)"
        )
        return EXIT_FAILURE

    print(f"Command: {entry.command}")
    if args.copy_id:
        try:
            copy_to_clipboard(entry.command)
        except ClipboardError as exc:
            print_and_log(logger, logging.ERROR, f"Failed to copy to clipboard: {exc}")
            return EXIT_FAILURE
        print("Command copied to clipboard")
        return EXIT_OK

    print("Executing command...")
    return_code = run_command(entry.command)
    if return_code != 0:
        print_and_log(logger, logging.ERROR, f"Command exited with code {return_code}")
        return EXIT_FAILURE
    return EXIT_OK


def run_history(
    settings: FfcraftSettings,
    services: AppServices | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    del settings
    services = _require_services(services, "history")
    history = services.history
    try:
        outcome = _run_history_mutation(services, args, logger)
    except StoreValidationError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_STORE
    except (StateWriteError, OSError) as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_IO
    if outcome is not None:
        return outcome

    if args.stats:
        stats = history.get_stats()
        print(
            "\n".join(
                [
                    "History Statistics",
                    "------------------",
                    f"Total commands: {stats.total_commands}",
                    f"Favorites: {stats.favorite_count}",
                    f"Most used provider: {stats.most_used_provider}",
                    f"Most used category: {stats.most_used_category}",
                    "",
                    f"Commands today: {stats.commands_today}",
                    f"Commands this week: {stats.commands_this_week}",
                    f"Commands this month: {stats.commands_this_month}",
                ]
            )
        )
        return EXIT_OK
    if args.export:
        destination = args.output or default_export_path("ffcraft-history", args.export)
        try:
            resolved = _write_text(destination, history.export_history(args.export))
        except OSError as exc:
            print_and_log(logger, logging.ERROR, f"Failed to export history: {exc}")
            return EXIT_IO
        print_and_log(logger, logging.INFO, f"History exported to {resolved}")
        return EXIT_OK
    if args.show:
        entry = history.get(args.show)
        if entry is None:
            print_and_log(logger, logging.ERROR, f"History entry {args.show} not found")
            return EXIT_STORE
        print(render_history_entry(entry))
        return EXIT_OK
    if args.copy_id or args.run_id or args.reuse_id:
        return _run_history_entry_action(services, args, logger)

    if args.favorites:
        title, entries = "Favorite Commands", history.get_favorites()
    elif args.most_used:
        title, entries = "Most Used Commands", history.get_most_used(args.limit)
    elif args.search:
        title, entries = f'Search Results for "{args.search}"', history.search(args.search)
    elif args.tag:
        title, entries = f'Commands tagged with "{args.tag}"', history.get_by_tag(args.tag)
    elif args.category:
        title, entries = f'Commands in "{args.category}"', history.get_by_category(args.category)
    else:
        title, entries = "Recent Commands", history.get_recent(args.limit)
    print(render_history_entries(title, entries))
    return EXIT_OK


# ---------------------------------------------------------------------- #
# preset
# ---------------------------------------------------------------------- #
def _render_preset_prompt(
    services: AppServices,
    args: argparse.Namespace,
) -> tuple[str, str]:
    """Validate ``--set`` values and return (rendered prompt, preset category)."""
    presets = services.presets
    preset = presets.get_preset_by_id(args.preset_id)
    if preset is None:
        raise PresetNotFoundError(f"Preset {args.preset_id} not found")
    values = validate_parameter_values(preset, parse_assignments(args.assignments))
    missing = missing_required(preset, values)
    if missing:
        names = [parameter.name for parameter in missing]
        raise PresetParameterError(
            f"Missing required parameter(s) for preset '{preset.id}': {', '.join(names)}",
            [f"{name}: required" for name in names],
        )
    return presets.build_prompt_from_preset(preset.id, values), preset.category


def _load_parameter_definitions(path: Path | None) -> list[Any]:
    if path is None:
        return []
    payload = json.loads(_read_text(path))
    if not isinstance(payload, list):
        raise StoreValidationError(f"{path} must contain a JSON array of parameters")
    return payload


def _run_preset_action(
    settings: FfcraftSettings,
    services: AppServices,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    presets = services.presets
    action = args.preset_command
    if action == "list":
        if args.category:
            title = f"Presets in {args.category}"
            items = presets.get_presets_by_category(args.category)
        elif args.common:
            title, items = "Common Presets", presets.get_common_presets()
        else:
            title, items = "Presets", presets.get_all_presets()
        print(render_preset_list(title, items))
        return EXIT_OK
    if action == "categories":
        for category in presets.get_categories():
            count = len(presets.get_presets_by_category(category))
            print(f"{category} ({count})")
        return EXIT_OK
    if action == "search":
        matches = presets.search_presets(args.query)
        print(render_preset_list(f'Presets matching "{args.query}"', matches))
        return EXIT_OK
    if action == "show":
        preset = presets.get_preset_by_id(args.preset_id)
        if preset is None:
            raise PresetNotFoundError(f"Preset {args.preset_id} not found")
        print(render_preset(preset))
        return EXIT_OK
    if action == "render":
        prompt, _category = _render_preset_prompt(services, args)
        print(prompt)
        return EXIT_OK
    if action == "use":
        prompt, category = _render_preset_prompt(services, args)
        exit_code = _generate_and_record(
            settings, services, args, logger, prompt, category=category
        )
        if exit_code == EXIT_OK and presets.increment_usage_count(args.preset_id):
            logger.debug("Incremented usage count for preset %s", args.preset_id)
        return exit_code
    if action == "add":
        created = presets.add_custom_preset(
            {
                "name": args.name,
                "category": args.category,
                "prompt": args.prompt,
                "description": args.description,
                "tags": args.tags or [],
                "examples": args.examples or [],
                "difficulty": args.difficulty,
                "common_use": args.common,
                "parameters": _load_parameter_definitions(args.parameters),
            }
        )
        print_and_log(
            logger, logging.INFO, f"Created custom preset '{created.name}' ({created.id})"
        )
        return EXIT_OK
    if action == "delete":
        if not presets.delete_custom_preset(args.preset_id):
            print_and_log(
                logger,
                logging.ERROR,
                f"Custom preset {args.preset_id} not found (built-in presets cannot be deleted)",
            )
            return EXIT_STORE
        print("Preset deleted")
        return EXIT_OK
    if action == "export":
        destination = args.output or default_export_path("ffcraft-presets", "json")
        resolved = _write_text(destination, presets.export_presets())
        print_and_log(logger, logging.INFO, f"Presets exported to {resolved}")
        return EXIT_OK
    if action == "import":
        imported = presets.import_custom_presets(_read_text(args.path))
        print_and_log(logger, logging.INFO, f"Imported {imported} custom presets from {args.path}")
        return EXIT_OK
    raise ValueError(f"Unknown preset command: {action}")


def run_preset(
    settings: FfcraftSettings,
    services: AppServices | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    services = _require_services(services, "preset")
    try:
        return _run_preset_action(settings, services, args, logger)
    except PresetParameterError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        for problem in exc.problems:
            print(f"  - {problem}")
        return EXIT_STORE
    except (PresetNotFoundError, StoreValidationError) as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_STORE
    except json.JSONDecodeError as exc:
        print_and_log(logger, logging.ERROR, f"Invalid JSON: {exc}")
        return EXIT_STORE
    except ValueError as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_STORE
    except (StateWriteError, OSError) as exc:
        print_and_log(logger, logging.ERROR, str(exc))
        return EXIT_IO


COMMAND_SPECS: dict[str, CommandSpec] = {
    "generate": CommandSpec(run_generate),
    "init": CommandSpec(run_init, requires_services=False),
    "config": CommandSpec(run_config, requires_services=False),
    "history": CommandSpec(run_history),
    "preset": CommandSpec(run_preset),
}


__all__ = [
    "COMMAND_SPECS",
    "CommandSpec",
    "EXIT_FAILURE",
    "EXIT_IO",
    "EXIT_OK",
    "EXIT_SETTINGS",
    "EXIT_STORE",
    "sample_config",
]
