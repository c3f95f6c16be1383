"""JSON array state files shared by the history and preset stores.

Updates:
  v0.2.1 - 2026-10-18 - Let stores downgrade LoadResult when records fail to hydrate.
  v0.2.0 - 2026-10-10 - Report load outcomes through LoadResult instead of console noise.
  v0.1.1 - 2026-10-02 - Write through a temporary sibling file and replace atomically.
  v0.1.0 - 2026-09-28 - Introduce JsonArrayFile persistence helper.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, cast

from .exceptions import StateWriteError

logger = logging.getLogger("ffcraft.storage")


class LoadStatus(str, Enum):
    """How a state file load concluded."""

    LOADED = "loaded"
    MISSING = "missing"
    RECOVERED = "recovered"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Observable outcome of reading a state file at store construction."""

    status: LoadStatus
    path: Path
    count: int = 0
    message: str | None = None

    @property
    def ok(self) -> bool:
        """Return True when no data was discarded."""
        return self.status in (LoadStatus.LOADED, LoadStatus.MISSING)

    def with_dropped(self, dropped: int, kept: int, label: str) -> LoadResult:
        """Return a RECOVERED result when records were rejected after parsing."""
        if not dropped:
            return replace(self, count=kept)
        note = f"Dropped {dropped} unreadable {label} record(s) in {self.path}"
        message = f"{self.message}; {note}" if self.message else note
        return replace(self, status=LoadStatus.RECOVERED, count=kept, message=message)


class JsonArrayFile:
    """Read and write a pretty-printed JSON array of objects."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> tuple[list[dict[str, Any]], LoadResult]:
        """Return the stored records and a LoadResult; never raises."""
        if not self.path.exists():
            return [], LoadResult(LoadStatus.MISSING, self.path)
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Unable to read state file %s: %s", self.path, exc)
            return [], LoadResult(LoadStatus.FAILED, self.path, message=str(exc))
        try:
            parsed = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as exc:
            message = f"Invalid JSON in {self.path}: {exc}"
            logger.warning("%s; starting with empty state", message)
            return [], LoadResult(LoadStatus.RECOVERED, self.path, message=message)
        if not isinstance(parsed, list):
            message = f"State file {self.path} must contain a JSON array"
            logger.warning("%s; starting with empty state", message)
            return [], LoadResult(LoadStatus.RECOVERED, self.path, message=message)

        records: list[dict[str, Any]] = []
        skipped = 0
        for item in cast("list[Any]", parsed):
            if isinstance(item, Mapping):
                mapping = cast("Mapping[object, Any]", item)
                records.append({str(key): value for key, value in mapping.items()})
            else:
                skipped += 1
        if skipped:
            message = f"Skipped {skipped} non-object item(s) in {self.path}"
            logger.warning(message)
            return records, LoadResult(
                LoadStatus.RECOVERED, self.path, count=len(records), message=message
            )
        return records, LoadResult(LoadStatus.LOADED, self.path, count=len(records))

    def save(self, records: Sequence[Mapping[str, Any]]) -> None:
        """Persist *records* in full, replacing the previous file contents."""
        payload = json.dumps([dict(record) for record in records], indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handle, temp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(handle, "w", encoding="utf-8") as stream:
                    stream.write(payload)
                    stream.write("\n")
                os.replace(temp_name, self.path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StateWriteError(f"Unable to write state file {self.path}: {exc}") from exc
        logger.debug("Persisted %d record(s) to %s", len(records), self.path)


__all__ = ["JsonArrayFile", "LoadResult", "LoadStatus"]
