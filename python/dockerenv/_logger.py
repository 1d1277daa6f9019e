# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Fire-and-forget history of delegated docker / compose commands.

All I/O is synchronous filesystem writes, one JSON object per line.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import datetime
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)


class CommandHistory:
    """Appends delegated commands and their exit codes to ``history.jsonl``."""

    def __init__(self, path: Path, *, enabled: bool = True) -> None:
        self._path = path
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    @property
    def path(self) -> Path:
        """The JSONL file entries are appended to."""
        return self._path

    def log_command(  # noqa: PLR0913
        self,
        kind: str,
        argv: Sequence[str],
        exit_code: int,
        started_at: datetime.datetime,
        duration_ms: float,
        *,
        env_dir: Path | None = None,
    ) -> None:
        """Record one finished command."""
        self.append(
            {
                "type": kind,
                "command": " ".join(argv),
                "env_dir": str(env_dir) if env_dir is not None else "",
                "exit_code": exit_code,
                "duration_ms": round(duration_ms, 1),
                "timestamp": started_at.isoformat(),
            }
        )

    def append(self, entry: dict[str, object]) -> None:
        """Append one JSONL line. Write failures are logged, not raised."""
        if not self._enabled:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError as exc:
            logger.warning("Cannot write command history to %s: %s", self._path, exc)

    def read(self) -> list[dict[str, object]]:
        """Return all recorded entries, oldest first, skipping bad lines."""
        if not self._path.is_file():
            return []
        entries: list[dict[str, object]] = []
        for raw in self._path.read_text().splitlines():
            stripped = raw.strip()
            if not stripped:
                continue
            try:
                entry = json.loads(stripped)
            except json.JSONDecodeError:
                continue
            if isinstance(entry, dict):
                entries.append(entry)
        return entries
