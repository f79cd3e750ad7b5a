from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class Preferences:
    """
    Per-user display preferences, persisted as a small JSON file.

    This is session state for the UI shell and has no link to the task store.
    """

    def __init__(self, path: Union[str, Path], default_dark: bool = False) -> None:
        self.path = Path(path)
        self.dark_mode = self._load(default_dark)

    def _load(self, default_dark: bool) -> bool:
        if not self.path.exists():
            return default_dark
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences %s: %s", self.path, exc)
            return default_dark
        value = data.get("dark_mode") if isinstance(data, dict) else None
        return value if isinstance(value, bool) else default_dark

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"dark_mode": self.dark_mode}), encoding="utf-8")

    def set_dark_mode(self, enabled: bool) -> None:
        self.dark_mode = bool(enabled)
        self._save()

    def toggle_dark_mode(self) -> bool:
        self.set_dark_mode(not self.dark_mode)
        return self.dark_mode
