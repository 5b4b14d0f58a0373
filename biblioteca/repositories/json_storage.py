"""
JSON file key-value storage.

Plays the role of the browser's localStorage for the offline store: a single
JSON document mapping a fixed key per collection to its serialized snapshot.
Every write rewrites the whole file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
import json

from loguru import logger


class JsonFileStorage:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Local storage file {} is corrupt; starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def read(self, key: str) -> Optional[list]:
        value = self._load().get(key)
        return value if isinstance(value, list) else None

    def write(self, key: str, value: list) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def clear(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
