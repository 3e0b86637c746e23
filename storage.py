# High-score persistence: a single durable key/value slot.
from __future__ import annotations

import json
import logging
import os
from typing import Protocol


logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")
DEFAULT_HIGHSCORE_PATH = os.path.join(DATA_DIR, "highscore.json")
HIGHSCORE_KEY = "snakeHighScore"


class HighScoreStore(Protocol):
    def get_high_score(self) -> int | None: ...

    def set_high_score(self, value: int) -> None: ...


class MemoryHighScoreStore:
    """In-process store; nothing survives the session."""
    def __init__(self, value: int | None = None) -> None:
        self.value = value

    def get_high_score(self) -> int | None:
        return self.value

    def set_high_score(self, value: int) -> None:
        self.value = int(value)


class JsonHighScoreStore:
    """
    Keeps the best score in a small JSON object on disk.

    Storage problems never reach the game: unreadable or malformed files read
    as "no high score" and failed writes are logged and dropped.
    """
    def __init__(self, path: str = DEFAULT_HIGHSCORE_PATH, key: str = HIGHSCORE_KEY) -> None:
        self.path = path
        self.key = key

    def _read(self) -> dict:
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    def get_high_score(self) -> int | None:
        try:
            data = self._read()
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Could not read high score from %s: %s", self.path, exc)
            return None

        value = data.get(self.key)
        # bool is an int subclass; reject it along with negatives.
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            if value is not None:
                logger.warning("Ignoring invalid high score %r in %s", value, self.path)
            return None
        return value

    def set_high_score(self, value: int) -> None:
        try:
            data = self._read()
        except (OSError, ValueError):
            data = {}
        data[self.key] = int(value)

        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.warning("Could not save high score to %s: %s", self.path, exc)
