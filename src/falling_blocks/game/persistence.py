"""High score storage collaborators.

The engine only needs an object with ``load_high_score()`` and
``save_high_score(value)``. Stores are free to raise; the engine logs the
failure and keeps playing.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union


logger = logging.getLogger(__name__)


class HighScoreStore(Protocol):
    def load_high_score(self) -> int: ...

    def save_high_score(self, value: int) -> None: ...


def default_highscore_path() -> Path:
    return Path.home() / ".falling_blocks" / "highscore.json"


class MemoryHighScoreStore:
    """Keeps the high score for the lifetime of the process."""

    def __init__(self, initial: int = 0) -> None:
        self.value = int(initial)

    def load_high_score(self) -> int:
        return self.value

    def save_high_score(self, value: int) -> None:
        self.value = int(value)


class JsonHighScoreStore:
    """Stores ``{"high_score": <int>}`` in a JSON file.

    A missing file counts as no prior high score. Content that is not a
    non-negative integer raises ``ValueError``.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else default_highscore_path()

    def load_high_score(self) -> int:
        if not self.path.exists():
            logger.debug("No high score file at %s", self.path)
            return 0
        data = json.loads(self.path.read_text(encoding="utf-8"))
        value = data.get("high_score") if isinstance(data, dict) else None
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValueError(f"Malformed high score file: {self.path}")
        return value

    def save_high_score(self, value: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".highscore-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({"high_score": int(value)}, fh)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
