from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Dict, FrozenSet, Optional

import numpy as np

from .grid import COLS, ROWS, GameGrid
from .persistence import HighScoreStore, MemoryHighScoreStore
from .pieces import Piece, TetrominoType
from .rules import ScoringRules


logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Command(IntEnum):
    NONE = 0
    LEFT = 1
    RIGHT = 2
    DOWN = 3
    ROTATE = 4
    START = 5
    TOGGLE_PAUSE = 6


_PLAYING_ONLY = frozenset({Phase.PLAYING})

# Phases in which each command is accepted; anything else is a no-op.
ALLOWED_PHASES: Dict[Command, FrozenSet[Phase]] = {
    Command.NONE: frozenset(Phase),
    Command.LEFT: _PLAYING_ONLY,
    Command.RIGHT: _PLAYING_ONLY,
    Command.DOWN: _PLAYING_ONLY,
    Command.ROTATE: _PLAYING_ONLY,
    Command.START: frozenset({Phase.IDLE, Phase.GAME_OVER}),
    Command.TOGGLE_PAUSE: frozenset({Phase.PLAYING, Phase.PAUSED}),
}


@dataclass
class GameConfig:
    random_seed: Optional[int] = None


@dataclass(frozen=True, eq=False)
class GameSnapshot:
    """Read-only view handed to renderers and environments."""

    board: np.ndarray
    piece_kind: Optional[TetrominoType]
    piece_shape: Optional[np.ndarray]
    piece_x: int
    piece_y: int
    next_kind: Optional[TetrominoType]
    phase: Phase
    score: int
    level: int
    lines: int
    high_score: int


class FallingBlockGame:
    """Falling-block game engine.

    The engine never schedules itself: a frame loop calls :meth:`tick` with
    the elapsed milliseconds, and input calls the command methods (or
    :meth:`apply`). Commands issued in a phase that does not accept them
    return ``False`` and change nothing.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        store: Optional[HighScoreStore] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.store: HighScoreStore = store if store is not None else MemoryHighScoreStore()
        self.rng = random.Random(self.config.random_seed)
        self.grid = GameGrid(COLS, ROWS)
        self.phase = Phase.IDLE
        self.current_piece: Optional[Piece] = None
        self.next_kind: Optional[TetrominoType] = None
        self.high_score = self._load_high_score()
        self._reset_session()
        self._handlers: Dict[Command, Callable[[], bool]] = {
            Command.NONE: lambda: False,
            Command.LEFT: lambda: self._shift(-1),
            Command.RIGHT: lambda: self._shift(1),
            Command.DOWN: self._move_down,
            Command.ROTATE: self._rotate,
            Command.START: self._start,
            Command.TOGGLE_PAUSE: self._toggle_pause,
        }

    def apply(self, command: Command) -> bool:
        command = Command(command)
        if self.phase not in ALLOWED_PHASES[command]:
            return False
        return self._handlers[command]()

    def start(self) -> bool:
        return self.apply(Command.START)

    def toggle_pause(self) -> bool:
        return self.apply(Command.TOGGLE_PAUSE)

    def move_left(self) -> bool:
        return self.apply(Command.LEFT)

    def move_right(self) -> bool:
        return self.apply(Command.RIGHT)

    def move_down(self) -> bool:
        return self.apply(Command.DOWN)

    def rotate(self) -> bool:
        return self.apply(Command.ROTATE)

    def tick(self, delta_ms: float) -> None:
        if self.phase is not Phase.PLAYING:
            return
        self.drop_counter += delta_ms
        if self.drop_counter > self.drop_interval:
            self._move_down()
            self.drop_counter = 0.0

    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    def snapshot(self) -> GameSnapshot:
        piece = self.current_piece
        return GameSnapshot(
            board=self.grid.clone_state(),
            piece_kind=piece.kind if piece is not None else None,
            piece_shape=piece.shape.copy() if piece is not None else None,
            piece_x=piece.x if piece is not None else 0,
            piece_y=piece.y if piece is not None else 0,
            next_kind=self.next_kind,
            phase=self.phase,
            score=self.score,
            level=self.level,
            lines=self.lines,
            high_score=self.high_score,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None and not self.game_over:
            for x, y in self.current_piece.cells():
                if self.grid.is_inside(x, y):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -self.current_piece.color
        return state

    def _reset_session(self) -> None:
        self.score = 0
        self.level = 1
        self.lines = 0
        self.drop_interval = self.rules.drop_interval_for_level(1)
        self.drop_counter = 0.0

    def reset(self) -> None:
        """Abandon any session and return to the idle phase; keeps the high score."""
        self._reset_session()
        self.grid.reset()
        self.next_kind = None
        self.current_piece = None
        self.phase = Phase.IDLE

    def _start(self) -> bool:
        self.reset()
        self.phase = Phase.PLAYING
        self._spawn_piece()
        logger.info("Game started")
        return True

    def _toggle_pause(self) -> bool:
        self.phase = Phase.PAUSED if self.phase is Phase.PLAYING else Phase.PLAYING
        logger.info("Phase is now %s", self.phase.value)
        return True

    def _random_kind(self) -> TetrominoType:
        return self.rng.choice(list(TetrominoType))

    def _spawn_piece(self) -> None:
        kind = self.next_kind if self.next_kind is not None else self._random_kind()
        self.next_kind = self._random_kind()
        self.current_piece = Piece.spawn(kind, self.grid.width)
        # Immediate collision check: if overlaps, game over
        piece = self.current_piece
        if self.grid.collides(piece.x, piece.y, piece.shape):
            self.phase = Phase.GAME_OVER
            self._update_high_score()
            logger.info("Game over: score=%d level=%d lines=%d", self.score, self.level, self.lines)

    def _shift(self, dx: int) -> bool:
        piece = self.current_piece
        if piece is None or self.grid.collides(piece.x + dx, piece.y, piece.shape):
            return False
        piece.x += dx
        return True

    def _move_down(self) -> bool:
        piece = self.current_piece
        if piece is None:
            return False
        if not self.grid.collides(piece.x, piece.y + 1, piece.shape):
            piece.y += 1
            self.drop_counter = 0.0
            return True
        self._lock_piece()
        return True

    def _rotate(self) -> bool:
        piece = self.current_piece
        if piece is None:
            return False
        rotated = piece.rotated_shape()
        new_x = piece.x
        if self.grid.collides(new_x, piece.y, rotated):
            rotated_width = rotated.shape[1]
            if new_x > 0 and not self.grid.collides(new_x - 1, piece.y, rotated):
                new_x -= 1
            elif new_x < self.grid.width - rotated_width and not self.grid.collides(new_x + 1, piece.y, rotated):
                new_x += 1
            else:
                return False
        piece.shape = rotated
        piece.x = new_x
        return True

    def _lock_piece(self) -> None:
        assert self.current_piece is not None
        self.grid.lock(self.current_piece)
        lines = self.grid.clear_completed_lines()
        self._add_score(lines)
        self._spawn_piece()

    def _add_score(self, lines: int) -> None:
        if lines > 0:
            self.score += self.rules.score_for_lines(lines, self.level)
            self.lines += lines
            logger.debug("Cleared %d line(s); score=%d", lines, self.score)
            new_level = self.rules.level_for_lines(self.lines)
            if new_level > self.level:
                self.level = new_level
                self.drop_interval = self.rules.drop_interval_for_level(self.level)
                logger.debug("Level %d, drop interval %d ms", self.level, self.drop_interval)
        self._update_high_score()

    def _update_high_score(self) -> None:
        if self.score <= self.high_score:
            return
        self.high_score = self.score
        try:
            self.store.save_high_score(self.high_score)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not save high score: %s", e)

    def _load_high_score(self) -> int:
        try:
            value = int(self.store.load_high_score())
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not load high score, starting from 0: %s", e)
            return 0
        return max(0, value)
