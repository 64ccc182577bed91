"""Game module for Falling Blocks.

Exports the core game engine and supporting classes:
- GameGrid: Grid representation, collision and line clearing
- Piece: Tetromino piece with clockwise rotation
- TetrominoType: Enum of available piece types
- ScoringRules: Scoring, leveling and gravity configuration
- FallingBlockGame: Engine state machine driven by commands and ticks
- JsonHighScoreStore / MemoryHighScoreStore: High score persistence
"""

from .grid import COLS, ROWS, GameGrid
from .pieces import BASE_SHAPES, COLORS, Piece, TetrominoType, rotate_cw
from .rules import ScoringRules
from .persistence import HighScoreStore, JsonHighScoreStore, MemoryHighScoreStore, default_highscore_path
from .core import Command, FallingBlockGame, GameConfig, GameSnapshot, Phase

__all__ = [
    "COLS",
    "ROWS",
    "GameGrid",
    "BASE_SHAPES",
    "COLORS",
    "Piece",
    "TetrominoType",
    "rotate_cw",
    "ScoringRules",
    "HighScoreStore",
    "JsonHighScoreStore",
    "MemoryHighScoreStore",
    "default_highscore_path",
    "Command",
    "FallingBlockGame",
    "GameConfig",
    "GameSnapshot",
    "Phase",
]
