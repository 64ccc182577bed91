from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import (
    COLORS,
    Command,
    FallingBlockGame,
    MemoryHighScoreStore,
    Phase,
    TetrominoType,
)


# Discrete action index -> engine command
ACTIONS: Tuple[Command, ...] = (
    Command.NONE,
    Command.LEFT,
    Command.RIGHT,
    Command.DOWN,
    Command.ROTATE,
)


class FallingBlocksEnv(gym.Env):
    """Agent-driven input source for the falling-block engine.

    Every step applies one command and then advances gravity by
    ``frame_ms``, as if one display frame had elapsed.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        frame_ms: Optional[float] = None,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.game = FallingBlockGame(store=MemoryHighScoreStore())
        self.render_mode = render_mode
        self.frame_ms = float(frame_ms) if frame_ms is not None else 1000.0 / self.metadata["render_fps"]
        self.max_episode_steps = int(max_episode_steps)

        height, width = self.game.grid.height, self.game.grid.width
        n_kinds = len(TetrominoType)

        # Locked cells are positive colour tokens, the falling piece negative
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_kinds, high=n_kinds, shape=(height, width), dtype=np.int8),
                "next_piece": spaces.Discrete(n_kinds + 1),
            }
        )
        self.action_space = spaces.Discrete(len(ACTIONS))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        next_kind = self.game.next_kind
        return {
            "board": self.game.get_state().astype(np.int8),
            "next_piece": int(next_kind) if next_kind is not None else 0,
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "level": self.game.level,
            "lines": self.game.lines,
            "high_score": self.game.high_score,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        self.game.reset()
        self.game.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        score_before = self.game.score
        self.game.apply(ACTIONS[int(action)])
        self.game.tick(self.frame_ms)
        self._steps += 1

        terminated = self.game.phase is Phase.GAME_OVER
        truncated = not terminated and self._steps >= self.max_episode_steps
        reward = float(self.game.score - score_before)
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            # Create a simple RGB image from the board
            board = self.game.get_state()
            cell = 12
            h, w = board.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(board[y, x])
                    color = COLORS[TetrominoType(abs(v))] if v else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass
