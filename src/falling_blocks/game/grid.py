from __future__ import annotations

import numpy as np

from .pieces import Piece, Shape


COLS = 10
ROWS = 20


class GameGrid:
    """Fixed 20x10 matrix of locked cells.

    The grid uses 0 for empty cells and positive integers for filled cells.
    Integer values are the colour token of the piece that filled the cell.
    Row 0 is the top of the board.
    """

    def __init__(self, width: int = COLS, height: int = ROWS) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_occupied(self, row: int, col: int) -> bool:
        return bool(self.grid[row, col] != 0)

    def collides(self, x: int, y: int, shape: Shape) -> bool:
        """Whether `shape` placed with its top-left at (x, y) hits a wall,
        the floor, or a locked cell.

        Rows above the board are only checked against the side walls.
        """
        h, w = shape.shape
        for r in range(h):
            for c in range(w):
                if not shape[r, c]:
                    continue
                col = x + c
                row = y + r
                if col < 0 or col >= self.width or row >= self.height:
                    return True
                if row >= 0 and self.grid[row, col] != 0:
                    return True
        return False

    def lock(self, piece: Piece) -> int:
        """Write the piece colour into the grid and return cells written."""
        written = 0
        for x, y in piece.cells():
            if y < 0:
                continue
            self.grid[y, x] = piece.color
            written += 1
        return written

    def clear_completed_lines(self) -> int:
        cleared = 0
        row = self.height - 1
        while row >= 0:
            if np.all(self.grid[row] != 0):
                # Rows above shift down into `row`, so it is checked again.
                self.grid = np.vstack(
                    (np.zeros((1, self.width), dtype=np.int8), np.delete(self.grid, row, axis=0))
                )
                cleared += 1
            else:
                row -= 1
        return cleared

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
