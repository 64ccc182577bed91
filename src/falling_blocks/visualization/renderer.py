from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np
import pygame

from falling_blocks.game import BASE_SHAPES, COLORS, Command, GameSnapshot, Phase, TetrominoType


BACKGROUND = (10, 10, 14)
BOARD_BG = (0, 0, 0)
GRID_LINE = (26, 26, 26)
PANEL_BG = (245, 245, 245)
TEXT = (230, 230, 230)
OVERLAY_BG = (0, 0, 0, 180)
BUTTON_BG = (60, 60, 72)
BUTTON_BORDER = (150, 150, 160)

BUTTON_HEIGHT = 40
BUTTON_GAP = 10

# On-screen controls, laid out two per row under the stats
BUTTONS: Tuple[Tuple[Command, str], ...] = (
    (Command.LEFT, "Left"),
    (Command.RIGHT, "Right"),
    (Command.ROTATE, "Rotate"),
    (Command.DOWN, "Down"),
)


def _color_for_value(v: int) -> Tuple[int, int, int]:
    if v == 0:
        return BOARD_BG
    return COLORS.get(abs(v), (200, 200, 200))


class Renderer:
    """Draws a :class:`GameSnapshot`: board, falling piece, side panel and
    the phase overlay."""

    def __init__(self, cell_size: int = 30, margin: int = 20, panel_width: int = 200) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self.preview_cell = max(8, cell_size * 5 // 6)
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    def _stats_top(self) -> int:
        return self.margin + 24 + self.preview_cell * 5 + 20

    def button_rects(self, cols: int) -> Dict[Command, pygame.Rect]:
        x0 = self.margin * 2 + cols * self.cell_size
        y0 = self._stats_top() + 4 * 28 + BUTTON_GAP
        w = (self.panel_width - BUTTON_GAP) // 2
        rects: Dict[Command, pygame.Rect] = {}
        for i, (command, _) in enumerate(BUTTONS):
            row, col = divmod(i, 2)
            rects[command] = pygame.Rect(
                x0 + col * (w + BUTTON_GAP),
                y0 + row * (BUTTON_HEIGHT + BUTTON_GAP),
                w,
                BUTTON_HEIGHT,
            )
        return rects

    def window_size(self, rows: int, cols: int) -> Tuple[int, int]:
        width = self.margin * 3 + cols * self.cell_size + self.panel_width
        buttons_bottom = max(r.bottom for r in self.button_rects(cols).values())
        height = max(self.margin * 2 + rows * self.cell_size, buttons_bottom + self.margin)
        return width, height

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None or self._big_font is None:
            self._font = pygame.font.SysFont(None, 26)
            self._big_font = pygame.font.SysFont(None, 44)
        return self._font, self._big_font

    def _draw_cell(self, surf: pygame.Surface, x: int, y: int, color: Tuple[int, int, int]) -> None:
        rect = pygame.Rect(x * self.cell_size, y * self.cell_size, self.cell_size - 1, self.cell_size - 1)
        pygame.draw.rect(surf, color, rect)

    def _board_surface(self, snap: GameSnapshot) -> pygame.Surface:
        h, w = snap.board.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill(BOARD_BG)
        for y in range(h):
            for x in range(w):
                v = int(snap.board[y, x])
                if v:
                    self._draw_cell(surf, x, y, _color_for_value(v))

        # The falling piece is hidden once the game has ended
        if snap.piece_shape is not None and snap.piece_kind is not None and snap.phase is not Phase.GAME_OVER:
            color = COLORS[snap.piece_kind]
            ph, pw = snap.piece_shape.shape
            for dy in range(ph):
                for dx in range(pw):
                    if snap.piece_shape[dy, dx]:
                        self._draw_cell(surf, snap.piece_x + dx, snap.piece_y + dy, color)

        for i in range(w + 1):
            pygame.draw.line(surf, GRID_LINE, (i * self.cell_size, 0), (i * self.cell_size, h * self.cell_size))
        for i in range(h + 1):
            pygame.draw.line(surf, GRID_LINE, (0, i * self.cell_size), (w * self.cell_size, i * self.cell_size))
        return surf

    def _draw_preview(self, screen: pygame.Surface, kind: Optional[TetrominoType], x0: int, y0: int) -> None:
        box = pygame.Rect(x0, y0, self.panel_width, self.preview_cell * 5)
        pygame.draw.rect(screen, PANEL_BG, box)
        if kind is None:
            return
        shape: np.ndarray = BASE_SHAPES[kind]
        sh, sw = shape.shape
        off_x = box.x + (box.width - sw * self.preview_cell) // 2
        off_y = box.y + (box.height - sh * self.preview_cell) // 2
        for py in range(sh):
            for px in range(sw):
                if shape[py, px]:
                    rect = pygame.Rect(
                        off_x + px * self.preview_cell,
                        off_y + py * self.preview_cell,
                        self.preview_cell - 2,
                        self.preview_cell - 2,
                    )
                    pygame.draw.rect(screen, COLORS[kind], rect)

    def _draw_buttons(self, screen: pygame.Surface, cols: int) -> None:
        font, _ = self._fonts()
        rects = self.button_rects(cols)
        for command, label in BUTTONS:
            rect = rects[command]
            pygame.draw.rect(screen, BUTTON_BG, rect, 0, border_radius=6)
            pygame.draw.rect(screen, BUTTON_BORDER, rect, 1, border_radius=6)
            text = font.render(label, True, TEXT)
            screen.blit(text, text.get_rect(center=rect.center))

    def _draw_overlay(self, screen: pygame.Surface, board_rect: pygame.Rect, snap: GameSnapshot) -> None:
        if snap.phase is Phase.IDLE:
            title, message = "Falling Blocks", "Press SPACE to start"
        elif snap.phase is Phase.PAUSED:
            title, message = "Paused", "Press SPACE to resume"
        elif snap.phase is Phase.GAME_OVER:
            title, message = "Game Over", f"Score: {snap.score} | Press SPACE to restart"
        else:
            return
        font, big_font = self._fonts()
        shade = pygame.Surface(board_rect.size, pygame.SRCALPHA)
        shade.fill(OVERLAY_BG)
        screen.blit(shade, board_rect.topleft)
        title_img = big_font.render(title, True, TEXT)
        screen.blit(title_img, title_img.get_rect(center=(board_rect.centerx, board_rect.centery - 20)))
        msg_img = font.render(message, True, TEXT)
        screen.blit(msg_img, msg_img.get_rect(center=(board_rect.centerx, board_rect.centery + 20)))

    def draw(self, screen: pygame.Surface, snap: GameSnapshot) -> None:
        font, _ = self._fonts()
        screen.fill(BACKGROUND)
        board_surf = self._board_surface(snap)
        board_rect = board_surf.get_rect(topleft=(self.margin, self.margin))
        screen.blit(board_surf, board_rect)

        x0 = board_rect.right + self.margin
        y0 = self.margin
        screen.blit(font.render("Next", True, TEXT), (x0, y0))
        self._draw_preview(screen, snap.next_kind, x0, y0 + 24)

        y_text = self._stats_top()
        info_lines = [
            f"Score: {snap.score}",
            f"Level: {snap.level}",
            f"Lines: {snap.lines}",
            f"High score: {snap.high_score}",
        ]
        for i, txt in enumerate(info_lines):
            screen.blit(font.render(txt, True, TEXT), (x0, y_text + i * 28))

        self._draw_buttons(screen, snap.board.shape[1])
        self._draw_overlay(screen, board_rect, snap)
        pygame.display.flip()
