from __future__ import annotations

import argparse
import logging
from typing import Dict, Mapping, Optional, Sequence, Tuple

import pygame

from falling_blocks.game import (
    Command,
    FallingBlockGame,
    GameConfig,
    JsonHighScoreStore,
    Phase,
    default_highscore_path,
)
from .renderer import Renderer


logger = logging.getLogger(__name__)

KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: Command.LEFT,
    pygame.K_RIGHT: Command.RIGHT,
    pygame.K_UP: Command.ROTATE,
    pygame.K_DOWN: Command.DOWN,
}


def command_for_key(key: int, phase: Phase) -> Optional[Command]:
    """SPACE starts a new game when none is running, otherwise pauses."""
    if key == pygame.K_SPACE:
        if phase in (Phase.IDLE, Phase.GAME_OVER):
            return Command.START
        return Command.TOGGLE_PAUSE
    return KEY_TO_COMMAND.get(key)


def command_for_click(pos: Tuple[int, int], button_rects: Mapping[Command, pygame.Rect]) -> Optional[Command]:
    for command, rect in button_rects.items():
        if rect.collidepoint(pos):
            return command
    return None


def run(game: FallingBlockGame, renderer: Renderer, fps: int = 60) -> None:
    pygame.init()
    pygame.key.set_repeat(170, 50)
    try:
        clock = pygame.time.Clock()
        screen = pygame.display.set_mode(renderer.window_size(game.grid.height, game.grid.width))
        pygame.display.set_caption("Falling Blocks")
        buttons = renderer.button_rects(game.grid.width)

        running = True
        while running:
            # Input handling
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        command = command_for_key(event.key, game.phase)
                        if command is not None:
                            game.apply(command)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    # Touch screens also emit FINGERDOWN for the same press
                    if getattr(event, "touch", False):
                        continue
                    command = command_for_click(event.pos, buttons)
                    if command is not None:
                        game.apply(command)
                elif event.type == pygame.FINGERDOWN:
                    width, height = screen.get_size()
                    command = command_for_click((int(event.x * width), int(event.y * height)), buttons)
                    if command is not None:
                        game.apply(command)

            # Gravity: the engine only sees elapsed milliseconds
            dt = clock.tick(fps)
            game.tick(dt)

            renderer.draw(screen, game.snapshot())
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Falling Blocks")
    p.add_argument("--highscore-file", type=str, default=str(default_highscore_path()))
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=30)
    p.add_argument("--fps", type=int, default=60)
    p.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO")
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="[FALLING_BLOCKS] %(asctime)s %(levelname)s %(name)s - %(message)s")

    game = FallingBlockGame(
        GameConfig(random_seed=args.seed),
        store=JsonHighScoreStore(args.highscore_file),
    )
    logger.info("High score %d loaded from %s", game.high_score, args.highscore_file)
    run(game, Renderer(cell_size=args.cell_size), fps=args.fps)


if __name__ == "__main__":  # pragma: no cover
    main()
