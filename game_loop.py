# Fixed-timestep scheduler: drives SnakeGame.tick() from a variable-rate frame callback.
from __future__ import annotations

import logging
import time
from typing import Callable

try:
    from .game_logic import GameSnapshot, GameStatus, SnakeGame
except ImportError:
    from game_logic import GameSnapshot, GameStatus, SnakeGame


logger = logging.getLogger(__name__)

# Frame callback period used by the GUI host (~60 Hz, like a display refresh).
FRAME_MS = 16


class GameLoop:
    """
    Accumulator-based loop.

    Every frame adds the real elapsed time to an accumulator while the game is
    PLAYING. Once the accumulator reaches the current tick interval the engine
    advances exactly one step and the accumulator is reset to zero, so a long
    stall never turns into a burst of catch-up ticks. The current state is
    rendered once per frame regardless of status.
    """
    def __init__(
        self,
        game: SnakeGame,
        render: Callable[[GameSnapshot], None],
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.game = game
        self.render = render
        self.clock = clock                 # seconds
        self.accumulator_ms = 0.0
        self.last_time: float | None = None
        self.running = False

    def start(self) -> None:
        self.reset_timing()
        self.running = True

    def stop(self) -> None:
        self.running = False
        logger.debug("Game loop stopped")

    def reset_timing(self) -> None:
        """Forget elapsed time; called whenever a fresh game begins."""
        self.accumulator_ms = 0.0
        self.last_time = None

    def frame(self, now: float | None = None) -> bool:
        """Run one frame. Returns whether a logical tick happened."""
        if not self.running:
            return False

        if now is None:
            now = self.clock()
        delta_ms = 0.0 if self.last_time is None else max(0.0, (now - self.last_time) * 1000.0)
        self.last_time = now

        ticked = False
        if self.game.status is GameStatus.PLAYING:
            self.accumulator_ms += delta_ms
            if self.accumulator_ms >= self.game.tick_interval_ms:
                self.game.tick()
                self.accumulator_ms = 0.0
                ticked = True

        self.render(self.game.snapshot())
        return ticked
