# Core Snake game state and rules, independent from GUI/scheduling code.
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterator, NamedTuple

import numpy as np

try:
    from .storage import HighScoreStore
except ImportError:
    from storage import HighScoreStore


logger = logging.getLogger(__name__)

# Bounds used when validating configuration values.
MIN_GRID_SIZE = 4
MAX_GRID_SIZE = 80
MIN_CELL_SIZE = 8
MAX_CELL_SIZE = 48
MIN_SPEED_MS = 20
MAX_SPEED_MS = 1000
MIN_INITIAL_LENGTH = 1

DIRECTION_DELTAS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}
OPPOSITES = {"up": "down", "down": "up", "left": "right", "right": "left"}


class Cell(NamedTuple):
    x: int
    y: int


class GameStatus(str, Enum):
    IDLE = "IDLE"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    GAME_OVER = "GAME_OVER"


@dataclass
class SnakeConfig:
    """Runtime settings shared between the logic layer and GUI."""
    grid_width: int = 30
    grid_height: int = 20
    cell_size: int = 20
    speed_ms: int = 150                # initial tick interval
    min_speed_ms: int = 50             # tick interval never drops below this
    speed_decrement_ms: int = 5
    speed_up_every: int = 5            # food items between speed-ups
    food_reward: int = 10
    initial_length: int = 3
    start_x: int = 10
    start_y: int = 15
    wrap_walls: bool = False
    show_grid: bool = True

    def __post_init__(self) -> None:
        for label, value in (("Grid width", self.grid_width), ("Grid height", self.grid_height)):
            if not (MIN_GRID_SIZE <= value <= MAX_GRID_SIZE):
                raise ValueError(f"{label} must be between {MIN_GRID_SIZE} and {MAX_GRID_SIZE}.")
        if not (MIN_CELL_SIZE <= self.cell_size <= MAX_CELL_SIZE):
            raise ValueError(f"Cell size must be between {MIN_CELL_SIZE} and {MAX_CELL_SIZE}.")
        if not (MIN_SPEED_MS <= self.min_speed_ms <= self.speed_ms <= MAX_SPEED_MS):
            raise ValueError(
                f"Speeds must satisfy {MIN_SPEED_MS} <= minimum <= initial <= {MAX_SPEED_MS}."
            )
        if self.speed_decrement_ms < 0:
            raise ValueError("Speed decrement must not be negative.")
        if self.speed_up_every <= 0 or self.food_reward <= 0:
            raise ValueError("Speed-up step and food reward must be positive.")
        if not (MIN_INITIAL_LENGTH <= self.initial_length <= self.grid_height):
            raise ValueError(
                f"Initial length must be between {MIN_INITIAL_LENGTH} and the grid height."
            )


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the simulation handed to the presentation layer."""
    snake_cells: tuple[Cell, ...]
    food: Cell | None
    status: GameStatus
    score: int
    high_score: int
    tick_interval_ms: int
    direction: str
    won: bool = False


class Grid:
    """Discrete W x H coordinate space with bounds and wrap semantics."""
    def __init__(self, width: int, height: int, rng: np.random.Generator | None = None) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Grid dimensions must be positive.")
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else np.random.default_rng()

    @property
    def size(self) -> int:
        return self.width * self.height

    def in_bounds(self, cell: tuple[int, int]) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def random_cell(self) -> Cell:
        """Uniformly pick any cell on the board."""
        return Cell(int(self.rng.integers(self.width)), int(self.rng.integers(self.height)))

    def wrap(self, cell: tuple[int, int]) -> Cell:
        x, y = cell
        return Cell(x % self.width, y % self.height)

    def translate(self, cell: tuple[int, int], direction: str) -> Cell:
        """Translate a cell by one tile in the given direction."""
        dx, dy = DIRECTION_DELTAS[direction]
        return Cell(cell[0] + dx, cell[1] + dy)


class Snake:
    """Ordered body segments, head at index 0."""
    def __init__(self, cells: list[tuple[int, int]]) -> None:
        if not cells:
            raise ValueError("Snake needs at least one segment.")
        self.body: deque[Cell] = deque(Cell(*c) for c in cells)
        self.body_set: set[Cell] = set(self.body)        # O(1) occupancy lookup
        if len(self.body_set) != len(self.body):
            raise ValueError("Snake segments must be distinct.")

    @classmethod
    def vertical(cls, head: tuple[int, int], length: int) -> Snake:
        """Head on top, body extending downward (so the snake faces up)."""
        x, y = head
        return cls([(x, y + i) for i in range(length)])

    def __len__(self) -> int:
        return len(self.body)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.body)

    def head(self) -> Cell:
        return self.body[0]

    def tail(self) -> Cell:
        return self.body[-1]

    def occupies(self, cell: tuple[int, int]) -> bool:
        return cell in self.body_set

    def advance(self, new_head: tuple[int, int], grows: bool) -> None:
        """Prepend the new head and drop the tail unless growing."""
        new_head = Cell(*new_head)
        if grows:
            self.body.appendleft(new_head)
            self.body_set.add(new_head)
            return

        old_tail = self.body.pop()
        self.body_set.discard(old_tail)
        self.body.appendleft(new_head)
        self.body_set.add(new_head)


class FoodSpawner:
    """Chooses free cells for food by rejection sampling with a bounded retry."""
    def __init__(self, grid: Grid, max_attempts: int | None = None) -> None:
        self.grid = grid
        self.max_attempts = max_attempts if max_attempts is not None else 4 * grid.size

    def spawn(self, snake: Snake) -> Cell | None:
        """Return an unoccupied cell, or None when the snake fills the board."""
        for _ in range(self.max_attempts):
            cell = self.grid.random_cell()
            if not snake.occupies(cell):
                return cell

        free = self.free_cells(snake)
        logger.debug("Food sampling exhausted after %d attempts; %d free cells left",
                     self.max_attempts, len(free))
        if len(free) == 0:
            return None
        x, y = free[int(self.grid.rng.integers(len(free)))]
        return Cell(int(x), int(y))

    def free_cells(self, snake: Snake) -> np.ndarray:
        """(N, 2) array of x, y pairs not covered by the snake."""
        occupied = np.zeros((self.grid.height, self.grid.width), dtype=bool)
        for x, y in snake:
            occupied[y, x] = True
        rows, cols = np.nonzero(~occupied)
        return np.column_stack((cols, rows))


class SnakeGame:
    """Pure game state + rules (no Tkinter/UI code)."""
    def __init__(
        self,
        config: SnakeConfig,
        store: HighScoreStore | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.grid = Grid(config.grid_width, config.grid_height, rng)
        self.spawner = FoodSpawner(self.grid)

        stored = store.get_high_score() if store is not None else None
        self.high_score = stored if stored is not None else 0
        self._new_board()
        self.status = GameStatus.IDLE

    def _start_head(self) -> Cell:
        """Configured start cell, or the board center if the snake would not fit."""
        cfg = self.config
        head = Cell(cfg.start_x, cfg.start_y)
        tail = Cell(cfg.start_x, cfg.start_y + cfg.initial_length - 1)
        if self.grid.in_bounds(head) and self.grid.in_bounds(tail):
            return head
        # Fallback for small boards.
        return Cell(cfg.grid_width // 2, max(0, (cfg.grid_height - cfg.initial_length) // 2))

    def _new_board(self) -> None:
        """Initialize snake, food, score and speed to their starting values."""
        self.snake = Snake.vertical(self._start_head(), self.config.initial_length)
        self.direction = "up"
        self.pending_direction = "up"                    # queued from input; applied next tick
        self.score = 0
        self.tick_interval_ms = self.config.speed_ms
        self.won = False
        self.beat_high_score = False
        self.food = self.spawner.spawn(self.snake)

    def start(self) -> bool:
        """IDLE -> PLAYING with a fresh board."""
        if self.status is not GameStatus.IDLE:
            return False
        self._new_board()
        self.status = GameStatus.PLAYING
        logger.info("Game started (high score %d)", self.high_score)
        return True

    def restart(self) -> bool:
        """GAME_OVER -> PLAYING with a fresh board."""
        if self.status is not GameStatus.GAME_OVER:
            return False
        self._new_board()
        self.status = GameStatus.PLAYING
        logger.info("Game restarted (high score %d)", self.high_score)
        return True

    def reset(self) -> None:
        """Return to a fresh IDLE board from any state."""
        self._new_board()
        self.status = GameStatus.IDLE

    def toggle_pause(self) -> bool:
        """Pause/resume; ignored outside PLAYING and PAUSED."""
        if self.status is GameStatus.PLAYING:
            self.status = GameStatus.PAUSED
        elif self.status is GameStatus.PAUSED:
            self.status = GameStatus.PLAYING
        else:
            return False
        return True

    def request_direction(self, new_direction: str) -> bool:
        """Queue an input direction; reject instant 180-degree turns."""
        if self.status is not GameStatus.PLAYING:
            return False
        if new_direction not in OPPOSITES:
            return False
        if OPPOSITES[new_direction] == self.direction:
            return False
        self.pending_direction = new_direction
        return True

    def tick(self) -> bool:
        """Advance one step. Returns False if nothing moved or the game ended this tick."""
        if self.status is not GameStatus.PLAYING:
            return False

        # Re-validate: a stale pending reversal is never applied.
        if OPPOSITES.get(self.pending_direction) != self.direction:
            self.direction = self.pending_direction
        candidate = self.grid.translate(self.snake.head(), self.direction)

        if self.config.wrap_walls:
            candidate = self.grid.wrap(candidate)
        elif not self.grid.in_bounds(candidate):
            self._game_over("wall")
            return False

        grows = candidate == self.food

        # Moving into current tail is allowed only if not growing
        # (because tail moves away in the same tick).
        if self.snake.occupies(candidate) and not (not grows and candidate == self.snake.tail()):
            self._game_over("self")
            return False

        self.snake.advance(candidate, grows)
        if grows:
            self._eat()
        return self.status is GameStatus.PLAYING

    def _eat(self) -> None:
        cfg = self.config
        self.score += cfg.food_reward
        if self.score > self.high_score:
            self.high_score = self.score
            self.beat_high_score = True
            if self.store is not None:
                self.store.set_high_score(self.high_score)

        if (self.score // cfg.food_reward) % cfg.speed_up_every == 0:
            new_interval = max(cfg.min_speed_ms, self.tick_interval_ms - cfg.speed_decrement_ms)
            if new_interval != self.tick_interval_ms:
                logger.debug("Speed up: %d ms -> %d ms", self.tick_interval_ms, new_interval)
            self.tick_interval_ms = new_interval

        self.food = self.spawner.spawn(self.snake)
        if self.food is None:
            self.won = True
            self._game_over("board full")

    def _game_over(self, reason: str) -> None:
        self.status = GameStatus.GAME_OVER
        logger.info("Game over (%s): score %d, length %d", reason, self.score, len(self.snake))
        if self.beat_high_score:
            logger.info("New high score: %d", self.high_score)

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            snake_cells=tuple(self.snake),
            food=self.food,
            status=self.status,
            score=self.score,
            high_score=self.high_score,
            tick_interval_ms=self.tick_interval_ms,
            direction=self.direction,
            won=self.won,
        )
