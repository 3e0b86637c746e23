"""
Tests for the SnakeGame rules engine: state machine, input buffering,
per-tick movement, collisions, scoring and speed-up.
"""

import dataclasses

import numpy as np
import pytest

from game_logic import Cell, GameSnapshot, GameStatus, Snake, SnakeConfig, SnakeGame
from storage import MemoryHighScoreStore


def feed(game, times=1):
    """Place food where the next tick will move the head and tick onto it."""
    for _ in range(times):
        game.food = game.grid.translate(game.snake.head(), game.pending_direction)
        assert game.tick()


class TestStateMachine:
    """Status transitions."""

    def test_new_game_is_idle_with_board(self):
        """A fresh game is IDLE but already has a snake and food to draw."""
        g = SnakeGame(SnakeConfig(), rng=np.random.default_rng(0))
        assert g.status is GameStatus.IDLE
        assert list(g.snake) == [(10, 15), (10, 16), (10, 17)]
        assert g.food is not None and not g.snake.occupies(g.food)
        assert g.direction == "up"

    def test_start_from_idle(self):
        """start moves IDLE to PLAYING."""
        g = SnakeGame(SnakeConfig())
        assert g.start()
        assert g.status is GameStatus.PLAYING
        assert not g.start()

    def test_tick_is_noop_outside_playing(self):
        """Ticks in IDLE, PAUSED and GAME_OVER change nothing."""
        g = SnakeGame(SnakeConfig())
        before = g.snapshot()
        assert not g.tick()
        assert g.snapshot() == before

        g.start()
        g.toggle_pause()
        before = g.snapshot()
        assert not g.tick()
        assert g.snapshot() == before

    def test_pause_toggle(self, game):
        """PLAYING <-> PAUSED."""
        assert game.toggle_pause()
        assert game.status is GameStatus.PAUSED
        assert game.toggle_pause()
        assert game.status is GameStatus.PLAYING

    def test_pause_ignored_when_idle_or_over(self):
        """toggle_pause is a no-op from IDLE and GAME_OVER."""
        g = SnakeGame(SnakeConfig())
        assert not g.toggle_pause()
        assert g.status is GameStatus.IDLE

        g.start()
        g.status = GameStatus.GAME_OVER
        assert not g.toggle_pause()
        assert g.status is GameStatus.GAME_OVER

    def test_double_pause_is_identity(self, game):
        """Two toggles from PLAYING give back an identical state."""
        game.tick()
        game.request_direction("left")
        before = game.snapshot()
        game.toggle_pause()
        game.toggle_pause()
        assert game.snapshot() == before
        assert game.pending_direction == "left"

    def test_restart_only_from_game_over(self, game):
        """restart requires GAME_OVER and resets the board."""
        assert not game.restart()
        feed(game, 2)
        game.status = GameStatus.GAME_OVER
        assert game.restart()
        assert game.status is GameStatus.PLAYING
        assert game.score == 0
        assert len(game.snake) == 3
        assert game.tick_interval_ms == 150
        assert game.direction == "up"

    def test_reset_returns_to_idle(self, game):
        """reset gives a fresh IDLE board from any state."""
        feed(game)
        game.reset()
        assert game.status is GameStatus.IDLE
        assert game.score == 0
        assert len(game.snake) == 3

    def test_high_score_survives_restart(self, game):
        """High score is kept across restarts."""
        feed(game, 3)
        game.status = GameStatus.GAME_OVER
        game.restart()
        assert game.score == 0
        assert game.high_score == 30


class TestInput:
    """Direction buffering."""

    def test_opposite_request_dropped(self, game):
        """Requesting DOWN while moving UP leaves the pending slot alone."""
        assert not game.request_direction("down")
        assert game.pending_direction == "up"

    def test_last_write_wins(self, game):
        """Only the latest valid request is kept."""
        assert game.request_direction("left")
        assert game.request_direction("right")
        assert game.pending_direction == "right"

    def test_opposite_checked_against_current_not_pending(self, game):
        """LEFT then DOWN in one tick: DOWN is still the opposite of current UP."""
        game.request_direction("left")
        assert not game.request_direction("down")
        assert game.pending_direction == "left"

    def test_unknown_direction_ignored(self, game):
        """Garbage input is ignored."""
        assert not game.request_direction("sideways")
        assert game.pending_direction == "up"

    def test_input_ignored_when_not_playing(self):
        """Input outside PLAYING is dropped."""
        g = SnakeGame(SnakeConfig())
        assert not g.request_direction("left")
        g.start()
        g.toggle_pause()
        assert not g.request_direction("left")
        assert g.pending_direction == "up"

    def test_pending_persists_until_consumed(self, game):
        """The pending slot is applied on the next tick."""
        game.request_direction("left")
        game.tick()
        assert game.direction == "left"
        assert game.snake.head() == (9, 15)

    def test_stale_reversal_revalidated_at_tick(self, game):
        """A reversal forced into the slot is not applied by tick."""
        game.pending_direction = "down"
        game.tick()
        assert game.direction == "up"
        assert game.snake.head() == (10, 14)


class TestMovement:
    """Per-tick movement and collisions."""

    def test_straight_ticks_until_wall(self, game):
        """Moving UP from row 15 survives 15 ticks and dies on the 16th."""
        game.tick()
        assert list(game.snake) == [(10, 14), (10, 15), (10, 16)]
        for _ in range(14):
            assert game.tick()
        assert game.snake.head() == (10, 0)

        before = list(game.snake)
        assert not game.tick()
        assert game.status is GameStatus.GAME_OVER
        assert list(game.snake) == before

    def test_length_constant_without_food(self, game):
        """Length is unchanged when not eating."""
        for _ in range(5):
            game.tick()
            assert len(game.snake) == 3

    def test_self_collision(self, store):
        """Turning into the body ends the game."""
        g = SnakeGame(SnakeConfig(), store=store, rng=np.random.default_rng(0))
        g.start()
        g.snake = Snake([(5, 5), (5, 6), (6, 6), (6, 5), (6, 4)])
        g.food = Cell(0, 0)
        g.request_direction("right")
        assert not g.tick()
        assert g.status is GameStatus.GAME_OVER

    def test_moving_into_vacating_tail_is_allowed(self, store):
        """Chasing the tail around a 2x2 loop is legal."""
        g = SnakeGame(SnakeConfig(), store=store, rng=np.random.default_rng(0))
        g.start()
        g.snake = Snake([(5, 5), (5, 6), (6, 6), (6, 5)])
        g.food = Cell(0, 0)
        g.request_direction("right")
        assert g.tick()
        assert g.snake.head() == (6, 5)
        assert len(g.snake) == 4

    def test_no_overlap_over_many_ticks(self, game):
        """Segments stay distinct and adjacent during play."""
        for step in range(60):
            if step % 8 == 0:
                game.request_direction("left" if step % 16 == 0 else "right")
            elif step % 8 == 4:
                game.request_direction("up" if game.snake.head().y > 5 else "down")
            if not game.tick():
                break
            cells = list(game.snake)
            assert len(set(cells)) == len(cells)
            for (ax, ay), (bx, by) in zip(cells, cells[1:]):
                assert abs(ax - bx) + abs(ay - by) == 1

    def test_wrap_walls(self, store):
        """With wrap enabled the snake reappears on the other side."""
        g = SnakeGame(SnakeConfig(wrap_walls=True, start_y=0), store=store, rng=np.random.default_rng(0))
        g.start()
        g.food = Cell(29, 0)
        assert g.snake.head() == (10, 0)
        assert g.tick()
        assert g.snake.head() == (10, 19)

    def test_start_falls_back_to_center_on_small_grid(self):
        """A start cell that does not fit the board is replaced by the center."""
        g = SnakeGame(SnakeConfig(grid_width=6, grid_height=6))
        assert list(g.snake) == [(3, 1), (3, 2), (3, 3)]


class TestScoring:
    """Food, score, high score and speed-up."""

    def test_eating_grows_and_scores(self, game):
        """Eating adds one segment, ten points and a new food off the snake."""
        game.food = Cell(10, 14)
        assert game.tick()
        assert len(game.snake) == 4
        assert game.score == 10
        assert game.food is not None
        assert not game.snake.occupies(game.food)

    def test_high_score_written_to_store(self, game, store):
        """A new best is pushed to persistence as it happens."""
        feed(game, 2)
        assert game.high_score == 20
        assert store.value == 20

    def test_high_score_seeded_from_store(self):
        """The stored best is loaded and only overwritten when beaten."""
        store = MemoryHighScoreStore(30)
        g = SnakeGame(SnakeConfig(), store=store, rng=np.random.default_rng(0))
        g.start()
        assert g.high_score == 30
        feed(g, 3)
        assert store.value == 30
        feed(g)
        assert g.high_score == 40
        assert store.value == 40

    def test_missing_store_value_means_zero(self):
        """Absent high score starts at 0."""
        g = SnakeGame(SnakeConfig(), store=MemoryHighScoreStore(None))
        assert g.high_score == 0

    def test_speed_up_every_fifth_food(self, game):
        """Interval drops 150 -> 145 at score 50."""
        feed(game, 4)
        assert game.tick_interval_ms == 150
        feed(game)
        assert game.score == 50
        assert game.tick_interval_ms == 145

    def test_speed_floor(self, store):
        """Interval keeps dropping every 50 points and stops at the floor."""
        g = SnakeGame(SnakeConfig(), store=store, rng=np.random.default_rng(3))
        g.start()
        intervals = []
        for _ in range(110):
            # Put a short snake back below the food each time so it never hits a wall.
            g.snake = Snake.vertical((10, 15), 3)
            g.direction = g.pending_direction = "up"
            g.food = Cell(10, 14)
            assert g.tick()
            intervals.append(g.tick_interval_ms)
        assert g.score == 1100
        assert all(a >= b for a, b in zip(intervals, intervals[1:]))
        assert intervals[99] == 50
        assert intervals[-1] == 50
        assert min(intervals) == 50

    def test_score_monotonic_within_session(self, game):
        """Score never decreases while playing."""
        last = 0
        for step in range(20):
            if step % 3 == 0:
                game.food = game.grid.translate(game.snake.head(), game.direction)
            if not game.tick():
                break
            assert game.score >= last
            last = game.score

    def test_full_board_is_a_win(self, store):
        """Eating the last free cell ends the game as a win."""
        cfg = SnakeConfig(grid_width=4, grid_height=4, initial_length=1, start_x=0, start_y=0)
        g = SnakeGame(cfg, store=store, rng=np.random.default_rng(0))
        g.start()
        # Boustrophedon body covering every cell except (0, 0).
        rows = [(x, y) for y in range(1, 4) for x in ((3, 2, 1, 0) if y % 2 else (0, 1, 2, 3))]
        body = [(1, 0), (2, 0), (3, 0)] + rows
        g.snake = Snake(body)
        g.direction = g.pending_direction = "left"
        g.food = Cell(0, 0)
        assert not g.tick()
        assert g.status is GameStatus.GAME_OVER
        assert g.won
        assert g.food is None
        assert len(g.snake) == 16


class TestSnapshot:
    """Read-only view for the presentation layer."""

    def test_snapshot_contents(self, game):
        """Snapshot mirrors the engine state."""
        snap = game.snapshot()
        assert isinstance(snap, GameSnapshot)
        assert snap.snake_cells == ((10, 15), (10, 16), (10, 17))
        assert snap.food == (0, 0)
        assert snap.status is GameStatus.PLAYING
        assert snap.score == 0
        assert snap.tick_interval_ms == 150

    def test_snapshot_is_frozen(self, game):
        """Presentation cannot write into a snapshot."""
        snap = game.snapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.score = 999

    def test_snapshot_detached_from_engine(self, game):
        """Later ticks do not change an earlier snapshot."""
        snap = game.snapshot()
        game.tick()
        assert snap.snake_cells[0] == (10, 15)
