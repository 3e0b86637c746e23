# Tkinter presentation layer: draws game snapshots and forwards keyboard input.
from __future__ import annotations

import logging
import tkinter as tk
from tkinter import messagebox

# Support both package imports and running this file directly.
try:
    from .game_logic import (
        MAX_CELL_SIZE,
        MAX_SPEED_MS,
        MIN_CELL_SIZE,
        GameSnapshot,
        GameStatus,
        SnakeConfig,
        SnakeGame,
    )
    from .game_loop import FRAME_MS, GameLoop
    from .storage import HighScoreStore, JsonHighScoreStore
except ImportError:
    from game_logic import (
        MAX_CELL_SIZE,
        MAX_SPEED_MS,
        MIN_CELL_SIZE,
        GameSnapshot,
        GameStatus,
        SnakeConfig,
        SnakeGame,
    )
    from game_loop import FRAME_MS, GameLoop
    from storage import HighScoreStore, JsonHighScoreStore


logger = logging.getLogger(__name__)

STATUS_LABELS = {
    GameStatus.IDLE: "Ready",
    GameStatus.PLAYING: "Playing",
    GameStatus.PAUSED: "Paused",
    GameStatus.GAME_OVER: "Game Over",
}


class SnakeApp:
    """Tkinter presentation layer for SnakeGame."""
    BG = "#020617"
    BOARD_BG = "#0f172a"
    SIDEBAR_BG = "#0b1220"
    GRID_COLOR = "#1e293b"
    SNAKE_HEAD = "#10b981"
    SNAKE_BODY = "#34d399"
    FOOD_COLOR = "#ef4444"
    TEXT_PRIMARY = "#e6eef7"
    TEXT_MUTED = "#94a3b8"
    ACCENT = "#10b981"
    DANGER = "#ef4444"

    GRID_PRESETS = {
        "Small (20x15)": (20, 15),
        "Classic (30x20)": (30, 20),
        "Large (40x30)": (40, 30),
    }

    def __init__(self, root: tk.Tk, store: HighScoreStore | None = None) -> None:
        self.root = root
        self.root.title("Neon Snake")
        self.root.configure(bg=self.BG)

        self.store = store if store is not None else JsonHighScoreStore()
        self.config = SnakeConfig()
        self.game = SnakeGame(self.config, store=self.store)
        self.loop = GameLoop(self.game, self.draw)
        self.after_id: str | None = None  # Tkinter timer id for the frame callback

        self._build_layout()
        self._bind_keys()
        self._apply_canvas_size()
        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self._start_loop()

    def _build_layout(self) -> None:
        """Create game canvas + right sidebar panels."""
        container = tk.Frame(self.root, bg=self.BG)
        container.pack(fill="both", expand=True, padx=16, pady=16)

        self.canvas = tk.Canvas(container, bg=self.BOARD_BG, highlightthickness=0, bd=0)
        self.canvas.pack(side="left", padx=(0, 16))

        self.sidebar = tk.Frame(container, bg=self.SIDEBAR_BG, width=260)
        self.sidebar.pack(side="right", fill="y")
        self.sidebar.pack_propagate(False)

        tk.Label(
            self.sidebar,
            text="NEON SNAKE",
            fg=self.ACCENT,
            bg=self.SIDEBAR_BG,
            font=("Helvetica", 18, "bold"),
        ).pack(anchor="w", padx=16, pady=(16, 12))

        self._build_status()
        self._build_controls()
        self._build_buttons()

    def _build_status(self) -> None:
        """HUD section with live score/best/speed/state labels."""
        frame = self._section("Status")
        self.score_var = tk.StringVar()
        self.best_var = tk.StringVar()
        self.speed_var = tk.StringVar()
        self.state_var = tk.StringVar()

        for var in (self.score_var, self.best_var, self.speed_var, self.state_var):
            tk.Label(
                frame,
                textvariable=var,
                fg=self.TEXT_PRIMARY,
                bg=self.SIDEBAR_BG,
                font=("Helvetica", 11),
                anchor="w",
            ).pack(fill="x", padx=10, pady=3)

    def _build_controls(self) -> None:
        """Settings that rebuild the game when applied."""
        frame = self._section("Settings")
        self.grid_choice = tk.StringVar(value="Classic (30x20)")
        self.cell_size_var = tk.StringVar(value=str(self.config.cell_size))
        self.start_speed_var = tk.StringVar(value=str(self.config.speed_ms))
        self.wrap_var = tk.BooleanVar(value=self.config.wrap_walls)

        row = tk.Frame(frame, bg=self.SIDEBAR_BG)
        row.pack(fill="x", padx=10, pady=3)
        tk.Label(row, text="Grid", fg=self.TEXT_PRIMARY, bg=self.SIDEBAR_BG).pack(side="left")
        tk.OptionMenu(row, self.grid_choice, *self.GRID_PRESETS).pack(side="right")

        for label, var in (("Cell size", self.cell_size_var), ("Start speed (ms)", self.start_speed_var)):
            row = tk.Frame(frame, bg=self.SIDEBAR_BG)
            row.pack(fill="x", padx=10, pady=3)
            tk.Label(row, text=label, fg=self.TEXT_PRIMARY, bg=self.SIDEBAR_BG).pack(side="left")
            tk.Spinbox(row, from_=0, to=999, textvariable=var, width=6, justify="center").pack(side="right")

        tk.Checkbutton(
            frame,
            text="Wrap around walls",
            variable=self.wrap_var,
            fg=self.TEXT_PRIMARY,
            bg=self.SIDEBAR_BG,
            selectcolor=self.BOARD_BG,
            activebackground=self.SIDEBAR_BG,
        ).pack(anchor="w", padx=10, pady=3)

    def _section(self, title: str) -> tk.LabelFrame:
        frame = tk.LabelFrame(
            self.sidebar,
            text=title,
            fg=self.TEXT_PRIMARY,
            bg=self.SIDEBAR_BG,
            bd=1,
            font=("Helvetica", 10, "bold"),
            labelanchor="n",
        )
        frame.pack(fill="x", padx=16, pady=(0, 12))
        return frame

    def _build_buttons(self) -> None:
        """Action buttons for start/pause/restart/reset/apply."""
        frame = tk.Frame(self.sidebar, bg=self.SIDEBAR_BG)
        frame.pack(fill="x", padx=16, pady=(0, 10))

        for text, command in (
            ("Start", self.start_game),
            ("Pause / Resume", self.toggle_pause),
            ("Restart", self.restart_game),
            ("Reset", self.reset_game),
            ("Apply Settings", self.apply_settings),
        ):
            self._button(frame, text, command).pack(fill="x", pady=3)

        tk.Label(
            self.sidebar,
            text="Move: Arrow keys / WASD\nSpace: pause   Enter: start",
            fg=self.TEXT_MUTED,
            bg=self.SIDEBAR_BG,
            justify="left",
            font=("Helvetica", 10),
        ).pack(anchor="w", padx=16, pady=(4, 10))

    def _button(self, parent: tk.Widget, text: str, command) -> tk.Button:
        return tk.Button(
            parent,
            text=text,
            command=command,
            fg="#04130d",
            bg=self.ACCENT,
            activebackground="#34d399",
            bd=0,
            relief="flat",
            font=("Helvetica", 11, "bold"),
            pady=6,
            cursor="hand2",
        )

    def _bind_keys(self) -> None:
        """Bind movement controls, spacebar pause and Enter to start."""
        bindings = {
            "<Up>": "up", "<Down>": "down", "<Left>": "left", "<Right>": "right",
            "w": "up", "s": "down", "a": "left", "d": "right",
            "W": "up", "S": "down", "A": "left", "D": "right",
        }
        for key, direction in bindings.items():
            self.root.bind(key, lambda _e, d=direction: self.game.request_direction(d))
        self.root.bind("<space>", lambda _e: self.toggle_pause())
        self.root.bind("<Return>", lambda _e: self.start_or_restart())

    def _parse_int(self, raw: str, low: int, high: int, label: str) -> int:
        """Parse and range-check integer settings with a clear error message."""
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"{label} must be an integer.")
        if not (low <= value <= high):
            raise ValueError(f"{label} must be between {low} and {high}.")
        return value

    def apply_settings(self) -> None:
        """Validate sidebar values, then rebuild the game with new config."""
        try:
            width, height = self.GRID_PRESETS[self.grid_choice.get()]
            cell_size = self._parse_int(self.cell_size_var.get(), MIN_CELL_SIZE, MAX_CELL_SIZE, "Cell size")
            speed_ms = self._parse_int(
                self.start_speed_var.get(), self.config.min_speed_ms, MAX_SPEED_MS, "Start speed"
            )
            config = SnakeConfig(
                grid_width=width,
                grid_height=height,
                cell_size=cell_size,
                speed_ms=speed_ms,
                wrap_walls=self.wrap_var.get(),
            )
        except (ValueError, KeyError) as exc:
            messagebox.showerror("Invalid Setting", str(exc))
            return

        self.config = config
        self.game = SnakeGame(self.config, store=self.store)
        self.loop.game = self.game
        self.loop.reset_timing()
        self._apply_canvas_size()
        logger.info("Applied settings: %s", config)

    def _apply_canvas_size(self) -> None:
        """Resize board canvas to match current grid + tile size."""
        self.canvas.configure(
            width=self.config.grid_width * self.config.cell_size,
            height=self.config.grid_height * self.config.cell_size,
        )

    def _start_loop(self) -> None:
        self.loop.start()
        self._schedule_frame()

    def _schedule_frame(self) -> None:
        self.loop.frame()
        if self.loop.running:
            self.after_id = self.root.after(FRAME_MS, self._schedule_frame)

    def _cancel_loop(self) -> None:
        """Cancel scheduled frame callback if one exists."""
        self.loop.stop()
        if self.after_id is not None:
            self.root.after_cancel(self.after_id)
            self.after_id = None

    def start_game(self) -> None:
        if self.game.start():
            self.loop.reset_timing()

    def restart_game(self) -> None:
        if self.game.restart():
            self.loop.reset_timing()

    def start_or_restart(self) -> None:
        if self.game.status is GameStatus.IDLE:
            self.start_game()
        else:
            self.restart_game()

    def toggle_pause(self) -> None:
        self.game.toggle_pause()

    def reset_game(self) -> None:
        self.game.reset()
        self.loop.reset_timing()

    def close(self) -> None:
        self._cancel_loop()
        self.root.destroy()

    def draw(self, snap: GameSnapshot) -> None:
        """Render board, food, snake, HUD labels, and status overlay."""
        self.canvas.delete("all")
        cell = self.config.cell_size
        width = self.config.grid_width * cell
        height = self.config.grid_height * cell

        if self.config.show_grid:
            for x in range(0, width + 1, cell):
                self.canvas.create_line(x, 0, x, height, fill=self.GRID_COLOR)
            for y in range(0, height + 1, cell):
                self.canvas.create_line(0, y, width, y, fill=self.GRID_COLOR)

        if snap.food is not None:
            fx, fy = snap.food
            self.canvas.create_oval(
                fx * cell + 2, fy * cell + 2, (fx + 1) * cell - 2, (fy + 1) * cell - 2,
                fill=self.FOOD_COLOR, outline="",
            )

        for idx, (x, y) in enumerate(snap.snake_cells):
            color = self.SNAKE_HEAD if idx == 0 else self.SNAKE_BODY
            self.canvas.create_rectangle(
                x * cell + 1, y * cell + 1, (x + 1) * cell - 1, (y + 1) * cell - 1,
                fill=color, outline="",
            )

        self.score_var.set(f"Score: {snap.score}")
        self.best_var.set(f"Best: {snap.high_score}")
        self.speed_var.set(f"Speed: {snap.tick_interval_ms} ms")
        self.state_var.set(f"State: {STATUS_LABELS[snap.status]}")

        if snap.status is not GameStatus.PLAYING:
            self._draw_overlay(snap, width, height)

    def _draw_overlay(self, snap: GameSnapshot, width: int, height: int) -> None:
        self.canvas.create_rectangle(0, 0, width, height, fill="#000000", stipple="gray50", outline="")
        if snap.status is GameStatus.IDLE:
            title, subtitle, color = "NEON SNAKE", "Arrow Keys or WASD to move - Enter to start", self.ACCENT
        elif snap.status is GameStatus.PAUSED:
            title, subtitle, color = "PAUSED", "Press Space to resume", self.TEXT_PRIMARY
        elif snap.won:
            title, subtitle, color = "YOU WIN", f"Final Score: {snap.score} - Enter to play again", self.ACCENT
        else:
            title, subtitle, color = "GAME OVER", f"Final Score: {snap.score} - Enter to try again", self.DANGER

        self.canvas.create_text(
            width // 2, height // 2 - 14, text=title, fill=color, font=("Helvetica", 26, "bold")
        )
        self.canvas.create_text(
            width // 2, height // 2 + 20, text=subtitle, fill=self.TEXT_MUTED, font=("Helvetica", 12)
        )


def run_player_gui() -> None:
    """Launch the Snake player interface."""
    root = tk.Tk()
    SnakeApp(root)
    root.mainloop()


if __name__ == "__main__":
    run_player_gui()
