# Launcher for the Snake player GUI.
from __future__ import annotations

import logging
import os

try:
    from .snake_gui import run_player_gui
except ImportError:
    from snake_gui import run_player_gui


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("SNAKE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_player_gui()


if __name__ == "__main__":
    main()
