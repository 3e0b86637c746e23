import os
import sys

import numpy as np
import pytest

# Add repo root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from game_logic import Cell, SnakeConfig, SnakeGame
from storage import MemoryHighScoreStore


@pytest.fixture
def store():
    return MemoryHighScoreStore()


@pytest.fixture
def game(store):
    """Default 30x20 game, seeded, already PLAYING with food parked out of the way."""
    g = SnakeGame(SnakeConfig(), store=store, rng=np.random.default_rng(1234))
    g.start()
    g.food = Cell(0, 0)
    return g
