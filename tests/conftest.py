import matplotlib

matplotlib.use("Agg")

import pytest

from src.mcts.config import SearchConfig
from src.mcts.engine import MCTS
from src.mcts.game_state import AI_PLAYER, TicTacToe, empty_board
from src.mcts.tree import Tree


@pytest.fixture
def game():
    return TicTacToe()


@pytest.fixture
def empty_tree(game):
    return Tree(game, empty_board(3), AI_PLAYER)


@pytest.fixture
def seeded_mcts():
    return MCTS.from_state(empty_board(3), AI_PLAYER, config=SearchConfig(iterations=300, seed=1234))
