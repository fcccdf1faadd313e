import ast

import numpy as np

from src.mcts.config import SearchConfig
from src.mcts.engine import MCTS
from src.mcts.game_state import AI_PLAYER, EMPTY, HUMAN_PLAYER, empty_board, is_terminal, winner
from src.mcts.play import build_parser, choose_move, main, play_game, self_play
from src.mcts.visualize import plot_root_visits, root_visit_grid


def parse_printed_board(text):
    return [[int(v) for v in line.split()] for line in text.strip().splitlines()]


def test_main_prints_board_after_ai_move(capsys):
    assert main(["--iterations", "300", "--seed", "1"]) == 0
    rows = parse_printed_board(capsys.readouterr().out)
    assert len(rows) == 3 and all(len(r) == 3 for r in rows)
    cells = [v for r in rows for v in r]
    assert cells.count(AI_PLAYER) == 1
    assert cells.count(EMPTY) == 8


def test_main_human_first_and_larger_board(capsys):
    assert main(["--size", "4", "--first", "human", "-n", "200", "--seed", "2"]) == 0
    cells = [v for r in parse_printed_board(capsys.readouterr().out) for v in r]
    assert len(cells) == 16
    assert cells.count(HUMAN_PLAYER) == 1


def test_main_writes_heat_map(tmp_path, capsys):
    path = tmp_path / "visits.png"
    assert main(["-n", "200", "--seed", "4", "--plot", str(path)]) == 0
    assert path.exists() and path.stat().st_size > 0


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.mode == "move"
    assert args.size == 3
    assert args.iterations == 10_000
    assert args.first == "ai"
    assert args.final_move == "uct"
    assert args.reward == "player_to_move"


def test_choose_move_returns_successor():
    move, board = choose_move(empty_board(), AI_PLAYER, SearchConfig(iterations=200, seed=8))
    r, c = move
    assert board[r][c] == AI_PLAYER
    assert sum(v != EMPTY for row in board for v in row) == 1


def test_self_play_reaches_terminal_board():
    board, result = self_play(size=3, config=SearchConfig(iterations=200, seed=3), verbose=False)
    assert is_terminal(board)
    assert result == winner(board)


def test_self_play_is_reproducible():
    config = SearchConfig(iterations=150, seed=21)
    assert self_play(config=config, verbose=False) == self_play(config=config, verbose=False)


def test_play_game_with_scripted_human(capsys):
    answers = iter(["nonsense"])

    def read(prompt):
        # Prompt lists the legal moves; take the first one.
        answer = next(answers, None)
        if answer is not None:
            return answer
        moves = ast.literal_eval(prompt[prompt.index("["):prompt.rindex("]") + 1])
        return "{} {}".format(*moves[0])

    result = play_game(config=SearchConfig(iterations=200, seed=6), read=read)
    out = capsys.readouterr().out
    assert "Enter two integers" in out
    assert "MCTS plays:" in out
    assert result in (HUMAN_PLAYER, AI_PLAYER, None)


def test_root_visit_grid_matches_statistics():
    mcts = MCTS.from_state(empty_board(), AI_PLAYER, config=SearchConfig(seed=13))
    mcts.search(300)
    grid = root_visit_grid(mcts.tree)
    assert grid.shape == (3, 3)
    assert grid.sum() == mcts.root.visits
    for move, visits, _ in mcts.root_statistics():
        assert grid[move] == visits


def test_root_visit_grid_of_unexpanded_tree_is_zero():
    mcts = MCTS.from_state(empty_board(), AI_PLAYER)
    assert np.array_equal(root_visit_grid(mcts.tree), np.zeros((3, 3)))


def test_plot_root_visits(tmp_path):
    mcts = MCTS.from_state(empty_board(), AI_PLAYER, config=SearchConfig(seed=13))
    mcts.search(100)
    path = tmp_path / "root.png"
    plot_root_visits(mcts.tree, str(path), title="test")
    assert path.exists()
