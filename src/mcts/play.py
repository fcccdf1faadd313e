import argparse
import logging
from typing import Callable, List, Optional, Tuple

from src.mcts.config import SearchConfig
from src.mcts.engine import MCTS
from src.mcts.game_state import (
    AI_PLAYER,
    HUMAN_PLAYER,
    Board,
    Move,
    TicTacToe,
    format_board,
    legal_moves,
    opponent,
    winner,
)
from src.mcts.visualize import plot_root_visits

logger = logging.getLogger(__name__)

PLAYERS = {"ai": AI_PLAYER, "human": HUMAN_PLAYER}


def print_board(board: Board):
    print(format_board(board))


def choose_move(board: Board, player: int, config: SearchConfig,
                plot_path: Optional[str] = None) -> Tuple[Move, Board]:
    """Search from `board` with `player` to move; return the move and the resulting board."""
    mcts = MCTS.from_state(board, player, game=TicTacToe(size=len(board)), config=config)
    best = mcts.search()
    if plot_path:
        plot_root_visits(mcts.tree, plot_path)
        logger.info("Saved root visit heat map to %s", plot_path)
    return best.move, best.state


def self_play(size: int = 3, first: int = AI_PLAYER,
              config: Optional[SearchConfig] = None, verbose: bool = True) -> Tuple[Board, Optional[int]]:
    """Both sides play with MCTS until the game ends. Returns the final board and the winner."""
    game = TicTacToe(size=size)
    config = config if config is not None else SearchConfig()
    board = game.initial_state()
    player = first
    # One generator for the whole game so a seeded run is reproducible.
    rng = config.make_rng()

    while not game.is_terminal(board):
        mcts = MCTS.from_state(board, player, game=game, config=config, rng=rng)
        best = mcts.search()
        board = best.state
        if verbose:
            print(f"Player {player} plays {best.move}")
            print_board(board)
            print()
        player = opponent(player)

    return board, winner(board)


def _read_human_move(board: Board, read: Callable[[str], str]) -> Move:
    moves = legal_moves(board)
    while True:
        raw = read(f"Your move as 'row col' {moves}: ")
        try:
            r, c = (int(x) for x in raw.split())
        except ValueError:
            print("Enter two integers, e.g. '1 2'.")
            continue
        if (r, c) not in moves:
            print("Illegal move.")
            continue
        return r, c


def play_game(size: int = 3, first: int = HUMAN_PLAYER,
              config: Optional[SearchConfig] = None,
              read: Callable[[str], str] = input) -> Optional[int]:
    game = TicTacToe(size=size)
    config = config if config is not None else SearchConfig()
    board = game.initial_state()
    player = first

    while not game.is_terminal(board):
        print_board(board)
        print()
        if player == HUMAN_PLAYER:
            move = _read_human_move(board, read)
            board = game.apply(board, move, player)
        else:
            move, board = choose_move(board, player, config)
            print("MCTS plays:", move)
        player = opponent(player)

    print_board(board)
    w = winner(board)
    if w == HUMAN_PLAYER:
        print("You win")
    elif w == AI_PLAYER:
        print("MCTS wins")
    else:
        print("Draw")
    return w


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pick tic-tac-toe moves with UCT Monte Carlo Tree Search.")
    parser.add_argument("--mode", choices=("move", "selfplay", "play"), default="move",
                        help="Single AI move from an empty board, a full MCTS-vs-MCTS game, or play against MCTS.")
    parser.add_argument("--size", "-s", type=int, default=3, help="Board side length.")
    parser.add_argument("--first", choices=sorted(PLAYERS), default="ai", help="Who moves first.")
    parser.add_argument("--iterations", "-n", type=int, default=10_000, help="Search iterations per move.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the search's random generator.")
    parser.add_argument("--max-nodes", type=int, default=None, help="Upper bound on tree size.")
    parser.add_argument("--final-move", choices=("uct", "max_visits"), default="uct",
                        help="Rule used to pick the move once the budget is spent.")
    parser.add_argument("--reward", choices=("player_to_move", "player_who_moved"), default="player_to_move",
                        help="Player a node credits a won rollout to.")
    parser.add_argument("--plot", default=None, help="Save a heat map of root visits to this path (move mode).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable INFO logging.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SearchConfig(
        iterations=args.iterations,
        seed=args.seed,
        max_nodes=args.max_nodes,
        final_move=args.final_move,
        reward=args.reward,
    )
    first = PLAYERS[args.first]

    if args.mode == "selfplay":
        _, w = self_play(size=args.size, first=first, config=config)
        print("Draw" if w is None else f"Player {w} wins")
    elif args.mode == "play":
        play_game(size=args.size, first=first, config=config)
    else:
        board = TicTacToe(size=args.size).initial_state()
        _, board = choose_move(board, first, config, plot_path=args.plot)
        print_board(board)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
