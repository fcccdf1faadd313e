from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from src.mcts.errors import InvalidMoveError


EMPTY = 0
HUMAN_PLAYER = 1
AI_PLAYER = -1

Board = Tuple[Tuple[int, ...], ...]
Move = Tuple[int, int]  # (row, col)


def empty_board(size: int = 3) -> Board:
    if size < 1:
        raise ValueError(f"board size must be positive, got {size}")
    return tuple((EMPTY,) * size for _ in range(size))


def opponent(player: int) -> int:
    return -player


def legal_moves(board: Board) -> List[Move]:
    """Empty cells in row-major order."""
    return [(r, c) for r, row in enumerate(board) for c, v in enumerate(row) if v == EMPTY]


def _line_owner(cells: List[int]) -> Optional[int]:
    first = cells[0]
    if first != EMPTY and all(v == first for v in cells):
        return first
    return None


def winner(board: Board) -> Optional[int]:
    """
    Return the mark owning a complete row, column or diagonal, None otherwise.

    Lines are checked as row i then column i for each i, then the main
    diagonal, then the anti-diagonal. The first complete line found wins.
    """
    n = len(board)
    for i in range(n):
        owner = _line_owner([board[i][j] for j in range(n)])
        if owner is not None:
            return owner
        owner = _line_owner([board[j][i] for j in range(n)])
        if owner is not None:
            return owner

    owner = _line_owner([board[i][i] for i in range(n)])
    if owner is not None:
        return owner
    return _line_owner([board[i][n - 1 - i] for i in range(n)])


def is_terminal(board: Board) -> bool:
    return winner(board) is not None or not legal_moves(board)


def apply_move(board: Board, move: Move, player: int) -> Board:
    r, c = move
    n = len(board)
    if not (0 <= r < n and 0 <= c < n):
        raise InvalidMoveError(f"move {move} is off a {n}x{n} board")
    if board[r][c] != EMPTY:
        raise InvalidMoveError(f"cell {move} is already taken by {board[r][c]}")

    rows = [tuple(row) for row in board]
    row = list(rows[r])
    row[c] = player
    rows[r] = tuple(row)
    return tuple(rows)


def format_board(board: Board) -> str:
    return "\n".join(" ".join(str(v) for v in row) for row in board)


@runtime_checkable
class Game(Protocol):
    def legal_moves(self, state) -> List:
        ...

    def winner(self, state) -> Optional[int]:
        ...

    def is_terminal(self, state) -> bool:
        ...

    def apply(self, state, move, player: int):
        ...

    def opponent(self, player: int) -> int:
        ...


@dataclass(frozen=True)
class TicTacToe:
    size: int = 3

    def __post_init__(self):
        if self.size < 1:
            raise ValueError(f"board size must be positive, got {self.size}")

    def initial_state(self) -> Board:
        return empty_board(self.size)

    def legal_moves(self, state: Board) -> List[Move]:
        return legal_moves(state)

    def winner(self, state: Board) -> Optional[int]:
        return winner(state)

    def is_terminal(self, state: Board) -> bool:
        return is_terminal(state)

    def apply(self, state: Board, move: Move, player: int) -> Board:
        return apply_move(state, move, player)

    def opponent(self, player: int) -> int:
        return opponent(player)
