from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from src.mcts.errors import ExpansionError
from src.mcts.game_state import Game

logger = logging.getLogger(__name__)


@dataclass
class Node:
    index: int
    state: Any
    player_to_move: int  # player who moves next at this node
    parent: Optional[int] = None  # arena index, None at the root
    move: Optional[Any] = None  # move that led here from the parent

    children: List[int] = field(default_factory=list)  # arena indices
    legal_moves: Tuple[Any, ...] = ()
    terminal: bool = False

    visits: int = 0
    wins: int = 0

    def is_fully_expanded(self) -> bool:
        return len(self.children) == len(self.legal_moves)

    def is_terminal(self) -> bool:
        return self.terminal

    @property
    def win_rate(self) -> float:
        if self.visits == 0:
            return 0.0
        return self.wins / self.visits


class Tree:
    """
    Arena of search nodes.

    Nodes are stored densely in a list and refer to each other by index, so
    the parent links used by backpropagation never form reference cycles.
    """

    def __init__(self, game: Game, initial_state: Any, player_to_move: int):
        self.game = game
        self._nodes: List[Node] = []
        self._new_node(initial_state, player_to_move, parent=None, move=None)

    def _new_node(self, state: Any, player_to_move: int, parent: Optional[int], move: Any) -> Node:
        node = Node(
            index=len(self._nodes),
            state=state,
            player_to_move=player_to_move,
            parent=parent,
            move=move,
            legal_moves=tuple(self.game.legal_moves(state)),
            terminal=self.game.is_terminal(state),
        )
        self._nodes.append(node)
        return node

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> Node:
        return self._nodes[0]

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def parent(self, node: Node) -> Optional[Node]:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def children(self, node: Node) -> List[Node]:
        return [self._nodes[i] for i in node.children]

    def path_to_root(self, node: Node) -> List[Node]:
        """Nodes from `node` up to the root, both included."""
        path = []
        current: Optional[Node] = node
        while current is not None:
            path.append(current)
            current = self.parent(current)
        return path

    def depth(self, node: Node) -> int:
        return len(self.path_to_root(node)) - 1

    def expand_all_children(self, node: Node) -> List[Node]:
        """Create one child per legal move of `node`, in enumeration order."""
        if node.children:
            raise ExpansionError(
                f"node {node.index} already has {len(node.children)} children"
            )

        next_player = self.game.opponent(node.player_to_move)
        for move in node.legal_moves:
            state = self.game.apply(node.state, move, node.player_to_move)
            child = self._new_node(state, next_player, parent=node.index, move=move)
            node.children.append(child.index)

        logger.debug("Expanded node %d into %d children", node.index, len(node.children))
        return self.children(node)

    def clear(self) -> None:
        """Release every node except the root and reset its statistics."""
        root = self.root
        root.children = []
        root.visits = 0
        root.wins = 0
        self._nodes = [root]
