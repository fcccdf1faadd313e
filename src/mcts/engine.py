"""
Monte Carlo Tree Search with UCT selection and random rollouts.

Each iteration runs four phases over the tree:

1. Selection: descend from the root with UCT until a terminal node or a node
   that still has unexpanded moves is reached.
2. Expansion: create every child of that node at once and pick one of them
   uniformly at random.
3. Simulation: play uniformly random moves from the picked node until the
   game ends.
4. Backpropagation: walk back to the root updating visit and win counters.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, List, Optional, Tuple

import numpy as np

from src.mcts.config import SearchConfig
from src.mcts.errors import EmptyTreeError, ExpansionError
from src.mcts.game_state import Game, TicTacToe
from src.mcts.tree import Node, Tree

logger = logging.getLogger(__name__)

EXPLORATION = 2.0


class MCTS:
    def __init__(self, tree: Tree, config: Optional[SearchConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.tree = tree
        self.config = config if config is not None else SearchConfig()
        self.rng = rng if rng is not None else self.config.make_rng()
        self._cap_warned = False

    @classmethod
    def from_state(cls, state: Any, player_to_move: int, game: Optional[Game] = None,
                   config: Optional[SearchConfig] = None,
                   rng: Optional[np.random.Generator] = None) -> "MCTS":
        if game is None:
            game = TicTacToe(size=len(state))
        if isinstance(game, TicTacToe):
            state = tuple(tuple(row) for row in state)
        return cls(Tree(game, state, player_to_move), config=config, rng=rng)

    @property
    def game(self) -> Game:
        return self.tree.game

    @property
    def root(self) -> Node:
        return self.tree.root

    def _choose(self, items: List):
        return items[self.rng.integers(len(items))]

    def _at_capacity(self, node: Node) -> bool:
        cap = self.config.max_nodes
        if cap is None or len(self.tree) + len(node.legal_moves) <= cap:
            return False
        if not self._cap_warned:
            logger.warning("Node cap %d reached (tree has %d nodes), simulating without expanding",
                           cap, len(self.tree))
            self._cap_warned = True
        return True

    def select(self) -> Node:
        node = self.root
        while not node.is_terminal():
            if not node.is_fully_expanded():
                if self._at_capacity(node):
                    return node
                return self.expand(node)
            node = self.best_child(node)
        return node

    def expand(self, node: Node) -> Node:
        if node.children:
            raise ExpansionError(f"node {node.index} was already expanded")
        children = self.tree.expand_all_children(node)
        return self._choose(children)

    def simulate(self, node: Node) -> Optional[int]:
        """Random playout from `node`. Returns the winner, or None for a draw."""
        game = self.game
        state = node.state
        player = node.player_to_move
        while game.winner(state) is None:
            moves = game.legal_moves(state)
            if not moves:
                return None
            state = game.apply(state, self._choose(moves), player)
            player = game.opponent(player)
        return game.winner(state)

    def _credited_player(self, node: Node) -> int:
        if self.config.reward == "player_who_moved":
            return self.game.opponent(node.player_to_move)
        return node.player_to_move

    def backpropagate(self, node: Node, result: Optional[int]) -> None:
        current: Optional[Node] = node
        while current is not None:
            current.visits += 1
            if result is not None and self._credited_player(current) == result:
                current.wins += 1
            current = self.tree.parent(current)

    def best_child(self, node: Node) -> Node:
        """
        UCT choice among the children of `node`.

        An unvisited child is returned immediately. Otherwise the score is
        wins / visits + 2 * sqrt(N / visits) with N the parent's visit count,
        and the first child with the highest score wins.
        """
        if not node.children:
            raise EmptyTreeError(f"node {node.index} has no children")

        best_score = -math.inf
        best: Optional[Node] = None
        for child in self.tree.children(node):
            if child.visits == 0:
                return child
            score = child.wins / child.visits + EXPLORATION * math.sqrt(node.visits / child.visits)
            if score > best_score:
                best_score = score
                best = child
        return best

    def most_visited_child(self, node: Node) -> Node:
        if not node.children:
            raise EmptyTreeError(f"node {node.index} has no children")
        best = None
        for child in self.tree.children(node):
            if best is None or child.visits > best.visits:
                best = child
        return best

    def iterate(self) -> Node:
        """Run one select/expand/simulate/backpropagate pass, return the simulated node."""
        node = self.select()
        result = self.simulate(node)
        self.backpropagate(node, result)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Simulated node %d (depth %d): result=%s", node.index,
                         self.tree.depth(node), result)
        return node

    def search(self, n: Optional[int] = None,
               stop_event: Optional[threading.Event] = None) -> Node:
        """
        Run `n` iterations (config.iterations by default) and return the chosen
        child of the root.

        `stop_event` is polled between iterations; setting it ends the search
        early with whatever statistics have been gathered.
        """
        if n is None:
            n = self.config.iterations
        if n < 1:
            raise ValueError(f"iteration count must be >= 1, got {n}")
        if self.root.is_terminal():
            raise EmptyTreeError("cannot search from a terminal position")

        logger.info("Starting search: %d iterations, player to move %d", n, self.root.player_to_move)
        self._cap_warned = False
        completed = 0
        for _ in range(n):
            if stop_event is not None and stop_event.is_set():
                logger.warning("Search cancelled after %d of %d iterations", completed, n)
                break
            self.iterate()
            completed += 1

        if completed == 0:
            raise EmptyTreeError("search was cancelled before its first iteration")

        if self.config.final_move == "max_visits":
            chosen = self.most_visited_child(self.root)
        else:
            chosen = self.best_child(self.root)

        logger.info("Search finished: %d iterations, %d nodes, move %s (visits=%d, wins=%d)",
                    completed, len(self.tree), chosen.move, chosen.visits, chosen.wins)
        return chosen

    def root_statistics(self) -> List[Tuple[Any, int, int]]:
        return [(c.move, c.visits, c.wins) for c in self.tree.children(self.root)]
