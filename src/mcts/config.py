from dataclasses import dataclass
from typing import Optional

import numpy as np


FINAL_MOVE_POLICIES = ("uct", "max_visits")
REWARD_CONVENTIONS = ("player_to_move", "player_who_moved")


@dataclass
class SearchConfig:
    iterations: int = 10_000
    seed: Optional[int] = None
    max_nodes: Optional[int] = None        # None leaves the tree unbounded
    final_move: str = "uct"                # how the move is picked once the budget is spent
    reward: str = "player_to_move"         # which player a node credits a won rollout to

    def __post_init__(self):
        if self.iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {self.iterations}")
        if self.max_nodes is not None and self.max_nodes < 1:
            raise ValueError(f"max_nodes must be >= 1, got {self.max_nodes}")
        if self.final_move not in FINAL_MOVE_POLICIES:
            raise ValueError(
                f"final_move must be one of {FINAL_MOVE_POLICIES}, got {self.final_move!r}"
            )
        if self.reward not in REWARD_CONVENTIONS:
            raise ValueError(
                f"reward must be one of {REWARD_CONVENTIONS}, got {self.reward!r}"
            )

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)
