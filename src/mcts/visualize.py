from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from src.mcts.tree import Tree


def root_visit_grid(tree: Tree) -> np.ndarray:
    """Visit count of each root child placed at the cell its move fills."""
    size = len(tree.root.state)
    grid = np.zeros((size, size), dtype=np.float64)
    for child in tree.children(tree.root):
        r, c = child.move
        grid[r, c] = child.visits
    return grid


def plot_root_visits(tree: Tree, path: str, title: Optional[str] = None) -> None:
    grid = root_visit_grid(tree)
    size = grid.shape[0]

    fig, ax = plt.subplots(figsize=(5, 5))
    im = ax.imshow(grid, cmap="viridis")
    fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)

    for r in range(size):
        for c in range(size):
            ax.text(c, r, f"{int(grid[r, c])}", ha="center", va="center", color="w")

    ax.set_xticks(range(size))
    ax.set_yticks(range(size))
    ax.set_xlabel("Column")
    ax.set_ylabel("Row")
    ax.set_title(title or f"Root visits ({tree.root.visits} simulations)")

    plt.tight_layout()
    plt.savefig(path)
    plt.close(fig)
