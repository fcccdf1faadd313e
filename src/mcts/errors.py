class MCTSError(Exception):
    """Base class for search contract violations."""


class InvalidMoveError(MCTSError, ValueError):
    """Raised when a move targets an occupied or off-board cell."""


class ExpansionError(MCTSError):
    """Raised when a node that already has children is expanded again."""


class EmptyTreeError(MCTSError):
    """
    Raised when a search cannot produce a move: a child is requested from a
    node that has none, the root is already terminal, or the search was
    cancelled before its first iteration.
    """
