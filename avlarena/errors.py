"""Exception hierarchy for avlarena.

Only conditions a caller can act on are exceptions. A missing key on delete
or search and a duplicate key on insert are ordinary boolean results.
"""


class AVLTreeError(Exception):
    """Base class for every error raised by avlarena."""


class CapacityError(AVLTreeError, MemoryError):
    """Raised when a node cannot be allocated.

    The arena is full and either growth is disabled or the maximum capacity
    has been reached. The tree is left exactly as it was before the call.
    """

    def __init__(self, capacity: int, message: str = None):
        self.capacity = capacity
        super().__init__(message or f"AVL arena is full ({capacity} nodes)")


class InvalidKeyError(AVLTreeError, TypeError):
    """Raised when a key is not an integer or does not fit in 64 bits."""


class ConfigError(AVLTreeError, ValueError):
    """Raised when an ArenaConfig fails validation."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("Invalid arena configuration: " + "; ".join(self.problems))
