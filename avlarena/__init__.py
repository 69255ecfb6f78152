"""avlarena - AVL trees over 64-bit integer keys on a compiled node arena.

Nodes are rows of a NumPy array and children are row indices, so rotations
are integer reassignments and no node holds a reference to another. The
maintenance engine is compiled with Numba.

Typical use:

    from avlarena import AVLTree

    tree = AVLTree([50, 30, 70, 20, 40, 60, 80])
    tree.delete(50)
    assert tree.validate().ok
    print(list(tree.inorder()))

Lower level:
    avlarena.engine    - njit insert/delete/rotations over (nodes, root)
    avlarena.arena     - AVLArena jitclass owning the node array
    avlarena.traversal - lazy in/pre/post/level-order generators
"""

__version__ = "0.1.0"

from .arena import AVLArena, warmup
from .config import ArenaConfig
from .errors import AVLTreeError, CapacityError, ConfigError, InvalidKeyError
from .render import format_keys, render_tree
from .tree import AVLTree
from .validate import Invariant, ValidationReport, Violation, validate

__all__ = [
    "__version__",
    "AVLTree",
    "AVLArena",
    "ArenaConfig",
    "AVLTreeError",
    "CapacityError",
    "ConfigError",
    "InvalidKeyError",
    "Invariant",
    "ValidationReport",
    "Violation",
    "validate",
    "render_tree",
    "format_keys",
    "warmup",
]
