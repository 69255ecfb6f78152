import numpy as np
from numba import int64, njit
from numba.experimental import jitclass
from typing import Tuple

from . import engine
from .engine import ARENA_FULL, INSERTED, REMOVED
from .layout import MAX_CAPACITY, MAX_PATH, NIL, get_node, unpack



# --------- AVLArena API ---------
spec = [
    ("size"          , int64),
    ("count"         , int64),
    ("nodes"         , int64[:, :]),
    ("root"          , int64),
    ("_free"         , int64),
    ("_free_list"    , int64[:]),
    ("_free_list_top", int64),
    ("_path"         , int64[:]),
]

@jitclass(spec)
class AVLArena:
    """
    Arena-backed AVL tree over int64 keys, compiled as a Numba jitclass.

    Nodes are rows of a 2D int64 array; children are row indices and row 0
    is the empty subtree. Released rows are recycled through a free list.
    Mutating methods return a status code instead of raising, so the Python
    facade decides how to report a full arena.

    Attributes:
        size (int64): Allocated rows, including the NIL row.
        count (int64): Current number of live nodes.
        nodes (int64[:, :]): Underlying [size, 2] array of packed rows.
        root (int64): Index of the root node (0 if empty).
    """

    def __init__(
        self,
        capacity: int

    ) -> None:

        if capacity < 0 or capacity > MAX_CAPACITY:
            raise ValueError("AVLArena capacity out of range")

        self.size           = int64(capacity + 1)
        self.count          = int64(0)
        self.nodes          = np.zeros((self.size, 2), dtype=np.int64)
        self.root           = int64(NIL)
        self._free          = int64(1)
        self._free_list     = np.zeros(self.size, dtype=np.int64)
        self._free_list_top = int64(0)
        self._path          = np.zeros(MAX_PATH, dtype=np.int64)

    @property
    def capacity(self) -> int:
        return self.size - 1

    @property
    def height(self) -> int:
        return engine.height(self.nodes, self.root)

    @property
    def root_info(self) -> Tuple[int, int, int, int]:
        h, l = get_node(self.nodes, self.root)
        return unpack(h, l)

    @property
    def is_full(self) -> bool:
        return self._free_list_top == 0 and self._free >= self.size

    def grow(
        self,
        capacity: int

    ) -> None:

        """
        Reallocate the arena with room for `capacity` nodes.

        Live rows keep their indices, so the root and every link stay valid.
        Shrinking is not supported; a smaller capacity is ignored.
        """

        if capacity > MAX_CAPACITY:
            raise ValueError("AVLArena capacity out of range")

        size = capacity + 1
        if size <= self.size:
            return

        nodes = np.zeros((size, 2), dtype=np.int64)
        nodes[: self.size, :] = self.nodes

        free_list = np.zeros(size, dtype=np.int64)
        free_list[: self.size] = self._free_list

        self.nodes      = nodes
        self._free_list = free_list
        self.size       = int64(size)

    def insert(
        self,
        key: int

    ) -> int:
        """Insert a key. Returns INSERTED, DUPLICATE or ARENA_FULL; only INSERTED changes the tree."""

        self.root, self._free, self._free_list_top, status = engine.insert(
            self.nodes,
            self.root,
            self._free,
            self._free_list,
            self._free_list_top,
            self._path,
            int64(key)
        )

        if status == INSERTED:
            self.count += 1

        return status

    def remove(
        self,
        key: int

    ) -> int:
        """Delete a key and rebalance. Returns REMOVED or NOT_FOUND."""

        self.root, self._free_list_top, status = engine.delete(
            self.nodes,
            self.root,
            self._free_list,
            self._free_list_top,
            self._path,
            int64(key)
        )

        if status == REMOVED:
            self.count -= 1

        return status

    def search(
        self,
        key: int

    ) -> bool:
        """Iterative BST lookup."""

        return engine.search(self.nodes, self.root, int64(key))

    def find(
        self,
        key: int

    ) -> int:
        """Index of the node holding `key`, or 0."""

        return engine.find(self.nodes, self.root, int64(key))

    def search_bulk(
        self,
        keys: np.ndarray

    ) -> np.ndarray:
        """Parallel membership test for an int64 array of keys."""

        return engine.search_bulk(self.nodes, self.root, keys)

    def fill(
        self,
        keys: np.ndarray

    ) -> Tuple[int, int]:

        """
        Insert keys in order until one is refused for lack of space.

        Returns:
            Tuple[int, int]: (inserted count, position of the first key not
            attempted; equals keys.size when every key was processed)
        """

        inserted = 0
        for i in range(keys.size):
            status = self.insert(keys[i])
            if status == ARENA_FULL:
                return inserted, i
            if status == INSERTED:
                inserted += 1

        return inserted, keys.size

    def drain(
        self,
        keys: np.ndarray

    ) -> int:
        """Delete every key of the array, returning how many were present."""

        removed = 0
        for i in range(keys.size):
            if self.remove(keys[i]) == REMOVED:
                removed += 1

        return removed

    def minimum(self) -> int:
        """Index of the smallest key, or 0 if the tree is empty."""

        return engine.minimum_index(self.nodes, self.root)

    def maximum(self) -> int:
        """Index of the largest key, or 0 if the tree is empty."""

        return engine.maximum_index(self.nodes, self.root)

    def key_at(
        self,
        index: int

    ) -> int:

        return self.nodes[index, 0]

    def inorder(self) -> np.ndarray:
        """
        Sorted array of all keys.

        WARNING: Allocates `count` int64 values. Prefer the lazy generators
        in `avlarena.traversal` for streaming over large trees.
        """
        return engine.collect_inorder(self.nodes, self.root, self.count)

    def clear(self) -> int:
        """Release every node. Returns how many were released."""

        stack = np.zeros(MAX_PATH, dtype=np.int64)
        self._free_list_top, released = engine.release_tree(
            self.nodes,
            self.root,
            self._free_list,
            self._free_list_top,
            stack
        )

        self.root  = int64(NIL)
        self.count = int64(0)
        return released

    def __len__(self) -> int:
        return self.count



# --------- Utils ---------
@njit
def warmup(capacity: int = 16) -> bool:
    """
    Minimally triggers JIT compilation for the core arena operations.
    """

    arena = AVLArena(capacity)
    keys  = np.array([30, 20, 10, 40, 50, 25], dtype=np.int64)
    arena.fill(keys)

    _ = arena.search(20)

    queries = np.array([10, 25, 99], dtype=np.int64)
    _ = arena.search_bulk(queries)

    arena.remove(10)
    arena.clear()

    return True
