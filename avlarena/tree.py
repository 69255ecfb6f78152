"""Python facade over the compiled AVL arena.

:class:`AVLTree` is the public entry point. It validates keys before they
reach compiled code, turns the engine's status codes into booleans and
exceptions, grows the arena according to its :class:`ArenaConfig` and ties
the lifetime of all nodes to a ``with`` block when used as a context
manager.

Example::

    with AVLTree([50, 30, 70]) as tree:
        tree.insert(20)
        tree.delete(50)
        print(list(tree.inorder()))
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

import numpy as np

from .arena import AVLArena
from .config import ArenaConfig
from .engine import ARENA_FULL, INSERTED, REMOVED
from .errors import CapacityError, ConfigError, InvalidKeyError
from .layout import NIL
from .render import render_tree
from .traversal import inorder, level_order, levels, postorder, preorder
from .validate import ValidationReport, validate

logger = logging.getLogger(__name__)

_INT64 = np.iinfo(np.int64)


def _coerce_key(key) -> int:
    """Return *key* as a Python ``int`` or raise :class:`InvalidKeyError`."""

    if isinstance(key, (bool, np.bool_)) or not isinstance(key, (int, np.integer)):
        raise InvalidKeyError(f"AVL keys must be integers, not {type(key).__name__}")
    key = int(key)
    if key < _INT64.min or key > _INT64.max:
        raise InvalidKeyError(f"key {key} does not fit in a signed 64-bit integer")
    return key


def _coerce_keys(keys: Iterable[int]) -> np.ndarray:
    """Return *keys* as a 1-D ``int64`` array, validating every element."""

    if isinstance(keys, np.ndarray):
        if keys.dtype.kind not in "iu":
            raise InvalidKeyError(f"AVL keys must be integers, not {keys.dtype}")
        if keys.dtype.kind == "u" and keys.size and keys.max() > _INT64.max:
            raise InvalidKeyError("unsigned keys above the int64 range")
        return np.ascontiguousarray(keys.ravel(), dtype=np.int64)
    return np.array([_coerce_key(key) for key in keys], dtype=np.int64)


class AVLTree:
    """Set of distinct 64-bit integer keys kept in an AVL tree.

    Inserting a key that is already present and deleting one that is absent
    are no-ops reported through the boolean return value. Not safe for
    concurrent use: callers sharing a tree across threads must serialize
    every call, traversals included.
    """

    def __init__(
        self,
        keys: Optional[Iterable[int]] = None,
        config: Optional[ArenaConfig] = None,
    ):
        """
        Args:
            keys: Optional initial keys, inserted in iteration order.
            config: Arena sizing policy; defaults to :class:`ArenaConfig`.

        Raises:
            ConfigError: *config* fails validation.
            CapacityError: the initial keys do not fit a non-growable arena.
        """
        self.config = config if config is not None else ArenaConfig()
        problems = self.config.validate()
        if problems:
            raise ConfigError(problems)

        self._arena = AVLArena(self.config.initial_capacity)
        if keys is not None:
            self.insert_many(keys)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def arena(self) -> AVLArena:
        """The compiled arena backing this tree."""
        return self._arena

    @property
    def nodes(self) -> np.ndarray:
        """Current node array. Replaced whenever the arena grows."""
        return self._arena.nodes

    @property
    def root(self) -> int:
        """Arena index of the root node, ``0`` when empty."""
        return int(self._arena.root)

    @property
    def root_key(self) -> Optional[int]:
        if self.root == NIL:
            return None
        return int(self._arena.key_at(self.root))

    @property
    def height(self) -> int:
        """Height of the tree: ``-1`` when empty, ``0`` for a single node."""
        return int(self._arena.height)

    @property
    def capacity(self) -> int:
        return int(self._arena.capacity)

    def __len__(self) -> int:
        return int(self._arena.count)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"AVLTree(size={len(self)}, height={self.height}, capacity={self.capacity})"

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _grow_for(self, required: int) -> None:
        """Grow the arena so *required* nodes fit, or raise CapacityError."""

        current = self.capacity
        if not self.config.growable or current >= self.config.max_capacity:
            logger.warning("AVL arena full at %d nodes; insert refused", current)
            raise CapacityError(current)

        new_capacity = self.config.next_capacity(current, required)
        logger.debug("Growing AVL arena from %d to %d nodes", current, new_capacity)
        self._arena.grow(new_capacity)

    def insert(self, key: int) -> bool:
        """Insert *key*.

        Returns:
            ``True`` if the key was added, ``False`` if it was already present.

        Raises:
            InvalidKeyError: *key* is not a 64-bit integer.
            CapacityError: no node could be allocated; the tree is unchanged.
        """
        key = _coerce_key(key)
        status = self._arena.insert(key)
        if status == ARENA_FULL:
            self._grow_for(len(self) + 1)
            status = self._arena.insert(key)
        return status == INSERTED

    def insert_many(self, keys: Iterable[int]) -> int:
        """Insert keys in order and return how many were new.

        Each key is inserted atomically. If the arena cannot grow, the keys
        before the refused one stay inserted and :class:`CapacityError` is
        raised.
        """
        array = _coerce_keys(keys)
        inserted, position = self._arena.fill(array)
        while position < array.size:
            self._grow_for(len(self) + int(array.size - position))
            added, stopped = self._arena.fill(array[position:])
            inserted += added
            position += stopped
        logger.debug("Inserted %d of %d keys", inserted, array.size)
        return int(inserted)

    def delete(self, key: int) -> bool:
        """Delete *key*.

        Returns:
            ``True`` if the key was removed, ``False`` if it was not present
            (the tree is then untouched).
        """
        key = _coerce_key(key)
        return self._arena.remove(key) == REMOVED

    def delete_many(self, keys: Iterable[int]) -> int:
        """Delete keys in order and return how many were present."""
        array = _coerce_keys(keys)
        removed = int(self._arena.drain(array))
        logger.debug("Deleted %d of %d keys", removed, array.size)
        return removed

    def clear(self) -> int:
        """Release every node and return how many were released.

        The arena keeps its capacity; released slots are reused by later
        inserts.
        """
        released = int(self._arena.clear())
        logger.debug("Released %d nodes", released)
        return released

    def __enter__(self) -> "AVLTree":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, key: int) -> bool:
        """Return ``True`` when *key* is in the tree."""
        return bool(self._arena.search(_coerce_key(key)))

    def __contains__(self, key) -> bool:
        try:
            key = _coerce_key(key)
        except InvalidKeyError:
            return False
        return bool(self._arena.search(key))

    def search_many(self, keys: Iterable[int]) -> np.ndarray:
        """Membership of many keys at once, computed in parallel."""
        return self._arena.search_bulk(_coerce_keys(keys))

    def min(self) -> int:
        """Smallest key. Raises ``ValueError`` on an empty tree."""
        if not self:
            raise ValueError("min() of an empty AVLTree")
        return int(self._arena.key_at(self._arena.minimum()))

    def max(self) -> int:
        """Largest key. Raises ``ValueError`` on an empty tree."""
        if not self:
            raise ValueError("max() of an empty AVLTree")
        return int(self._arena.key_at(self._arena.maximum()))

    # ------------------------------------------------------------------
    # Traversal and inspection
    # ------------------------------------------------------------------

    def inorder(self) -> Iterator[int]:
        return inorder(self.nodes, self.root)

    def preorder(self) -> Iterator[int]:
        return preorder(self.nodes, self.root)

    def postorder(self) -> Iterator[int]:
        return postorder(self.nodes, self.root)

    def level_order(self) -> Iterator[int]:
        return level_order(self.nodes, self.root)

    def levels(self) -> Iterator[list]:
        return levels(self.nodes, self.root)

    def __iter__(self) -> Iterator[int]:
        return self.inorder()

    def to_array(self) -> np.ndarray:
        """All keys in ascending order as an ``int64`` array."""
        return self._arena.inorder()

    def validate(self) -> ValidationReport:
        """Check BST order, balance, cached heights and the node count."""
        return validate(self.nodes, self.root, expected_count=len(self))

    def render(self) -> str:
        """Sideways diagram with each node's height and balance factor."""
        return render_tree(self.nodes, self.root)


__all__ = ["AVLTree"]
