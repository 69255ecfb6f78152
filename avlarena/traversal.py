"""Lazy traversals over an AVL arena.

Each generator takes the arena's node array and a root index and yields keys
as plain ``int`` values. They never mutate the arena; mutating the tree while
a generator is suspended is undefined. Depth-first walks keep an explicit
stack so tree height never touches the interpreter's recursion limit.
"""

from collections import deque
from typing import Deque, Iterator, List, Tuple

import numpy as np

from .layout import NIL, unpack

Row = Tuple[int, int, int, int]


def read_row(nodes: np.ndarray, index: int) -> Row:
    """Return ``(key, left, right, height)`` for the node at *index*."""

    key, left, right, height = unpack(nodes[index, 0], nodes[index, 1])
    return int(key), int(left), int(right), int(height)


def inorder(nodes: np.ndarray, root: int) -> Iterator[int]:
    """Yield keys in ascending order (left, node, right)."""

    stack: List[Row] = []
    current = root
    while stack or current != NIL:
        while current != NIL:
            row = read_row(nodes, current)
            stack.append(row)
            current = row[1]
        key, _, right, _ = stack.pop()
        yield key
        current = right


def preorder(nodes: np.ndarray, root: int) -> Iterator[int]:
    """Yield keys node first, then the left and right subtrees."""

    if root == NIL:
        return
    stack: List[int] = [root]
    while stack:
        key, left, right, _ = read_row(nodes, stack.pop())
        yield key
        if right != NIL:
            stack.append(right)
        if left != NIL:
            stack.append(left)


def postorder(nodes: np.ndarray, root: int) -> Iterator[int]:
    """Yield keys after both subtrees (left, right, node)."""

    if root == NIL:
        return
    # Each entry is (row, children_pushed)
    stack: List[Tuple[Row, bool]] = [(read_row(nodes, root), False)]
    while stack:
        row, expanded = stack.pop()
        if expanded:
            yield row[0]
            continue
        stack.append((row, True))
        if row[2] != NIL:
            stack.append((read_row(nodes, row[2]), False))
        if row[1] != NIL:
            stack.append((read_row(nodes, row[1]), False))


def level_order(nodes: np.ndarray, root: int) -> Iterator[int]:
    """Yield keys breadth-first, left to right within each level.

    Only live children are enqueued, so the walk ends once the deepest level
    has been emitted.
    """

    if root == NIL:
        return
    queue: Deque[int] = deque([root])
    while queue:
        key, left, right, _ = read_row(nodes, queue.popleft())
        yield key
        if left != NIL:
            queue.append(left)
        if right != NIL:
            queue.append(right)


def levels(nodes: np.ndarray, root: int) -> Iterator[List[int]]:
    """Yield the keys of each level as a list, root level first."""

    if root == NIL:
        return
    frontier: List[int] = [root]
    while frontier:
        keys: List[int] = []
        below: List[int] = []
        for index in frontier:
            key, left, right, _ = read_row(nodes, index)
            keys.append(key)
            if left != NIL:
                below.append(left)
            if right != NIL:
                below.append(right)
        yield keys
        frontier = below


__all__ = [
    "read_row",
    "inorder",
    "preorder",
    "postorder",
    "level_order",
    "levels",
]
