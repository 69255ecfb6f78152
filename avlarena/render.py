"""Text rendering for AVL arenas.

Rendering is kept out of the traversals so they stay pure queries; callers
decide when and where the text goes.
"""

from __future__ import annotations

from typing import Iterable, List

import numpy as np

from .layout import NIL
from .traversal import read_row


def render_tree(nodes: np.ndarray, root: int, indent: int = 4) -> str:
    """Render the tree sideways, one node per line.

    The right subtree is drawn above its parent and the left subtree below,
    each level shifted by *indent* spaces, so turning the output 90 degrees
    clockwise shows the usual picture. Every line reads
    ``key (h=height, bf=balance)`` using the cached heights.

    Returns ``"<empty>"`` for an empty tree.
    """

    if root == NIL:
        return "<empty>"

    lines: List[str] = []

    def cached_height(index: int) -> int:
        return -1 if index == NIL else read_row(nodes, index)[3]

    def walk(index: int, depth: int) -> None:
        if index == NIL:
            return
        key, left, right, height = read_row(nodes, index)
        walk(right, depth + 1)
        balance = cached_height(left) - cached_height(right)
        lines.append(f"{' ' * (depth * indent)}{key} (h={height}, bf={balance})")
        walk(left, depth + 1)

    walk(root, 0)
    return "\n".join(lines)


def format_keys(keys: Iterable[int], separator: str = "| ") -> str:
    """Join a traversal for display, e.g. ``"10| 20| 30| "``.

    Every key is followed by *separator*, matching the classic one-line
    traversal printout.
    """

    return "".join(f"{key}{separator}" for key in keys)


__all__ = ["render_tree", "format_keys"]
