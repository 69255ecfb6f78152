import numpy as np
from numba import njit
from typing import Tuple



# Node row layout (one arena row = 2x int64):
#     row[0]: key   (full signed 64-bit)
#     row[1]: LINKS[62]: [left[28] | right[28] | height[6]]
#     Limitations:
#         0 <= left   <= (1 << 28) - 1
#         0 <= right  <= (1 << 28) - 1
#         0 <= height <= (1 << 6)  - 1
#     Index 0 is never a live node: it is the empty subtree (NIL).



NIL          = 0
INDEX_MASK   = np.int64(0xFFFFFFF)  # (1 << 28) - 1
HEIGHT_MASK  = np.int64(0x3F)       # (1 <<  6) - 1
RIGHT_SHIFT  = np.int64(0x6)        # 6
LEFT_SHIFT   = np.int64(0x22)       # 34
MAX_CAPACITY = (1 << 28) - 1

# An AVL tree of MAX_CAPACITY nodes is at most 1.44 * log2(n + 2) ~ 41 levels deep
MAX_PATH     = 64



# ---------- JIT-Compiled Bitwise Accessors / Updaters for Packed Fields ----------
@njit(inline="always")
def pack(
    key:    np.int64,
    left:   np.int64,
    right:  np.int64,
    height: np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Pack a node into its arena row representation (key, links).

    The key is kept whole in the first word. Child indices and the cached
    height share the second word according to the layout
    [left[28] | right[28] | height[6]].

    :param key: The node key (signed 64-bit)
    :type key: np.int64
    :param left: Arena index of the left child, 0 when absent
    :type left: np.int64
    :param right: Arena index of the right child, 0 when absent
    :type right: np.int64
    :param height: Cached subtree height, 0 for a leaf
    :type height: np.int64
    :return: The (key, links) pair stored in one arena row
    :rtype: Tuple[np.int64, np.int64]
    """

    links = (
        ((np.int64(left)   & INDEX_MASK) << LEFT_SHIFT)
        | ((np.int64(right) & INDEX_MASK) << RIGHT_SHIFT)
        | (np.int64(height) & HEIGHT_MASK)
    )

    return np.int64(key), np.int64(links)

@njit(inline="always")
def unpack(
    key:   np.int64,
    links: np.int64

) -> Tuple[np.int64, np.int64, np.int64, np.int64]:

    """
    Unpack an arena row into (key, left, right, height).

    NOTE:
    Intended for inspection, rendering and tests. The engine reads single
    fields through the getters below instead of unpacking whole rows.
    """

    height = links & HEIGHT_MASK
    right  = (links >> RIGHT_SHIFT) & INDEX_MASK
    left   = (links >> LEFT_SHIFT) & INDEX_MASK

    return np.int64(key), left, right, height

@njit(inline="always")
def _get_key(
    key: np.int64,
    _:   np.int64

) -> np.int64:

    """
    Return the key word unchanged.
    """

    return np.int64(key)

@njit(inline="always")
def _get_height(
    _:     np.int64,
    links: np.int64

) -> np.int64:

    """
    Extract the 'height' field (6 bits) from the links word.
    """

    return np.int64(links & HEIGHT_MASK)

@njit(inline="always")
def _get_right(
    _:     np.int64,
    links: np.int64

) -> np.int64:

    """
    Extract the 'right' field (28 bits) from the links word.
    """

    return np.int64((links >> RIGHT_SHIFT) & INDEX_MASK)

@njit(inline="always")
def _get_left(
    _:     np.int64,
    links: np.int64

) -> np.int64:

    """
    Extract the 'left' field (28 bits) from the links word.
    """

    return np.int64((links >> LEFT_SHIFT) & INDEX_MASK)

@njit(inline="always")
def _update_height(
    key:        np.int64,
    links:      np.int64,
    new_height: np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Replace the 'height' bits of the links word. The key is returned as-is.
    """

    links = (links & ~HEIGHT_MASK) | (np.int64(new_height) & HEIGHT_MASK)

    return np.int64(key), np.int64(links)

@njit(inline="always")
def _update_right(
    key:       np.int64,
    links:     np.int64,
    new_right: np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Replace the 'right' bits of the links word. The key is returned as-is.
    """

    links = (links & ~(INDEX_MASK << RIGHT_SHIFT)) | ((np.int64(new_right) & INDEX_MASK) << RIGHT_SHIFT)

    return np.int64(key), np.int64(links)

@njit(inline="always")
def _update_left(
    key:      np.int64,
    links:    np.int64,
    new_left: np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Replace the 'left' bits of the links word. The key is returned as-is.
    """

    links = (links & ~(INDEX_MASK << LEFT_SHIFT)) | ((np.int64(new_left) & INDEX_MASK) << LEFT_SHIFT)

    return np.int64(key), np.int64(links)

@njit(inline="always")
def _update_key(
    _:       np.int64,
    links:   np.int64,
    new_key: np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Replace the key word. Only deletion of a two-children node does this.
    """

    return np.int64(new_key), np.int64(links)

@njit(inline="always")
def set_node(
    nodes: np.ndarray,
    index: np.int64,
    node:  Tuple[np.int64, np.int64]

) -> None:

    """
    Assign a (key, links) pair to the given row of the arena.
    """

    nodes[index, 0] = node[0]
    nodes[index, 1] = node[1]

@njit(inline="always")
def get_node(
    nodes: np.ndarray,
    index: np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Get the (key, links) pair stored at an arena index.
    """

    return nodes[index, 0], nodes[index, 1]

@njit(inline="always")
def clear_node(
    nodes: np.ndarray,
    index: np.int64

) -> None:

    """
    Zero an arena row so a released slot holds no stale links.
    """

    nodes[index, 0] = 0
    nodes[index, 1] = 0



# ---------- Per-field Arena Access ----------
@njit(inline="always")
def key_of(nodes: np.ndarray, index: np.int64) -> np.int64:
    k, l = get_node(nodes, index)
    return _get_key(k, l)

@njit(inline="always")
def left_of(nodes: np.ndarray, index: np.int64) -> np.int64:
    k, l = get_node(nodes, index)
    return _get_left(k, l)

@njit(inline="always")
def right_of(nodes: np.ndarray, index: np.int64) -> np.int64:
    k, l = get_node(nodes, index)
    return _get_right(k, l)

@njit(inline="always")
def stored_height(nodes: np.ndarray, index: np.int64) -> np.int64:
    k, l = get_node(nodes, index)
    return _get_height(k, l)

@njit(inline="always")
def set_key(nodes: np.ndarray, index: np.int64, key: np.int64) -> None:
    k, l = get_node(nodes, index)
    set_node(nodes, index, _update_key(k, l, key))

@njit(inline="always")
def set_left(nodes: np.ndarray, index: np.int64, child: np.int64) -> None:
    k, l = get_node(nodes, index)
    set_node(nodes, index, _update_left(k, l, child))

@njit(inline="always")
def set_right(nodes: np.ndarray, index: np.int64, child: np.int64) -> None:
    k, l = get_node(nodes, index)
    set_node(nodes, index, _update_right(k, l, child))

@njit(inline="always")
def set_height(nodes: np.ndarray, index: np.int64, height: np.int64) -> None:
    k, l = get_node(nodes, index)
    set_node(nodes, index, _update_height(k, l, height))
