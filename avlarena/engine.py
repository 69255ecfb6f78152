import numpy as np
from numba import njit, prange
from typing import Tuple

from .layout import (
    MAX_PATH,
    NIL,
    clear_node,
    key_of,
    left_of,
    pack,
    right_of,
    set_height,
    set_key,
    set_left,
    set_node,
    set_right,
    stored_height,
)



# Status codes returned next to the new root
INSERTED   = 1
DUPLICATE  = 0
ARENA_FULL = -1

REMOVED    = 1
NOT_FOUND  = 0



# ---------- JIT-Compiled Height / Balance Bookkeeping ----------
@njit(inline="always")
def height(
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Cached height of the subtree rooted at `index`: -1 for NIL, 0 for a leaf.
    Pure read, nothing is recomputed.
    """

    if index == NIL:
        return np.int64(-1)

    return stored_height(nodes, index)

@njit(inline="always")
def recompute_height(
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Recompute and store height(index) = 1 + max(height(left), height(right)).
    The children's cached heights must already be final.
    """

    new_height = 1 + max(
        height(nodes, left_of(nodes, index)),
        height(nodes, right_of(nodes, index))
    )
    set_height(nodes, index, new_height)

    return np.int64(new_height)

@njit
def balance_factor(
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    height(left) - height(right). Only defined for a live node.
    """

    assert index != NIL, "balance factor of an empty subtree"

    return height(nodes, left_of(nodes, index)) - height(nodes, right_of(nodes, index))



# ---------- JIT-Compiled Rotations ----------
@njit(inline="always")
def rotate_left_left( # SRR: Single Right Rotation
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Fix a left-left imbalance at `index`.

    The left child is promoted to subtree root, `index` becomes its right
    child and adopts the promoted node's former right subtree as its new left
    subtree. The caller relinks the parent to the returned index.

    :param nodes: Arena rows of the tree
    :type nodes: np.ndarray
    :param index: Index of the unbalanced node
    :type index: np.int64
    :return: Index of the new root of the rotated subtree
    :rtype: np.int64
    """

    pivot = left_of(nodes, index)

    # Rotate
    set_left(nodes, index, right_of(nodes, pivot))
    set_right(nodes, pivot, index)

    # Update heights, old root first since it is now the pivot's child
    recompute_height(nodes, index)
    recompute_height(nodes, pivot)

    return np.int64(pivot) # new root

@njit(inline="always")
def rotate_right_right( # SLR: Single Left Rotation
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Fix a right-right imbalance at `index`. Mirror of `rotate_left_left`.
    """

    pivot = right_of(nodes, index)

    # Rotate
    set_right(nodes, index, left_of(nodes, pivot))
    set_left(nodes, pivot, index)

    # Update heights
    recompute_height(nodes, index)
    recompute_height(nodes, pivot)

    return np.int64(pivot) # new root

@njit(inline="always")
def rotate_left_right( # DLR: Double Left-Right Rotation
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Fix a left-right imbalance at `index`.

    The grandchild `index.left.right` becomes the subtree root. It hands its
    left subtree to `index.left` (right slot) and its right subtree to
    `index` (left slot), then adopts `index.left` as its left child and
    `index` as its right child.

    :param nodes: Arena rows of the tree
    :type nodes: np.ndarray
    :param index: Index of the unbalanced node
    :type index: np.int64
    :return: Index of the new root of the rotated subtree
    :rtype: np.int64
    """

    child = left_of(nodes, index)
    pivot = right_of(nodes, child)

    # Donate the pivot's subtrees
    set_right(nodes, child, left_of(nodes, pivot))
    set_left(nodes, index, right_of(nodes, pivot))

    # Promote the pivot
    set_left(nodes, pivot, child)
    set_right(nodes, pivot, index)

    # Update heights
    recompute_height(nodes, child)
    recompute_height(nodes, index)
    recompute_height(nodes, pivot)

    return np.int64(pivot) # new root

@njit(inline="always")
def rotate_right_left( # DRL: Double Right-Left Rotation
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Fix a right-left imbalance at `index`. Mirror of `rotate_left_right`.
    """

    child = right_of(nodes, index)
    pivot = left_of(nodes, child)

    # Donate the pivot's subtrees
    set_left(nodes, child, right_of(nodes, pivot))
    set_right(nodes, index, left_of(nodes, pivot))

    # Promote the pivot
    set_left(nodes, pivot, index)
    set_right(nodes, pivot, child)

    # Update heights
    recompute_height(nodes, child)
    recompute_height(nodes, index)
    recompute_height(nodes, pivot)

    return np.int64(pivot) # new root

@njit
def choose_and_apply_rotation(
    nodes: np.ndarray,
    index: np.int64

) -> np.int64:

    """
    Apply the one rotation that rebalances `index` and return the new
    subtree root. Returns `index` itself when it is already balanced.

    Left-heavy:  LR when the left child leans right, otherwise LL.
    Right-heavy: RL when the right child leans left, otherwise RR.
    A child with balance 0 only occurs after a deletion and takes the
    single rotation.
    """

    bf = balance_factor(nodes, index)

    if bf > 1: # L
        if balance_factor(nodes, left_of(nodes, index)) < 0: # LR
            return rotate_left_right(nodes, index)
        return rotate_left_left(nodes, index) # LL

    if bf < -1: # R
        if balance_factor(nodes, right_of(nodes, index)) > 0: # RL
            return rotate_right_left(nodes, index)
        return rotate_right_right(nodes, index) # RR

    return np.int64(index)



# ---------- JIT-Compiled AVLTree Core Operations ----------
@njit(inline="always")
def _relink(
    nodes:     np.ndarray,
    parent:    np.int64,
    old_child: np.int64,
    new_child: np.int64

) -> None:

    """
    Point whichever child slot of `parent` held `old_child` at `new_child`.
    """

    if left_of(nodes, parent) == old_child:
        set_left(nodes, parent, new_child)
    else:
        set_right(nodes, parent, new_child)

@njit(boundscheck=False)
def retrace(
    nodes: np.ndarray,
    root:  np.int64,
    path:  np.ndarray,
    top:   np.int64

) -> np.int64:

    """
    Walk the ancestor path bottom-up and restore the AVL invariants.

    Every ancestor in path[0:top] has its height recomputed and, when its
    balance factor left [-1, 1], is rotated. The rotated subtree root is
    relinked into the next ancestor before that ancestor is examined, so a
    height change caused by one rotation is seen by every node above it.

    Args:
        nodes (np.ndarray): 2D array [N, 2] holding the arena rows.
        root (np.int64): Current root index.
        path (np.ndarray): Ancestor indices, path[0] is the root.
        top (np.int64): Number of valid entries in `path`.

    Returns:
        np.int64: The (possibly new) root index.
    """

    for i in range(top - 1, -1, -1):
        node = path[i]
        recompute_height(nodes, node)

        bf = balance_factor(nodes, node)
        if bf > 1 or bf < -1:
            sub_root = choose_and_apply_rotation(nodes, node)

            if i > 0:
                _relink(nodes, path[i - 1], node, sub_root)
            else:
                root = sub_root

    return np.int64(root)

@njit(inline="always")
def _allocate(
    nodes:         np.ndarray,
    free:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Take a slot from the free list, otherwise the next never-used slot.
    Returns NIL as the index when the arena is exhausted.
    """

    if free_list_top > 0:
        free_list_top -= 1
        return np.int64(free_list[free_list_top]), np.int64(free), np.int64(free_list_top)

    if free < nodes.shape[0]:
        return np.int64(free), np.int64(free + 1), np.int64(free_list_top)

    return np.int64(NIL), np.int64(free), np.int64(free_list_top)

@njit(inline="always")
def _release(
    nodes:         np.ndarray,
    index:         np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64

) -> np.int64:

    """
    Zero a row and push its index on the free list.
    """

    clear_node(nodes, index)
    free_list[free_list_top] = index

    return np.int64(free_list_top + 1)

@njit(boundscheck=False)
def insert(
    nodes:         np.ndarray,
    root:          np.int64 ,
    free:          np.int64 , # start from 1
    free_list:     np.ndarray,
    free_list_top: np.int64  ,
    path:          np.ndarray, # use in rebalancing
    key:           np.int64

) -> Tuple[np.int64, np.int64, np.int64, np.int64]:

    """
    Insert a key into an array-based AVL tree with rebalancing.

    The descent records every ancestor of the insertion point in `path`.
    Nothing is written before the key is known to be new and a slot is known
    to be available, so a duplicate or a full arena leaves the tree exactly
    as it was.

    Parameters
    ----------
    nodes : np.ndarray
        The array holding all rows of the arena.
    root : np.int64
        Index of the current root node (0 if tree is empty).
    free : np.int64
        Next never-used index in `nodes`.
    free_list : np.ndarray
        Stack of released node indices for reuse.
    free_list_top : np.int64
        Number of entries on the free list.
    path : np.ndarray
        Preallocated ancestor buffer of MAX_PATH entries.
    key : np.int64
        The key to insert.

    Returns
    -------
    Tuple[np.int64, np.int64, np.int64, np.int64]
        Updated (root, free, free_list_top, status) where status is one of
        INSERTED, DUPLICATE or ARENA_FULL.
    """

    # Descend
    top     = 0
    parent  = np.int64(NIL)
    current = np.int64(root)
    while current != NIL:
        current_key = key_of(nodes, current)

        if key == current_key:
            return np.int64(root), np.int64(free), np.int64(free_list_top), np.int64(DUPLICATE)

        path[top] = current
        top += 1
        parent = current

        if key < current_key: # Left
            current = left_of(nodes, current)
        else: # Right
            current = right_of(nodes, current)

    # Allocate
    new_index, free, free_list_top = _allocate(nodes, free, free_list, free_list_top)
    if new_index == NIL:
        return np.int64(root), np.int64(free), np.int64(free_list_top), np.int64(ARENA_FULL)

    set_node(nodes, new_index, pack(key, NIL, NIL, 0))

    # First node
    if parent == NIL:
        return np.int64(new_index), np.int64(free), np.int64(free_list_top), np.int64(INSERTED)

    if key < key_of(nodes, parent):
        set_left(nodes, parent, new_index)
    else:
        set_right(nodes, parent, new_index)

    # Rebalancing
    root = retrace(nodes, root, path, top)

    return np.int64(root), np.int64(free), np.int64(free_list_top), np.int64(INSERTED)

@njit(inline="always")
def _extend_to_successor(
    nodes: np.ndarray,
    index: np.int64,
    path:  np.ndarray,
    top:   np.int64

) -> Tuple[np.int64, np.int64]:

    """
    Record the lineage from `index` down to its in-order successor.

    Moves to the right child, then follows left links to the leftmost node,
    pushing each node on `path` so every one of them is retraced after the
    successor row is released. `index` must have a right child.

    Returns:
        Tuple[np.int64, np.int64]:
            - successor index
            - updated path length
    """

    current = right_of(nodes, index)
    while current != NIL:
        path[top] = current
        top += 1
        current = left_of(nodes, current)

    return np.int64(path[top - 1]), np.int64(top)

@njit(boundscheck=False)
def delete(
    nodes:         np.ndarray,
    root:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    path:          np.ndarray,
    key:           np.int64

) -> Tuple[np.int64, np.int64, np.int64]:

    """
    Iterative AVL deletion with slot recycling.

    1. Search: walk to the key recording the path; an empty tree or a
    missing key returns NOT_FOUND and writes nothing.
    2. Unlink: a leaf is dropped, a one-child node is replaced by its child,
    a two-children node takes its successor's key and the successor row is
    removed instead.
    3. Recycle: the removed row is zeroed and pushed on the free list.
    4. Retrace: every ancestor of the removed row is rebalanced up to the
    root; unlike insertion several rotations may be needed.

    Args:
        nodes (np.ndarray): 2D array [N, 2] storing the arena rows.
        root (np.int64): Index of the current tree root.
        free_list (np.ndarray): Stack of available indices for recycling.
        free_list_top (np.int64): Current size of the free list.
        path (np.ndarray): Scratch buffer for the ancestor indices.
        key (np.int64): The key to remove.

    Returns:
        Tuple[np.int64, np.int64, np.int64]:
            - new root index
            - updated free_list_top
            - REMOVED or NOT_FOUND
    """

    # Search
    top     = 0
    current = np.int64(root)
    while current != NIL:
        path[top] = current
        top += 1

        current_key = key_of(nodes, current)
        if key == current_key:
            break

        if key < current_key:
            current = left_of(nodes, current)
        else:
            current = right_of(nodes, current)

    if current == NIL:
        return np.int64(root), np.int64(free_list_top), np.int64(NOT_FOUND)

    # Pick the row to physically remove
    target  = current
    removed = target
    if left_of(nodes, target) != NIL and right_of(nodes, target) != NIL:
        successor, top = _extend_to_successor(nodes, target, path, top)
        set_key(nodes, target, key_of(nodes, successor))
        removed = successor

    # Unlink it, path[top - 1] is `removed`
    replacement = left_of(nodes, removed)
    if replacement == NIL:
        replacement = right_of(nodes, removed)

    if top > 1:
        _relink(nodes, path[top - 2], removed, replacement)
    else:
        root = replacement

    free_list_top = _release(nodes, removed, free_list, free_list_top)

    # Rebalancing
    root = retrace(nodes, root, path, top - 1)

    return np.int64(root), np.int64(free_list_top), np.int64(REMOVED)

@njit(inline="always")
def find(
    nodes: np.ndarray,
    root:  np.int64,
    key:   np.int64

) -> np.int64:

    """
    Iterative BST lookup. Returns the index holding `key`, or NIL.
    """

    current = np.int64(root)
    while current != NIL:
        current_key = key_of(nodes, current)

        if key == current_key:
            return current

        elif key < current_key:
            current = left_of(nodes, current)

        else:
            current = right_of(nodes, current)

    return np.int64(NIL)

@njit
def search(
    nodes: np.ndarray,
    root:  np.int64,
    key:   np.int64

) -> bool:

    return find(nodes, root, key) != NIL

@njit(boundscheck=False)
def release_tree(
    nodes:         np.ndarray,
    root:          np.int64,
    free_list:     np.ndarray,
    free_list_top: np.int64,
    stack:         np.ndarray

) -> Tuple[np.int64, np.int64]:

    """
    Release every node reachable from `root` onto the free list.

    Each popped node pushes at most its two children, so the stack never
    holds more than height + 2 entries.

    Returns:
        Tuple[np.int64, np.int64]: (updated free_list_top, released count)
    """

    if root == NIL:
        return np.int64(free_list_top), np.int64(0)

    released  = 0
    stack_idx = 0
    stack[stack_idx] = root
    stack_idx += 1

    while stack_idx > 0:
        stack_idx -= 1
        node  = stack[stack_idx]
        left  = left_of(nodes, node)
        right = right_of(nodes, node)

        if left != NIL:
            stack[stack_idx] = left
            stack_idx += 1
        if right != NIL:
            stack[stack_idx] = right
            stack_idx += 1

        free_list_top = _release(nodes, node, free_list, free_list_top)
        released += 1

    return np.int64(free_list_top), np.int64(released)



# ---------- Subtree Navigation ----------
@njit
def minimum_index(nodes: np.ndarray, index: np.int64) -> np.int64:
    """Leftmost node of the subtree at `index`, NIL for an empty subtree."""

    if index == NIL:
        return np.int64(NIL)

    current = np.int64(index)
    while left_of(nodes, current) != NIL:
        current = left_of(nodes, current)

    return current

@njit
def maximum_index(nodes: np.ndarray, index: np.int64) -> np.int64:
    """Rightmost node of the subtree at `index`, NIL for an empty subtree."""

    if index == NIL:
        return np.int64(NIL)

    current = np.int64(index)
    while right_of(nodes, current) != NIL:
        current = right_of(nodes, current)

    return current

@njit
def successor_index(nodes: np.ndarray, index: np.int64) -> np.int64:
    """Smallest node of the right subtree of `index`, NIL when there is none."""

    return minimum_index(nodes, right_of(nodes, index))

@njit
def predecessor_index(nodes: np.ndarray, index: np.int64) -> np.int64:
    """Largest node of the left subtree of `index`, NIL when there is none."""

    return maximum_index(nodes, left_of(nodes, index))



# ---------- Bulk Loops ----------
@njit(parallel=True)
def search_bulk(
    nodes: np.ndarray,
    root:  np.int64,
    keys:  np.ndarray

) -> np.ndarray:

    """
    Look up many keys in parallel with `prange`.

    Read-only: no insert or delete may run on the same arena meanwhile.

    Returns:
        np.ndarray: Boolean array, True where the key is present.
    """

    size    = keys.size
    results = np.zeros(size, dtype=np.bool_)
    for i in prange(size):
        results[i] = find(nodes, root, keys[i]) != NIL

    return results

@njit
def collect_inorder( # LVR
    nodes: np.ndarray,
    root:  np.int64,
    count: np.int64

) -> np.ndarray:

    """
    Extract all keys in ascending order into a new int64 array.
    Recommended for integrity checks and bulk export.
    """

    traverse = np.zeros(count, dtype=np.int64)
    stack    = np.zeros(MAX_PATH, dtype=np.int64)

    current      = np.int64(root)
    stack_idx    = 0
    traverse_idx = 0

    while traverse_idx < count:

        while current != NIL:
            stack[stack_idx] = current
            stack_idx += 1
            current = left_of(nodes, current)

        if stack_idx == 0:
            break

        stack_idx -= 1
        current = stack[stack_idx]

        traverse[traverse_idx] = key_of(nodes, current)
        traverse_idx += 1

        current = right_of(nodes, current)

    return traverse
