"""Tests for the AVLArena jitclass and the facade conveniences built on it."""

from __future__ import annotations

import random

import numpy as np
import pytest

from avlarena import AVLArena, AVLTree, warmup
from avlarena.engine import ARENA_FULL, DUPLICATE, INSERTED, NOT_FOUND, REMOVED


def test_warmup_compiles() -> None:
    assert warmup()


def test_arena_counts_only_new_keys() -> None:
    arena = AVLArena(8)
    assert arena.insert(5) == INSERTED
    assert arena.insert(5) == DUPLICATE
    assert arena.insert(6) == INSERTED
    assert len(arena) == 2
    assert arena.count == 2


def test_arena_remove_status() -> None:
    arena = AVLArena(4)
    arena.insert(1)
    assert arena.remove(2) == NOT_FOUND
    assert arena.remove(1) == REMOVED
    assert len(arena) == 0
    assert arena.root == 0


def test_arena_reports_full() -> None:
    arena = AVLArena(2)
    arena.insert(1)
    arena.insert(2)
    assert arena.is_full
    assert arena.insert(3) == ARENA_FULL
    assert len(arena) == 2


def test_arena_rejects_bad_capacity() -> None:
    with pytest.raises(ValueError):
        AVLArena(-1)


def test_grow_keeps_indices() -> None:
    arena = AVLArena(3)
    for key in (10, 20, 30):
        arena.insert(key)
    root = arena.root
    index = arena.find(10)

    arena.grow(10)
    assert arena.capacity == 10
    assert arena.root == root
    assert arena.find(10) == index
    assert not arena.is_full
    assert arena.insert(40) == INSERTED
    assert arena.inorder().tolist() == [10, 20, 30, 40]

    arena.grow(5)
    assert arena.capacity == 10


def test_fill_and_drain() -> None:
    arena = AVLArena(3)
    inserted, position = arena.fill(np.array([3, 1, 3, 2, 4], dtype=np.int64))
    assert (inserted, position) == (3, 4)

    removed = arena.drain(np.array([1, 9, 2], dtype=np.int64))
    assert removed == 2
    assert arena.inorder().tolist() == [3]


def test_arena_root_info_and_extremes() -> None:
    arena = AVLArena(8)
    arena.fill(np.array([2, 1, 3], dtype=np.int64))
    assert arena.root_info == (2, arena.find(1), arena.find(3), 1)
    assert arena.key_at(arena.minimum()) == 1
    assert arena.key_at(arena.maximum()) == 3
    assert arena.height == 1


def test_search_many_matches_scalar_search() -> None:
    tree = AVLTree(range(0, 100, 3))
    queries = np.arange(-5, 105)
    found = tree.search_many(queries)

    assert found.dtype == np.bool_
    assert found.tolist() == [tree.search(int(key)) for key in queries]


def test_clear_releases_and_reuses_slots() -> None:
    tree = AVLTree(range(20))
    capacity = tree.capacity

    assert tree.clear() == 20
    assert len(tree) == 0
    assert tree.root == 0
    assert list(tree) == []

    tree.insert_many(range(100, 120))
    assert tree.capacity == capacity
    assert tree.validate().ok


def test_context_manager_clears_tree() -> None:
    with AVLTree([3, 1, 2]) as tree:
        assert len(tree) == 3
    assert len(tree) == 0
    assert not tree


def test_min_max_of_empty_tree_raise() -> None:
    tree = AVLTree()
    with pytest.raises(ValueError):
        tree.min()
    with pytest.raises(ValueError):
        tree.max()
    assert tree.root_key is None


def test_bulk_mutation_counts() -> None:
    tree = AVLTree()
    assert tree.insert_many([5, 3, 5, 8]) == 3
    assert tree.delete_many([3, 4]) == 1
    assert list(tree) == [5, 8]


def test_repr() -> None:
    tree = AVLTree([1, 2, 3])
    assert repr(tree) == "AVLTree(size=3, height=1, capacity=64)"


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_random_operations_match_a_set(seed) -> None:
    rng = random.Random(seed)
    tree = AVLTree()
    expected = set()

    for _ in range(2000):
        key = rng.randint(-200, 200)
        if rng.random() < 0.6:
            assert tree.insert(key) == (key not in expected)
            expected.add(key)
        else:
            assert tree.delete(key) == (key in expected)
            expected.discard(key)

    assert list(tree) == sorted(expected)
    assert len(tree) == len(expected)
    report = tree.validate()
    assert report.ok, report.summary()
