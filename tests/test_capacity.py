"""Arena sizing, allocation failure and key validation."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from avlarena import (
    ArenaConfig,
    AVLTree,
    AVLTreeError,
    CapacityError,
    ConfigError,
    InvalidKeyError,
)
from avlarena.layout import MAX_CAPACITY


def test_default_config_is_valid() -> None:
    assert ArenaConfig().validate() == []


@pytest.mark.parametrize(
    "config, problem",
    [
        (ArenaConfig(initial_capacity=-1), "initial_capacity cannot be negative"),
        (ArenaConfig(growth_factor=1.0), "growth_factor must be greater than 1.0"),
        (ArenaConfig(max_capacity=MAX_CAPACITY + 1), "max_capacity cannot exceed"),
        (ArenaConfig(initial_capacity=10, max_capacity=5), "initial_capacity cannot exceed max_capacity"),
    ],
)
def test_config_validation_reports_problems(config, problem) -> None:
    problems = config.validate()
    assert any(p.startswith(problem) for p in problems), problems


def test_invalid_config_is_rejected_by_tree() -> None:
    with pytest.raises(ConfigError) as excinfo:
        AVLTree(config=ArenaConfig(growth_factor=0.5))
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.problems == ["growth_factor must be greater than 1.0"]


def test_fixed_config_does_not_grow() -> None:
    config = ArenaConfig.fixed(5)
    assert config.growable is False
    assert config.initial_capacity == config.max_capacity == 5
    assert config.validate() == []


def test_preallocated_config_grows_past_initial_size() -> None:
    config = ArenaConfig.preallocated(1000)
    assert config.growable is True
    assert AVLTree(config=config).capacity == 1000


def test_next_capacity_multiplies_and_clips() -> None:
    config = ArenaConfig(max_capacity=6)
    assert ArenaConfig().next_capacity(4, 5) == 8
    assert ArenaConfig().next_capacity(0, 1) == 1
    assert ArenaConfig().next_capacity(4, 20) == 32
    assert config.next_capacity(4, 5) == 6


def test_full_arena_refuses_insert_and_keeps_tree(assert_valid) -> None:
    tree = AVLTree([1, 2, 3], config=ArenaConfig.fixed(3))
    before = tree.nodes.copy()
    root = tree.root

    with pytest.raises(CapacityError) as excinfo:
        tree.insert(4)

    assert excinfo.value.capacity == 3
    assert isinstance(excinfo.value, MemoryError)
    assert isinstance(excinfo.value, AVLTreeError)
    assert tree.root == root
    assert len(tree) == 3
    assert np.array_equal(tree.nodes, before)
    assert not tree.search(4)
    assert_valid(tree)


def test_full_arena_still_reports_duplicates() -> None:
    tree = AVLTree([1, 2, 3], config=ArenaConfig.fixed(3))
    assert tree.insert(2) is False


def test_full_arena_accepts_insert_after_delete() -> None:
    tree = AVLTree([1, 2, 3], config=ArenaConfig.fixed(3))
    tree.delete(2)
    assert tree.insert(4) is True
    assert list(tree) == [1, 3, 4]


def test_insert_many_stops_at_capacity() -> None:
    tree = AVLTree(config=ArenaConfig.fixed(3))
    with pytest.raises(CapacityError):
        tree.insert_many([5, 1, 5, 3, 4, 2])

    assert list(tree) == [1, 3, 5]
    assert tree.validate().ok


def test_growable_arena_grows_on_demand(caplog, assert_valid) -> None:
    caplog.set_level(logging.DEBUG, logger="avlarena.tree")
    tree = AVLTree(config=ArenaConfig(initial_capacity=2))

    for key in range(10):
        assert tree.insert(key)

    assert tree.capacity >= 10
    assert list(tree) == list(range(10))
    assert "Growing AVL arena from 2 to 4 nodes" in caplog.text
    assert_valid(tree)


def test_insert_many_grows_once_for_the_batch(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="avlarena.tree")
    tree = AVLTree(np.arange(100), config=ArenaConfig(initial_capacity=4))

    assert len(tree) == 100
    assert tree.capacity == 128
    assert caplog.text.count("Growing AVL arena") == 1
    assert tree.validate().ok


def test_grow_respects_max_capacity(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="avlarena.tree")
    tree = AVLTree(config=ArenaConfig(initial_capacity=2, max_capacity=3))

    tree.insert(1)
    tree.insert(2)
    tree.insert(3)
    assert tree.capacity == 3

    with pytest.raises(CapacityError):
        tree.insert(4)
    assert "insert refused" in caplog.text


def test_empty_arena_grows_from_zero() -> None:
    tree = AVLTree(config=ArenaConfig(initial_capacity=0))
    assert tree.insert(7)
    assert tree.capacity == 1


@pytest.mark.parametrize("key", ["7", 7.0, None, True, np.bool_(False)])
def test_non_integer_keys_are_rejected(key) -> None:
    tree = AVLTree()
    with pytest.raises(InvalidKeyError):
        tree.insert(key)
    with pytest.raises(TypeError):
        tree.delete(key)
    assert key not in tree


@pytest.mark.parametrize("key", [2 ** 63, -(2 ** 63) - 1])
def test_out_of_range_keys_are_rejected(key) -> None:
    tree = AVLTree()
    with pytest.raises(InvalidKeyError):
        tree.insert(key)
    assert key not in tree


def test_numpy_integer_keys_are_accepted() -> None:
    tree = AVLTree()
    assert tree.insert(np.int32(5))
    assert tree.insert(np.uint8(3))
    assert np.int64(5) in tree
    assert list(tree) == [3, 5]


def test_bulk_keys_must_be_integer_arrays() -> None:
    tree = AVLTree()
    with pytest.raises(InvalidKeyError):
        tree.insert_many(np.array([1.5, 2.5]))
    with pytest.raises(InvalidKeyError):
        tree.insert_many(np.array([2 ** 64 - 1], dtype=np.uint64))
    with pytest.raises(InvalidKeyError):
        tree.insert_many([1, "2"])
    assert len(tree) == 0
