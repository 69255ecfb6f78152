from __future__ import annotations

from typing import Iterable

import numpy as np
import pytest

from avlarena import AVLTree
from avlarena.layout import pack, set_node


@pytest.fixture
def assert_valid():
    """Return a checker asserting that a tree satisfies every AVL invariant."""

    def check(tree: AVLTree) -> None:
        report = tree.validate()
        assert report.ok, report.summary()
        assert list(tree.inorder()) == sorted(tree.inorder())

    return check


@pytest.fixture
def build_tree():
    """Return a factory inserting keys one by one, in order."""

    def build(keys: Iterable[int], **kwargs) -> AVLTree:
        tree = AVLTree(**kwargs)
        for key in keys:
            tree.insert(key)
        return tree

    return build


@pytest.fixture
def make_nodes():
    """Return a factory for hand-built arenas.

    Rows are given as ``{index: (key, left, right, height)}``; row 0 stays
    the empty sentinel.
    """

    def make(rows) -> np.ndarray:
        nodes = np.zeros((max(rows) + 1, 2), dtype=np.int64)
        for index, (key, left, right, height) in rows.items():
            set_node(nodes, index, pack(key, left, right, height))
        return nodes

    return make
