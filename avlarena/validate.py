"""Structural validation for AVL arenas.

The validator is a test and debugging aid; the engine never calls it. It
walks the tree once and checks each invariant independently, so a report can
name every invariant that is broken rather than stopping at the first:

* ``BST_ORDER`` – every key lies strictly between the bounds set by its
  ancestors.
* ``BALANCE`` – ``|height(left) - height(right)| <= 1`` using the true
  subtree heights measured from the links.
* ``HEIGHT_CACHE`` – each node's stored height equals its true height.
* ``NODE_COUNT`` – the reachable node count matches the arena's live count
  and no node is reachable twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from .layout import NIL
from .traversal import read_row

logger = logging.getLogger(__name__)


class Invariant(Enum):
    """Invariants checked by :func:`validate`."""

    BST_ORDER = "bst_order"
    BALANCE = "balance"
    HEIGHT_CACHE = "height_cache"
    NODE_COUNT = "node_count"


@dataclass(frozen=True)
class Violation:
    """A single invariant failure located at the node holding *key*."""

    invariant: Invariant
    key: Optional[int]
    message: str


@dataclass
class ValidationReport:
    """Outcome of validating one tree."""

    node_count: int = 0
    height: int = -1
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return ``True`` when no invariant is violated."""

        return not self.violations

    @property
    def failed(self) -> Tuple[Invariant, ...]:
        """Violated invariants, each listed once in check order."""

        seen = {violation.invariant for violation in self.violations}
        return tuple(invariant for invariant in Invariant if invariant in seen)

    def __bool__(self) -> bool:
        return self.ok

    def summary(self) -> str:
        """One line per violation, or ``"ok"``."""

        if self.ok:
            return "ok"
        return "\n".join(
            f"{violation.invariant.value}: {violation.message}"
            for violation in self.violations
        )


def validate(
    nodes: np.ndarray,
    root: int,
    expected_count: Optional[int] = None,
) -> ValidationReport:
    """Check every AVL invariant of the tree rooted at *root*.

    Args:
        nodes: Arena node array.
        root: Root index, ``0`` for an empty tree.
        expected_count: Live node count the arena claims to hold. When
            given, a different reachable count is a ``NODE_COUNT`` violation.

    Returns:
        A :class:`ValidationReport`; ``report.ok`` is ``True`` for a valid
        tree. An empty tree is valid.
    """

    report = ValidationReport()
    true_heights: Dict[int, int] = {NIL: -1}
    visited = set()

    def record(invariant: Invariant, key: Optional[int], message: str) -> None:
        logger.debug("AVL invariant %s violated: %s", invariant.value, message)
        report.violations.append(Violation(invariant, key, message))

    # Entries: (index, lower bound, upper bound, children_done)
    stack: List[Tuple[int, Optional[int], Optional[int], bool]] = []
    if root != NIL:
        stack.append((root, None, None, False))

    while stack:
        index, low, high, children_done = stack.pop()
        key, left, right, stored = read_row(nodes, index)

        if children_done:
            left_height = true_heights.get(left, -1)
            right_height = true_heights.get(right, -1)
            actual = 1 + max(left_height, right_height)
            true_heights[index] = actual

            if stored != actual:
                record(
                    Invariant.HEIGHT_CACHE,
                    key,
                    f"key={key}: stored height {stored}, actual {actual}",
                )

            balance = left_height - right_height
            if balance < -1 or balance > 1:
                record(
                    Invariant.BALANCE,
                    key,
                    f"key={key}: balance factor {balance}",
                )
            continue

        if index in visited:
            record(
                Invariant.NODE_COUNT,
                key,
                f"key={key}: node {index} reachable more than once",
            )
            continue
        visited.add(index)

        if (low is not None and key <= low) or (high is not None and key >= high):
            record(
                Invariant.BST_ORDER,
                key,
                f"key={key}: outside bounds ({low}, {high})",
            )

        stack.append((index, low, high, True))
        if right != NIL:
            stack.append((right, key, high, False))
        if left != NIL:
            stack.append((left, low, key, False))

    report.node_count = len(visited)
    report.height = true_heights.get(root, -1)

    if expected_count is not None and expected_count != report.node_count:
        record(
            Invariant.NODE_COUNT,
            None,
            f"{report.node_count} nodes reachable, arena reports {expected_count}",
        )

    return report


__all__ = [
    "Invariant",
    "Violation",
    "ValidationReport",
    "validate",
]
