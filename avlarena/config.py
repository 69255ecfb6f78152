"""Configuration for avlarena trees.

An ArenaConfig says how many nodes to preallocate and what to do when the
arena runs out of rows: grow by a factor, or refuse the insert.
"""

from dataclasses import dataclass
from typing import List

from .layout import MAX_CAPACITY


@dataclass
class ArenaConfig:
    """Sizing policy for the node arena of an AVLTree."""

    initial_capacity: int = 64          # Nodes allocated up front
    growable: bool = True               # Reallocate when full vs raise CapacityError
    growth_factor: float = 2.0          # Multiplier applied on each reallocation
    max_capacity: int = MAX_CAPACITY    # Hard ceiling, bounded by the 28-bit index

    @classmethod
    def fixed(cls, capacity: int) -> 'ArenaConfig':
        """Create a config that never reallocates.

        Args:
            capacity: Exact number of nodes the tree can hold

        Returns:
            ArenaConfig whose inserts fail once `capacity` nodes are live
        """
        return cls(
            initial_capacity=capacity,
            growable=False,
            max_capacity=capacity,
        )

    @classmethod
    def preallocated(cls, capacity: int) -> 'ArenaConfig':
        """Create a growable config sized for `capacity` nodes up front."""
        return cls(initial_capacity=capacity)

    def next_capacity(self, current: int, required: int) -> int:
        """Capacity to grow to so that at least `required` nodes fit.

        Args:
            current: Current arena capacity
            required: Number of nodes that must fit after growing

        Returns:
            New capacity, clipped to max_capacity
        """
        capacity = max(current, 1)
        while capacity < required:
            capacity = max(capacity + 1, int(capacity * self.growth_factor))
        return min(capacity, self.max_capacity)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.initial_capacity < 0:
            errors.append("initial_capacity cannot be negative")

        if self.max_capacity < 0:
            errors.append("max_capacity cannot be negative")
        elif self.max_capacity > MAX_CAPACITY:
            errors.append(f"max_capacity cannot exceed {MAX_CAPACITY}")

        if self.initial_capacity > self.max_capacity:
            errors.append("initial_capacity cannot exceed max_capacity")

        if self.growable and self.growth_factor <= 1.0:
            errors.append("growth_factor must be greater than 1.0")

        return errors
