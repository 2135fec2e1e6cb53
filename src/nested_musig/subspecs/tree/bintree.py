"""
Implements the binary aggregation tree used to nest MuSig2 sessions.

### Shape

Participants are the leaves. Each inner node stands for the aggregate of
its two children and caches the value obtained by combining theirs with a
caller-supplied function (for signing, pairwise key aggregation).

The tree is built bottom-up, one level at a time:

1.  Wrap each input value in a `Leaf`.
2.  Scan the level left to right in non-overlapping pairs `(2i, 2i + 1)`,
    combining each pair into a `Node`.
3.  If the level has odd length, carry its last element up unchanged.
4.  Repeat until one node remains. That node is the root.

The shape depends only on the number of leaves, never on their values, so
the same participant ordering always yields the same tree. Both signing
rounds rely on this: the authentication path used in round 2 must describe
exactly the tree walked in round 1.

### Ownership

Nodes own their children outright. There are no parent pointers; anything
position-dependent is passed down explicitly while traversing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from nested_musig.types import EmptyInputError

V = TypeVar("V")

Combine = Callable[[V, V], V]
"""Pairwise aggregation function: `(left, right) -> parent`."""


class BinTree(ABC, Generic[V]):
    """An immutable binary tree whose every node carries a value."""

    __slots__ = ()

    value: V

    @property
    def is_leaf(self) -> bool:
        """Whether this node is a leaf."""
        return isinstance(self, Leaf)

    @property
    def is_node(self) -> bool:
        """Whether this node is an inner node."""
        return isinstance(self, Node)

    @abstractmethod
    def height(self) -> int:
        """Number of levels, counting a lone leaf as height 1."""

    @abstractmethod
    def leaf_count(self) -> int:
        """Number of leaves reachable from this node."""

    @abstractmethod
    def node_count(self) -> int:
        """Number of nodes, leaves included, in this subtree."""

    @abstractmethod
    def leaves(self) -> Iterator[V]:
        """Leaf values, left to right."""

    @staticmethod
    def leaf(value: V) -> Leaf[V]:
        """Create a leaf."""
        return Leaf(value)

    @staticmethod
    def node(left: BinTree[V], right: BinTree[V], agg: Combine[V]) -> Node[V]:
        """Create an inner node whose value is `agg(left.value, right.value)`."""
        return Node(left, right, agg(left.value, right.value))

    @staticmethod
    def carry(left: BinTree[V]) -> Node[V]:
        """Create a single-child inner node that propagates its child's value."""
        return Node(left, None, left.value)

    @classmethod
    def from_values(cls, values: Sequence[V], agg: Combine[V]) -> BinTree[V]:
        """
        Builds a balanced tree over `values`, in order.

        Args:
            values: The leaf values. Must not be empty.
            agg: Combines two sibling values into their parent's value.

        Returns:
            The root of the tree.

        Raises:
            EmptyInputError: If `values` is empty.
        """
        if len(values) == 0:
            raise EmptyInputError()

        level: list[BinTree[V]] = [cls.leaf(v) for v in values]
        while len(level) > 1:
            parents: list[BinTree[V]] = [
                cls.node(left, right, agg) for left, right in zip(level[0::2], level[1::2])
            ]
            # An odd element out moves up a level as it is.
            if len(level) % 2 == 1:
                parents.append(level[-1])
            level = parents
        return level[0]


@dataclass(frozen=True, slots=True)
class Leaf(BinTree[V]):
    """A terminal node representing one participant."""

    value: V
    """The participant's value (its public key, when signing)."""

    def height(self) -> int:
        return 1

    def leaf_count(self) -> int:
        return 1

    def node_count(self) -> int:
        return 1

    def leaves(self) -> Iterator[V]:
        yield self.value


@dataclass(frozen=True, slots=True)
class Node(BinTree[V]):
    """
    An inner node owning its children.

    `right` is only ever None for a node made with `BinTree.carry`, whose
    value is its left child's. `from_values` never produces one.
    """

    left: BinTree[V]
    """The left subtree. Always present."""

    right: BinTree[V] | None
    """The right subtree, or None for a carried-up single child."""

    value: V
    """The combined value of the children."""

    def height(self) -> int:
        right_height = 0 if self.right is None else self.right.height()
        return 1 + max(self.left.height(), right_height)

    def leaf_count(self) -> int:
        right_count = 0 if self.right is None else self.right.leaf_count()
        return self.left.leaf_count() + right_count

    def node_count(self) -> int:
        right_count = 0 if self.right is None else self.right.node_count()
        return 1 + self.left.node_count() + right_count

    def leaves(self) -> Iterator[V]:
        yield from self.left.leaves()
        if self.right is not None:
            yield from self.right.leaves()
