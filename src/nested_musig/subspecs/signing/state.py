"""
Per-node protocol state for one signing session.

The aggregation tree is immutable. Everything the two rounds compute lives
here instead, in a mapping from a node's value (its aggregate public key) to
a mutable `NodeState` record.

Write order:

- One entry per leaf is registered before round 1.
- Round 1 fills in leaf nonce state and adds one entry per inner node.
- Round 2 fills in the round-2 fields of every node, ending at the root.

Every field is written once and only read after it was written. The one
exception is a single-child node, whose round-1 result replaces its child's
output under the shared key. Reading a field that is still unset means the
rounds ran out of order, which is reported as a `StructuralInconsistencyError`
and never defaulted.
"""

from __future__ import annotations

from dataclasses import dataclass

from nested_musig.types import StructuralInconsistencyError

from ..musig import Round1Out, Round1State, Round2Result
from ..secp256k1 import Point, Scalar


@dataclass(slots=True)
class NodeState:
    """Signing state of one tree node."""

    secret_key: Scalar | None = None
    """Set only for leaves controlled locally."""

    round1_state: Round1State | None = None
    """A leaf's secret nonces. Cleared once round 2 consumed them."""

    round1_output: Round1Out | None = None
    """A leaf's commitments, or an inner node's extended aggregate."""

    round1_internal_output: Round1Out | None = None
    """An inner node's aggregate before extension. Round-2 context for its subtree."""

    round2_state: Point | None = None
    """The final nonce `R` as seen by this subtree."""

    round2_output: Scalar | None = None
    """This subtree's share `s` of the response."""


def _short(public_key: Point) -> str:
    return public_key.hex()[:16]


class StateStore:
    """Mapping from node public key to its `NodeState`, live for one session."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[Point, NodeState] = {}

    def __contains__(self, public_key: object) -> bool:
        return public_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def register_leaf(self, public_key: Point, secret_key: Scalar | None = None) -> NodeState:
        """
        Add the entry for one leaf before round 1.

        Raises:
            StructuralInconsistencyError: If the key is already registered.
        """
        if public_key in self._entries:
            raise StructuralInconsistencyError(
                f"Public key {_short(public_key)} is registered twice"
            )
        entry = NodeState(secret_key=secret_key)
        self._entries[public_key] = entry
        return entry

    def record_internal(
        self, public_key: Point, output: Round1Out, internal_output: Round1Out
    ) -> NodeState:
        """
        Record an inner node's round-1 result.

        A single-child node shares its child's key, so its result lands on
        the child's existing entry and replaces the child's round-1 output
        with the extended one. The child's own output has already been read
        by then. Such a node cannot be signed through in round 2.
        """
        entry = self._entries.setdefault(public_key, NodeState())
        entry.round1_output = output
        entry.round1_internal_output = internal_output
        return entry

    def get(self, public_key: Point) -> NodeState | None:
        """The entry for `public_key`, if any."""
        return self._entries.get(public_key)

    def entry(self, public_key: Point) -> NodeState:
        """
        The entry for `public_key`.

        Raises:
            StructuralInconsistencyError: If the node has no entry.
        """
        entry = self.get(public_key)
        if entry is None:
            raise StructuralInconsistencyError(f"No state for node {_short(public_key)}")
        return entry

    def require_secret_key(self, public_key: Point) -> Scalar:
        """A leaf's secret key, which must have been registered."""
        secret_key = self.entry(public_key).secret_key
        if secret_key is None:
            raise StructuralInconsistencyError(
                f"Leaf {_short(public_key)} has no local secret key"
            )
        return secret_key

    def require_round1_state(self, public_key: Point) -> Round1State:
        """A leaf's secret round-1 state, which must not have been consumed yet."""
        state = self.entry(public_key).round1_state
        if state is None:
            raise StructuralInconsistencyError(
                f"Leaf {_short(public_key)} has no unused round-1 state"
            )
        return state

    def require_round1_output(self, public_key: Point) -> Round1Out:
        """A node's round-1 output, as contributed to its parent."""
        output = self.entry(public_key).round1_output
        if output is None:
            raise StructuralInconsistencyError(
                f"Node {_short(public_key)} has not completed round 1"
            )
        return output

    def require_round1_internal_output(self, public_key: Point) -> Round1Out:
        """An inner node's pre-extension round-1 aggregate."""
        output = self.entry(public_key).round1_internal_output
        if output is None:
            raise StructuralInconsistencyError(
                f"Inner node {_short(public_key)} has no round-1 aggregate"
            )
        return output

    def require_round2(self, public_key: Point) -> Round2Result:
        """A node's round-2 state and output."""
        entry = self.entry(public_key)
        if entry.round2_state is None or entry.round2_output is None:
            raise StructuralInconsistencyError(
                f"Node {_short(public_key)} has not completed round 2"
            )
        return entry.round2_state, entry.round2_output
