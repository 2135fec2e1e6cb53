"""
Signing session orchestrator.

Wires the aggregation tree, the state store and the two round traversals
into one n-of-n signing run:

    build tree -> round 1 -> round 2 -> read root signature -> verify

A session signs exactly once. It owns its state store, which carries nonce
secrets and is dropped with the session.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from nested_musig.types import EmptyInputError, StructuralInconsistencyError

from ..musig import DEFAULT_PARAMS, KeyPair, Params, Round2Result
from ..secp256k1 import Point
from ..tree import BinTree
from .backend import MusigBackend, SigningBackend
from .round1 import run_round1
from .round2 import run_round2
from .state import StateStore

logger = logging.getLogger(__name__)


class Phase(Enum):
    """How far a session has progressed."""

    CREATED = auto()
    """Tree built, leaves registered."""

    ROUND1_DONE = auto()
    """Every node holds its round-1 output."""

    ROUND2_DONE = auto()
    """Every node holds its round-2 result; the root's is the signature."""


@dataclass(slots=True)
class SigningSession:
    """
    One n-of-n signing run over a binary aggregation tree.

    Use `SigningSession.create` rather than the constructor.
    """

    tree: BinTree[Point]
    """Aggregation tree over the participants' public keys."""

    store: StateStore
    """Per-node protocol state."""

    backend: SigningBackend
    """The signing primitives."""

    params: Params
    """Protocol parameters passed to every primitive that takes them."""

    phase: Phase = field(default=Phase.CREATED)
    """Current progress."""

    message: bytes | None = field(default=None)
    """The message signed in round 2."""

    @classmethod
    def create(
        cls,
        keypairs: Sequence[KeyPair],
        backend: SigningBackend | None = None,
        params: Params = DEFAULT_PARAMS,
    ) -> SigningSession:
        """
        Registers the participants and builds their aggregation tree.

        The order of `keypairs` fixes the tree shape.

        Args:
            keypairs: One key pair per local participant, in tree order.
            backend: The signing primitives. Defaults to the reference scheme.
            params: Protocol parameters.

        Raises:
            EmptyInputError: If there are no participants.
            StructuralInconsistencyError: If two participants share a public key.
            PrimitiveFailureError: If key aggregation fails.
        """
        if len(keypairs) == 0:
            raise EmptyInputError("cannot sign with zero participants")
        backend = backend if backend is not None else MusigBackend()

        store = StateStore()
        for keypair in keypairs:
            store.register_leaf(keypair.public_key, keypair.secret_key)

        tree = BinTree.from_values([kp.public_key for kp in keypairs], backend.key_combine)
        logger.info(
            "Built aggregation tree: %d leaves, height %d", tree.leaf_count(), tree.height()
        )
        return cls(tree=tree, store=store, backend=backend, params=params)

    @property
    def aggregate_key(self) -> Point:
        """The root aggregate public key the signature verifies under."""
        return self.tree.value

    def run_round1(self) -> None:
        """
        Runs round 1 over the whole tree.

        Raises:
            StructuralInconsistencyError: If round 1 already ran.
            PrimitiveFailureError: If any primitive call fails.
        """
        if self.phase is not Phase.CREATED:
            raise StructuralInconsistencyError(f"Round 1 cannot run in phase {self.phase.name}")
        run_round1(self.tree, self.store, self.backend, self.params)
        self.phase = Phase.ROUND1_DONE
        logger.info("Round 1 complete: %d nodes committed", len(self.store))

    def run_round2(self, message: bytes) -> None:
        """
        Runs round 2 over the whole tree, signing `message`.

        Starts from the root with an empty outer context and an empty
        authentication path.

        Raises:
            StructuralInconsistencyError: If round 1 has not completed, or
                round 2 already ran.
            PrimitiveFailureError: If any primitive call fails.
        """
        if self.phase is not Phase.ROUND1_DONE:
            raise StructuralInconsistencyError(f"Round 2 cannot run in phase {self.phase.name}")
        run_round2(self.tree, self.store, self.backend, self.params, message)
        self.message = message
        self.phase = Phase.ROUND2_DONE
        logger.info("Round 2 complete")

    def signature(self) -> Round2Result:
        """
        The completed signature: the root's round-2 state and output.

        Raises:
            StructuralInconsistencyError: If round 2 has not completed.
        """
        if self.phase is not Phase.ROUND2_DONE:
            raise StructuralInconsistencyError(
                f"No signature available in phase {self.phase.name}"
            )
        return self.store.require_round2(self.aggregate_key)

    def sign(self, message: bytes) -> Round2Result:
        """Runs both rounds and returns the completed signature."""
        self.run_round1()
        self.run_round2(message)
        return self.signature()

    def verify(self, message: bytes | None = None) -> bool:
        """
        Verifies the session's signature under the root aggregate key.

        Args:
            message: The message to check against. Defaults to the one
                signed in round 2.

        Returns:
            `True` if the signature is accepted, `False` otherwise.
        """
        signature = self.signature()
        if message is None:
            assert self.message is not None
            message = self.message
        accepted = self.backend.verify(self.params, self.aggregate_key, message, signature)
        logger.info("Signature %s", "accepted" if accepted else "rejected")
        return accepted
