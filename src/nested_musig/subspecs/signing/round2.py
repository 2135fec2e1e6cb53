"""
Round 2 of tree signing: partial signatures bound to tree positions.

### Algorithm

Context flows down, results flow up.

On the way down, each inner node appends its pre-extension round-1
aggregate to the outer context, and each child's authentication path gains
one level holding the child's sibling key. On the way up, the two children's
round-2 results are aggregated into the node's own.

At a leaf, the partial signature is produced from the leaf's secret key and
nonce state, the message, the outer context and the authentication path.
Together these let the leaf recompute the root key and the root nonce
without seeing any other leaf's state.

An inner node with a single child cannot be signed through: there is no
sibling to put on the path. The tree builder never creates one, so meeting
one here means the tree and the traversal disagree.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from nested_musig.types import StructuralInconsistencyError

from ..musig import AuthPath, Params, Round1Out
from ..secp256k1 import Point
from ..tree import BinTree, Leaf, Node
from .backend import SigningBackend
from .state import StateStore

logger = logging.getLogger(__name__)


def run_round2(
    tree: BinTree[Point],
    store: StateStore,
    backend: SigningBackend,
    params: Params,
    message: bytes,
    outer_context: Sequence[Round1Out] = (),
    auth_path: AuthPath = (),
) -> None:
    """
    Computes and stores the round-2 result of every node in `tree`.

    Args:
        tree: The aggregation tree walked in round 1.
        store: State store completed by round 1.
        backend: The signing primitives.
        params: Protocol parameters.
        message: The message to sign.
        outer_context: Round-1 aggregates of the ancestors of `tree`, root first.
        auth_path: Sibling keys from the root down to `tree`, root first.

    Raises:
        PrimitiveFailureError: If any primitive call fails.
        StructuralInconsistencyError: If a node has one child, or state that
            round 1 should have produced is missing.
    """
    match tree:
        case Leaf(value=public_key):
            state = store.require_round1_state(public_key)
            secret_key = store.require_secret_key(public_key)
            nonce, response = backend.round2_sign(
                params, state, outer_context, secret_key, message, auth_path
            )
            entry = store.entry(public_key)
            # Nonces are single use.
            entry.round1_state = None
            entry.round2_state = nonce
            entry.round2_output = response
            logger.debug(
                "Round 2 leaf %s signed at depth %d", public_key.hex()[:16], len(auth_path)
            )

        case Node(right=None, value=public_key):
            raise StructuralInconsistencyError(
                f"Round 2 reached single-child node {public_key.hex()[:16]}"
            )

        case Node(left=left, right=right, value=public_key):
            assert right is not None
            context = (*outer_context, store.require_round1_internal_output(public_key))

            run_round2(
                left, store, backend, params, message, context, (*auth_path, (right.value,))
            )
            run_round2(
                right, store, backend, params, message, context, (*auth_path, (left.value,))
            )

            nonce, response = backend.round2_aggregate(
                [store.require_round2(left.value), store.require_round2(right.value)]
            )
            entry = store.entry(public_key)
            entry.round2_state = nonce
            entry.round2_output = response
            logger.debug("Round 2 node %s aggregated", public_key.hex()[:16])
