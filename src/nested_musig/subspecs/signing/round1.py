"""
Round 1 of tree signing: nonce commitments, children before parents.

### Algorithm

A post-order walk over the tree:

- **Leaf**: start round 1 for the participant and store its secret nonce
  state and public commitments.
- **Inner node with two children**: finish both subtrees, aggregate their
  round-1 outputs, then extend the aggregate with the node's own key. The
  extended vector is what the parent aggregates; the plain aggregate is kept
  as well, because it is the context round 2 needs at this level.
- **Inner node with one child**: nothing to aggregate, so the child's output
  is extended directly.

Round 1 must finish over the whole tree before round 2 starts anywhere,
since round 2 at a node reads aggregates of every ancestor.
"""

from __future__ import annotations

import logging

from ..musig import Params
from ..secp256k1 import Point
from ..tree import BinTree, Leaf, Node
from .backend import SigningBackend
from .state import StateStore

logger = logging.getLogger(__name__)


def run_round1(
    tree: BinTree[Point],
    store: StateStore,
    backend: SigningBackend,
    params: Params,
) -> None:
    """
    Computes and stores the round-1 output of every node in `tree`.

    Args:
        tree: The aggregation tree over the participants' public keys.
        store: State store with one registered entry per leaf.
        backend: The signing primitives.
        params: Protocol parameters.

    Raises:
        PrimitiveFailureError: If any primitive call fails.
        StructuralInconsistencyError: If a leaf has no registered entry.
    """
    match tree:
        case Leaf(value=public_key):
            entry = store.entry(public_key)
            state, output = backend.round1_begin(params.NONCE_COUNT)
            entry.round1_state = state
            entry.round1_output = output
            logger.debug("Round 1 leaf %s committed", public_key.hex()[:16])

        case Node(left=left, right=right, value=public_key):
            run_round1(left, store, backend, params)
            internal_output = store.require_round1_output(left.value)

            if right is not None:
                run_round1(right, store, backend, params)
                right_output = store.require_round1_output(right.value)
                internal_output = backend.round1_aggregate([internal_output, right_output])

            output = backend.round1_extend(params, internal_output, public_key)
            store.record_internal(public_key, output, internal_output)
            logger.debug("Round 1 node %s aggregated", public_key.hex()[:16])
