"""
Data containers exchanged by the nested MuSig2 primitives.

Round-1 values are vectors of `nu` components: the leaf's secret nonces and
their public commitments. Inner nodes only ever see commitments.
"""

from __future__ import annotations

from ...types import StrictBaseModel
from ..secp256k1 import Point, Scalar


class KeyPair(StrictBaseModel):
    """A participant's signing key pair."""

    secret_key: Scalar
    """The secret scalar `x`. **MUST BE KEPT CONFIDENTIAL.**"""

    public_key: Point
    """The public point `X = x * G`."""


class Round1State(StrictBaseModel):
    """
    A leaf's secret round-1 state. **MUST BE KEPT CONFIDENTIAL.**

    Using the same state for two round-2 signatures leaks the secret key.
    """

    nonces: tuple[Scalar, ...]
    """The secret nonces `r_1..r_nu`."""

    def __len__(self) -> int:
        return len(self.nonces)


class Round1Out(StrictBaseModel):
    """
    Public round-1 output of a leaf or a subtree.

    For a leaf these are `R_k = r_k * G`. For an inner node they are either
    the sum of the children's outputs or that sum extended to the node's
    tree position.
    """

    commitments: tuple[Point, ...]
    """The public nonce commitments, one per nonce."""

    def __len__(self) -> int:
        return len(self.commitments)

    def __bytes__(self) -> bytes:
        """Concatenated compressed encodings of the commitments."""
        return b"".join(bytes(c) for c in self.commitments)


type Round2Result = tuple[Point, Scalar]
"""
Round-2 state and output of a node: the final nonce `R` and a response `s`.

At the root this pair is the completed Schnorr signature.
"""

type AuthPath = tuple[tuple[Point, ...], ...]
"""
Sibling keys per tree level, ordered from the root downward.

Entry `i` holds the siblings met at depth `i` on the way from the root to
the node the path belongs to.
"""
