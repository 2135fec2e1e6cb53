"""
Defines the pairwise signing primitives of nested MuSig2.

Specification for the functions a binary aggregation tree is driven with:
key generation and aggregation, the round-1 nonce functions (`sign_round1`,
`sign_agg`, `sign_agg_ext`), the round-2 functions (`sign_prime`,
`sign_agg_prime`) and verification (`verify`).

### Nesting

Every inner node of the tree is itself a MuSig2 "signer" whose key is the
aggregate of its two children. Its nonce vector is the sum of its children's
vectors, re-randomised by `sign_agg_ext` with coefficients bound to the
node's key. The transformation is linear, so a leaf can compute how its own
nonces flow into the root nonce from public data alone: the round-1
aggregates of its ancestors and the sibling keys along its path.

The completed signature `(R, s)` is an ordinary Schnorr signature under the
root aggregate key:

    s * G == R + c * X_root,   c = H(R || X_root || m)
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import model_validator

from nested_musig.config import NESTED_MUSIG_ENV
from nested_musig.types import StrictBaseModel

from ..secp256k1 import G, Point, Scalar
from .constants import DEFAULT_PARAMS, Params
from .containers import AuthPath, KeyPair, Round1Out, Round1State, Round2Result
from .hashes import challenge, key_agg_coeff, key_sort, nonce_ext_coeffs, nonce_sign_coeff
from .rand import PROD_RAND, TEST_RAND, Rand


def _collapse(coeff: Scalar, output: Round1Out) -> Point:
    """Compute `sum_k coeff^k * A_k` over an output vector."""
    return Point.sum([a_k * coeff**k for k, a_k in enumerate(output.commitments)])


class NestedMusigScheme(StrictBaseModel):
    """Instance of the nested MuSig2 primitives for a given parameter set."""

    params: Params
    """Public parameters: nonce count and hash domain."""

    rand: Rand
    """Source of secret keys and nonces."""

    @model_validator(mode="after")
    def enforce_strict_types(self) -> "NestedMusigScheme":
        """Reject subclasses to prevent type confusion attacks."""
        if type(self.params) is not Params:
            raise TypeError("params must be exactly Params, not a subclass")
        if type(self.rand) is not Rand:
            raise TypeError("rand must be exactly Rand, not a subclass")
        return self

    def key_gen(self) -> KeyPair:
        """Generates a fresh key pair."""
        secret_key = self.rand.scalar()
        return KeyPair(secret_key=secret_key, public_key=G * secret_key)

    def key_agg(self, keys: Sequence[Point]) -> Point:
        """
        Aggregates a set of public keys into one.

        `X = sum_i a_i * X_i`, where each `a_i` commits to the sorted key set.
        The result does not depend on the order of `keys`.

        Raises:
            ValueError: If `keys` is empty or the aggregate is the identity.
        """
        if len(keys) == 0:
            raise ValueError("Cannot aggregate an empty key set")
        ordered = key_sort(keys)
        aggregate = Point.sum([key * key_agg_coeff(self.params, ordered, key) for key in ordered])
        # The identity only appears with negligible probability, or for
        # adversarially chosen keys.
        if aggregate.is_infinity():
            raise ValueError("Aggregate key is the point at infinity")
        return aggregate

    def sign_round1(self, nonce_count: int) -> tuple[Round1Out, Round1State]:
        """
        Starts round 1 for one leaf.

        Draws `nonce_count` secret nonces and commits to them.

        Returns:
            The public output and the secret state to keep for round 2.

        Raises:
            ValueError: If `nonce_count` does not match the parameter set.
        """
        if nonce_count != self.params.NONCE_COUNT:
            raise ValueError(
                f"Expected {self.params.NONCE_COUNT} nonces per signer, got {nonce_count}"
            )
        nonces = tuple(self.rand.scalars(nonce_count))
        out = Round1Out(commitments=tuple(G * r for r in nonces))
        return out, Round1State(nonces=nonces)

    def sign_agg(self, outs: Sequence[Round1Out]) -> Round1Out:
        """
        Aggregates sibling round-1 outputs component-wise.

        Raises:
            ValueError: If there are no outputs or their lengths differ.
        """
        if len(outs) == 0:
            raise ValueError("Cannot aggregate zero round-1 outputs")
        width = len(outs[0])
        if any(len(out) != width for out in outs):
            raise ValueError("Round-1 outputs have different nonce counts")
        return Round1Out(
            commitments=tuple(
                Point.sum([out.commitments[k] for out in outs]) for k in range(width)
            )
        )

    def sign_agg_ext(self, out: Round1Out, aggregate_key: Point) -> Round1Out:
        """
        Binds an aggregated round-1 output to a tree position.

        With coefficients `b_j` derived from the node's aggregate key and the
        aggregated vector `A`, the extended vector is

            E_j = sum_k b_j^k * A_k

        which is what the node's parent sees as this subtree's contribution.
        """
        if len(out) != self.params.NONCE_COUNT:
            raise ValueError(
                f"Expected {self.params.NONCE_COUNT} commitments, got {len(out)}"
            )
        coeffs = nonce_ext_coeffs(self.params, aggregate_key, out)
        return Round1Out(commitments=tuple(_collapse(b_j, out) for b_j in coeffs))

    def sign_prime(
        self,
        state: Round1State,
        outs_by_depth: Sequence[Round1Out],
        secret_key: Scalar,
        message: bytes,
        auth_path: AuthPath,
    ) -> Round2Result:
        """
        Produces a leaf's round-2 partial signature.

        ### Algorithm

        1.  **Key climb**: Starting from the leaf key, aggregate with the
            siblings of each level of `auth_path` (deepest first). This yields
            every ancestor's aggregate key, the root key `X`, and the product
            `mu` of the leaf's aggregation coefficients along the way.

        2.  **Nonce climb**: Starting from the identity matrix, compose the
            extension of every non-root ancestor, using its round-1 aggregate
            from `outs_by_depth`. Row `j` of the result says how the leaf's
            nonces appear in component `j` of the root's aggregate.

        3.  **Collapse**: Derive the message-bound coefficient `b` from the
            root aggregate and compute the final nonce `R` and challenge `c`.

        4.  **Respond**: `s = sum_k w_k * r_k + c * mu * x`, where `w` is the
            collapsed nonce weight of the leaf.

        Args:
            state: The leaf's secret round-1 state.
            outs_by_depth: Round-1 aggregates of the ancestors, root first.
            secret_key: The leaf's secret key.
            message: The message being signed.
            auth_path: Sibling keys per level, root first.

        Returns:
            The final nonce `R` and this leaf's response share `s`.

        Raises:
            ValueError: On inconsistent context lengths or nonce counts.
        """
        depth = len(auth_path)
        if len(outs_by_depth) != depth:
            raise ValueError(
                f"Outer context has {len(outs_by_depth)} levels, "
                f"authentication path has {depth}"
            )
        nu = len(state)
        if nu != self.params.NONCE_COUNT:
            raise ValueError(f"Expected {self.params.NONCE_COUNT} nonces, got {nu}")
        if any(len(out) != nu for out in outs_by_depth):
            raise ValueError("Outer context has a round-1 output of the wrong width")
        if secret_key.is_zero():
            raise ValueError("Secret key must be non-zero")

        # Key climb, from the leaf's parent up to the root.
        public_key = G * secret_key
        ancestor_keys: list[Point] = [public_key] * depth
        mu = Scalar.one()
        current = public_key
        for level in reversed(range(depth)):
            keys = [current, *auth_path[level]]
            mu = mu * key_agg_coeff(self.params, keys, current)
            current = self.key_agg(keys)
            ancestor_keys[level] = current
        aggregate_key = current

        # A lone leaf is its own root: its aggregate is its own output.
        if depth == 0:
            root_out = Round1Out(commitments=tuple(G * r for r in state.nonces))
        else:
            root_out = outs_by_depth[0]

        # Nonce climb over the non-root ancestors, from the parent upward.
        matrix = [[Scalar.one() if j == i else Scalar.zero() for i in range(nu)] for j in range(nu)]
        for level in range(depth - 1, 0, -1):
            coeffs = nonce_ext_coeffs(self.params, ancestor_keys[level], outs_by_depth[level])
            matrix = [
                [
                    sum(
                        (b_j**k * matrix[k][i] for k in range(nu)),
                        start=Scalar.zero(),
                    )
                    for i in range(nu)
                ]
                for b_j in coeffs
            ]

        b = nonce_sign_coeff(self.params, aggregate_key, root_out, message)
        nonce = _collapse(b, root_out)
        if nonce.is_infinity():
            raise ValueError("Final nonce is the point at infinity")
        c = challenge(self.params, nonce, aggregate_key, message)

        response = c * mu * secret_key
        for i, r_i in enumerate(state.nonces):
            weight = sum((b**j * matrix[j][i] for j in range(nu)), start=Scalar.zero())
            response = response + weight * r_i
        return nonce, response

    def sign_agg_prime(self, parts: Sequence[Round2Result]) -> Round2Result:
        """
        Aggregates the round-2 results of sibling subtrees.

        Honest subtrees all derive the same final nonce, so the first one is
        kept. A subtree that signed with the wrong key derives a different
        nonce; that is not detected here but makes `verify` reject.

        Raises:
            ValueError: If there are no parts.
        """
        if len(parts) == 0:
            raise ValueError("Cannot aggregate zero round-2 results")
        nonce = parts[0][0]
        response = sum((s for _, s in parts), start=Scalar.zero())
        return nonce, response

    def verify(self, aggregate_key: Point, message: bytes, signature: Round2Result) -> bool:
        """
        Verifies a completed signature against an aggregate key.

        Returns:
            `True` if `s * G == R + c * X`, `False` otherwise.
        """
        nonce, response = signature
        if nonce.is_infinity() or aggregate_key.is_infinity():
            return False
        c = challenge(self.params, nonce, aggregate_key, message)
        return G * response == nonce + aggregate_key * c


PROD_SCHEME = NestedMusigScheme(params=DEFAULT_PARAMS, rand=PROD_RAND)
"""An instance drawing keys and nonces from the OS entropy source."""

TEST_SCHEME = NestedMusigScheme(params=DEFAULT_PARAMS, rand=TEST_RAND)
"""A reproducible instance for test environments."""

DEFAULT_SCHEME = TEST_SCHEME if NESTED_MUSIG_ENV == "test" else PROD_SCHEME
"""The scheme selected by the `NESTED_MUSIG_ENV` environment flag."""
