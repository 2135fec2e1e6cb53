"""
Hash functions of the nested MuSig2 scheme.

All of them are BIP-340 tagged hashes reduced into the scalar field:

    tagged_hash(tag, msg) = SHA256(SHA256(tag) || SHA256(tag) || msg)

Encodings fed into the hashes are fixed-width (33-byte compressed points,
4-byte big-endian indices), so concatenation is unambiguous.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from ..secp256k1 import Point, Scalar
from .constants import (
    TAG_CHALLENGE,
    TAG_KEYAGG_COEF,
    TAG_KEYAGG_LIST,
    TAG_NONCE_EXT,
    TAG_NONCE_SIGN,
    Params,
)
from .containers import Round1Out


def tagged_hash(tag: str, msg: bytes) -> bytes:
    """BIP-340 tagged SHA256."""
    tag_hash = hashlib.sha256(tag.encode()).digest()
    return hashlib.sha256(tag_hash + tag_hash + msg).digest()


def key_sort(keys: Sequence[Point]) -> list[Point]:
    """Sort public keys by their compressed encoding."""
    return sorted(keys, key=bytes)


def hash_keys(params: Params, sorted_keys: Sequence[Point]) -> bytes:
    """Commitment to the full (sorted) key list."""
    return tagged_hash(params.tag(TAG_KEYAGG_LIST), b"".join(bytes(k) for k in sorted_keys))


def key_agg_coeff(params: Params, keys: Sequence[Point], key: Point) -> Scalar:
    """
    Aggregation coefficient of `key` within the set `keys`.

    The coefficient depends on the set, not on its order, which is what lets
    an authentication path carry siblings without recording left/right.

    Raises:
        ValueError: If `key` is not one of `keys`.
    """
    if key not in keys:
        raise ValueError(f"Key {key} is not part of the aggregated key set")
    list_hash = hash_keys(params, key_sort(keys))
    return Scalar.from_hash(tagged_hash(params.tag(TAG_KEYAGG_COEF), list_hash + bytes(key)))


def nonce_ext_coeffs(params: Params, aggregate_key: Point, output: Round1Out) -> list[Scalar]:
    """
    Coefficients `b_1..b_nu` used to extend an aggregated nonce vector.

    One coefficient per output component, each bound to the node's aggregate
    key and to the whole aggregated vector.
    """
    prefix = bytes(aggregate_key) + bytes(output)
    tag = params.tag(TAG_NONCE_EXT)
    return [
        Scalar.from_hash(tagged_hash(tag, prefix + j.to_bytes(4, byteorder="big")))
        for j in range(len(output))
    ]


def nonce_sign_coeff(
    params: Params, aggregate_key: Point, output: Round1Out, message: bytes
) -> Scalar:
    """Coefficient collapsing the root nonce vector into the final nonce `R`."""
    return Scalar.from_hash(
        tagged_hash(params.tag(TAG_NONCE_SIGN), bytes(aggregate_key) + bytes(output) + message)
    )


def challenge(params: Params, nonce: Point, aggregate_key: Point, message: bytes) -> Scalar:
    """Schnorr challenge `c = H(R || X || m)`."""
    return Scalar.from_hash(
        tagged_hash(params.tag(TAG_CHALLENGE), bytes(nonce) + bytes(aggregate_key) + message)
    )
