"""Specifications for the secp256k1 curve and its scalar field."""

from .curve import COMPRESSED_POINT_BYTES, G, Point
from .field import N, P, SCALAR_BYTES, Scalar

__all__ = [
    "P",
    "N",
    "G",
    "SCALAR_BYTES",
    "COMPRESSED_POINT_BYTES",
    "Point",
    "Scalar",
]
