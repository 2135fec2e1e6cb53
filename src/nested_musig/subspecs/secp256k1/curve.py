"""
Group operations on the secp256k1 elliptic curve.

Points are exposed as immutable, hashable models in affine coordinates.
Internally, scalar multiplication runs in Jacobian coordinates so that a
full double-and-add ladder needs a single modular inversion.
"""

from __future__ import annotations

from typing import Self

from pydantic import model_validator

from nested_musig.types import StrictBaseModel

from .field import N, P, Scalar

COMPRESSED_POINT_BYTES: int = 33
"""Size of a SEC1 compressed point encoding."""

_GX: int = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
_GY: int = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

_Jacobian = tuple[int, int, int]
"""(X, Y, Z) with affine x = X/Z^2, y = Y/Z^3. Z == 0 is the point at infinity."""

_JACOBIAN_INFINITY: _Jacobian = (1, 1, 0)


def _jacobian_double(p1: _Jacobian) -> _Jacobian:
    x1, y1, z1 = p1
    if z1 == 0 or y1 == 0:
        return _JACOBIAN_INFINITY
    y1_sq = y1 * y1 % P
    s = 4 * x1 * y1_sq % P
    m = 3 * x1 * x1 % P
    x3 = (m * m - 2 * s) % P
    y3 = (m * (s - x3) - 8 * y1_sq * y1_sq) % P
    z3 = 2 * y1 * z1 % P
    return (x3, y3, z3)


def _jacobian_add(p1: _Jacobian, p2: _Jacobian) -> _Jacobian:
    x1, y1, z1 = p1
    x2, y2, z2 = p2
    if z1 == 0:
        return p2
    if z2 == 0:
        return p1
    z1_sq = z1 * z1 % P
    z2_sq = z2 * z2 % P
    u1 = x1 * z2_sq % P
    u2 = x2 * z1_sq % P
    s1 = y1 * z2_sq * z2 % P
    s2 = y2 * z1_sq * z1 % P
    if u1 == u2:
        if s1 != s2:
            return _JACOBIAN_INFINITY
        return _jacobian_double(p1)
    h = (u2 - u1) % P
    r = (s2 - s1) % P
    h_sq = h * h % P
    h_cu = h * h_sq % P
    u1_h_sq = u1 * h_sq % P
    x3 = (r * r - h_cu - 2 * u1_h_sq) % P
    y3 = (r * (u1_h_sq - x3) - s1 * h_cu) % P
    z3 = h * z1 * z2 % P
    return (x3, y3, z3)


def _jacobian_mul(p1: _Jacobian, k: int) -> _Jacobian:
    result = _JACOBIAN_INFINITY
    for bit in bin(k % N)[2:]:
        result = _jacobian_double(result)
        if bit == "1":
            result = _jacobian_add(result, p1)
    return result


class Point(StrictBaseModel):
    """
    A point on secp256k1 in affine coordinates.

    The point at infinity (the group identity) has both coordinates unset.
    """

    x: int | None = None
    """Affine x coordinate, or None for the point at infinity."""

    y: int | None = None
    """Affine y coordinate, or None for the point at infinity."""

    @model_validator(mode="after")
    def check_on_curve(self) -> "Point":
        """Reject coordinates that do not satisfy y^2 = x^3 + 7."""
        if self.x is None and self.y is None:
            return self
        if self.x is None or self.y is None:
            raise ValueError("Both coordinates must be set, or neither")
        if not (0 <= self.x < P and 0 <= self.y < P):
            raise ValueError("Coordinates must be reduced modulo P")
        if (self.y * self.y - self.x * self.x * self.x - 7) % P != 0:
            raise ValueError("Point is not on the secp256k1 curve")
        return self

    @classmethod
    def infinity(cls) -> Self:
        """The group identity."""
        return cls()

    @classmethod
    def generator(cls) -> Self:
        """The standard secp256k1 base point G."""
        return cls(x=_GX, y=_GY)

    def is_infinity(self) -> bool:
        """Whether this is the group identity."""
        return self.x is None

    def _to_jacobian(self) -> _Jacobian:
        if self.x is None or self.y is None:
            return _JACOBIAN_INFINITY
        return (self.x, self.y, 1)

    @classmethod
    def _from_jacobian(cls, p1: _Jacobian) -> Self:
        x1, y1, z1 = p1
        if z1 == 0:
            return cls.infinity()
        z_inv = pow(z1, -1, P)
        z_inv_sq = z_inv * z_inv % P
        return cls(x=x1 * z_inv_sq % P, y=y1 * z_inv_sq * z_inv % P)

    def __add__(self, other: Self) -> Self:
        """Group addition."""
        return self._from_jacobian(_jacobian_add(self._to_jacobian(), other._to_jacobian()))

    def __mul__(self, scalar: Scalar) -> Self:
        """Scalar multiplication `point * k`."""
        return self._from_jacobian(_jacobian_mul(self._to_jacobian(), scalar.value))

    @classmethod
    def sum(cls, points: list[Self]) -> Self:
        """Add a list of points with a single final inversion."""
        acc = _JACOBIAN_INFINITY
        for point in points:
            acc = _jacobian_add(acc, point._to_jacobian())
        return cls._from_jacobian(acc)

    def __bytes__(self) -> bytes:
        """
        SEC1 compressed encoding.

        The point at infinity is encoded as 33 zero bytes so that it can
        still be fed into hashes.
        """
        if self.x is None or self.y is None:
            return b"\x00" * COMPRESSED_POINT_BYTES
        prefix = b"\x03" if self.y & 1 else b"\x02"
        return prefix + self.x.to_bytes(32, byteorder="big")

    def hex(self) -> str:
        """Lowercase hex of the compressed encoding."""
        return bytes(self).hex()

    def __str__(self) -> str:
        return self.hex()


G: Point = Point.generator()
"""The secp256k1 base point."""
