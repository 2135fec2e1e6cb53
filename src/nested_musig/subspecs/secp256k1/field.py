"""Core definition of the secp256k1 scalar field Z_n."""

from typing import Self

from pydantic import Field, field_validator

from nested_musig.types import StrictBaseModel

# =================================================================
# Curve Constants
#
# secp256k1: y^2 = x^3 + 7 over F_p, with a prime-order group of size n.
# =================================================================

P: int = 2**256 - 2**32 - 977
"""The base field prime of secp256k1."""

N: int = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
"""The order of the secp256k1 group, and the modulus of the scalar field."""

SCALAR_BYTES: int = 32
"""The size of a serialized scalar in bytes."""


# =================================================================
# Scalar Field Z_n
#
# Secret keys, nonces, hash-derived coefficients and signature responses
# all live in this field. All arithmetic is performed modulo N.
# =================================================================


class Scalar(StrictBaseModel):
    """An element of the secp256k1 scalar field Z_n."""

    value: int = Field(ge=0, lt=N, description="Scalar value in the range [0, N)")

    @field_validator("value", mode="before")
    @classmethod
    def reduce_modulo_n(cls, v: int) -> int:
        """Reduces an integer input modulo N before validation."""
        return v % N

    @classmethod
    def zero(cls) -> Self:
        """The additive identity."""
        return cls(value=0)

    @classmethod
    def one(cls) -> Self:
        """The multiplicative identity."""
        return cls(value=1)

    def is_zero(self) -> bool:
        """Whether this is the zero scalar."""
        return self.value == 0

    def __add__(self, other: Self) -> Self:
        """Scalar addition."""
        return self.__class__(value=self.value + other.value)

    def __mul__(self, other: Self) -> Self:
        """Scalar multiplication."""
        return self.__class__(value=self.value * other.value)

    def __pow__(self, exponent: int) -> Self:
        """Scalar exponentiation."""
        return self.__class__(value=pow(self.value, exponent, N))

    def __bytes__(self) -> bytes:
        """32-byte big-endian encoding, as used by BIP-340 style hashes."""
        return self.value.to_bytes(SCALAR_BYTES, byteorder="big")

    @classmethod
    def from_hash(cls, digest: bytes) -> Self:
        """Interpret a hash digest as a scalar, reducing it modulo N."""
        return cls(value=int.from_bytes(digest, byteorder="big"))

    def hex(self) -> str:
        """Lowercase hex of the 32-byte encoding."""
        return bytes(self).hex()
