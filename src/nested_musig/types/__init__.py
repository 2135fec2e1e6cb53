"""Reusable type definitions for the nested MuSig2 signing package."""

from .base import StrictBaseModel
from .exceptions import (
    EmptyInputError,
    NestedMusigError,
    PrimitiveFailureError,
    StructuralInconsistencyError,
)

__all__ = [
    "StrictBaseModel",
    # Exceptions
    "NestedMusigError",
    "EmptyInputError",
    "PrimitiveFailureError",
    "StructuralInconsistencyError",
]
