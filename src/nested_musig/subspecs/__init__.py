"""Subspecifications for the nested MuSig2 signing package."""

from .signing import SigningSession
from .tree import BinTree

__all__ = [
    "BinTree",
    "SigningSession",
]
