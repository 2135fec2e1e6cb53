"""
This package provides a Python specification of the pairwise nested MuSig2
primitives that drive a binary aggregation tree.

It exposes the containers, the parameter set and the scheme instances.
"""

from .constants import DEFAULT_PARAMS, Params
from .containers import AuthPath, KeyPair, Round1Out, Round1State, Round2Result
from .interface import DEFAULT_SCHEME, PROD_SCHEME, TEST_SCHEME, NestedMusigScheme
from .rand import PROD_RAND, TEST_RAND, Rand

__all__ = [
    "NestedMusigScheme",
    "Params",
    "Rand",
    "KeyPair",
    "Round1Out",
    "Round1State",
    "Round2Result",
    "AuthPath",
    "DEFAULT_PARAMS",
    "DEFAULT_SCHEME",
    "PROD_SCHEME",
    "TEST_SCHEME",
    "PROD_RAND",
    "TEST_RAND",
]
