"""
Capability interface between the tree orchestration and the signing primitives.

The traversals never call the scheme directly. They go through a
`SigningBackend`, which names the seven operations a nested two-round
scheme must offer and guarantees that any failure surfaces as a
`PrimitiveFailureError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol, TypeVar, runtime_checkable

from nested_musig.types import PrimitiveFailureError

from ..musig import (
    DEFAULT_SCHEME,
    AuthPath,
    NestedMusigScheme,
    Params,
    Round1Out,
    Round1State,
    Round2Result,
)
from ..secp256k1 import Point, Scalar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class SigningBackend(Protocol):
    """
    The pairwise signing capability a signing session is driven with.

    Implementations raise `PrimitiveFailureError` on any failure. Callers
    never retry: one failure aborts the whole session.
    """

    def key_combine(self, left: Point, right: Point) -> Point:
        """Deterministically aggregate two sibling keys. Used to build the tree."""
        ...

    def round1_begin(self, nonce_count: int) -> tuple[Round1State, Round1Out]:
        """Start round 1 for one local leaf: secret state and public output."""
        ...

    def round1_aggregate(self, outputs: Sequence[Round1Out]) -> Round1Out:
        """Combine sibling round-1 outputs."""
        ...

    def round1_extend(self, params: Params, output: Round1Out, tweak_key: Point) -> Round1Out:
        """Bind an aggregated round-1 output to the tree position of `tweak_key`."""
        ...

    def round2_sign(
        self,
        params: Params,
        state: Round1State,
        outer_context: Sequence[Round1Out],
        secret_key: Scalar,
        message: bytes,
        auth_path: AuthPath,
    ) -> Round2Result:
        """Produce a leaf's partial signature."""
        ...

    def round2_aggregate(self, parts: Sequence[Round2Result]) -> Round2Result:
        """Combine the round-2 results of two sibling subtrees."""
        ...

    def verify(
        self, params: Params, aggregate_key: Point, message: bytes, signature: Round2Result
    ) -> bool:
        """Accept or reject a completed signature."""
        ...


class MusigBackend:
    """Drives a `NestedMusigScheme` through the `SigningBackend` interface."""

    __slots__ = ("scheme",)

    def __init__(self, scheme: NestedMusigScheme = DEFAULT_SCHEME) -> None:
        self.scheme = scheme

    def _for(self, params: Params) -> NestedMusigScheme:
        """
        The wrapped scheme, once `params` is confirmed to be its own.

        `key_combine` and the aggregation calls run under the scheme's own
        parameters, so every parameterised call must use the same set.

        Raises:
            ValueError: If `params` differs from the scheme's parameters.
        """
        if params != self.scheme.params:
            raise ValueError(
                f"Session parameters {params!r} differ from the scheme parameters "
                f"{self.scheme.params!r}"
            )
        return self.scheme

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except Exception as exc:
            logger.debug("Primitive %s raised %r", operation, exc)
            raise PrimitiveFailureError(operation, str(exc)) from exc

    def key_combine(self, left: Point, right: Point) -> Point:
        return self._call("key_combine", lambda: self.scheme.key_agg([left, right]))

    def round1_begin(self, nonce_count: int) -> tuple[Round1State, Round1Out]:
        out, state = self._call("round1_begin", lambda: self.scheme.sign_round1(nonce_count))
        return state, out

    def round1_aggregate(self, outputs: Sequence[Round1Out]) -> Round1Out:
        return self._call("round1_aggregate", lambda: self.scheme.sign_agg(outputs))

    def round1_extend(self, params: Params, output: Round1Out, tweak_key: Point) -> Round1Out:
        return self._call(
            "round1_extend", lambda: self._for(params).sign_agg_ext(output, tweak_key)
        )

    def round2_sign(
        self,
        params: Params,
        state: Round1State,
        outer_context: Sequence[Round1Out],
        secret_key: Scalar,
        message: bytes,
        auth_path: AuthPath,
    ) -> Round2Result:
        return self._call(
            "round2_sign",
            lambda: self._for(params).sign_prime(
                state, outer_context, secret_key, message, auth_path
            ),
        )

    def round2_aggregate(self, parts: Sequence[Round2Result]) -> Round2Result:
        return self._call("round2_aggregate", lambda: self.scheme.sign_agg_prime(parts))

    def verify(
        self, params: Params, aggregate_key: Point, message: bytes, signature: Round2Result
    ) -> bool:
        return self._call(
            "verify", lambda: self._for(params).verify(aggregate_key, message, signature)
        )
