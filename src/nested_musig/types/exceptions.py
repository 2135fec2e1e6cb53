"""Exception hierarchy for tree-structured signing sessions."""

from __future__ import annotations


class NestedMusigError(Exception):
    """
    Base exception for all signing-session errors.

    None of these are locally recoverable: a session that raised one must be
    abandoned and restarted from key generation.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class EmptyInputError(NestedMusigError):
    """Raised when an aggregation tree is requested over zero leaves."""

    def __init__(self, message: str = "cannot build tree from an empty sequence") -> None:
        super().__init__(message)


class PrimitiveFailureError(NestedMusigError):
    """
    Raised when an external signing primitive fails.

    Attributes:
        operation: Name of the capability that failed (e.g. `round2_sign`).
        detail: Description of the underlying failure.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


class StructuralInconsistencyError(NestedMusigError):
    """
    Raised when the tree and the state store disagree.

    Examples are a round-2 visit to a node with no right child, a store
    lookup for a node whose state should already exist, or running the
    rounds out of order. These indicate a programming or ordering bug.
    """
