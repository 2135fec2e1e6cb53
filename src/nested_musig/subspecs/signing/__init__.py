"""Tree-structured two-round signing: state store, traversals and session."""

from .backend import MusigBackend, SigningBackend
from .round1 import run_round1
from .round2 import run_round2
from .session import Phase, SigningSession
from .state import NodeState, StateStore

__all__ = [
    "MusigBackend",
    "NodeState",
    "Phase",
    "SigningBackend",
    "SigningSession",
    "StateStore",
    "run_round1",
    "run_round2",
]
