"""
Protocol parameters and hash domain tags for nested MuSig2.

Every hash in the scheme is a BIP-340 style tagged hash. The tag is the
parameter set's `DOMAIN` joined with one of the suffixes below, so two
parameter sets with different domains never share a hash context.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Final


class Params(BaseModel):
    """A model holding the public parameters of a nested MuSig2 deployment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    NONCE_COUNT: int = Field(default=2, ge=2)
    """
    Number of nonces each leaf commits to in round 1, `nu`.

    Two-round MuSig2 needs at least two; every round-1 output vector has
    exactly this many components.
    """

    DOMAIN: str = Field(default="NestedMuSig2", min_length=1)
    """Prefix of every hash tag."""

    def tag(self, suffix: str) -> str:
        """Full hash tag for one of the scheme's hash contexts."""
        return f"{self.DOMAIN}/{suffix}"


TAG_KEYAGG_LIST: Final = "keyagg list"
"""Hash of the sorted list of keys being aggregated."""

TAG_KEYAGG_COEF: Final = "keyagg coef"
"""Per-key aggregation coefficient."""

TAG_NONCE_EXT: Final = "nonce ext"
"""Coefficients binding an inner node's nonce vector to its tree position."""

TAG_NONCE_SIGN: Final = "nonce sign"
"""Coefficient collapsing the root nonce vector for a specific message."""

TAG_CHALLENGE: Final = "challenge"
"""Schnorr challenge."""

DEFAULT_PARAMS: Final = Params()
"""The parameter set used unless a caller supplies another one."""
