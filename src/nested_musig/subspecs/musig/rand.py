"""Random scalar generator for keys and nonces."""

import random
import secrets

from pydantic import PrivateAttr

from nested_musig.types import StrictBaseModel

from ..secp256k1 import N, Scalar


class Rand(StrictBaseModel):
    """
    A source of uniformly random non-zero scalars.

    Without a seed, scalars come from the operating system's CSPRNG. With a
    seed, they come from a reproducible generator, which is only suitable
    for tests and demos.
    """

    seed: int | None = None
    """Seed of the reproducible generator, or None for the OS entropy source."""

    _rng: random.Random | None = PrivateAttr(default=None)

    def model_post_init(self, __context: object) -> None:
        """Create the seeded generator, if any."""
        if self.seed is not None:
            self._rng = random.Random(self.seed)

    def scalar(self) -> Scalar:
        """Draw a scalar in [1, N)."""
        if self._rng is None:
            return Scalar(value=secrets.randbelow(N - 1) + 1)
        return Scalar(value=self._rng.randrange(1, N))

    def scalars(self, length: int) -> list[Scalar]:
        """Draw `length` independent scalars."""
        return [self.scalar() for _ in range(length)]


PROD_RAND = Rand()
"""An instance backed by the OS entropy source."""

TEST_RAND = Rand(seed=0)
"""A reproducible instance for test environments."""
