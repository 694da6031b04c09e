"""Stochastic service-time source."""

import math
import random
from typing import Optional, Protocol


class Sampler(Protocol):
    """Anything that can draw a non-negative variate from mean/std-dev."""

    def sample(self, mean: float, std_dev: float) -> float: ...


class RandomService:
    """Gaussian variates via the Box-Muller transform, floored at zero.

    Each instance owns its own ``random.Random`` so a seeded line is
    reproducible regardless of what else consumes the global generator.
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def reseed(self, seed: Optional[int]) -> None:
        """Restart the underlying generator from ``seed``."""
        self._rng.seed(seed)

    def _uniform(self) -> float:
        # random() is in [0, 1); log(0) is undefined
        u = self._rng.random()
        while u == 0.0:
            u = self._rng.random()
        return u

    def sample(self, mean: float, std_dev: float) -> float:
        """Return max(0, N(mean, std_dev))."""
        u1 = self._uniform()
        u2 = self._uniform()
        z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return max(0.0, z0 * std_dev + mean)
