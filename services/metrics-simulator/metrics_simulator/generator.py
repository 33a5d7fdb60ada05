"""Random value generation for simulated metrics."""

import numpy as np


class MetricGenerator:
    """Draws uniformly distributed integers for meters and timers.

    Each generator wraps its own numpy Generator, so clouds running on
    different threads never share random state and a seed makes runs
    reproducible.
    """

    def __init__(self, rng: np.random.Generator | None = None, seed=None):
        self._rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self, low: int, high: int) -> int:
        """Return one integer in [low, high). Ranges are validated at config load."""
        return int(self._rng.integers(low, high))


def spawn_generators(count: int, seed: int | None = None) -> list[MetricGenerator]:
    """Create ``count`` independent generators derived from one seed."""
    seed_seq = np.random.SeedSequence(seed)
    return [MetricGenerator(rng=np.random.default_rng(child)) for child in seed_seq.spawn(count)]
