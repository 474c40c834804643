from __future__ import annotations
import numpy as np

class SeedPolicy:
    """One seed, one NumPy generator.

    Every random draw in povar goes through an explicit ``numpy.random.Generator``.
    Build a fresh policy at the point where a reproducible sequence of
    simulate/estimate calls starts; reusing the same seed replays the sequence.
    """
    def __init__(self, seed: int):
        self.seed = int(seed)
        self.np_rng = np.random.default_rng(self.seed)
