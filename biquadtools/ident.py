"""
Excitation signals for system identification.
"""
import numpy as np
import logging
logger = logging.getLogger(__name__)


class PRBS:
    def __init__(self, seed=None, dtype=int):
        """
        Pseudo-random binary sequence of ±1 values.

        Each instance owns its generator, so two sources built with the same
        seed produce the same sequence regardless of any other random activity
        in the process.

        Parameters
        ----------
        seed : int or None, optional
            Seed for ``numpy.random.default_rng``. None draws fresh entropy.
        dtype : type, optional
            Element type of the values, e.g. ``int`` or ``float``.
        """
        self.seed = seed
        self.dtype = dtype
        self._rng = np.random.default_rng(seed)

    def get(self):
        """Next value of the sequence, either -1 or +1."""
        return self.dtype(self._rng.integers(0, 2) * 2 - 1)

    def sample(self, n):
        """Next `n` values as an array."""
        return (self._rng.integers(0, 2, size=n) * 2 - 1).astype(self.dtype)

    def reset(self):
        """Restart the sequence from the seed."""
        self._rng = np.random.default_rng(self.seed)
