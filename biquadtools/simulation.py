"""
Sample-by-sample simulation of SISO elements.

These helpers drive anything with a ``step(x)`` method (sections, cascades,
gains, controllers) over a whole input sequence and collect the outputs in
a numpy array. They do not reset the element unless asked, so a simulation
can continue from the state left by a previous one.
"""
import logging
from typing import Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def simulate(system, x: Sequence, reset: bool = False) -> np.ndarray:
    """
    Step `system` once per input sample and return the outputs.

    Parameters
    ----------
    system : SISO
        Element to drive.
    x : sequence of number
        Input samples.
    reset : bool, optional
        If True, reset the element before the first sample. Default is False.

    Returns
    -------
    ndarray
        Output samples, same length as `x`.
    """
    if reset:
        system.reset()
    return np.array([system.step(xi) for xi in x])


def impulse_response(system, n: int, amplitude: float = 1.0, reset: bool = True) -> np.ndarray:
    """
    First `n` samples of the response to a discrete impulse of height `amplitude`.
    """
    if n < 1:
        raise ValueError(f"Number of samples must be positive, got {n}")
    x = np.zeros(n)
    x[0] = amplitude
    return simulate(system, x, reset=reset)


def step_response(system, n: int, amplitude: float = 1.0, reset: bool = True) -> Tuple[np.ndarray, np.ndarray]:
    """
    First `n` samples of the response to a step of height `amplitude`.

    Returns
    -------
    t : ndarray
        Sample times ``k*Ts`` (``Ts`` defaults to 1 when the element has none).
    y : ndarray
        Output samples.
    """
    if n < 1:
        raise ValueError(f"Number of samples must be positive, got {n}")
    Ts = getattr(system, 'Ts', 1.0)
    y = simulate(system, np.full(n, amplitude), reset=reset)
    return np.arange(n) * Ts, y
