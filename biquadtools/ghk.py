"""
g-h-k (alpha-beta-gamma) tracking filter.

A fixed-gain estimator of position, velocity and acceleration from noisy
position measurements taken every ``T`` seconds. Each update corrects the
current prediction with the measurement residual and then predicts the next
sample with a constant-acceleration model.

References
----------
E. Brookner, *Tracking and Kalman Filtering Made Easy*, ch. 1 (g-h and g-h-k
filters).

J. E. Gray and W. Murray, "A derivation of an analytic expression for the
tracking index for the alpha-beta-gamma filter", IEEE Trans. Aerospace and
Electronic Systems, 29(3), 1993.
"""
from typing import NamedTuple, Tuple

import numpy as np
import logging
logger = logging.getLogger(__name__)


class GHK(NamedTuple):
    g: float
    h: float
    k: float


class TrackState(NamedTuple):
    x: float
    v: float
    a: float


def from_abc(alpha, beta, gamma):
    """g-h-k gains from alpha-beta-gamma gains (``k = gamma/2``)."""
    return GHK(alpha, beta, gamma / 2)


def critically_damped(theta):
    """
    Critically damped g-h-k gains for discounting factor `theta` (0 < theta < 1).
    """
    if not 0 < theta < 1:
        raise ValueError(f"Discounting factor must lie in (0, 1), got {theta}")
    return GHK(
        1 - theta**3,
        3 * (1 - theta**2) * (1 - theta) / 2,
        (1 - theta)**3 / 2,
    )


def optimal_gaussian(tracking_index):
    """
    Steady-state Kalman (optimal Gaussian) g-h-k gains for a tracking index.

    Parameters
    ----------
    tracking_index : float
        ``lambda = sigma_w * T**2 / sigma_v``, positive.

    Returns
    -------
    GHK
    """
    if not tracking_index > 0:
        raise ValueError(f"Tracking index must be positive, got {tracking_index}")
    lam = tracking_index
    b = lam / 2 - 3
    c = lam / 2 + 3
    d = -1
    p = c - b * b / 3
    q = 2 * b**3 / 27 - b * c / 3 + d
    v = np.sqrt(q * q + 4 * p**3 / 27)
    z = -np.cbrt(q + v / 2)
    s = z - p / (3 * z) - b / 3
    g = 1 - s * s
    h = 2 * s * s - 4 * s + 2
    k = h * h / (2 * g) / 2
    return GHK(float(g), float(h), float(k))


def optimal_gaussian_noise(sigma_w, sigma_v, T):
    """
    Optimal Gaussian gains from process noise `sigma_w`, measurement noise `sigma_v` and period `T`.
    """
    if not sigma_v > 0:
        raise ValueError(f"Measurement noise must be positive, got {sigma_v}")
    return optimal_gaussian(sigma_w * T * T / sigma_v)


def correct_predict(coeff: GHK, state: TrackState, z: float, T: float) -> Tuple[TrackState, TrackState]:
    """
    One g-h-k update.

    Parameters
    ----------
    coeff : GHK
        Filter gains.
    state : TrackState
        Predicted state for the current sample.
    z : float
        Position measurement.
    T : float
        Sample period (s).

    Returns
    -------
    correction : TrackState
        State corrected with the measurement.
    prediction : TrackState
        State predicted for the next sample.
    """
    g, h, k = coeff
    r = z - state.x

    x = state.x + g * r
    v = state.v + h / T * r
    a = state.a + 2 * k / (T * T) * r
    correction = TrackState(x, v, a)

    prediction = TrackState(x + v * T + a * T * T / 2, v + a * T, a)
    return correction, prediction


class GHKFilter:
    def __init__(self, coeff, T, state=TrackState(0.0, 0.0, 0.0)):
        """
        Stateful g-h-k tracker.

        :meth:`step` takes a position measurement and returns the corrected
        position; the prediction for the next sample is kept internally.
        """
        if not T > 0:
            raise ValueError(f"Sample period must be positive, got {T}")
        self.coeff = GHK(*coeff)
        self.T = T
        self._initial = TrackState(*state)
        self.prediction = self._initial
        self.correction = self._initial

    def step(self, z):
        self.correction, self.prediction = correct_predict(self.coeff, self.prediction, z, self.T)
        return self.correction.x

    def reset(self, state=None):
        self.prediction = self._initial if state is None else TrackState(*state)
        self.correction = self.prediction
