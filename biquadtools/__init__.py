from biquadtools.section import SISO, Coefficients, BiquadSection, Gain
from biquadtools.cascade import BiquadCascade
from biquadtools.synthesis import (
    ConfigurationError, Method, PIDConfig,
    forward_euler_coeff, backward_euler_coeff, trapezoidal_coeff,
    pid_coefficients, synthesize,
)
from biquadtools.controller import Limiter, Controller, P, PI, PD, PID
from biquadtools.simulation import simulate, impulse_response, step_response
from biquadtools.ghk import GHK, TrackState, GHKFilter
from biquadtools.ident import PRBS

__version__ = "0.1.0"
