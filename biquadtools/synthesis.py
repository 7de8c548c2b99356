"""
Continuous-to-discrete coefficient synthesis for PID-family controllers.

The continuous controller

    C(s) = Kp + Ki/s + Kd*s/(Tf*s + 1)

is mapped onto a single biquad section by substituting one of three
discrete integrator formulas for `s`:

- Forward Euler:   s = (z - 1)/Ts
- Backward Euler:  s = (z - 1)/(Ts*z)
- Trapezoidal:     s = 2/Ts * (z - 1)/(z + 1)   (Tustin, the default)

Forward Euler is the cheapest and is accurate when the Nyquist frequency is
far above the controller bandwidth, but may turn a stable continuous design
into an unstable discrete one. Backward Euler and Trapezoidal always map a
stable continuous design to a stable discrete one; Trapezoidal gives the best
match of the frequency response.
"""
from biquadtools.filtermath import check_signed
from biquadtools.section import BiquadSection, Coefficients

from dataclasses import dataclass
from enum import Enum
import math
import logging
logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Controller parameters that cannot be turned into a valid filter."""


class Method(Enum):
    FORWARD_EULER = 'forward_euler'
    BACKWARD_EULER = 'backward_euler'
    TRAPEZOIDAL = 'trapezoidal'

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace('-', '_').replace(' ', '_')
            aliases = {
                'forward_euler': cls.FORWARD_EULER,
                'euler': cls.FORWARD_EULER,
                'backward_euler': cls.BACKWARD_EULER,
                'backward_diff': cls.BACKWARD_EULER,
                'trapezoidal': cls.TRAPEZOIDAL,
                'tustin': cls.TRAPEZOIDAL,
                'bilinear': cls.TRAPEZOIDAL,
            }
            return aliases.get(key)
        return None


def _real(value, name):
    check_signed(value, name)
    value = float(value)
    if math.isnan(value):
        raise ConfigurationError(f"`{name}` must not be NaN")
    return value


@dataclass(frozen=True)
class PIDConfig:
    """
    Validated continuous-time PID parameters.

    Parameters
    ----------
    Kp : float
        Proportional gain.
    Ki : float
        Integral gain.
    Kd : float
        Derivative gain.
    Tf : float
        Time constant (s) of the first-order filter on the derivative term.
        Zero means an unfiltered derivative.
    Ts : float
        Sample period (s), strictly positive.
    method : Method or str
        Discrete integrator formula. Strings such as ``'tustin'`` or
        ``'backward_diff'`` are accepted.

    Raises
    ------
    ConfigurationError
        On a non-positive or non-finite `Ts`, a negative or non-finite `Tf`,
        non-finite gains, an unknown method, or an unfiltered derivative
        (``Tf == 0`` with ``Kd != 0``) under Forward Euler.
    TypeError
        If a parameter is not a real number.
    """
    Kp: float = 1.0
    Ki: float = 0.0
    Kd: float = 0.0
    Tf: float = 0.0
    Ts: float = 1.0
    method: Method = Method.TRAPEZOIDAL

    def __post_init__(self):
        for name in ('Kp', 'Ki', 'Kd', 'Tf', 'Ts'):
            value = _real(getattr(self, name), name)
            if math.isinf(value):
                raise ConfigurationError(f"`{name}` must be finite, got {value}")
            object.__setattr__(self, name, value)

        if not self.Ts > 0:
            raise ConfigurationError(f"Sample period `Ts` must be positive, got {self.Ts}")
        if self.Tf < 0:
            raise ConfigurationError(f"Filter time constant `Tf` must be non-negative, got {self.Tf}")

        try:
            method = Method(self.method)
        except ValueError as e:
            raise ConfigurationError(f"Unknown discretization method {self.method!r}") from e
        object.__setattr__(self, 'method', method)

        if method is Method.FORWARD_EULER and self.Kd != 0 and self.Tf == 0:
            raise ConfigurationError("Forward Euler needs a derivative filter: `Tf` must be positive when `Kd` is non-zero")

    @classmethod
    def from_time_constants(cls, Ts=1.0, Kp=1.0, Ti=math.inf, Td=0.0, N=math.inf, method=Method.TRAPEZOIDAL):
        """
        Build the configuration from the ``Ti/Td/N`` parameterization.

        Uses ``Ki = Kp/Ti``, ``Kd = Kp*Td`` and ``Tf = Td/N``. An infinite `Ti`
        removes the integral action, a zero `Td` removes the derivative
        action, and an infinite `N` leaves the derivative unfiltered.

        Parameters
        ----------
        Ts : float
            Sample period (s).
        Kp : float
            Proportional gain.
        Ti : float
            Integral time constant (s), positive, may be infinite.
        Td : float
            Derivative time constant (s), non-negative and finite.
        N : float
            Derivative filter coefficient, positive, may be infinite.
        method : Method or str
            Discrete integrator formula.

        Returns
        -------
        PIDConfig
        """
        Kp = _real(Kp, 'Kp')
        Ti = _real(Ti, 'Ti')
        Td = _real(Td, 'Td')
        N = _real(N, 'N')
        if not Ti > 0:
            raise ConfigurationError(f"Integral time constant `Ti` must be positive, got {Ti}")
        if Td < 0 or math.isinf(Td):
            raise ConfigurationError(f"Derivative time constant `Td` must be finite and non-negative, got {Td}")
        if not N > 0:
            raise ConfigurationError(f"Filter coefficient `N` must be positive, got {N}")
        return cls(Kp=Kp, Ki=Kp / Ti, Kd=Kp * Td, Tf=Td / N, Ts=Ts, method=method)


def forward_euler_coeff(Kp, Ki, Kd, Tf, Ts):
    """
    Biquad coefficients for ``s = (z - 1)/Ts``.

    Discrete controller: ``Kp + Kd/(Tf + Ts/(z - 1)) + Ki*Ts/(z - 1)``.
    When ``Kd == 0`` the filter time constant is irrelevant and is replaced
    by 1 so the formulas never divide by zero.
    """
    if Kd == 0:
        logger.debug(f"Forward Euler without derivative term: using Tf=1 in place of Tf={Tf}")
        Tf = 1.0
    elif Tf == 0:
        raise ConfigurationError("Forward Euler needs a derivative filter: `Tf` must be positive when `Kd` is non-zero")
    return Coefficients(
        (Kd + Kp*Tf)/Tf,
        (Kp*Ts - 2*Kp*Tf - 2*Kd + Ki*Tf*Ts)/Tf,
        (Kd + Ki*Ts*Ts + Kp*Tf - Kp*Ts - Ki*Tf*Ts)/Tf,
        (Ts - 2*Tf)/Tf,
        (Tf - Ts)/Tf,
    )


def backward_euler_coeff(Kp, Ki, Kd, Tf, Ts):
    """
    Biquad coefficients for ``s = (z - 1)/(Ts*z)``.

    Discrete controller: ``Kp + Kd/(Tf + Ts*z/(z - 1)) + Ki*Ts*z/(z - 1)``.
    """
    return Coefficients(
        (Kd + Ki*Ts*Ts + Kp*Tf + Kp*Ts + Ki*Tf*Ts)/(Tf + Ts),
        -(2*Kd + 2*Kp*Tf + Kp*Ts + Ki*Tf*Ts)/(Tf + Ts),
        (Kd + Kp*Tf)/(Tf + Ts),
        -(2*Tf + Ts)/(Tf + Ts),
        Tf/(Tf + Ts),
    )


def trapezoidal_coeff(Kp, Ki, Kd, Tf, Ts):
    """
    Biquad coefficients for ``s = 2/Ts * (z - 1)/(z + 1)``.

    Discrete controller: ``Kp + Kd/(Tf + Ts*(z + 1)/(2*(z - 1))) + Ki*Ts*(z + 1)/(2*(z - 1))``.
    """
    return Coefficients(
        (4*Kd + Ki*Ts*Ts + 4*Kp*Tf + 2*Kp*Ts + 2*Ki*Tf*Ts)/(4*Tf + 2*Ts),
        -(4*Kd - Ki*Ts*Ts + 4*Kp*Tf)/(2*Tf + Ts),
        (4*Kd + Ki*Ts*Ts + 4*Kp*Tf - 2*Kp*Ts - 2*Ki*Tf*Ts)/(4*Tf + 2*Ts),
        -(4*Tf)/(2*Tf + Ts),
        (2*Tf - Ts)/(2*Tf + Ts),
    )


_FORMULAS = {
    Method.FORWARD_EULER: forward_euler_coeff,
    Method.BACKWARD_EULER: backward_euler_coeff,
    Method.TRAPEZOIDAL: trapezoidal_coeff,
}


def pid_coefficients(config):
    """
    Map a :class:`PIDConfig` to normalized biquad coefficients.

    Pure and deterministic: equal configurations give equal coefficients.
    """
    coeff = _FORMULAS[config.method](config.Kp, config.Ki, config.Kd, config.Tf, config.Ts)
    logger.debug(f"{config.method.value} coefficients for {config}: {coeff}")
    return coeff


def synthesize(config, name='PID'):
    """
    Build the biquad section that realizes `config`.

    Parameters
    ----------
    config : PIDConfig
        Continuous parameters and discretization method.
    name : str, optional
        Name of the resulting section.

    Returns
    -------
    BiquadSection
        Section with ``Ts = config.Ts``. An unstable result, which Forward
        Euler can produce, is logged as a warning and returned as is.
    """
    section = BiquadSection(*pid_coefficients(config), Ts=config.Ts, name=name)
    if not section.stable():
        logger.warning(f"{name}: {config.method.value} discretization gave an unstable section, poles {section.poles()}")
    return section
