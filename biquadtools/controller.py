from biquadtools.filtermath import check_signed
from biquadtools.section import BiquadSection, Gain
from biquadtools.response import FrequencyResponse
from biquadtools.synthesis import PIDConfig, Method, synthesize

import math
import numbers
import logging
logger = logging.getLogger(__name__)

ANTI_WINDUP_POLICIES = ('freeze', 'none')


class Limiter:
    def __init__(self, limit=None):
        """
        Symmetric output clamp with clip-state hysteresis.

        The clipping flag is only raised when the raw signal leaves
        ``[-limit, limit]`` and only lowered once it is back inside, bounds
        included. While the flag is up the output is clamped.

        Parameters
        ----------
        limit : number or None, optional
            Output magnitude limit. ``None`` (or an infinite float) means
            unbounded: the signal passes through and the flag is lowered on
            the next sample. Integer limits are kept as given, however large.

        Notes
        -----
        NaN compares false against the bounds, so it never changes the flag:
        it passes through unclipped while linear and is clamped to ``+limit``
        while clipping.
        """
        self.clipping = False
        self.limit = limit

    @property
    def limit(self):
        return self._limit

    @limit.setter
    def limit(self, value):
        if value is not None:
            check_signed(value, 'limit')
            if value != value:
                raise ValueError("Output limit must not be NaN")
            if value < 0:
                raise ValueError(f"Output limit must be non-negative, got {value}")
            if not isinstance(value, numbers.Integral) and math.isinf(value):
                value = None
        self._limit = value

    @property
    def bounded(self):
        return self._limit is not None

    def clip(self, u):
        L = self._limit
        if L is None:
            self.clipping = False
            return u

        if not self.clipping and (u > L or u < -L):
            self.clipping = True
        elif self.clipping and (-L <= u <= L):
            self.clipping = False

        if self.clipping:
            u = max(-L, min(L, u))
        return u


class Controller(FrequencyResponse):
    def __init__(self, element, limit=None, anti_windup='freeze', name='Controller'):
        """
        Error-driven controller: a linear element followed by an output limiter.

        Every :meth:`step` runs the raw control effort through the element
        (a :class:`Gain` for pure P, a :class:`BiquadSection` otherwise) and
        then through a hysteretic :class:`Limiter`. Use the :func:`P`,
        :func:`PI`, :func:`PD` and :func:`PID` factories or
        :meth:`from_gains` rather than calling this directly.

        Parameters
        ----------
        element : Gain or BiquadSection
            Linear part of the controller.
        limit : number or None, optional
            Output magnitude limit, unbounded by default.
        anti_windup : {'freeze', 'none'}, optional
            With ``'freeze'`` (default) the section's registers are held at
            their previous values on every sample where the output ends up
            clipped, so the integrator stops accumulating during saturation.
            With ``'none'`` the section always advances. Both behave
            identically while the limit is unbounded.
        name : str, optional
            Controller name.

        Attributes
        ----------
        element : Gain or BiquadSection
        Ts : float
            Sample period, taken from the element.
        """
        if not isinstance(element, (Gain, BiquadSection)):
            raise TypeError(f"Controller element must be a Gain or BiquadSection, got {type(element).__name__}")
        if anti_windup not in ANTI_WINDUP_POLICIES:
            raise ValueError(f"Unknown anti-windup policy {anti_windup!r}, expected one of {ANTI_WINDUP_POLICIES}")
        self.name = name
        self.element = element
        self.Ts = element.Ts
        self.anti_windup = anti_windup
        self._limiter = Limiter(limit)
        self._freeze = anti_windup == 'freeze' and isinstance(element, BiquadSection)
        logger.debug(f"{name}: {element!r}, limit={self._limiter.limit}, anti_windup={anti_windup}")

    @classmethod
    def from_config(cls, config, limit=None, anti_windup='freeze', name='PID'):
        """Controller driving the section synthesized from a :class:`PIDConfig`."""
        return cls(synthesize(config, name=name), limit=limit, anti_windup=anti_windup, name=name)

    @classmethod
    def from_gains(cls, Kp=1.0, Ki=0.0, Kd=0.0, Tf=0.0, Ts=1.0, method=Method.TRAPEZOIDAL,
                   limit=None, anti_windup='freeze', name='PID'):
        """
        Controller from the parallel-gain form ``Kp + Ki/s + Kd*s/(Tf*s + 1)``.

        Parameters
        ----------
        Kp, Ki, Kd : float
            Proportional, integral and derivative gains.
        Tf : float
            Derivative filter time constant (s).
        Ts : float
            Sample period (s).
        method : Method or str
            Discrete integrator formula, Trapezoidal by default.
        limit : number or None
            Output magnitude limit.
        anti_windup : {'freeze', 'none'}
            Anti-windup policy.
        name : str
            Controller name.
        """
        config = PIDConfig(Kp=Kp, Ki=Ki, Kd=Kd, Tf=Tf, Ts=Ts, method=method)
        return cls.from_config(config, limit=limit, anti_windup=anti_windup, name=name)

    @property
    def limit(self):
        return self._limiter.limit

    @property
    def clipping(self):
        return self._limiter.clipping

    @property
    def coefficients(self):
        return self.element.coefficients

    def step(self, e):
        """
        Advance the controller by one sample.

        Parameters
        ----------
        e : number
            Control error.

        Returns
        -------
        number
            Limited control output.
        """
        if self._freeze:
            held = self.element.state
        u = self._limiter.clip(self.element.step(e))
        if self._freeze and self._limiter.clipping:
            self.element.reset(held)
        return u

    def set_limit(self, limit):
        """
        Replace the output limit.

        The clipping flag is left as it is; it settles on the next step.
        """
        self._limiter.limit = limit

    def reset(self):
        """Zero the filter state. Coefficients and limit are kept."""
        self.element.reset()

    def poles(self):
        return self.element.poles()

    def zeros(self):
        return self.element.zeros()

    def stable(self):
        return self.element.stable()

    def to_tf(self):
        """Linear part of the controller as a ``control.TransferFunction``."""
        if isinstance(self.element, Gain):
            return self.element.as_section().to_tf()
        return self.element.to_tf()

    def _response(self, z):
        return self.element._response(z)

    def __repr__(self):
        return f"Controller({self.element!r}, limit={self.limit!r}, anti_windup={self.anti_windup!r}, name={self.name!r})"


def P(Kp=1.0, limit=None, Ts=1.0, name='P'):
    """
    Proportional controller ``u = Kp*e``.

    No filter state is involved; integer gains and limits keep integer
    arithmetic.
    """
    return Controller(Gain(Kp, Ts=Ts, name=name), limit=limit, name=name)


def PID(Ts=1.0, Kp=1.0, Ti=math.inf, Td=0.0, N=math.inf, limit=None,
        method=Method.TRAPEZOIDAL, anti_windup='freeze', name='PID'):
    """
    Proportional-integral-derivative controller in time-constant form.

    Parameters
    ----------
    Ts : float
        Sample period (s).
    Kp : float
        Proportional gain.
    Ti : float
        Integral time constant (s); infinite disables the integral action.
    Td : float
        Derivative time constant (s); zero disables the derivative action.
    N : float
        Derivative filter coefficient, ``Tf = Td/N``; infinite means no filter.
    limit : number or None
        Output magnitude limit, unbounded by default.
    method : Method or str
        Discrete integrator formula, Trapezoidal by default.
    anti_windup : {'freeze', 'none'}
        Anti-windup policy, see :class:`Controller`.
    name : str
        Controller name.

    Returns
    -------
    Controller
    """
    config = PIDConfig.from_time_constants(Ts=Ts, Kp=Kp, Ti=Ti, Td=Td, N=N, method=method)
    return Controller.from_config(config, limit=limit, anti_windup=anti_windup, name=name)


def PI(Ts=1.0, Kp=1.0, Ti=math.inf, limit=None, method=Method.TRAPEZOIDAL, anti_windup='freeze', name='PI'):
    """Proportional-integral controller: :func:`PID` with ``Td = 0``."""
    return PID(Ts=Ts, Kp=Kp, Ti=Ti, Td=0.0, N=math.inf, limit=limit, method=method,
               anti_windup=anti_windup, name=name)


def PD(Ts=1.0, Kp=1.0, Td=0.0, N=math.inf, limit=None, method=Method.TRAPEZOIDAL, anti_windup='freeze', name='PD'):
    """Proportional-derivative controller: :func:`PID` with ``Ti = inf``."""
    return PID(Ts=Ts, Kp=Kp, Ti=math.inf, Td=Td, N=N, limit=limit, method=method,
               anti_windup=anti_windup, name=name)
