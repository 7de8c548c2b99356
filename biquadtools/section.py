from biquadtools.filtermath import check_signed, quadratic_roots, polynomial_roots, monic_quadratic
from biquadtools.response import FrequencyResponse
from biquadtools.utils import normalize_tf_string

from typing import NamedTuple, Protocol, runtime_checkable
import control
import numpy as np
import logging
logger = logging.getLogger(__name__)


@runtime_checkable
class SISO(Protocol):
    """Single-input single-output element stepped one sample at a time."""

    def step(self, x): ...

    def reset(self): ...


class Coefficients(NamedTuple):
    """Normalized biquad coefficients, ``a0 == 1`` implied."""
    b0: float
    b1: float
    b2: float
    a1: float
    a2: float


def _pad_second_order(nume, deno):
    """
    Bring z-domain polynomials (highest power first) to three coefficients each.

    Both polynomials are multiplied by the same power of z so the denominator
    becomes second order; the numerator is then left-padded with zeros.
    """
    nume = np.trim_zeros(np.atleast_1d(np.asarray(nume, dtype=float)), 'f')
    deno = np.trim_zeros(np.atleast_1d(np.asarray(deno, dtype=float)), 'f')
    if deno.size == 0:
        raise ValueError("Denominator of the transfer function is zero")
    if nume.size == 0:
        nume = np.zeros(1)
    if deno.size > 3:
        raise ValueError(f"Denominator has order {deno.size - 1}; a biquad section supports at most order 2")
    if nume.size > deno.size:
        raise ValueError(f"Transfer function is improper (numerator order {nume.size - 1} "
                         f"> denominator order {deno.size - 1}) and cannot be realized causally")
    shift = 3 - deno.size
    deno = np.concatenate((deno, np.zeros(shift)))
    nume = np.concatenate((nume, np.zeros(shift)))
    nume = np.concatenate((np.zeros(3 - nume.size), nume))
    return nume, deno


class BiquadSection(FrequencyResponse):
    def __init__(self, b0, b1, b2, a1, a2, Ts=1.0, name='Biquad'):
        """
        Second-order recursive filter section in direct form II transposed.

        The transfer function is

            H(z) = (b0 + b1 z^-1 + b2 z^-2) / (1 + a1 z^-1 + a2 z^-2)

        and every call to :meth:`step` evaluates

            y  = b0*x + w0
            w0 = b1*x - a1*y + w1
            w1 = b2*x - a2*y

        with the two state registers ``w0`` and ``w1`` starting at zero.

        Parameters
        ----------
        b0, b1, b2 : number
            Numerator coefficients.
        a1, a2 : number
            Denominator coefficients, normalized so that ``a0 == 1``.
        Ts : float, optional
            Sample period in seconds, used for frequency-domain analysis only.
            Default is 1.
        name : str, optional
            Name of the section.

        Notes
        -----
        Coefficients may be signed integers (fixed-point use) or reals; the
        recursion keeps whatever arithmetic they define. Overflow and NaN are
        propagated, never trapped.

        Raises
        ------
        TypeError
            If a coefficient is not a signed real or integer number.
        """
        for label, value in zip(Coefficients._fields, (b0, b1, b2, a1, a2)):
            check_signed(value, label)
        self.name = name
        self.Ts = Ts
        self._coeff = Coefficients(b0, b1, b2, a1, a2)
        self._w0 = 0
        self._w1 = 0
        logger.debug(f"{self.name}: {self._coeff}")

    @classmethod
    def from_unnormalized(cls, b0, b1, b2, a0, a1, a2, **kwargs):
        """
        Build a section from the 6-coefficient form ``(b0, b1, b2, a0, a1, a2)``.

        All terms are divided by `a0`, so the result has the same poles and
        zeros as the pre-divided 5-coefficient form.

        Raises
        ------
        ValueError
            If `a0` is zero.
        """
        check_signed(a0, 'a0')
        if a0 == 0:
            raise ValueError("Leading denominator coefficient a0 must be non-zero")
        return cls(b0 / a0, b1 / a0, b2 / a0, a1 / a0, a2 / a0, **kwargs)

    @classmethod
    def from_zpk(cls, zeros, poles, k, **kwargs):
        """
        Build a section from a zero pair, a pole pair and a gain.

        Parameters
        ----------
        zeros : sequence of complex
            Two zeros, real or complex-conjugate.
        poles : sequence of complex
            Two poles, real or complex-conjugate.
        k : float
            Gain applied to the numerator.

        Returns
        -------
        BiquadSection
        """
        c1, c2 = monic_quadratic(zeros)
        a1, a2 = monic_quadratic(poles)
        return cls(k, k * c1, k * c2, a1, a2, **kwargs)

    @classmethod
    def from_expression(cls, tf, domain='z', Ts=1.0, method='bilinear', name=None):
        """
        Build a section from a rational expression string.

        Parameters
        ----------
        tf : str
            Expression in `z` (``domain='z'``) or in `s` (``domain='s'``),
            e.g. ``'(z + 1)/(z^2 - 0.5z + 0.06)'`` or ``'10/(s + 10)'``.
        domain : {'z', 's'}, optional
            How to read the expression. An `s`-domain expression is
            discretized with ``scipy.signal.cont2discrete``.
        Ts : float, optional
            Sample period in seconds. Required for ``domain='s'``.
        method : str, optional
            Discretization method passed to ``cont2discrete`` for
            ``domain='s'`` (default ``'bilinear'``).
        name : str, optional
            Section name. Defaults to the expression itself.

        Returns
        -------
        BiquadSection

        Raises
        ------
        ValueError
            If the expression cannot be parsed, is not rational in the domain
            variable, exceeds second order or is improper.
        """
        from tokenize import TokenError
        from sympy import Poly, Symbol, SympifyError, together
        from sympy.polys.polyerrors import PolynomialError
        from sympy.parsing.sympy_parser import parse_expr, standard_transformations, implicit_multiplication_application

        if domain not in ('z', 's'):
            raise ValueError(f"Unrecognized domain '{domain}'. Use 's' or 'z'.")
        if domain == 's' and (Ts is None or not Ts > 0):
            raise ValueError("Sample period `Ts` must be positive for domain='s'")

        var = Symbol(domain)
        try:
            expr = parse_expr(
                normalize_tf_string(tf),
                local_dict={domain: var},
                transformations=standard_transformations + (implicit_multiplication_application,)
            )
        except (SympifyError, SyntaxError, TypeError, TokenError) as e:
            raise ValueError(f"Failed to parse TF expression '{tf}': {e}") from e

        symbols = expr.free_symbols
        if symbols and symbols != {var}:
            raise ValueError(
                f"TF expression '{tf}' uses symbols {sorted(str(s) for s in symbols)}, "
                f"but the domain was set to '{domain}'"
            )

        nume_expr, deno_expr = together(expr).as_numer_denom()
        try:
            nume = np.array(Poly(nume_expr, var).all_coeffs(), dtype=float)
            deno = np.array(Poly(deno_expr, var).all_coeffs(), dtype=float)
        except (PolynomialError, TypeError) as e:
            raise ValueError(f"TF must be a rational polynomial in '{var}', got '{tf}': {e}") from e

        if domain == 's':
            from scipy.signal import cont2discrete
            try:
                nume_d, deno_d, _ = cont2discrete((nume, deno), dt=Ts, method=method)
            except ValueError as e:
                raise ValueError(f"Cannot discretize '{tf}' with method '{method}': {e}") from e
            nume, deno = np.asarray(nume_d).flatten(), np.asarray(deno_d).flatten()

        nume, deno = _pad_second_order(nume, deno)
        return cls.from_unnormalized(*nume, *deno, Ts=Ts, name=name or tf)

    @classmethod
    def from_tf(cls, tf, name=None):
        """
        Build a section from a discrete-time ``control.TransferFunction`` of order two or less.

        Raises
        ------
        ValueError
            If `tf` is continuous-time, not SISO or above second order.
        """
        if tf.ninputs != 1 or tf.noutputs != 1:
            raise ValueError("Only SISO transfer functions can be realized as a biquad section")
        if tf.dt == 0:
            raise ValueError("Transfer function is continuous-time; discretize it first (e.g. with `sample_system`)")
        nume, deno = control.tfdata(tf)
        nume, deno = _pad_second_order(np.asarray(nume)[0, 0, :], np.asarray(deno)[0, 0, :])
        Ts = tf.dt if tf.dt is not True and tf.dt is not None else 1.0
        return cls.from_unnormalized(*nume, *deno, Ts=Ts, name=name or tf.name)

    @property
    def coefficients(self):
        return self._coeff

    @property
    def state(self):
        """The state registers ``(w0, w1)``."""
        return self._w0, self._w1

    def step(self, x):
        """
        Advance the filter by one sample.

        Parameters
        ----------
        x : number
            Input sample.

        Returns
        -------
        number
            Output sample.
        """
        b0, b1, b2, a1, a2 = self._coeff
        y = b0 * x + self._w0
        self._w0 = b1 * x - a1 * y + self._w1
        self._w1 = b2 * x - a2 * y
        return y

    def reset(self, state=None):
        """
        Set the state registers, to zero by default.

        Parameters
        ----------
        state : tuple of number, optional
            New ``(w0, w1)``.
        """
        if state is None:
            self._w0, self._w1 = 0, 0
        else:
            w0, w1 = state
            self._w0, self._w1 = w0, w1

    def poles(self):
        """Roots of ``z**2 + a1*z + a2`` as a pair of complex numbers."""
        return quadratic_roots(self._coeff.a1, self._coeff.a2)

    def zeros(self):
        """
        Roots of ``b0*z**2 + b1*z + b2`` as a pair of complex numbers.

        If `b0` vanishes the numerator loses degree and the missing roots are
        reported as complex infinity.
        """
        return polynomial_roots(self._coeff[:3])

    def stable(self):
        """
        True if both poles lie on or inside the unit circle.

        Marginal stability (magnitude exactly one) counts as stable. For a
        complex-conjugate pair the squared magnitude equals ``a2``, which is
        compared directly.
        """
        a1, a2 = self._coeff.a1, self._coeff.a2
        if a1 * a1 - 4 * a2 < 0:
            return bool(a2 <= 1)
        return all(abs(p) <= 1 for p in self.poles())

    @property
    def sos(self):
        """Coefficients as a SciPy second-order-section row ``[b0, b1, b2, 1, a1, a2]``."""
        b0, b1, b2, a1, a2 = self._coeff
        return np.array([b0, b1, b2, 1, a1, a2], dtype=float)

    def to_tf(self):
        """The section as a discrete-time ``control.TransferFunction`` with ``dt = Ts``."""
        b0, b1, b2, a1, a2 = self._coeff
        return control.tf([b0, b1, b2], [1, a1, a2], self.Ts, name=self.name)

    def _response(self, z):
        b0, b1, b2, a1, a2 = self._coeff
        return (b0 * z**2 + b1 * z + b2) / (z**2 + a1 * z + a2)

    def __mul__(self, other):
        """Series connection: ``self`` first, then `other`."""
        from biquadtools.cascade import BiquadCascade
        if isinstance(other, BiquadCascade):
            return BiquadCascade([self, *other.sections], Ts=self.Ts)
        if isinstance(other, BiquadSection):
            return BiquadCascade([self, other], Ts=self.Ts)
        return NotImplemented

    def __repr__(self):
        b0, b1, b2, a1, a2 = self._coeff
        return f"BiquadSection({b0!r}, {b1!r}, {b2!r}, {a1!r}, {a2!r}, Ts={self.Ts!r}, name={self.name!r})"


class Gain(FrequencyResponse):
    def __init__(self, K, Ts=1.0, name='Gain'):
        """
        Memoryless gain ``y = K*x``.

        This is the direct-gain path of a proportional controller. It has no
        state; for pole/zero introspection it behaves as the section
        ``(K, 0, 0, 0, 0)``.
        """
        check_signed(K, 'K')
        self.K = K
        self.Ts = Ts
        self.name = name

    def step(self, x):
        return self.K * x

    def reset(self, state=None):
        pass

    def as_section(self):
        return BiquadSection(self.K, 0, 0, 0, 0, Ts=self.Ts, name=self.name)

    @property
    def coefficients(self):
        return Coefficients(self.K, 0, 0, 0, 0)

    def poles(self):
        return self.as_section().poles()

    def zeros(self):
        return self.as_section().zeros()

    def stable(self):
        return True

    def _response(self, z):
        return self.K * np.ones_like(z)

    def __repr__(self):
        return f"Gain({self.K!r}, Ts={self.Ts!r}, name={self.name!r})"
