import numbers
import numpy as np
import logging
logger = logging.getLogger(__name__)


def check_signed(value, name='value'):
    """
    Reject element types that cannot carry a signed filter quantity.

    Coefficients, state and limits may be Python or numpy integers (fixed-point
    use) or reals. Unsigned integers cannot represent negative feedback terms,
    and complex values have no ordering for the limiter.

    Parameters
    ----------
    value : object
        Candidate scalar.
    name : str, optional
        Name used in the error message.

    Returns
    -------
    value
        The input, unchanged.

    Raises
    ------
    TypeError
        If `value` is not a real number or has an unsigned integer type.
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise TypeError(f"`{name}` must be a signed real or integer number, got {type(value).__name__}")
    if isinstance(value, np.unsignedinteger):
        raise TypeError(f"`{name}` has unsigned type {type(value).__name__}; a signed type is required")
    return value


def quadratic_roots(b, c):
    """
    Roots of the monic quadratic ``x**2 + b*x + c``.

    The roots come straight from the quadratic formula. A negative discriminant
    yields a complex-conjugate pair, otherwise two real roots. The first root
    always takes the positive square root.

    Parameters
    ----------
    b : float
        Linear coefficient.
    c : float
        Constant coefficient.

    Returns
    -------
    tuple of complex
        ``((-b + sqrt(d))/2, (-b - sqrt(d))/2)`` with ``d = b**2 - 4c``.
    """
    disc = b * b - 4 * c
    if disc < 0:
        sq = 1j * np.sqrt(-disc)
    else:
        sq = np.sqrt(disc)
    return complex((-b + sq) / 2), complex((-b - sq) / 2)


def polynomial_roots(p):
    """
    Roots of ``p[0]*x**2 + p[1]*x + p[2]`` as a pair.

    A vanishing leading coefficient lowers the degree; each missing root is
    reported as complex infinity, i.e. a root at z = ∞.

    Parameters
    ----------
    p : sequence of float
        Three polynomial coefficients, highest power first.

    Returns
    -------
    tuple of complex
    """
    p0, p1, p2 = p
    if p0 != 0:
        return quadratic_roots(p1 / p0, p2 / p0)
    inf = complex(np.inf, 0)
    if p1 != 0:
        return complex(-p2 / p1), inf
    return inf, inf


def monic_quadratic(roots):
    """
    Coefficients ``(c1, c2)`` of the monic quadratic ``x**2 + c1*x + c2`` with the given roots.

    Parameters
    ----------
    roots : sequence of complex
        Exactly two roots. They must be real or form a complex-conjugate pair,
        otherwise the polynomial would have complex coefficients.

    Returns
    -------
    tuple of float

    Raises
    ------
    ValueError
        If the roots do not give a real polynomial.
    """
    if len(roots) != 2:
        raise ValueError(f"A second-order section needs exactly two roots, got {len(roots)}")
    r1, r2 = complex(roots[0]), complex(roots[1])
    c1 = -(r1 + r2)
    c2 = r1 * r2
    scale = max(1.0, abs(r1), abs(r2))
    if abs(c1.imag) > 1e-12 * scale or abs(c2.imag) > 1e-12 * scale ** 2:
        raise ValueError(f"Roots {r1} and {r2} are not real or complex conjugates")
    return c1.real, c2.real


def wrap_phase(phase, deg=False):
    """
    Wrap phase values to [-π, π) or [-180°, 180°).

    Parameters
    ----------
    phase : array_like or float
        Phase value(s) to wrap.
    deg : bool, optional
        If True, the input is in degrees. Default is False (radians).

    Returns
    -------
    ndarray or float
        Wrapped phase.
    """
    if deg:
        return (phase + 180.0) % 360.0 - 180.0
    return (phase + np.pi) % (2 * np.pi) - np.pi


def nan_checker(x):
    """
    Drop NaNs from an array and return a mask of where they were.

    Parameters
    ----------
    x : ndarray
        Input array.

    Returns
    -------
    xnew : ndarray
        `x` without its NaN entries.
    nanarray : ndarray of bool
        True where `x` was NaN.
    """
    nanarray = np.isnan(x)
    if nanarray.any():
        logger.warning('NaN was detected in the input array')
        return x[~nanarray], nanarray
    return x, nanarray


def tf_group_delay(f, tf):
    """
    Group delay of a sampled complex frequency response.

    The delay is ``-d(phase)/d(omega)`` with ``omega = 2*pi*f``, estimated with
    ``np.gradient`` on the unwrapped phase. NaN entries of `tf` are skipped
    for the derivative and kept as NaN in the output.

    Parameters
    ----------
    f : array_like
        Frequencies in Hz.
    tf : array_like
        Complex response evaluated at `f`.

    Returns
    -------
    ndarray
        Group delay in seconds.
    """
    f = np.asarray(f, dtype=float)
    tf = np.asarray(tf)
    tfnew, nanarray = nan_checker(tf)

    phase = np.unwrap(np.angle(tfnew))
    gd = -np.gradient(phase, 2 * np.pi * f[~nanarray])

    output = np.full(tf.shape, np.nan)
    output[~nanarray] = gd
    return output
