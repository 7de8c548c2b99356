"""
Unit tests for continuous-to-discrete PID coefficient synthesis.

Each discretization is checked against its defining substitution for `s`,
and against scipy.signal.cont2discrete which implements the same three
integrator formulas as a generalized bilinear transform.
"""
import math

import numpy as np
import pytest
from scipy import signal

from biquadtools import (
    BiquadSection, ConfigurationError, Method, PIDConfig,
    backward_euler_coeff, forward_euler_coeff, pid_coefficients, synthesize, trapezoidal_coeff,
)
from biquadtools.simulation import simulate

GAINS = dict(Kp=1.5, Ki=0.8, Kd=0.05, Tf=0.02, Ts=0.01)

SUBSTITUTIONS = {
    Method.FORWARD_EULER: lambda z, Ts: (z - 1) / Ts,
    Method.BACKWARD_EULER: lambda z, Ts: (z - 1) / (Ts * z),
    Method.TRAPEZOIDAL: lambda z, Ts: 2 / Ts * (z - 1) / (z + 1),
}

SCIPY_METHODS = {
    Method.FORWARD_EULER: 'euler',
    Method.BACKWARD_EULER: 'backward_diff',
    Method.TRAPEZOIDAL: 'bilinear',
}


def continuous_pid(s, Kp, Ki, Kd, Tf):
    return Kp + Ki / s + Kd * s / (Tf * s + 1)


@pytest.mark.parametrize("alias, expected", [
    ('euler', Method.FORWARD_EULER),
    ('Forward-Euler', Method.FORWARD_EULER),
    ('backward_diff', Method.BACKWARD_EULER),
    ('backward_euler', Method.BACKWARD_EULER),
    ('tustin', Method.TRAPEZOIDAL),
    ('bilinear', Method.TRAPEZOIDAL),
    (Method.TRAPEZOIDAL, Method.TRAPEZOIDAL),
])
def test_method_aliases(alias, expected):
    assert Method(alias) is expected


def test_unknown_method():
    with pytest.raises(ValueError):
        Method('zoh')
    with pytest.raises(ConfigurationError):
        PIDConfig(method='zoh')


@pytest.mark.parametrize("method", list(Method))
def test_matches_substitution(method):
    config = PIDConfig(**GAINS, method=method)
    section = synthesize(config)

    f = np.array([0.5, 2.0, 10.0, 40.0])
    z = np.exp(2j * np.pi * f * config.Ts)
    s = SUBSTITUTIONS[method](z, config.Ts)
    expected = continuous_pid(s, config.Kp, config.Ki, config.Kd, config.Tf)
    np.testing.assert_allclose(section.frequency_response(f), expected, rtol=1e-9)


@pytest.mark.parametrize("method", list(Method))
def test_matches_cont2discrete(method):
    Kp, Ki, Kd, Tf, Ts = GAINS['Kp'], GAINS['Ki'], GAINS['Kd'], GAINS['Tf'], GAINS['Ts']
    num = [Kp * Tf + Kd, Kp + Ki * Tf, Ki]
    den = [Tf, 1, 0]
    num_d, den_d, _ = signal.cont2discrete((num, den), dt=Ts, method=SCIPY_METHODS[method])
    num_d = np.asarray(num_d).flatten()
    den_d = np.asarray(den_d).flatten()
    expected = np.concatenate((num_d, den_d[1:])) / den_d[0]

    coeff = pid_coefficients(PIDConfig(**GAINS, method=method))
    np.testing.assert_allclose(coeff, expected, rtol=1e-8, atol=1e-10)


def test_methods_give_distinct_coefficients():
    sets = {m: pid_coefficients(PIDConfig(**GAINS, method=m)) for m in Method}
    assert sets[Method.FORWARD_EULER] != sets[Method.BACKWARD_EULER]
    assert sets[Method.FORWARD_EULER] != sets[Method.TRAPEZOIDAL]
    assert sets[Method.BACKWARD_EULER] != sets[Method.TRAPEZOIDAL]


def test_coefficients_are_deterministic():
    assert pid_coefficients(PIDConfig(**GAINS)) == pid_coefficients(PIDConfig(**GAINS))


def test_trapezoidal_pi_literal():
    b0, b1, b2, a1, a2 = trapezoidal_coeff(Kp=2.0, Ki=2.0, Kd=0.0, Tf=0.0, Ts=0.1)
    assert (b0, b1, b2) == pytest.approx((2.1, 0.2, -1.9))
    assert (a1, a2) == pytest.approx((0.0, -1.0))


def test_backward_euler_pi_literal():
    b0, b1, b2, a1, a2 = backward_euler_coeff(Kp=2.0, Ki=2.0, Kd=0.0, Tf=0.0, Ts=0.1)
    assert (b0, b1, b2) == pytest.approx((2.2, -2.0, 0.0))
    assert (a1, a2) == pytest.approx((-1.0, 0.0))


class TestForwardEulerGuard:
    def test_filter_constant_irrelevant_without_derivative(self):
        assert forward_euler_coeff(1.0, 1.0, 0.0, 0.0, 1.0) == forward_euler_coeff(1.0, 1.0, 0.0, 1.0, 1.0)

    def test_unfiltered_derivative_rejected(self):
        with pytest.raises(ConfigurationError):
            forward_euler_coeff(1.0, 0.0, 1.0, 0.0, 1.0)
        with pytest.raises(ConfigurationError):
            PIDConfig(Kd=1.0, method=Method.FORWARD_EULER)

    def test_unfiltered_derivative_allowed_elsewhere(self):
        for method in (Method.BACKWARD_EULER, Method.TRAPEZOIDAL):
            section = synthesize(PIDConfig(Kp=1.0, Kd=1.0, Tf=0.0, Ts=1.0, method=method))
            assert np.isfinite(section.coefficients).all()

    def test_unstable_result_is_logged(self, caplog):
        config = PIDConfig(Kp=1.0, Ki=1.0, Ts=3.0, method='euler')
        with caplog.at_level("WARNING", logger="biquadtools.synthesis"):
            section = synthesize(config)
        assert not section.stable()
        assert "unstable" in caplog.text


class TestTimeConstants:
    def test_conversion(self):
        config = PIDConfig.from_time_constants(Ts=0.1, Kp=2.0, Ti=4.0, Td=0.5, N=10.0)
        assert config.Ki == pytest.approx(0.5)
        assert config.Kd == pytest.approx(1.0)
        assert config.Tf == pytest.approx(0.05)
        assert config.method is Method.TRAPEZOIDAL

    def test_defaults_disable_integral_and_derivative(self):
        config = PIDConfig.from_time_constants(Ts=1.0, Kp=2.0)
        assert (config.Ki, config.Kd, config.Tf) == (0.0, 0.0, 0.0)

    def test_no_integral_is_pure_gain(self):
        section = synthesize(PIDConfig.from_time_constants(Ts=1.0, Kp=2.0, Ti=math.inf))
        assert list(simulate(section, range(5))) == pytest.approx([0, 2, 4, 6, 8])

    @pytest.mark.parametrize("kwargs", [
        dict(Ti=0.0),
        dict(Ti=-1.0),
        dict(Td=-0.1),
        dict(Td=math.inf),
        dict(N=0.0),
        dict(Kp=math.nan),
        dict(Ts=0.0),
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            PIDConfig.from_time_constants(**kwargs)


class TestConfigValidation:
    @pytest.mark.parametrize("kwargs", [
        dict(Ts=0.0),
        dict(Ts=-0.1),
        dict(Ts=math.inf),
        dict(Tf=-1.0),
        dict(Kp=math.inf),
        dict(Ki=math.nan),
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            PIDConfig(**kwargs)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            PIDConfig(Ts=0.0)

    @pytest.mark.parametrize("bad", ["1", 1j, np.uint8(1), None])
    def test_non_numeric(self, bad):
        with pytest.raises(TypeError):
            PIDConfig(Kp=bad)

    def test_frozen(self):
        config = PIDConfig()
        with pytest.raises(AttributeError):
            config.Kp = 3.0

    def test_synthesized_section_carries_sample_period(self):
        section = synthesize(PIDConfig(**GAINS), name='loop')
        assert isinstance(section, BiquadSection)
        assert section.Ts == GAINS['Ts']
        assert section.name == 'loop'
