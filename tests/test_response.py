"""
Frequency-domain helpers, plotting and expression normalization.
"""
import numpy as np
import pytest
import matplotlib.pyplot as plt

from biquadtools import BiquadCascade, BiquadSection, Gain, PI
from biquadtools.filtermath import monic_quadratic, quadratic_roots, tf_group_delay, wrap_phase
from biquadtools.plots import pole_zero_plot, response_plot
from biquadtools.simulation import step_response
from biquadtools.utils import normalize_tf_string


@pytest.fixture
def lowpass():
    return BiquadSection(0.25, 0.5, 0.25, 0, 0, Ts=1e-3, name='lowpass')


class TestFrequencyResponse:
    def test_gain_is_flat(self):
        g = Gain(2.0, Ts=0.1)
        np.testing.assert_allclose(g.frequency_response([0.0, 1.0, 4.9]), [2.0, 2.0, 2.0])

    def test_dc_and_nyquist(self, lowpass):
        H = lowpass.frequency_response([0.0, 500.0])
        assert H[0] == pytest.approx(1.0)
        assert abs(H[1]) == pytest.approx(0.0, abs=1e-12)

    def test_bode_dc(self, lowpass):
        mag, phase = lowpass.bode([0.0])
        assert mag[0] == pytest.approx(1.0)
        assert phase[0] == pytest.approx(0.0)
        mag_db, _ = lowpass.bode([0.0], dB=True)
        assert mag_db[0] == pytest.approx(0.0, abs=1e-12)

    def test_bode_phase_wrapped(self, lowpass):
        f = np.linspace(1, 499, 200)
        _, phase = lowpass.bode(f, deg=True, wrap=True)
        assert np.all(phase >= -180) and np.all(phase < 180)

    def test_delay_group_delay(self):
        delay = BiquadSection(0, 1, 0, 0, 0, Ts=0.5)
        f = np.linspace(0.01, 0.9, 50)
        np.testing.assert_allclose(delay.group_delay(f), 0.5, rtol=1e-6)

    def test_symmetric_fir_group_delay(self, lowpass):
        f = np.linspace(1, 400, 100)
        np.testing.assert_allclose(lowpass.group_delay(f), lowpass.Ts, rtol=1e-6)

    def test_cascade_response_is_product(self, lowpass):
        other = BiquadSection(1.0, -0.5, 0.0, 0.3, 0.0, Ts=1e-3)
        cascade = BiquadCascade([lowpass, other])
        f = np.array([10.0, 100.0, 300.0])
        np.testing.assert_allclose(
            cascade.frequency_response(f),
            lowpass.frequency_response(f) * other.frequency_response(f),
        )


class TestFilterMath:
    def test_wrap_phase_degrees(self):
        np.testing.assert_allclose(wrap_phase(np.array([190.0, -190.0, 360.0]), deg=True), [-170.0, 170.0, 0.0])

    def test_wrap_phase_radians(self):
        assert wrap_phase(3 * np.pi / 2) == pytest.approx(-np.pi / 2)

    def test_group_delay_keeps_nan_positions(self):
        f = np.array([1.0, 2.0, 3.0, 4.0])
        tf = np.exp(-2j * np.pi * f * 0.1)
        tf[2] = np.nan
        gd = tf_group_delay(f, tf)
        assert np.isnan(gd[2])
        np.testing.assert_allclose(gd[[0, 1, 3]], 0.1, rtol=1e-6)

    def test_quadratic_roots_real(self):
        assert quadratic_roots(-3, 2) == (2, 1)

    def test_quadratic_roots_complex(self):
        r1, r2 = quadratic_roots(0, 1)
        assert r1 == 1j
        assert r2 == -1j

    def test_monic_quadratic(self):
        assert monic_quadratic([1j, -1j]) == (0.0, 1.0)
        assert monic_quadratic([2, 3]) == (-5.0, 6.0)


class TestPlots:
    def test_bode_plot(self, lowpass):
        f = np.logspace(0, np.log10(499), 50)
        ax_mag, ax_phase = lowpass.bode_plot(f, dB=True, title='lowpass')
        assert ax_mag.get_title() == 'lowpass'
        assert ax_phase.get_xlabel() == "Frequency (Hz)"
        assert len(ax_mag.get_lines()) == 1

    def test_bode_plot_overlay(self, lowpass):
        f = np.logspace(0, np.log10(499), 50)
        axes = lowpass.bode_plot(f)
        PI(Ts=1e-3, Kp=1.0, Ti=0.01).bode_plot(f, axes=axes, label='PI')
        assert len(axes[0].get_lines()) == 2

    def test_pole_zero_plot(self):
        sec = BiquadSection(0, 1, -1, -1, 1, name='marginal')
        ax = pole_zero_plot(sec)
        assert ax.get_title() == 'marginal'
        # unit circle + two scatter collections
        assert len(ax.get_lines()) == 1
        assert len(ax.collections) == 2

    def test_pole_zero_plot_existing_axis(self):
        fig, ax = plt.subplots()
        out = pole_zero_plot(BiquadCascade([BiquadSection(1, 0, 0, -0.5, 0.06)]), ax=ax, title='cascade')
        assert out is ax
        assert ax.get_title() == 'cascade'

    def test_response_plot(self):
        t, y = step_response(PI(Ts=0.1, Kp=2.0, Ti=1.0), 20)
        ax = response_plot(t, {'PI': y, 'reference': np.ones_like(t)}, title='step')
        assert len(ax.get_lines()) == 2
        assert ax.get_title() == 'step'


class TestNormalizeTF:
    @pytest.mark.parametrize("raw, expected", [
        ('2z^2 + 1', '2*z**2 + 1'),
        ('0.5z', '0.5*z'),
        ('(z+1)(z-1)', '(z+1)*(z-1)'),
        ('2(z+1)', '2*(z+1)'),
        ('(z+1)2', '(z+1)*2'),
    ])
    def test_implicit_multiplication(self, raw, expected):
        assert normalize_tf_string(raw) == expected

    def test_scientific_literal_preserved(self):
        assert normalize_tf_string('1e-3*z + 2.5E2') == '0.001*z + 250.0'

    def test_tiny_scientific_literal_keeps_value(self):
        out = normalize_tf_string('1e-20*z + 3.25e-18')
        assert out == '1e-20*z + 3.25e-18'
