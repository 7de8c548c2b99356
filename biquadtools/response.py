from biquadtools.filtermath import wrap_phase, tf_group_delay
from biquadtools.plots import default_rc

import warnings
import numpy as np
import matplotlib.pyplot as plt
import logging
logger = logging.getLogger(__name__)


class FrequencyResponse:
    """
    Frequency-domain introspection for discrete SISO elements.

    Subclasses provide a sample period ``Ts`` (seconds) and ``_response(z)``,
    the transfer function evaluated at complex points ``z``. Everything else
    (complex response on the unit circle, Bode data, group delay and the Bode
    plot) is derived here.
    """

    Ts = 1.0

    def _response(self, z):
        raise NotImplementedError

    def frequency_response(self, f):
        """
        Evaluate the transfer function on the unit circle.

        Parameters
        ----------
        f : array_like
            Fourier frequencies in Hz.

        Returns
        -------
        ndarray of complex
            ``H(exp(j*2*pi*f*Ts))``.
        """
        f = np.asarray(f, dtype=float)
        z = np.exp(1j * 2 * np.pi * f * self.Ts)
        return self._response(z)

    def bode(self, f, dB=False, deg=True, wrap=True):
        """
        Compute the Bode magnitude and phase at given frequencies.

        Parameters
        ----------
        f : array_like
            Frequency array in Hz.
        dB : bool, optional
            If True, return magnitude in decibels. Default is False (linear).
        deg : bool, optional
            If True, return phase in degrees. Default is True.
        wrap : bool, optional
            If True, wrap phase to [-180, 180) deg or [-π, π) rad. Default is True.

        Returns
        -------
        mag : ndarray
        phase : ndarray
        """
        val = self.frequency_response(f)
        mag = 20 * np.log10(np.abs(val)) if dB else np.abs(val)
        phase = np.angle(val, deg=deg)
        if wrap:
            phase = wrap_phase(phase, deg=deg)
        return mag, phase

    def group_delay(self, f):
        """Group delay in seconds at frequencies `f` (Hz)."""
        f = np.asarray(f, dtype=float)
        return tf_group_delay(f, self.frequency_response(f))

    def bode_plot(self, f, figsize=(4, 4), title=None, dB=False, deg=True, wrap=True, axes=None, label=None, *args, **kwargs):
        """
        Plot the Bode diagram (magnitude and phase) of this element.

        Parameters
        ----------
        f : array_like
            Frequency array in Hz.
        figsize : tuple, optional
            Size of the figure if a new one is created.
        title : str, optional
            Title of the magnitude axis.
        dB, deg, wrap : bool, optional
            As in :meth:`bode`.
        axes : tuple of matplotlib.axes.Axes, optional
            Existing (magnitude, phase) axes to draw into.
        label : str, optional
            Legend label. Defaults to the element's ``name``.

        Returns
        -------
        tuple of matplotlib.axes.Axes
            The magnitude and phase axes.
        """
        f = np.asarray(f, dtype=float)

        with plt.rc_context(default_rc), warnings.catch_warnings():
            warnings.simplefilter("ignore", category=RuntimeWarning)

            mag, phase = self.bode(f, dB=dB, deg=deg, wrap=wrap)

            if axes is None:
                fig, (ax_mag, ax_phase) = plt.subplots(2, 1, figsize=figsize, sharex=True)
            else:
                ax_mag, ax_phase = axes
                fig = ax_mag.figure

            lbl = label if label is not None else getattr(self, 'name', None)
            ax_mag_func = ax_mag.semilogx if dB else ax_mag.loglog
            ax_mag_func(f, mag, label=lbl, *args, **kwargs)
            ax_phase.semilogx(f, phase, label=lbl, *args, **kwargs)

            ax_mag.set_ylabel("Magnitude (dB)" if dB else "Magnitude")
            ax_phase.set_ylabel("Phase (deg)" if deg else "Phase (rad)")
            ax_phase.set_xlabel("Frequency (Hz)")
            ax_mag.set_xlim(f[0], f[-1])
            ax_phase.set_xlim(f[0], f[-1])

            if lbl is not None:
                ax_mag.legend(loc='best', edgecolor='black', fancybox=True, shadow=True, framealpha=1, fontsize=8)
            if title is not None:
                ax_mag.set_title(title)

            fig.tight_layout()
            fig.align_ylabels()

            return ax_mag, ax_phase
