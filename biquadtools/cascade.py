from biquadtools.section import BiquadSection
from biquadtools.response import FrequencyResponse

import control
import numpy as np
import logging
logger = logging.getLogger(__name__)


class BiquadCascade(FrequencyResponse):
    def __init__(self, sections, Ts=None, name='Cascade'):
        """
        Series connection of second-order sections.

        Filters of order above two are realized as a product of biquads.
        :meth:`step` feeds the output of each section to the next, in list
        order, and returns the output of the last one. The ideal transfer
        function does not depend on the order; intermediate numerical
        conditioning does, so the order is left to the caller.

        Parameters
        ----------
        sections : sequence of BiquadSection
            The sections, fixed for the lifetime of the cascade.
        Ts : float, optional
            Sample period in seconds. Defaults to that of the first section.
        name : str, optional
            Name of the cascade.

        Raises
        ------
        ValueError
            If `sections` is empty.
        TypeError
            If an element is not a BiquadSection.
        """
        sections = tuple(sections)
        if not sections:
            raise ValueError("A cascade needs at least one section")
        for sec in sections:
            if not isinstance(sec, BiquadSection):
                raise TypeError(f"Cascade elements must be BiquadSection, got {type(sec).__name__}")
        self.name = name
        self._sections = sections
        self.Ts = sections[0].Ts if Ts is None else Ts

        periods = {sec.Ts for sec in sections}
        if len(periods) > 1:
            logger.warning(f"{name}: sections have different sample periods {sorted(periods)}; using Ts={self.Ts}")

    @classmethod
    def from_sos(cls, sos, Ts=1.0, name='Cascade'):
        """
        Build a cascade from a SciPy-style ``(n_sections, 6)`` array.

        Each row is ``[b0, b1, b2, a0, a1, a2]``; rows are normalized by `a0`.
        """
        sos = np.atleast_2d(np.asarray(sos, dtype=float))
        if sos.ndim != 2 or sos.shape[1] != 6:
            raise ValueError(f"SOS array must have shape (n_sections, 6), got {sos.shape}")
        sections = [
            BiquadSection.from_unnormalized(*row, Ts=Ts, name=f"{name}[{i}]")
            for i, row in enumerate(sos)
        ]
        return cls(sections, Ts=Ts, name=name)

    @property
    def sections(self):
        return self._sections

    def __len__(self):
        return len(self._sections)

    def __iter__(self):
        return iter(self._sections)

    def __getitem__(self, index):
        return self._sections[index]

    def step(self, x):
        for sec in self._sections:
            x = sec.step(x)
        return x

    def reset(self):
        for sec in self._sections:
            sec.reset()

    def poles(self):
        """Poles of every section, in section order."""
        return tuple(p for sec in self._sections for p in sec.poles())

    def zeros(self):
        """Zeros of every section, in section order."""
        return tuple(z for sec in self._sections for z in sec.zeros())

    def stable(self):
        return all(sec.stable() for sec in self._sections)

    @property
    def sos(self):
        """The cascade as a ``(n_sections, 6)`` array for ``scipy.signal.sosfilt``."""
        return np.vstack([sec.sos for sec in self._sections])

    def to_tf(self):
        """Product of the section transfer functions as a ``control.TransferFunction``."""
        tf = self._sections[0].to_tf()
        for sec in self._sections[1:]:
            tf = control.series(tf, sec.to_tf())
        tf.name = self.name
        return tf

    def _response(self, z):
        val = np.ones_like(z, dtype=complex)
        for sec in self._sections:
            val = val * sec._response(z)
        return val

    def __mul__(self, other):
        if isinstance(other, BiquadCascade):
            return BiquadCascade([*self._sections, *other.sections], Ts=self.Ts)
        if isinstance(other, BiquadSection):
            return BiquadCascade([*self._sections, other], Ts=self.Ts)
        return NotImplemented

    def __repr__(self):
        return f"BiquadCascade({list(self._sections)!r}, Ts={self.Ts!r}, name={self.name!r})"
