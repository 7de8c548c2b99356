import numpy as np
import matplotlib.pyplot as plt

default_rc = {
    'figure.dpi': 150,
    'font.size': 8,
    'axes.labelsize': 8,
    'axes.titlesize': 9,
    'xtick.labelsize': 8,
    'ytick.labelsize': 8,
    'axes.grid': True,
    'grid.color': '#FFD700',
    'grid.linewidth': 0.7,
    'grid.linestyle': '--',
    'axes.prop_cycle': plt.cycler('color', [
        '#000000', '#DC143C', '#00BFFF', '#FFD700', '#32CD32',
        '#FF69B4', '#FF4500', '#1E90FF', '#8A2BE2', '#FFA07A', '#8B0000'
    ]),
    }


def pole_zero_plot(system, ax=None, figsize=(4, 4), title=None):
    """
    Draw the pole-zero map of a section, cascade or controller in the z-plane.

    Poles are drawn as crosses and zeros as circles, together with the unit
    circle that bounds the stable region. Zeros at infinity are skipped.

    Parameters
    ----------
    system : object
        Anything with ``poles()`` and ``zeros()`` returning sequences of complex.
    ax : matplotlib.axes.Axes, optional
        Axis to draw into. If None, a new figure is created.
    figsize : tuple, optional
        Figure size when creating a new figure.
    title : str, optional
        Axis title. Defaults to the system's ``name`` when it has one.

    Returns
    -------
    matplotlib.axes.Axes
    """
    poles = np.asarray(system.poles(), dtype=complex)
    zeros = np.asarray(system.zeros(), dtype=complex)
    zeros = zeros[np.isfinite(zeros)]

    with plt.rc_context(default_rc):
        if ax is None:
            fig, ax = plt.subplots(figsize=figsize)

        theta = np.linspace(0, 2 * np.pi, 512)
        ax.plot(np.cos(theta), np.sin(theta), color='gray', linewidth=0.8, linestyle=':')
        ax.scatter(zeros.real, zeros.imag, marker='o', facecolors='none', edgecolors='#00BFFF', label='zeros')
        ax.scatter(poles.real, poles.imag, marker='x', color='#DC143C', label='poles')

        ax.set_xlabel("Re(z)")
        ax.set_ylabel("Im(z)")
        ax.set_aspect('equal', adjustable='datalim')
        ax.legend(loc='best', fontsize=7)

        if title is None:
            title = getattr(system, 'name', None)
        if title is not None:
            ax.set_title(title)

    return ax


def response_plot(t, responses, ax=None, figsize=(5, 3), title=None, ylabel="Output"):
    """
    Plot one or more time responses sharing a time axis.

    Parameters
    ----------
    t : array_like
        Time axis (s).
    responses : dict
        Maps a label to a response array of the same length as `t`.
    ax : matplotlib.axes.Axes, optional
        Axis to draw into.
    figsize : tuple, optional
        Figure size when creating a new figure.
    title : str, optional
        Axis title.
    ylabel : str, optional
        Label of the vertical axis.

    Returns
    -------
    matplotlib.axes.Axes
    """
    with plt.rc_context(default_rc):
        if ax is None:
            fig, ax = plt.subplots(figsize=figsize)
        for label, y in responses.items():
            ax.step(t, y, where='post', label=label)
        ax.set_xlabel("Time (s)")
        ax.set_ylabel(ylabel)
        ax.legend(loc='best', edgecolor='black', fancybox=True, shadow=True, framealpha=1, fontsize=8)
        if title is not None:
            ax.set_title(title)
    return ax
