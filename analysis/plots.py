"""
Visualization Functions

Matplotlib figure generators for decoded CFS feature streams.
"""

import numpy as np
import matplotlib.pyplot as plt

from conversion.constants import FFT_HOP, FFT_WINDOW, TARGET_RATE_HZ

CHANNEL_NAMES = ("EEG (C3/C4)", "EOG-l", "EOG-r")
CHANNEL_CMAPS = ("viridis", "magma", "magma")


def freq_axis_hz(n_freq: int, *, fs_hz: int = TARGET_RATE_HZ, nfft: int = FFT_WINDOW) -> np.ndarray:
    """Centre frequency of each kept FFT bin (Hz)."""
    return np.arange(n_freq) * fs_hz / nfft


def time_axis_s(n_time: int, *, fs_hz: int = TARGET_RATE_HZ, hop: int = FFT_HOP) -> np.ndarray:
    """Start time of each window position within the epoch (s)."""
    return np.arange(n_time) * hop / fs_hz


def _log_mag(x: np.ndarray) -> np.ndarray:
    return 20.0 * np.log10(np.asarray(x, dtype=np.float64) + 1e-6)


# ═══════════════════════════════════════════════════════════════════════════════
# SINGLE EPOCH
# ═══════════════════════════════════════════════════════════════════════════════

def plot_epoch_spectrogram(features: np.ndarray, epoch: int, *, title_prefix: str = "") -> plt.Figure:
    """
    Three-panel spectrogram (EEG, EOG-l, EOG-r) of one epoch.

    Parameters
    ----------
    features : np.ndarray
        Shape (n_epochs, 3, n_time, n_freq)
    epoch : int
        Epoch index (0-based)
    """
    if not 0 <= epoch < features.shape[0]:
        raise IndexError(f"Epoch {epoch} out of range (0..{features.shape[0] - 1})")

    n_time, n_freq = features.shape[2], features.shape[3]
    t = time_axis_s(n_time)
    f = freq_axis_hz(n_freq)
    extent = (t[0], t[-1] + FFT_HOP / TARGET_RATE_HZ, f[0], f[-1] + TARGET_RATE_HZ / FFT_WINDOW)

    fig, axes = plt.subplots(1, 3, figsize=(16, 4.5), sharey=True)
    for c, ax in enumerate(axes):
        img = ax.imshow(
            _log_mag(features[epoch, c].T),
            origin="lower",
            aspect="auto",
            extent=extent,
            cmap=CHANNEL_CMAPS[c],
        )
        ax.set_title(CHANNEL_NAMES[c], fontsize=11, fontweight="bold")
        ax.set_xlabel("Time in epoch (s)", fontsize=10)
        fig.colorbar(img, ax=ax, label="dB")
    axes[0].set_ylabel("Frequency (Hz)", fontsize=10)

    fig.suptitle(f"{title_prefix}Epoch {epoch + 1}/{features.shape[0]}", fontsize=13, fontweight="bold")
    fig.tight_layout()
    return fig


# ═══════════════════════════════════════════════════════════════════════════════
# WHOLE RECORDING
# ═══════════════════════════════════════════════════════════════════════════════

def plot_recording_overview(features: np.ndarray, *, title_prefix: str = "") -> plt.Figure:
    """
    Per-channel spectral overview across the night.

    Each epoch's 32 time positions are averaged, giving an
    epochs × frequency image per channel.
    """
    n_epochs, n_channels, _, n_freq = features.shape
    f = freq_axis_hz(n_freq)
    mean_spec = features.mean(axis=2)       # (epochs, channels, freq)
    hours = n_epochs * 30.0 / 3600.0

    fig, axes = plt.subplots(n_channels, 1, figsize=(16, 10), sharex=True)
    fig.subplots_adjust(hspace=0.35)

    for c, ax in enumerate(np.atleast_1d(axes)):
        if n_epochs:
            img = ax.imshow(
                _log_mag(mean_spec[:, c, :].T),
                origin="lower",
                aspect="auto",
                extent=(0.0, hours, f[0], f[-1]),
                cmap=CHANNEL_CMAPS[c],
            )
            fig.colorbar(img, ax=ax, label="dB")
        ax.set_title(CHANNEL_NAMES[c], fontsize=11, fontweight="bold")
        ax.set_ylabel("Frequency (Hz)", fontsize=10)
    np.atleast_1d(axes)[-1].set_xlabel("Time (h)", fontsize=10)

    fig.suptitle(f"{title_prefix}Spectral overview | epochs={n_epochs:,}", fontsize=13, fontweight="bold")
    return fig
