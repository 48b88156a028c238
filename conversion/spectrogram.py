"""
Epoch Spectrogram Extraction

Windowed-FFT time/frequency features per 30 s epoch:
3 channels × 32 time positions × 32 frequency bins.
"""

import numpy as np
from scipy import signal

from .constants import (
    EPOCH_SAMPLES,
    FFT_WINDOW,
    FFT_HOP,
    N_CHANNELS,
    N_FREQ_BINS,
    N_TIME_BINS,
)


def count_epochs(n_samples: int, *, epoch_samples: int = EPOCH_SAMPLES) -> int:
    """Whole epochs in n_samples; the remainder is dropped."""
    return int(n_samples) // epoch_samples


def window_offsets(
    *,
    epoch_samples: int = EPOCH_SAMPLES,
    window: int = FFT_WINDOW,
    hop: int = FFT_HOP,
) -> np.ndarray:
    """Start offsets of the FFT windows within an epoch (0, 90, ..., 2790)."""
    return np.arange(0, epoch_samples - window, hop)


class SpectrogramExtractor:
    """
    FFT work context for one conversion.

    Holds the Hamming window and scratch buffers, so an instance must not be
    shared between concurrently running conversions. Create one per task.
    """

    def __init__(
        self,
        *,
        epoch_samples: int = EPOCH_SAMPLES,
        window: int = FFT_WINDOW,
        hop: int = FFT_HOP,
        n_freq: int = N_FREQ_BINS,
        n_time: int = N_TIME_BINS,
    ):
        self.epoch_samples = epoch_samples
        self.window = window
        self.hop = hop
        self.n_freq = n_freq
        self.n_time = n_time

        self.offsets = window_offsets(epoch_samples=epoch_samples, window=window, hop=hop)
        if self.offsets.size != n_time:
            raise ValueError(
                f"Window geometry gives {self.offsets.size} positions per epoch, expected {n_time}"
            )

        self.hamming = signal.windows.hamming(window, sym=True)
        # (n_time, window) gather index into one epoch
        self._index = self.offsets[:, np.newaxis] + np.arange(window)[np.newaxis, :]
        self._frames = np.empty((n_time, window), dtype=np.float64)

    def epoch_block(self, epoch_data: np.ndarray) -> np.ndarray:
        """
        Magnitude spectrogram of one epoch of one channel.

        Returns
        -------
        np.ndarray
            Shape (n_time, n_freq)
        """
        np.multiply(epoch_data[self._index], self.hamming, out=self._frames)
        spectrum = np.fft.rfft(self._frames, n=self.window, axis=1)
        return np.abs(spectrum[:, :self.n_freq])

    def extract(self, eeg: np.ndarray, eog_left: np.ndarray, eog_right: np.ndarray) -> np.ndarray:
        """
        Feature blocks for every whole epoch of the three derivations.

        All inputs must be at the target rate and at least as long as `eeg`.

        Returns
        -------
        np.ndarray
            Shape (epochs, 3, n_time, n_freq), float64. Channel order is
            EEG, EOG-left, EOG-right.
        """
        n_epochs = count_epochs(len(eeg), epoch_samples=self.epoch_samples)
        payload = np.zeros((n_epochs, N_CHANNELS, self.n_time, self.n_freq), dtype=np.float64)

        channels = (eeg, eog_left, eog_right)
        for i in range(n_epochs):
            start = i * self.epoch_samples
            stop = start + self.epoch_samples
            for c, data in enumerate(channels):
                payload[i, c] = self.epoch_block(np.asarray(data[start:stop], dtype=np.float64))

        return payload
