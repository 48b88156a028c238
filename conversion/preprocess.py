"""
Signal Preprocessing

Unit → µV scaling, FIR bandpass design, conditioning of the EEG/EOG
derivations and rate matching to the 100 Hz target rate.
"""

from dataclasses import dataclass
from math import gcd
from typing import NamedTuple

import numpy as np
from scipy import signal

from .constants import (
    FILTER_ORDER,
    EEG_BAND_HZ,
    EOG_BAND_HZ,
    TARGET_RATE_HZ,
)
from .errors import InvalidUnit

# ═══════════════════════════════════════════════════════════════════════════════
# UNIT → MICROVOLTS
# ═══════════════════════════════════════════════════════════════════════════════

# Checked in order; "V" must come last so it only matches a bare volt prefix
UNIT_MULTIPLIERS = (
    ("nV", 0.001),
    ("uV", 1.0),
    ("mV", 1000.0),
    ("V", 1_000_000.0),
)


def find_unit_multiplier(unit: str) -> float:
    """
    Multiplier that converts samples in `unit` to microvolts.

    Prefix match, case-sensitive. Raises InvalidUnit for anything else.
    """
    unit = unit or ""
    for prefix, multiplier in UNIT_MULTIPLIERS:
        if unit.startswith(prefix):
            return multiplier
    raise InvalidUnit(unit)


# ═══════════════════════════════════════════════════════════════════════════════
# FIR BANDPASS DESIGN
# ═══════════════════════════════════════════════════════════════════════════════

def fir_bandpass(order: int, fl: float, fh: float) -> np.ndarray:
    """
    Windowed-sinc bandpass: difference of two low-pass kernels.

    Parameters
    ----------
    order : int
        Filter order N; N + 1 coefficients are returned
    fl, fh : float
        Cutoffs normalised as f_hz * 2 / fs_hz

    Returns
    -------
    np.ndarray
        b[i] = hamming[i] * (sinc(fh*(i-N/2))*fh - sinc(fl*(i-N/2))*fl)
    """
    n = np.arange(order + 1, dtype=np.float64) - order / 2.0
    window = signal.windows.hamming(order + 1, sym=True)
    return window * (np.sinc(fh * n) * fh - np.sinc(fl * n) * fl)


def normalized_band(band_hz: tuple, fs_hz: float) -> tuple:
    """(low, high) in Hz → fractions of the sampling rate (f * 2 / fs)."""
    low_hz, high_hz = band_hz
    return low_hz * 2.0 / fs_hz, high_hz * 2.0 / fs_hz


@dataclass(frozen=True)
class FilterBank:
    """Kernels for one recording. Read-only once designed."""
    eeg: np.ndarray
    eog_left: np.ndarray
    eog_right: np.ndarray


def design_filters(
    eeg_rate: float,
    eog_left_rate: float,
    eog_right_rate: float,
    *,
    order: int = FILTER_ORDER,
    eeg_band_hz: tuple = EEG_BAND_HZ,
    eog_band_hz: tuple = EOG_BAND_HZ,
) -> FilterBank:
    """
    Design the EEG and EOG kernels.

    The right EOG kernel is only designed at its own rate when both EOG
    channels share a rate; otherwise the left kernel is reused as-is.
    """
    eeg = fir_bandpass(order, *normalized_band(eeg_band_hz, eeg_rate))
    eog_left = fir_bandpass(order, *normalized_band(eog_band_hz, eog_left_rate))

    if eog_right_rate == eog_left_rate:
        eog_right = fir_bandpass(order, *normalized_band(eog_band_hz, eog_right_rate))
    else:
        eog_right = eog_left

    for kernel in (eeg, eog_left, eog_right):
        kernel.setflags(write=False)
    return FilterBank(eeg=eeg, eog_left=eog_left, eog_right=eog_right)


# ═══════════════════════════════════════════════════════════════════════════════
# CONDITIONING
# ═══════════════════════════════════════════════════════════════════════════════

class Derivations(NamedTuple):
    eeg: np.ndarray
    eog_left: np.ndarray
    eog_right: np.ndarray


def filter_same(x: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Centered linear convolution, output length == len(x)."""
    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    return signal.convolve(x, kernel, mode="same")


def condition_signals(
    c3: np.ndarray,
    c4: np.ndarray,
    el: np.ndarray,
    er: np.ndarray,
    *,
    multipliers: tuple,
    filters: FilterBank,
) -> Derivations:
    """
    Scale raw channels to µV and bandpass them.

    EEG = (filt(C3 * m3) + filt(C4 * m4)) / 2
    EOG-l / EOG-r are scaled and filtered independently.
    """
    m3, m4, m_el, m_er = multipliers

    eeg_left = filter_same(np.asarray(c3, dtype=np.float64) * m3, filters.eeg)
    eeg_right = filter_same(np.asarray(c4, dtype=np.float64) * m4, filters.eeg)

    # Channels may differ in length by a record at most; average the overlap
    n = min(eeg_left.size, eeg_right.size)
    eeg = (eeg_left[:n] + eeg_right[:n]) / 2.0

    eog_left = filter_same(np.asarray(el, dtype=np.float64) * m_el, filters.eog_left)
    eog_right = filter_same(np.asarray(er, dtype=np.float64) * m_er, filters.eog_right)

    return Derivations(eeg=eeg, eog_left=eog_left, eog_right=eog_right)


# ═══════════════════════════════════════════════════════════════════════════════
# RATE MATCHING
# ═══════════════════════════════════════════════════════════════════════════════

def resample(target_rate: float, source_rate: float, x: np.ndarray) -> np.ndarray:
    """
    Rational resampling by int(target_rate) / int(source_rate).

    Polyphase FIR (Kaiser window) via scipy; output length is
    ceil(len(x) * up / down).
    """
    up, down = int(target_rate), int(source_rate)
    if up <= 0 or down <= 0:
        raise ValueError(f"Sampling rates must be >= 1 Hz, got {target_rate} and {source_rate}")

    g = gcd(up, down)
    up, down = up // g, down // g

    x = np.asarray(x, dtype=np.float64)
    if up == down or x.size == 0:
        return x.copy()
    return signal.resample_poly(x, up, down)


def match_rate(x: np.ndarray, fs_hz: float, *, target_rate: int = TARGET_RATE_HZ) -> np.ndarray:
    """Bring a derivation to the target rate; pass-through if already there."""
    if int(fs_hz) == int(target_rate):
        return np.asarray(x, dtype=np.float64)
    return resample(target_rate, fs_hz, x)


def conform_length(x: np.ndarray, n: int) -> np.ndarray:
    """Truncate or zero-pad to exactly n samples."""
    if x.size >= n:
        return x[:n]
    return np.concatenate((x, np.zeros(n - x.size, dtype=x.dtype)))
