"""
Shared fixtures: synthetic EDF recordings and an in-memory recording fake.
"""

import os
import sys

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pyedflib
import pytest

# Make the repo root importable when running without an install
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from conversion.channels import ChannelRoleMap

LABELS = ("C3-A2", "C4-A1", "EOGl-A2", "EOGr-A1", "EMG chin")


def synthetic_signal(n: int, fs: float, seed: int = 0) -> np.ndarray:
    """Alpha + delta + noise, comfortably inside ±500 µV."""
    rng = np.random.default_rng(seed)
    t = np.arange(n) / fs
    x = 40.0 * np.sin(2 * np.pi * 10.0 * t) + 60.0 * np.sin(2 * np.pi * 1.5 * t)
    return x + rng.normal(0.0, 5.0, n)


def write_test_edf(
    path,
    *,
    labels=LABELS,
    fs=256,
    seconds=512,
    units="uV",
    seed=0,
):
    """
    Write an EDF+ file with one synthetic signal per label.

    fs and units may be scalars or per-channel sequences.
    """
    n_ch = len(labels)
    rates = list(fs) if isinstance(fs, (list, tuple)) else [fs] * n_ch
    dims = list(units) if isinstance(units, (list, tuple)) else [units] * n_ch

    writer = pyedflib.EdfWriter(str(path), n_ch, file_type=pyedflib.FILETYPE_EDFPLUS)
    set_fs = getattr(writer, "setSampleFrequency", None) or writer.setSamplefrequency
    try:
        signals = []
        for i, label in enumerate(labels):
            writer.setLabel(i, label)
            writer.setPhysicalDimension(i, dims[i])
            set_fs(i, rates[i])
            writer.setPhysicalMaximum(i, 500.0)
            writer.setPhysicalMinimum(i, -500.0)
            writer.setDigitalMaximum(i, 32767)
            writer.setDigitalMinimum(i, -32768)
            signals.append(synthetic_signal(int(rates[i] * seconds), rates[i], seed + i))
        writer.writeSamples(signals)
    finally:
        writer.close()
    return path


class FakeRecording:
    """In-memory stand-in with the EdfRecording surface."""

    def __init__(self, labels, rates, units, data=None, n_samples=None, record_duration=1.0):
        self.raw_labels = list(labels)
        self.labels = [label.strip().lower() for label in labels]
        self._rates = list(rates)
        self._units = list(units)
        self._data = data
        self._n = n_samples
        self.datarecord_duration = record_duration
        self.closed = False

    @property
    def n_channels(self):
        return len(self.labels)

    def physical_dimension(self, index):
        return self._units[index]

    def samples_in_datarecord(self, index):
        return int(self._rates[index] * self.datarecord_duration)

    def sample_rate(self, index):
        return self._rates[index]

    def samples_in_file(self, index):
        if self._n is not None:
            return self._n[index]
        return len(self._data[index]) if self._data else 0

    def read_physical(self, index):
        return np.asarray(self._data[index], dtype=np.float64)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture
def role_map():
    return ChannelRoleMap.from_labels("C3-A2", "C4-A1", "EOGl-A2", "EOGr-A1")


@pytest.fixture
def edf_file(tmp_path):
    """Short valid recording: 256 Hz, 150 s (5 epochs after rate matching)."""
    return write_test_edf(tmp_path / "short.edf", seconds=150)


@pytest.fixture(scope="session")
def night_edf(tmp_path_factory):
    """4 channels at 256 Hz, 512 s, uV."""
    path = tmp_path_factory.mktemp("night") / "night.edf"
    return write_test_edf(path, seconds=512)
