"""
Channel Resolution

Opens EDF recordings (pyedflib), maps the four channel roles to channel
indices by label and derives per-channel sampling rate and unit scaling.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import numpy as np
import pyedflib

from .errors import (
    ChannelNotFound,
    ChannelReadError,
    FileOpenError,
    SampleRateMismatch,
)
from .preprocess import find_unit_multiplier


# ═══════════════════════════════════════════════════════════════════════════════
# ROLES
# ═══════════════════════════════════════════════════════════════════════════════

class ChannelRole(Enum):
    """The four fixed channel roles, in CFS order."""

    EEG_LEFT = ("c3", "C3", "C3:A2")
    EEG_RIGHT = ("c4", "C4", "C4:A1")
    EOG_LEFT = ("el", "EL", "EOGl:A2")
    EOG_RIGHT = ("er", "ER", "EOGr:A1")

    def __init__(self, key: str, short_name: str, montage: str):
        self.key = key
        self.short_name = short_name
        self.montage = montage


ROLES = tuple(ChannelRole)


@dataclass(frozen=True)
class ChannelRoleMap:
    """Lower-cased channel labels for EEG-left, EEG-right, EOG-left, EOG-right."""
    c3: str
    c4: str
    el: str
    er: str

    @classmethod
    def from_labels(cls, c3: str, c4: str, el: str, er: str) -> "ChannelRoleMap":
        return cls(*(str(label).strip().lower() for label in (c3, c4, el, er)))

    def label_for(self, role: ChannelRole) -> str:
        return getattr(self, role.key)

    def as_dict(self) -> dict:
        return {role.key: self.label_for(role) for role in ROLES}


@dataclass(frozen=True)
class ResolvedChannel:
    role: ChannelRole
    index: int
    label: str
    sample_rate: float
    unit: str
    multiplier: float
    n_samples: int


@dataclass(frozen=True)
class ResolvedChannels:
    c3: ResolvedChannel
    c4: ResolvedChannel
    el: ResolvedChannel
    er: ResolvedChannel

    def __getitem__(self, role: ChannelRole) -> ResolvedChannel:
        return getattr(self, role.key)

    def __iter__(self):
        return iter((self.c3, self.c4, self.el, self.er))

    @property
    def multipliers(self) -> tuple:
        return tuple(ch.multiplier for ch in self)


# ═══════════════════════════════════════════════════════════════════════════════
# EDF BOUNDARY
# ═══════════════════════════════════════════════════════════════════════════════

# pyedflib reports open failures as OSError with edflib's message text
_OPEN_ERROR_KINDS = (
    ("no such file", "not-found"),
    ("format error", "malformed"),
    ("not edf", "malformed"),
    ("already been opened", "already-open"),
    ("files opened", "too-many-open"),
    ("read error", "read-error"),
    ("malloc", "memory-error"),
)


def _open_error_kind(exc: Exception) -> str:
    text = str(exc).lower()
    for needle, kind in _OPEN_ERROR_KINDS:
        if needle in text:
            return kind
    return "unknown"


class EdfRecording:
    """
    Read-only view of an opened EDF(+)/BDF(+) file.

    Labels are exposed lower-cased and stripped. Sampling rate is derived as
    samples_per_record / record_duration and does not change while open.
    """

    def __init__(self, reader, path=None):
        self._reader = reader
        self.path = path
        n = reader.signals_in_file
        self.labels = [reader.getLabel(i).strip().lower() for i in range(n)]
        self.raw_labels = [reader.getLabel(i).strip() for i in range(n)]

    @property
    def n_channels(self) -> int:
        return len(self.labels)

    @property
    def datarecord_duration(self) -> float:
        return float(self._reader.datarecord_duration)

    def physical_dimension(self, index: int) -> str:
        return self._reader.getPhysicalDimension(index).strip()

    def samples_in_datarecord(self, index: int) -> int:
        return int(self._reader.samples_in_datarecord(index))

    def samples_in_file(self, index: int) -> int:
        return int(self._reader.getNSamples()[index])

    def sample_rate(self, index: int) -> float:
        return self.samples_in_datarecord(index) / self.datarecord_duration

    def read_physical(self, index: int) -> np.ndarray:
        return np.asarray(self._reader.readSignal(index), dtype=np.float64)

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def open_recording(path) -> EdfRecording:
    """Open an EDF file; failures are raised as FileOpenError(kind)."""
    path = Path(path)
    if not path.is_file():
        raise FileOpenError("not-found", path)
    try:
        reader = pyedflib.EdfReader(str(path))
    except MemoryError:
        raise FileOpenError("memory-error", path)
    except OSError as e:
        raise FileOpenError(_open_error_kind(e), path) from e
    return EdfRecording(reader, path)


# ═══════════════════════════════════════════════════════════════════════════════
# RESOLUTION
# ═══════════════════════════════════════════════════════════════════════════════

def resolve_channels(recording, role_map: ChannelRoleMap) -> ResolvedChannels:
    """
    Map each role to a channel of `recording`.

    Raises
    ------
    ChannelNotFound
        A role's label is not among the recording's channel labels
    InvalidUnit
        A channel's physical dimension is not nV, uV, mV or V
    FileOpenError
        A channel rate below 1 Hz or a zero record duration (kind "malformed")
    SampleRateMismatch
        int(rate C3) != int(rate C4)
    """
    labels = list(recording.labels)

    indices = {}
    for role in ROLES:
        label = role_map.label_for(role)
        if label not in labels:
            raise ChannelNotFound(role)
        indices[role] = labels.index(label)

    resolved = {}
    for role in ROLES:
        i = indices[role]
        unit = recording.physical_dimension(i)
        try:
            rate = recording.sample_rate(i)
        except ZeroDivisionError:
            rate = 0.0
        # Header with a zero record duration or under 1 sample per second
        if rate < 1:
            raise FileOpenError("malformed", getattr(recording, "path", None))
        resolved[role.key] = ResolvedChannel(
            role=role,
            index=i,
            label=labels[i],
            sample_rate=rate,
            unit=unit,
            multiplier=find_unit_multiplier(unit),
            n_samples=recording.samples_in_file(i),
        )

    channels = ResolvedChannels(**resolved)
    if int(channels.c3.sample_rate) != int(channels.c4.sample_rate):
        raise SampleRateMismatch(channels.c3.sample_rate, channels.c4.sample_rate)
    return channels


def read_channel(recording, channel: ResolvedChannel) -> np.ndarray:
    """All physical samples of one resolved channel."""
    try:
        data = recording.read_physical(channel.index)
    except (OSError, ValueError, MemoryError) as e:
        raise ChannelReadError(channel.role, str(e)) from e

    if data.size != channel.n_samples:
        raise ChannelReadError(
            channel.role, f"got {data.size} of {channel.n_samples} samples"
        )
    return data


def prompt_channel_labels(recording) -> ChannelRoleMap:
    """
    Interactive channel selection from a recording's channel list.

    Raises
    ------
    ValueError
        If a selection is not a valid 1-based channel number
    """
    print("Please make sure all files share the same channel labels.")
    print("Following channels are found:")
    for i, label in enumerate(recording.raw_labels, 1):
        print(f"{i}: {label}")

    picks = []
    for role in ROLES:
        answer = input(f"Please select the {role.montage} channel number: ").strip()
        try:
            number = int(answer)
        except ValueError:
            raise ValueError(f"Invalid Channel Number: '{answer}'")
        if not 1 <= number <= recording.n_channels:
            raise ValueError(f"Invalid Channel Number: {number}")
        picks.append(recording.labels[number - 1])

    return ChannelRoleMap.from_labels(*picks)
