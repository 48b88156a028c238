"""
Conversion package for the EDF → CFS converter.

Modules:
- constants: CFS format constants and defaults
- config: Configuration loading and validation
- errors: Per-file conversion failures
- channels: EDF access (pyedflib) and channel role resolution
- preprocess: Unit scaling, FIR bandpass, rate matching
- spectrogram: Epoch spectrogram extraction
- encode_cfs: CFS serialization
- pipeline: Single-file conversion
- batch: Parallel batch driver
- naming: Output paths and input discovery
- html_log: HTML conversion log

Usage:
    from conversion import ChannelRoleMap, convert_file, run_batch
    role_map = ChannelRoleMap.from_labels("C3-A2", "C4-A1", "EOGl-A2", "EOGr-A1")
    batch = run_batch(["night1.edf", "night2.edf"], role_map, workers=4)
"""

from pathlib import Path

# Package directory (for path-robust operations)
PACKAGE_DIR = Path(__file__).parent.resolve()

# Core exports
from .channels import (
    ChannelRole,
    ChannelRoleMap,
    ResolvedChannels,
    open_recording,
    resolve_channels,
    prompt_channel_labels,
)
from .preprocess import (
    find_unit_multiplier,
    fir_bandpass,
    design_filters,
    condition_signals,
    match_rate,
)
from .spectrogram import SpectrogramExtractor
from .encode_cfs import CfsHeader, encode_cfs, write_cfs
from .pipeline import FileResult, convert_file
from .batch import BatchResult, run_batch
from .errors import ConversionError

# Version
__version__ = "1.0.0"

__all__ = [
    # Channels
    "ChannelRole",
    "ChannelRoleMap",
    "ResolvedChannels",
    "open_recording",
    "resolve_channels",
    "prompt_channel_labels",

    # Signal processing
    "find_unit_multiplier",
    "fir_bandpass",
    "design_filters",
    "condition_signals",
    "match_rate",
    "SpectrogramExtractor",

    # Encoding
    "CfsHeader",
    "encode_cfs",
    "write_cfs",

    # Pipeline
    "FileResult",
    "convert_file",
    "BatchResult",
    "run_batch",
    "ConversionError",

    # Paths
    "PACKAGE_DIR",
]
