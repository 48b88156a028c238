"""
Analysis Package

Offline inspection of CFS files produced by the converter.
Decodes and verifies the feature stream and generates PDF reports.

Usage:
    from analysis.pipeline import inspect_cfs
    results = inspect_cfs(Path("night1.cfs"), export_pdf_report=True)

    from analysis.decode_cfs import parse_cfs_bytes
    features, meta = parse_cfs_bytes(cfs_bytes)
"""

__version__ = "1.0.0"

from .pipeline import inspect_cfs
from .decode_cfs import parse_cfs_bytes, read_cfs, duration_from_epochs
from .plots import plot_epoch_spectrogram, plot_recording_overview
from .report import export_pdf, plot_summary_page

__all__ = [
    # Pipeline
    "inspect_cfs",
    # Decoding
    "parse_cfs_bytes",
    "read_cfs",
    "duration_from_epochs",
    # Plots
    "plot_epoch_spectrogram",
    "plot_recording_overview",
    # Report
    "export_pdf",
    "plot_summary_page",
]
