"""
Report Generation

CFS summary page and multi-page PDF export.
"""

from pathlib import Path
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from .decode_cfs import duration_from_epochs


def summary_lines(meta: dict) -> list:
    """Text lines describing a decoded CFS file."""
    lines = []
    lines.append("=" * 80)
    lines.append("CFS FILE SUMMARY".center(80))
    lines.append("=" * 80)
    lines.append("")

    lines.append("HEADER".center(80, "-"))
    lines.append(f"File:        {Path(meta.get('path', '<bytes>')).name}")
    lines.append(f"Version:     {meta['version']}")
    lines.append(f"Geometry:    {meta['n_channels']} channels × {meta['n_time_bins']} time × {meta['n_freq_bins']} freq bins")
    lines.append(f"Epochs:      {meta['n_epochs']:,} ({duration_from_epochs(meta['n_epochs']) / 3600.0:.2f} h)")
    lines.append(f"Compressed:  {'yes' if meta['compressed'] else 'no'}")
    lines.append("")

    lines.append("INTEGRITY".center(80, "-"))
    lines.append(f"SHA-1:       {meta['digest']}")
    lines.append(f"Status:      {'[OK] digest matches payload' if meta['digest_ok'] else '[ERROR] digest mismatch'}")
    lines.append("")

    lines.append("SIZE".center(80, "-"))
    lines.append(f"File:        {meta['file_bytes']:,} bytes")
    lines.append(f"Payload:     {meta['payload_bytes']:,} bytes compressed / {meta['raw_bytes']:,} bytes raw")
    lines.append(f"Ratio:       {meta['compression_ratio']:.2f}x")
    return lines


def plot_summary_page(meta: dict) -> plt.Figure:
    """Text-only first page for the PDF."""
    fig, ax = plt.subplots(figsize=(11, 8.5))
    ax.axis('off')
    ax.text(0.05, 0.95, "\n".join(summary_lines(meta)),
            verticalalignment='top',
            horizontalalignment='left',
            fontsize=10,
            family='monospace',
            transform=ax.transAxes)
    fig.suptitle("CFS Inspection Report", fontsize=14, fontweight='bold', y=0.98)
    return fig


def export_pdf(figures: list, output_path: Path, *, keep_open: bool = False) -> Path:
    """
    Write figures to a multi-page PDF (one page per figure).

    Figures are closed after saving unless keep_open is True.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with PdfPages(output_path) as pdf:
        for fig in figures:
            pdf.savefig(fig)
            if not keep_open:
                plt.close(fig)

    return output_path
