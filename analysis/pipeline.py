"""
CFS Inspection Pipeline

1. Decode and verify the CFS file
2. Print header / integrity summary
3. Generate plots (overview + selected epochs)
4. Export PDF report
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import matplotlib
import matplotlib.pyplot as plt

from .decode_cfs import read_cfs
from .plots import plot_epoch_spectrogram, plot_recording_overview
from .report import export_pdf, plot_summary_page, summary_lines


def inspect_cfs(
    cfs_path: Path,
    *,
    export_pdf_report: bool = False,
    out_dir: Optional[Path] = None,
    epochs: Optional[List[int]] = None,
    verify: bool = True,
    quiet: bool = False,
) -> dict:
    """
    Decode a CFS file and optionally build a PDF report.

    Parameters
    ----------
    cfs_path : Path
        .cfs file
    export_pdf_report : bool
        If True, write <stem>_report.pdf
    out_dir : Path, optional
        Output directory for the PDF. Default: cfs_path.parent / "reports"
    epochs : list of int, optional
        Epochs to plot individually. Default: first epoch only
    verify : bool
        Fail on digest mismatch
    quiet : bool
        Suppress the printed summary

    Returns
    -------
    dict
        - meta: decoded header and integrity info
        - features: (epochs, 3, 32, 32) float32 array
        - pdf_path: report path or None
    """
    cfs_path = Path(cfs_path)
    features, meta = read_cfs(cfs_path, verify=verify)

    if not quiet:
        print("\n".join(summary_lines(meta)))

    pdf_path = None
    if export_pdf_report:
        if epochs is None:
            epochs = [0] if meta["n_epochs"] else []

        figures = [plot_summary_page(meta), plot_recording_overview(features, title_prefix=f"{cfs_path.name} | ")]
        for epoch in epochs:
            figures.append(plot_epoch_spectrogram(features, epoch, title_prefix=f"{cfs_path.name} | "))

        out_dir = Path(out_dir) if out_dir else cfs_path.parent / "reports"
        pdf_path = export_pdf(figures, out_dir / f"{cfs_path.stem}_report.pdf")
        if not quiet:
            print(f"\n✓ Report saved: {pdf_path}")

    return {"meta": meta, "features": features, "pdf_path": pdf_path}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="cfs-inspect", description="Inspect and verify CFS files")
    parser.add_argument("files", nargs="+", help="CFS files")
    parser.add_argument("--pdf", action="store_true", help="Export a PDF report per file")
    parser.add_argument("--out-dir", type=str, default=None, help="PDF output directory")
    parser.add_argument("--epoch", type=int, action="append", default=None,
                        help="Epoch to plot (1-based, repeatable)")
    parser.add_argument("--no-verify", action="store_true", help="Do not fail on digest mismatch")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    matplotlib.use("Agg")

    epochs = [e - 1 for e in args.epoch] if args.epoch else None
    failures = 0
    for name in args.files:
        try:
            inspect_cfs(
                Path(name),
                export_pdf_report=args.pdf,
                out_dir=args.out_dir,
                epochs=epochs,
                verify=not args.no_verify,
            )
        except (OSError, ValueError, IndexError) as e:
            failures += 1
            print(f"✗ {name}: {e}")
        finally:
            plt.close("all")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
