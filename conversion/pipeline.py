"""
Per-file Conversion Pipeline

One EDF file → one CFS file:
1. Skip if already converted (unless overwrite)
2. Open recording, resolve channels, read samples
3. Design filters, condition EEG/EOG derivations
4. Rate-match to 100 Hz
5. Extract epoch spectrograms
6. Encode and write CFS
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .channels import ChannelRoleMap, open_recording, read_channel, resolve_channels
from .constants import TARGET_RATE_HZ
from .encode_cfs import encode_cfs, write_cfs
from .errors import AlreadyConverted, ConversionError
from .naming import cfs_path_for
from .preprocess import condition_signals, conform_length, design_filters, match_rate
from .spectrogram import SpectrogramExtractor


@dataclass
class FileResult:
    """Outcome of converting a single file."""

    source_path: Path
    success: bool
    messages: List[str] = field(default_factory=list)
    output_path: Optional[Path] = None
    n_epochs: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


def convert_file(
    edf_path,
    role_map: ChannelRoleMap,
    *,
    overwrite: bool = False,
    target_rate: int = TARGET_RATE_HZ,
) -> FileResult:
    """
    Convert one EDF file to CFS.

    Never raises for conversion failures: every ConversionError is captured
    in the returned FileResult together with the diagnostics collected so far.

    Parameters
    ----------
    edf_path : Path or str
        Input EDF file
    role_map : ChannelRoleMap
        Channel labels for C3, C4, EL, ER
    overwrite : bool
        Replace an existing .cfs output
    target_rate : int
        Rate all derivations are matched to (Hz)

    Returns
    -------
    FileResult
    """
    edf_path = Path(edf_path)
    out_path = cfs_path_for(edf_path)
    messages = [f"Filename: {edf_path}"]

    try:
        if not overwrite and out_path.exists():
            raise AlreadyConverted(out_path)

        with open_recording(edf_path) as recording:
            channels = resolve_channels(recording, role_map)
            messages.append(f"Total Samples found: {channels.c3.n_samples}")

            raw = []
            for ch in channels:
                messages.append(
                    f"{ch.role.montage} channel, sampling rate: {ch.sample_rate:g}Hz measured in {ch.unit}"
                )
                raw.append(read_channel(recording, ch))

        filters = design_filters(
            channels.c3.sample_rate,
            channels.el.sample_rate,
            channels.er.sample_rate,
        )
        derivations = condition_signals(
            *raw, multipliers=channels.multipliers, filters=filters
        )
        del raw

        eeg = match_rate(derivations.eeg, channels.c3.sample_rate, target_rate=target_rate)
        eog_left = conform_length(
            match_rate(derivations.eog_left, channels.el.sample_rate, target_rate=target_rate),
            eeg.size,
        )
        eog_right = conform_length(
            match_rate(derivations.eog_right, channels.er.sample_rate, target_rate=target_rate),
            eeg.size,
        )

        # Private FFT context: never shared across concurrent conversions
        extractor = SpectrogramExtractor()
        features = extractor.extract(eeg, eog_left, eog_right)
        n_epochs = int(features.shape[0])
        messages.append(f"Epochs: {n_epochs}")

        write_cfs(out_path, encode_cfs(features), overwrite=overwrite)
        messages.append(f"Saved: {out_path}")

    except ConversionError as e:
        messages.append(f"ERROR: {e}")
        return FileResult(
            source_path=edf_path,
            success=False,
            messages=messages,
            error=str(e),
            error_type=type(e).__name__,
        )

    return FileResult(
        source_path=edf_path,
        success=True,
        messages=messages,
        output_path=out_path,
        n_epochs=n_epochs,
    )
