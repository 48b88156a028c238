"""
CFS Decoder

Parse CFS artifacts back into float32 feature arrays.
Verifies header geometry, SHA-1 digest and payload size.
"""

import hashlib
import zlib
from pathlib import Path

import numpy as np

from conversion.constants import (
    CFS_SIGNATURE,
    CFS_VERSION,
    DIGEST_BYTES,
    HEADER_BYTES,
    N_CHANNELS,
    N_FREQ_BINS,
    N_TIME_BINS,
)
from conversion.encode_cfs import CfsHeader

PREFIX_BYTES = HEADER_BYTES + DIGEST_BYTES      # 31


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN PARSER
# ═══════════════════════════════════════════════════════════════════════════════

def parse_cfs_bytes(data: bytes, *, verify: bool = True) -> tuple[np.ndarray, dict]:
    """
    Strict CFS parser.

    Hard-fails on:
      - data shorter than header + digest
      - signature != b"CFS" or unsupported version
      - geometry other than 3 channels × 32 × 32
      - payload that does not inflate to epochs × 3072 float32
      - digest mismatch (if verify)

    Parameters
    ----------
    data : bytes
        Raw CFS file contents
    verify : bool
        If True, check the SHA-1 digest against the inflated stream

    Returns
    -------
    features : np.ndarray
        Shape (n_epochs, 3, 32, 32), float32, (epoch, channel, time, freq)
    meta : dict
        Header fields plus digest (hex), compressed/raw sizes, digest_ok

    Raises
    ------
    ValueError
        If format validation fails
    """
    if len(data) < PREFIX_BYTES:
        raise ValueError(f"CFS too small: {len(data)} bytes (< {PREFIX_BYTES}).")

    header = CfsHeader.unpack(data)
    if header.signature != CFS_SIGNATURE:
        raise ValueError(f"Bad signature {header.signature!r}, expected {CFS_SIGNATURE!r}.")
    if header.version != CFS_VERSION:
        raise ValueError(f"Unsupported CFS version {header.version}.")
    if (header.n_channels, header.n_time, header.n_freq) != (N_CHANNELS, N_TIME_BINS, N_FREQ_BINS):
        raise ValueError(
            f"Unsupported geometry: {header.n_channels} channels × "
            f"{header.n_time} × {header.n_freq} bins."
        )

    digest = data[HEADER_BYTES:PREFIX_BYTES]
    payload = data[PREFIX_BYTES:]

    if header.compressed:
        try:
            stream = zlib.decompress(payload)
        except zlib.error as e:
            raise ValueError(f"Payload does not inflate: {e}")
    else:
        stream = payload

    n_values = header.n_epochs * N_CHANNELS * N_TIME_BINS * N_FREQ_BINS
    if len(stream) != n_values * 4:
        raise ValueError(
            f"Payload size mismatch: got {len(stream)} bytes, expected {n_values * 4} "
            f"for {header.n_epochs} epochs."
        )

    digest_ok = hashlib.sha1(stream).digest() == digest
    if verify and header.hashed and not digest_ok:
        raise ValueError("SHA-1 digest mismatch. File is corrupted.")

    features = np.frombuffer(stream, dtype="<f4").astype(np.float32).reshape(
        header.n_epochs, N_CHANNELS, N_TIME_BINS, N_FREQ_BINS
    )

    meta = {
        "version": int(header.version),
        "n_epochs": int(header.n_epochs),
        "n_channels": int(header.n_channels),
        "n_time_bins": int(header.n_time),
        "n_freq_bins": int(header.n_freq),
        "compressed": header.compressed,
        "hashed": header.hashed,
        "digest": digest.hex(),
        "digest_ok": bool(digest_ok),
        "file_bytes": len(data),
        "payload_bytes": len(payload),
        "raw_bytes": len(stream),
        "compression_ratio": len(stream) / len(payload) if payload else float("nan"),
    }
    return features, meta


def read_cfs(path, *, verify: bool = True) -> tuple[np.ndarray, dict]:
    """Read and parse a .cfs file."""
    path = Path(path)
    features, meta = parse_cfs_bytes(path.read_bytes(), verify=verify)
    meta["path"] = str(path)
    return features, meta


def duration_from_epochs(n_epochs: int, epoch_seconds: float = 30.0) -> float:
    """Recording length covered by the feature stream (seconds)."""
    return n_epochs * epoch_seconds
