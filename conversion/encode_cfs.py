"""
CFS Encoder

Narrow features to float32, hash, compress and write the CFS artifact.

On-disk layout (all multi-byte fields little-endian, no padding):

    off  size  field
    0    3     b"CFS"
    3    1     version
    4    1     frequency bins (32)
    5    1     time bins (32)
    6    1     channels (3)
    7    2     epoch count (uint16)
    9    1     compression flag
    10   1     hash flag
    11   20    SHA-1 of the uncompressed float32 stream
    31   ...   zlib-compressed float32 stream
"""

import hashlib
import os
import stat
import struct
import sys
import tempfile
import zlib
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from .constants import (
    CFS_SIGNATURE,
    CFS_VERSION,
    DIGEST_BYTES,
    HEADER_STRUCT,
    MAX_EPOCHS,
    N_CHANNELS,
    N_FREQ_BINS,
    N_TIME_BINS,
)
from .errors import (
    AlreadyConverted,
    CompressionError,
    DigestError,
    EpochCountOverflow,
    WriteError,
)


# ═══════════════════════════════════════════════════════════════════════════════
# HEADER
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CfsHeader:
    n_epochs: int
    signature: bytes = CFS_SIGNATURE
    version: int = CFS_VERSION
    n_freq: int = N_FREQ_BINS
    n_time: int = N_TIME_BINS
    n_channels: int = N_CHANNELS
    compressed: bool = True
    hashed: bool = True

    def pack(self) -> bytes:
        if not 0 <= self.n_epochs <= MAX_EPOCHS:
            raise EpochCountOverflow(self.n_epochs, MAX_EPOCHS)
        return struct.pack(
            HEADER_STRUCT,
            self.signature,
            self.version,
            self.n_freq,
            self.n_time,
            self.n_channels,
            self.n_epochs,
            int(self.compressed),
            int(self.hashed),
        )

    @classmethod
    def unpack(cls, data: bytes) -> "CfsHeader":
        sig, version, n_freq, n_time, n_channels, n_epochs, comp, hashed = struct.unpack_from(
            HEADER_STRUCT, data, 0
        )
        return cls(
            n_epochs=n_epochs,
            signature=sig,
            version=version,
            n_freq=n_freq,
            n_time=n_time,
            n_channels=n_channels,
            compressed=bool(comp),
            hashed=bool(hashed),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# BYTE ORDER
# ═══════════════════════════════════════════════════════════════════════════════

def reverse_chunks(data: bytes, chunk_size: int) -> bytes:
    """Reverse byte order inside every chunk_size-byte field of `data`."""
    if chunk_size <= 1:
        return bytes(data)
    raw = np.frombuffer(data, dtype=np.uint8)
    if raw.size % chunk_size:
        raise ValueError(f"{raw.size} bytes is not a multiple of the {chunk_size}-byte field size")
    return raw.reshape(-1, chunk_size)[:, ::-1].tobytes()


def _is_big_endian(dtype: np.dtype, host_byteorder: str) -> bool:
    if dtype.byteorder == ">":
        return True
    return dtype.byteorder == "=" and host_byteorder == "big"


def to_little_endian(values: np.ndarray, *, host_byteorder: str = sys.byteorder) -> bytes:
    """
    Raw bytes of `values` in little-endian order.

    Elements stored big-endian (explicitly, or natively on a big-endian host)
    are byte-reversed per element.
    """
    arr = np.ascontiguousarray(values)
    raw = arr.tobytes()
    if _is_big_endian(arr.dtype, host_byteorder):
        return reverse_chunks(raw, arr.dtype.itemsize)
    return raw


# ═══════════════════════════════════════════════════════════════════════════════
# PAYLOAD
# ═══════════════════════════════════════════════════════════════════════════════

def narrow(features: np.ndarray) -> np.ndarray:
    """float64 → IEEE-754 float32, flattened in (epoch, channel, time, freq) order."""
    return np.ascontiguousarray(features, dtype=np.float32).reshape(-1)


def sha1_digest(stream: bytes) -> bytes:
    digest = hashlib.sha1(stream).digest()
    if len(digest) != DIGEST_BYTES:
        raise DigestError()
    return digest


def compress_stream(stream: bytes, *, level: int = -1) -> bytes:
    """zlib (DEFLATE) compression of the float stream."""
    try:
        return zlib.compress(stream, level)
    except MemoryError:
        raise CompressionError("out-of-memory")
    except zlib.error as e:
        raise CompressionError("buffer-too-small") from e


def encode_cfs(features: np.ndarray) -> bytes:
    """
    Full CFS artifact for a feature array of shape (epochs, 3, 32, 32).

    Raises
    ------
    EpochCountOverflow
        More epochs than fit the uint16 header field
    DigestError, CompressionError
        If hashing or compression fails
    """
    features = np.asarray(features)
    n_epochs = int(features.shape[0]) if features.ndim else 0
    header = CfsHeader(n_epochs=n_epochs).pack()

    stream = to_little_endian(narrow(features))
    digest = sha1_digest(stream)
    payload = compress_stream(stream)

    return header + digest + payload


# ═══════════════════════════════════════════════════════════════════════════════
# OUTPUT
# ═══════════════════════════════════════════════════════════════════════════════

# Querying the umask sets it process-wide, so it is read once at import
_UMASK = os.umask(0)
os.umask(_UMASK)


def output_mode() -> int:
    """Permission bits a plain open() would give a new file."""
    return 0o666 & ~_UMASK


def write_cfs(path: Path, data: bytes, *, overwrite: bool = False) -> Path:
    """
    Write `data` to `path` via a temporary file and an atomic rename.

    Raises
    ------
    AlreadyConverted
        If `path` exists and overwrite is False
    WriteError
        If the file can not be created or written
    """
    path = Path(path)
    if not overwrite and path.exists():
        raise AlreadyConverted(path)

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise WriteError(path, str(e)) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        # mkstemp creates 0600; match what open() would give (or the replaced file)
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else output_mode()
        os.chmod(tmp_name, mode)
        if not overwrite and path.exists():
            raise AlreadyConverted(path)
        os.replace(tmp_name, path)
    except OSError as e:
        raise WriteError(path, str(e)) from e
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)

    return path
