"""
Naming and discovery contracts.

- cfs_path_for() - Output path for an input EDF
- find_edf_files() - Recursive input discovery
- build_log_path() - HTML log file location
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .constants import CFS_EXTENSION, EDF_EXTENSION, LOG_TIMESTAMP_FORMAT, LOG_SUFFIX


def cfs_path_for(edf_path) -> Path:
    """recording.edf → recording.cfs, next to the input."""
    return Path(edf_path).with_suffix(CFS_EXTENSION)


def find_edf_files(root, ext: str = EDF_EXTENSION) -> List[Path]:
    """
    All files under `root` (recursively) with extension `ext`.

    Extension match is case-insensitive. Returns [] if `root` is not a
    directory. Sorted for a stable batch order.
    """
    root = Path(root)
    if not root.is_dir():
        return []
    ext = ext.lower()
    return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() == ext)


def build_log_path(first_file, now: Optional[datetime] = None) -> Path:
    """
    <dir of first input>/<DD-Mon-YYYY-HHMM>_log.html

    Args:
        first_file: First file of the batch
        now: Timestamp (default: current local time)
    """
    now = now or datetime.now()
    base = Path(first_file).resolve().parent
    return base / f"{now.strftime(LOG_TIMESTAMP_FORMAT)}{LOG_SUFFIX}"
