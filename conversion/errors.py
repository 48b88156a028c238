"""
Conversion Errors

Every failure of a single file's conversion is a ConversionError.
They are caught by the per-file pipeline and turned into a failed result;
none of them is fatal to a batch.
"""


class ConversionError(Exception):
    """Base class for per-file conversion failures."""


class FileOpenError(ConversionError):
    """The EDF file could not be opened."""

    KINDS = (
        "not-found",
        "malformed",
        "already-open",
        "too-many-open",
        "read-error",
        "memory-error",
        "unknown",
    )

    MESSAGES = {
        "not-found": "Can not open file, no such file or directory",
        "malformed": "The file is not EDF(+) or BDF(+) compliant (it contains format errors)",
        "already-open": "File has already been opened",
        "too-many-open": "Too many files opened",
        "read-error": "A read error occurred",
        "memory-error": "Memory Error.",
        "unknown": "Unknown error",
    }

    def __init__(self, kind: str, path=None):
        if kind not in self.KINDS:
            kind = "unknown"
        self.kind = kind
        self.path = path
        super().__init__(self.MESSAGES[kind])


class ChannelNotFound(ConversionError):
    def __init__(self, role):
        self.role = role
        super().__init__(f"{role.short_name} label not found!")


class SampleRateMismatch(ConversionError):
    def __init__(self, rate_left: float, rate_right: float):
        self.rate_left = rate_left
        self.rate_right = rate_right
        super().__init__(
            f"C3 and C4 sampling rates must be same ({rate_left} Hz vs {rate_right} Hz)."
        )


class InvalidUnit(ConversionError):
    def __init__(self, unit: str):
        self.unit = unit
        super().__init__(f"Invalid measurement unit '{unit}'. (must be nV, uV, mV or V)")


class ChannelReadError(ConversionError):
    def __init__(self, role, detail: str = ""):
        self.role = role
        msg = f"reading channel {role.short_name} data."
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class CompressionError(ConversionError):
    REASONS = ("buffer-too-small", "out-of-memory")

    def __init__(self, reason: str):
        self.reason = reason
        if reason == "out-of-memory":
            msg = "Not enough memory for compression!"
        else:
            msg = "Buffer was too small!"
        super().__init__(msg)


class DigestError(ConversionError):
    def __init__(self):
        super().__init__("Problem in conversion! SHA1 Failed...")


class WriteError(ConversionError):
    def __init__(self, path, detail: str = ""):
        self.path = path
        msg = f"Opening {path}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class AlreadyConverted(ConversionError):
    def __init__(self, path):
        self.path = path
        super().__init__("File already converted.")


class EpochCountOverflow(ConversionError):
    def __init__(self, n_epochs: int, limit: int):
        self.n_epochs = n_epochs
        super().__init__(f"Recording too long: {n_epochs} epochs (max {limit}).")
