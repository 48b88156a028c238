"""
Constants for the EDF → CFS conversion system.

Separated into:
- FORMAT CONSTANTS: CFS wire format, do not change
- SIGNAL PROCESSING: Fixed pipeline geometry
- DEFAULTS & POLICY: Configurable values
"""

# =============================================================================
# FORMAT CONSTANTS (CFS wire format, do not change)
# =============================================================================

CFS_SIGNATURE = b"CFS"
CFS_VERSION = 1
CFS_EXTENSION = ".cfs"

N_FREQ_BINS = 32             # FFT magnitude bins kept per time position
N_TIME_BINS = 32             # Window positions per epoch
N_CHANNELS = 3               # EEG, EOG-left, EOG-right
EPOCH_FEATURES = N_CHANNELS * N_FREQ_BINS * N_TIME_BINS   # 3072

HEADER_BYTES = 11            # 3 sig + 4 × u8 + u16 epochs + 2 × u8 flags
DIGEST_BYTES = 20            # SHA-1
HEADER_STRUCT = "<3sBBBBHBB"
MAX_EPOCHS = 0xFFFF          # Epoch count is a uint16


# =============================================================================
# SIGNAL PROCESSING (fixed pipeline geometry)
# =============================================================================

TARGET_RATE_HZ = 100         # All derivations are rate-matched to this
EPOCH_SAMPLES = 3000         # 30 s at 100 Hz

FFT_WINDOW = 128             # Hamming window / FFT length
FFT_HOP = 90                 # Samples between window positions

FILTER_ORDER = 50            # 51 FIR taps
EEG_BAND_HZ = (0.3, 45.0)
EOG_BAND_HZ = (0.3, 12.0)


# =============================================================================
# DEFAULTS & POLICY (configurable)
# =============================================================================

EDF_EXTENSION = ".edf"
MIN_WORKERS = 2              # Lower bound on the conversion pool size
LOG_TIMESTAMP_FORMAT = "%d-%b-%Y-%H%M"
LOG_SUFFIX = "_log.html"

# Channel role keys as used in config files and on the command line
CHANNEL_KEYS = ("c3", "c4", "el", "er")
