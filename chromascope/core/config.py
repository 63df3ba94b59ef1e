"""Configuration constants and default extraction settings."""

# Literal filename suffix accepted by the file gate (case-sensitive)
FILE_FORMAT = "mzML"

# Plot type names accepted by the CLI, in display order
PLOT_TYPE_NAMES = {
    "tic": "TIC",
    "bpc": "Base Peak",
    "xic": "XIC",
}


# Default extraction settings
class DEFAULTS:
    """Default configuration values."""

    # Chromatogram selection
    PLOT_TYPE = "tic"
    POLARITY = "positive"

    # XIC
    XIC_MS_LEVEL = 1
    XIC_TOLERANCE_PPM = 10.0

    # Moving-average half-window (the slider range is 0..MAX)
    SMOOTHING_WINDOW = 0
    MAX_SMOOTHING_WINDOW = 11

    # pyOpenMS stores retention times in seconds
    SECONDS_PER_MINUTE = 60.0

    # Array dtypes
    RT_DTYPE = "float32"
    INTENSITY_DTYPE = "float32"
    MZ_DTYPE = "float64"
    INDEX_DTYPE = "int64"
