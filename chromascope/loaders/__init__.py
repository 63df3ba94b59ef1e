"""Run-file readers."""

from chromascope.loaders.base import (
    CentroidSpectrum,
    Peak,
    PeakData,
    PeakDataLevel,
    RunReader,
    Spectrum,
    Tolerance,
    ToleranceUnit,
    is_supported_file,
)
from chromascope.loaders.mzml_loader import MzMLRunReader, MzMLSpectrum, get_polarity
from chromascope.loaders.spectrum_extractor import extract_spectrum_table, summarize_run


def open_run_file(path) -> RunReader:
    """Open a run file with the reader for its format.

    Raises:
        OpenError: if the file is rejected or cannot be read
    """
    return MzMLRunReader.open(path)


__all__ = [
    "CentroidSpectrum",
    "MzMLRunReader",
    "MzMLSpectrum",
    "Peak",
    "PeakData",
    "PeakDataLevel",
    "RunReader",
    "Spectrum",
    "Tolerance",
    "ToleranceUnit",
    "get_polarity",
    "is_supported_file",
    "extract_spectrum_table",
    "open_run_file",
    "summarize_run",
]
