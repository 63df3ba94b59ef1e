"""Extraction and signal-processing stages: extract -> prepare -> smooth, plus lookup."""

from chromascope.processing.chromatogram import (
    build_retention_time_index,
    extract,
    extract_bpc,
    extract_tic,
    extract_xic,
    validate_xic_parameters,
)
from chromascope.processing.locator import (
    locate_by_index,
    locate_by_retention_time,
    locate_by_time,
    spectrum_to_mass_spectrum,
)
from chromascope.processing.prepare import prepare_for_plot
from chromascope.processing.smoothing import smooth

__all__ = [
    "build_retention_time_index",
    "extract",
    "extract_bpc",
    "extract_tic",
    "extract_xic",
    "locate_by_index",
    "locate_by_retention_time",
    "locate_by_time",
    "prepare_for_plot",
    "smooth",
    "spectrum_to_mass_spectrum",
    "validate_xic_parameters",
]
