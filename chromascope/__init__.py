"""
chromascope: chromatogram and spectrum extraction engine for mzML run files.

Extracts TIC, base peak and extracted ion chromatograms with pyOpenMS,
prepares and smooths them for plotting, and resolves clicked retention
times to full mass spectra.
"""

__version__ = "0.3.0"

from chromascope.core.errors import EngineError
from chromascope.core.models import MassSpectrum, PlotSeries, PlotType, Polarity
from chromascope.core.session import Session, SessionState
from chromascope.core.worker import ExtractionWorker

__all__ = [
    "EngineError",
    "ExtractionWorker",
    "MassSpectrum",
    "PlotSeries",
    "PlotType",
    "Polarity",
    "Session",
    "SessionState",
    "__version__",
]
