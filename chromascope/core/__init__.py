"""Core modules for chromascope: data model, errors, events and configuration.

Session and ExtractionWorker live in chromascope.core.session and
chromascope.core.worker; they depend on the loaders and are not imported here.
"""

from chromascope.core.config import DEFAULTS, FILE_FORMAT
from chromascope.core.errors import (
    CentroidingFailed,
    EngineError,
    InvalidParameter,
    NoIndexAvailable,
    NoMatchingPeaks,
    OpenError,
    ReaderUnavailable,
    SpectrumMissing,
)
from chromascope.core.events import EventBus, EventType
from chromascope.core.models import (
    ChromatogramSeries,
    MassSpectrum,
    PlotSeries,
    PlotType,
    Polarity,
    RetentionTimeIndex,
    RunSummary,
)

__all__ = [
    "DEFAULTS",
    "FILE_FORMAT",
    "CentroidingFailed",
    "EngineError",
    "InvalidParameter",
    "NoIndexAvailable",
    "NoMatchingPeaks",
    "OpenError",
    "ReaderUnavailable",
    "SpectrumMissing",
    "EventBus",
    "EventType",
    "ChromatogramSeries",
    "MassSpectrum",
    "PlotSeries",
    "PlotType",
    "Polarity",
    "RetentionTimeIndex",
    "RunSummary",
]
