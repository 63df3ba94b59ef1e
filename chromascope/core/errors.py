"""Exception hierarchy for the extraction engine.

Every failure the engine reports derives from EngineError so that callers
can catch one type and still tell "no peaks" apart from a broken file.
"""

from typing import Optional


class EngineError(Exception):
    """Base class for all engine errors."""


class OpenError(EngineError):
    """The run file is missing, unreadable, malformed or has the wrong suffix."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open {path}: {reason}")


class ReaderUnavailable(EngineError):
    """An operation needs an open run file but none is open."""

    def __init__(self, message: str = "No run file is open"):
        super().__init__(message)


class CentroidingFailed(EngineError):
    """A spectrum could not be converted to centroid form."""

    def __init__(self, index: int, cause: Optional[BaseException] = None):
        self.index = index
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Centroiding failed for spectrum {index}{detail}")


class NoMatchingPeaks(EngineError):
    """An XIC found no peak in any scan for the requested mass window."""

    def __init__(self, mass: float, tolerance_ppm: float, polarity):
        self.mass = mass
        self.tolerance_ppm = tolerance_ppm
        self.polarity = polarity
        super().__init__(
            f"No matching peaks for m/z {mass} +/- {tolerance_ppm} ppm ({polarity})"
        )


class NoIndexAvailable(EngineError):
    """No retention-time index has been built for the current file."""

    def __init__(self, message: str = "No chromatogram has been extracted yet"):
        super().__init__(message)


class SpectrumMissing(EngineError):
    """The requested spectrum does not exist in the run file."""

    def __init__(self, message: str):
        super().__init__(message)


class InvalidParameter(EngineError, ValueError):
    """A caller supplied an out-of-range parameter."""
