"""Run-file reader capability interface.

The engine only talks to readers through RunReader and Spectrum. A reader
owns the backing store of one run file and hands out spectra in file order;
each spectrum exposes its peak arrays at whatever level the file stores them
and can be converted to centroid form.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import ClassVar, Optional

import numpy as np

from chromascope.core.config import DEFAULTS, FILE_FORMAT
from chromascope.core.models import Polarity


def is_supported_file(path) -> bool:
    """Return True if the path ends with the literal mzML suffix.

    The comparison is case-sensitive: ``data.mzML`` passes, ``data.mzml``
    does not.
    """
    return str(path).endswith(FILE_FORMAT)


class PeakDataLevel(Enum):
    """How the peaks of a spectrum are stored."""

    RAW = auto()  # profile arrays
    CENTROID = auto()  # picked peak list
    DECONVOLUTED = auto()  # charge-deconvoluted peak list
    MISSING = auto()  # no peak data


@dataclass(frozen=True)
class PeakData:
    """Peak arrays of one spectrum normalized to (float64 m/z, float32 intensity)."""

    level: PeakDataLevel
    mz: np.ndarray
    intensity: np.ndarray

    @classmethod
    def from_arrays(cls, level: PeakDataLevel, mz, intensity) -> "PeakData":
        mz = np.asarray(mz, dtype=DEFAULTS.MZ_DTYPE)
        intensity = np.asarray(intensity, dtype=DEFAULTS.INTENSITY_DTYPE)
        if len(mz) != len(intensity):
            raise ValueError(f"mz and intensity lengths differ ({len(mz)} != {len(intensity)})")
        if len(mz) == 0:
            level = PeakDataLevel.MISSING
        return cls(level, mz, intensity)

    @classmethod
    def missing(cls) -> "PeakData":
        return cls(
            PeakDataLevel.MISSING,
            np.empty(0, dtype=DEFAULTS.MZ_DTYPE),
            np.empty(0, dtype=DEFAULTS.INTENSITY_DTYPE),
        )

    def __len__(self) -> int:
        return len(self.mz)


class ToleranceUnit(Enum):
    PPM = "ppm"
    DA = "Da"


@dataclass(frozen=True)
class Tolerance:
    """Mass window around a target m/z, absolute or parts-per-million."""

    value: float
    unit: ToleranceUnit = ToleranceUnit.PPM

    @classmethod
    def ppm(cls, value: float) -> "Tolerance":
        return cls(float(value), ToleranceUnit.PPM)

    @classmethod
    def da(cls, value: float) -> "Tolerance":
        return cls(float(value), ToleranceUnit.DA)

    def width(self, mass: float) -> float:
        """Half-width of the window around ``mass`` in Da."""
        if self.unit is ToleranceUnit.PPM:
            return mass * self.value / 1e6
        return self.value

    def bounds(self, mass: float) -> tuple[float, float]:
        w = self.width(mass)
        return mass - w, mass + w


@dataclass(frozen=True)
class Peak:
    """A single centroided peak; ``index`` is its position within the spectrum."""

    mz: float
    intensity: float
    index: int


@dataclass(frozen=True)
class CentroidSpectrum:
    """Centroided peak list of one scan."""

    index: int
    retention_time: float
    mz: np.ndarray
    intensity: np.ndarray

    def __len__(self) -> int:
        return len(self.mz)

    def peaks_near(self, mass: float, tolerance: Tolerance) -> list[Peak]:
        """Return every peak within ``tolerance`` of ``mass`` (inclusive), in m/z order."""
        lower, upper = tolerance.bounds(mass)
        hits = np.flatnonzero((self.mz >= lower) & (self.mz <= upper))
        return [Peak(float(self.mz[i]), float(self.intensity[i]), int(i)) for i in hits]


class Spectrum(ABC):
    """One scan of a run file.

    Subclasses provide the peak arrays and centroiding; the summary values
    are derived from the peak arrays.
    """

    def __init__(self, index: int, retention_time: float, polarity: Polarity, ms_level: int):
        self.index = int(index)
        self.retention_time = float(retention_time)  # minutes
        self.polarity = polarity
        self.ms_level = int(ms_level)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(index={self.index}, rt={self.retention_time:.4f}, "
            f"polarity={self.polarity}, ms_level={self.ms_level})"
        )

    @abstractmethod
    def peaks(self) -> PeakData:
        """Peak arrays at the level stored in the file."""
        ...

    @abstractmethod
    def to_centroid(self) -> CentroidSpectrum:
        """Centroided copy of this spectrum.

        Raises:
            CentroidingFailed: if the signal cannot be peak-picked
        """
        ...

    def total_intensity(self) -> float:
        """Sum of all intensities (0.0 for an empty spectrum)."""
        return float(np.sum(self.peaks().intensity, dtype=np.float64))

    def base_peak(self) -> tuple[float, float]:
        """(m/z, intensity) of the most intense peak, (0.0, 0.0) when empty."""
        data = self.peaks()
        if len(data) == 0:
            return 0.0, 0.0
        i = int(np.argmax(data.intensity))
        return float(data.mz[i]), float(data.intensity[i])


class RunReader(ABC):
    """Abstract base class for run-file readers.

    One implementation per supported file format. Iteration is restartable:
    every ``iter()`` starts again at the first spectrum.
    """

    format_name: ClassVar[str]

    def __init__(self, path: Path | str):
        self.path = Path(path)

    @classmethod
    @abstractmethod
    def open(cls, path: Path | str) -> "RunReader":
        """Open a run file.

        Raises:
            OpenError: if the file is missing, unreadable or malformed
        """
        ...

    @abstractmethod
    def __iter__(self) -> Iterator[Spectrum]:
        """Iterate over all spectra in file order."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Total number of spectra."""
        ...

    @abstractmethod
    def spectrum_by_index(self, index: int) -> Optional[Spectrum]:
        """Random access by spectrum index; None when out of range."""
        ...

    @abstractmethod
    def spectrum_by_time(self, retention_time: float) -> Optional[Spectrum]:
        """Spectrum closest to ``retention_time`` (minutes); None for an empty run."""
        ...

    def close(self) -> None:
        """Release the backing store."""

    def __enter__(self) -> "RunReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def iter_ms_level(self, ms_level: int) -> Iterator[Spectrum]:
        """Iterate over spectra of a specific MS level."""
        for spectrum in self:
            if spectrum.ms_level == ms_level:
                yield spectrum
