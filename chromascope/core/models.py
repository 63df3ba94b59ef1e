"""Data containers passed between the engine stages.

All series are stored as parallel numpy arrays. Containers are treated as
immutable once built: every extraction produces fresh instances and the
session swaps them in as a whole.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd

from chromascope.core.config import DEFAULTS, PLOT_TYPE_NAMES
from chromascope.core.errors import InvalidParameter


class Polarity(Enum):
    """Ion mode of a scan."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "Polarity":
        """Parse a polarity from its name or sign ("positive", "+", "neg", ...)."""
        if isinstance(value, Polarity):
            return value
        text = str(value).strip().lower()
        if text in ("positive", "pos", "+", "1"):
            return cls.POSITIVE
        if text in ("negative", "neg", "-", "-1"):
            return cls.NEGATIVE
        if text in ("unknown", "0", ""):
            return cls.UNKNOWN
        raise InvalidParameter(f"Unknown polarity: {value!r}")

    def __str__(self) -> str:
        return self.value


class PlotType(Enum):
    """Chromatogram kinds the extractor can produce."""

    TIC = "tic"
    BPC = "bpc"
    XIC = "xic"

    @classmethod
    def parse(cls, value) -> "PlotType":
        if isinstance(value, PlotType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidParameter(f"Unknown plot type: {value!r}") from None

    @property
    def label(self) -> str:
        return PLOT_TYPE_NAMES[self.value]


def _as_array(values, dtype: str) -> np.ndarray:
    return np.ascontiguousarray(np.asarray(values, dtype=dtype))


@dataclass(frozen=True)
class ChromatogramSeries:
    """One sample per contributing peak or scan.

    retention_times, intensities and indices are parallel arrays. ``mz`` is
    empty for TIC, the base-peak m/z for BPC and the matched m/z for XIC.
    """

    retention_times: np.ndarray
    intensities: np.ndarray
    indices: np.ndarray
    mz: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=DEFAULTS.MZ_DTYPE))
    plot_type: PlotType = PlotType.TIC
    polarity: Polarity = Polarity.POSITIVE

    def __post_init__(self):
        object.__setattr__(self, "retention_times", _as_array(self.retention_times, DEFAULTS.RT_DTYPE))
        object.__setattr__(self, "intensities", _as_array(self.intensities, DEFAULTS.INTENSITY_DTYPE))
        object.__setattr__(self, "indices", _as_array(self.indices, DEFAULTS.INDEX_DTYPE))
        object.__setattr__(self, "mz", _as_array(self.mz, DEFAULTS.MZ_DTYPE))

        n = len(self.retention_times)
        if len(self.intensities) != n or len(self.indices) != n:
            raise InvalidParameter(
                "retention_times, intensities and indices must have equal length "
                f"({n}, {len(self.intensities)}, {len(self.indices)})"
            )
        if len(self.mz) not in (0, n):
            raise InvalidParameter(f"mz must be empty or match the series length ({len(self.mz)} != {n})")

    def __len__(self) -> int:
        return len(self.retention_times)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def rt_range(self) -> Optional[tuple[float, float]]:
        """(min, max) retention time, or None for an empty series."""
        if self.is_empty:
            return None
        return float(self.retention_times.min()), float(self.retention_times.max())

    def to_dataframe(self) -> pd.DataFrame:
        """Return the series as a DataFrame (rt, intensity, index[, mz])."""
        df = pd.DataFrame(
            {
                "rt": self.retention_times,
                "intensity": self.intensities,
                "index": self.indices,
            }
        )
        if len(self.mz):
            df["mz"] = self.mz
        return df


@dataclass(frozen=True)
class PlotSeries:
    """Plot-ready (x, y) points, one per retention time."""

    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "x", _as_array(self.x, "float64"))
        object.__setattr__(self, "y", _as_array(self.y, "float64"))
        if len(self.x) != len(self.y):
            raise InvalidParameter(f"x and y must have equal length ({len(self.x)} != {len(self.y)})")

    @classmethod
    def empty(cls) -> "PlotSeries":
        return cls(np.empty(0), np.empty(0))

    @classmethod
    def from_points(cls, points) -> "PlotSeries":
        """Build from an iterable of (x, y) pairs."""
        arr = np.asarray(points, dtype="float64").reshape(-1, 2)
        return cls(arr[:, 0], arr[:, 1])

    def __len__(self) -> int:
        return len(self.x)

    def __getitem__(self, i: int) -> tuple[float, float]:
        return float(self.x[i]), float(self.y[i])

    @property
    def points(self) -> np.ndarray:
        """(n, 2) array of [x, y] rows."""
        return np.column_stack((self.x, self.y))

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({"rt": self.x, "intensity": self.y})


@dataclass(frozen=True)
class MassSpectrum:
    """Full (m/z, intensity) arrays of one spectrum."""

    mz: np.ndarray
    intensity: np.ndarray
    index: Optional[int] = None
    retention_time: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "mz", _as_array(self.mz, DEFAULTS.MZ_DTYPE))
        object.__setattr__(self, "intensity", _as_array(self.intensity, DEFAULTS.INTENSITY_DTYPE))
        if len(self.mz) != len(self.intensity):
            raise InvalidParameter(
                f"mz and intensity must have equal length ({len(self.mz)} != {len(self.intensity)})"
            )

    @classmethod
    def empty(cls, index: Optional[int] = None, retention_time: Optional[float] = None) -> "MassSpectrum":
        return cls(np.empty(0), np.empty(0), index=index, retention_time=retention_time)

    def __len__(self) -> int:
        return len(self.mz)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({"mz": self.mz, "intensity": self.intensity})


@dataclass(frozen=True)
class RunSummary:
    """Overview of an opened run file."""

    path: str
    n_spectra: int
    index_range: Optional[tuple[int, int]] = None  # first and last spectrum index
    rt_range: Optional[tuple[float, float]] = None  # minutes
    ms_levels: dict[int, int] = field(default_factory=dict)  # level -> count
    polarities: dict[str, int] = field(default_factory=dict)  # polarity -> count


@dataclass(frozen=True)
class RetentionTimeIndex:
    """Sorted retention times paired with the spectrum index of each sample."""

    retention_times: np.ndarray
    indices: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "retention_times", _as_array(self.retention_times, DEFAULTS.RT_DTYPE))
        object.__setattr__(self, "indices", _as_array(self.indices, DEFAULTS.INDEX_DTYPE))
        if len(self.retention_times) != len(self.indices):
            raise InvalidParameter("retention_times and indices must have equal length")
        if len(self.retention_times) > 1 and np.any(np.diff(self.retention_times) < 0):
            raise InvalidParameter("retention_times must be sorted ascending")

    def __len__(self) -> int:
        return len(self.retention_times)
