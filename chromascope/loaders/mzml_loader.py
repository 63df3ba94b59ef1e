"""mzML run-file reader backed by pyOpenMS.

The whole experiment is parsed once with MzMLFile into an MSExperiment;
spectra are then wrapped on demand. pyOpenMS reports retention times in
seconds, the engine works in minutes.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Optional

import numpy as np
from pyopenms import IonSource, MSExperiment, MSSpectrum, MzMLFile, PeakPickerHiRes, SpectrumSettings

from chromascope.core.config import DEFAULTS
from chromascope.core.errors import CentroidingFailed, OpenError
from chromascope.core.models import Polarity
from chromascope.loaders.base import (
    CentroidSpectrum,
    PeakData,
    PeakDataLevel,
    RunReader,
    Spectrum,
    is_supported_file,
)
from chromascope.utils.search import nearest_position

logger = logging.getLogger(__name__)

# Name of the per-peak charge array written for deconvoluted spectra
_CHARGE_ARRAY_NAME = "charge"


def get_polarity(spec) -> Polarity:
    """Read the scan polarity from the spectrum's instrument settings."""
    polarity = spec.getInstrumentSettings().getPolarity()
    if polarity == IonSource.Polarity.POSITIVE:
        return Polarity.POSITIVE
    if polarity == IonSource.Polarity.NEGATIVE:
        return Polarity.NEGATIVE
    return Polarity.UNKNOWN


def get_peak_level(spec) -> PeakDataLevel:
    """Classify how the spectrum stores its peaks."""
    if spec.size() == 0:
        return PeakDataLevel.MISSING
    for array in spec.getIntegerDataArrays():
        name = array.getName()
        if isinstance(name, bytes):
            name = name.decode()
        if name == _CHARGE_ARRAY_NAME:
            return PeakDataLevel.DECONVOLUTED
    # Unannotated spectra are classified from the peak spacing
    if spec.getType(True) == SpectrumSettings.SpectrumType.PROFILE:
        return PeakDataLevel.RAW
    return PeakDataLevel.CENTROID


class MzMLSpectrum(Spectrum):
    """A Spectrum view over one pyOpenMS MSSpectrum."""

    def __init__(self, index: int, spec: MSSpectrum):
        super().__init__(
            index=index,
            retention_time=spec.getRT() / DEFAULTS.SECONDS_PER_MINUTE,
            polarity=get_polarity(spec),
            ms_level=spec.getMSLevel(),
        )
        self._spec = spec
        self._peaks: Optional[PeakData] = None

    def peaks(self) -> PeakData:
        if self._peaks is None:
            level = get_peak_level(self._spec)
            if level is PeakDataLevel.MISSING:
                self._peaks = PeakData.missing()
            else:
                mz_array, int_array = self._spec.get_peaks()
                self._peaks = PeakData.from_arrays(level, mz_array, int_array)
        return self._peaks

    def to_centroid(self) -> CentroidSpectrum:
        data = self.peaks()
        if data.level is PeakDataLevel.RAW:
            try:
                picked = MSSpectrum()
                PeakPickerHiRes().pick(self._spec, picked)
                mz_array, int_array = picked.get_peaks()
            except Exception as e:
                raise CentroidingFailed(self.index, e) from e
            mz = np.asarray(mz_array, dtype=DEFAULTS.MZ_DTYPE)
            intensity = np.asarray(int_array, dtype=DEFAULTS.INTENSITY_DTYPE)
        else:
            mz, intensity = data.mz, data.intensity
        return CentroidSpectrum(self.index, self.retention_time, mz, intensity)


class MzMLRunReader(RunReader):
    """Reads mzML files with pyOpenMS.

    Example:
        with MzMLRunReader.open("data.mzML") as reader:
            for spectrum in reader:
                print(spectrum.index, spectrum.retention_time)
    """

    format_name = "mzML"

    def __init__(self, path: Path | str, exp: MSExperiment):
        super().__init__(path)
        self._exp: Optional[MSExperiment] = exp
        self._rts = np.array(
            [spec.getRT() / DEFAULTS.SECONDS_PER_MINUTE for spec in exp],
            dtype=np.float64,
        )
        # Spectra are not guaranteed to be RT-sorted when polarities interleave
        self._rt_order = np.argsort(self._rts, kind="stable")

    @classmethod
    def open(cls, path: Path | str) -> "MzMLRunReader":
        """Parse an mzML file (blocking pyOpenMS C++ call).

        Raises:
            OpenError: if the path has the wrong suffix, does not exist or
                cannot be parsed
        """
        path = Path(path)
        if not is_supported_file(path):
            raise OpenError(str(path), f"not an {cls.format_name} file")
        if not path.is_file():
            raise OpenError(str(path), "file not found")

        logger.info("Reading %s with MzMLFile", path.name)
        exp = MSExperiment()
        try:
            MzMLFile().load(str(path), exp)
        except Exception as e:
            logger.error("Error parsing %s: %s", path.name, e)
            raise OpenError(str(path), f"malformed mzML ({e})") from e
        logger.info("Loaded %d spectra from %s", len(exp), path.name)
        return cls(path, exp)

    @property
    def experiment(self) -> MSExperiment:
        if self._exp is None:
            raise ValueError(f"{self.path.name} has been closed")
        return self._exp

    def __iter__(self) -> Iterator[Spectrum]:
        exp = self.experiment
        for idx in range(len(exp)):
            yield MzMLSpectrum(idx, exp[idx])

    def __len__(self) -> int:
        return 0 if self._exp is None else len(self._exp)

    def spectrum_by_index(self, index: int) -> Optional[Spectrum]:
        exp = self.experiment
        if index < 0 or index >= len(exp):
            return None
        return MzMLSpectrum(index, exp[int(index)])

    def spectrum_by_time(self, retention_time: float) -> Optional[Spectrum]:
        if len(self._rts) == 0:
            return None
        best = nearest_position(self._rts[self._rt_order], retention_time)
        return self.spectrum_by_index(int(self._rt_order[best]))

    def close(self) -> None:
        self._exp = None
        self._rts = np.empty(0)
        self._rt_order = np.empty(0, dtype=np.int64)
