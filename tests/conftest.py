"""Shared fixtures: synthetic mzML files and an in-memory reader."""

from pathlib import Path
from typing import Optional

import numpy as np
import pytest
from pyopenms import InstrumentSettings, IonSource, MSExperiment, MSSpectrum, MzMLFile, SpectrumSettings

from chromascope.core.errors import CentroidingFailed
from chromascope.core.models import Polarity
from chromascope.loaders.base import CentroidSpectrum, PeakData, PeakDataLevel, RunReader, Spectrum
from chromascope.utils.search import nearest_position

POSITIVE = IonSource.Polarity.POSITIVE
NEGATIVE = IonSource.Polarity.NEGATIVE

# (rt seconds, ms level, polarity, mz, intensity) -- see SMALL_RUN_* below for derived values
SMALL_RUN = [
    (60.0, 1, POSITIVE, [100.0, 200.0, 300.0], [10.0, 50.0, 20.0]),
    (66.0, 2, POSITIVE, [150.0, 250.0], [5.0, 5.0]),
    (72.0, 1, NEGATIVE, [100.0, 400.0], [30.0, 40.0]),
    (120.0, 1, POSITIVE, [199.999, 200.0, 200.001, 500.0], [4.0, 6.0, 8.0, 100.0]),
    (180.0, 1, POSITIVE, [200.0005], [12.0]),
]


def make_ms_spectrum(rt, ms_level, polarity, mz, intensity, native_id, spectrum_type=None) -> MSSpectrum:
    """Build a pyOpenMS spectrum with polarity set in its instrument settings."""
    spec = MSSpectrum()
    spec.setRT(rt)
    spec.setMSLevel(ms_level)
    spec.setNativeID(native_id)
    spec.set_peaks((np.asarray(mz, dtype=np.float64), np.asarray(intensity, dtype=np.float32)))
    settings = InstrumentSettings()
    settings.setPolarity(polarity)
    spec.setInstrumentSettings(settings)
    spec.setType(spectrum_type if spectrum_type is not None else SpectrumSettings.SpectrumType.CENTROID)
    return spec


def write_mzml(path: Path, spectra) -> Path:
    exp = MSExperiment()
    for i, (rt, ms_level, polarity, mz, intensity) in enumerate(spectra):
        exp.addSpectrum(make_ms_spectrum(rt, ms_level, polarity, mz, intensity, f"scan={i + 1}"))
    MzMLFile().store(str(path), exp)
    return path


@pytest.fixture
def small_mzml(tmp_path) -> Path:
    """Five-scan mzML file with mixed polarity and MS levels."""
    return write_mzml(tmp_path / "small.mzML", SMALL_RUN)


@pytest.fixture
def other_mzml(tmp_path) -> Path:
    """A second, different run for reset tests."""
    return write_mzml(
        tmp_path / "other.mzML",
        [
            (30.0, 1, POSITIVE, [500.0], [1.0]),
            (90.0, 1, POSITIVE, [500.0], [2.0]),
        ],
    )


def write_profile_mzml(path: Path, spectrum_type) -> Path:
    """One MS1 profile scan with a Gaussian peak centered at m/z 400.0."""
    mz = np.linspace(399.98, 400.02, 41)
    intensity = 1000.0 * np.exp(-((mz - 400.0) ** 2) / (2 * 0.003**2))
    exp = MSExperiment()
    exp.addSpectrum(make_ms_spectrum(60.0, 1, POSITIVE, mz, intensity, "scan=1", spectrum_type=spectrum_type))
    MzMLFile().store(str(path), exp)
    return path


@pytest.fixture
def profile_mzml(tmp_path) -> Path:
    return write_profile_mzml(tmp_path / "profile.mzML", SpectrumSettings.SpectrumType.PROFILE)


@pytest.fixture
def unannotated_profile_mzml(tmp_path) -> Path:
    """Profile data written without a profile/centroid annotation."""
    return write_profile_mzml(tmp_path / "unannotated.mzML", SpectrumSettings.SpectrumType.UNKNOWN)


class FakeSpectrum(Spectrum):
    """In-memory spectrum; ``fail_centroid`` makes to_centroid raise."""

    def __init__(self, index, rt, mz=(), intensity=(), polarity=Polarity.POSITIVE, ms_level=1,
                 level=PeakDataLevel.CENTROID, fail_centroid=False):
        super().__init__(index, rt, polarity, ms_level)
        self._data = PeakData.from_arrays(level, mz, intensity)
        self.fail_centroid = fail_centroid

    def peaks(self) -> PeakData:
        return self._data

    def to_centroid(self) -> CentroidSpectrum:
        if self.fail_centroid:
            raise CentroidingFailed(self.index, RuntimeError("bad signal"))
        return CentroidSpectrum(self.index, self.retention_time, self._data.mz, self._data.intensity)


class FakeReader(RunReader):
    """RunReader over a list of FakeSpectrum, counting full passes."""

    format_name = "fake"

    def __init__(self, spectra, path="fake.mzML"):
        super().__init__(path)
        self.spectra = list(spectra)
        self.passes = 0
        self.closed = False

    @classmethod
    def open(cls, path):
        return cls([], path)

    def __iter__(self):
        self.passes += 1
        yield from self.spectra

    def __len__(self):
        return len(self.spectra)

    def spectrum_by_index(self, index) -> Optional[Spectrum]:
        if 0 <= index < len(self.spectra):
            return self.spectra[index]
        return None

    def spectrum_by_time(self, retention_time) -> Optional[Spectrum]:
        if not self.spectra:
            return None
        rts = np.array([s.retention_time for s in self.spectra])
        order = np.argsort(rts, kind="stable")
        return self.spectra[int(order[nearest_position(rts[order], retention_time)])]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_spectrum():
    return FakeSpectrum


@pytest.fixture
def fake_reader():
    """Factory fixture: fake_reader([FakeSpectrum(...), ...]) -> FakeReader."""
    return FakeReader
