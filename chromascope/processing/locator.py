"""Resolve a retention time or a spectrum index to a full mass spectrum."""

import logging
from typing import Optional

from chromascope.core.errors import NoIndexAvailable, SpectrumMissing
from chromascope.core.models import MassSpectrum, RetentionTimeIndex
from chromascope.loaders.base import PeakDataLevel, RunReader, Spectrum
from chromascope.utils.search import nearest_position

logger = logging.getLogger(__name__)


def locate_by_retention_time(rt_index: Optional[RetentionTimeIndex], clicked_rt: float) -> int:
    """Return the spectrum index whose retention time is closest to ``clicked_rt``.

    Ties between two neighbors go to the earlier one.

    Raises:
        NoIndexAvailable: if no index has been built, or it is empty
    """
    if rt_index is None or len(rt_index) == 0:
        raise NoIndexAvailable()
    pos = nearest_position(rt_index.retention_times, float(clicked_rt))
    index = int(rt_index.indices[pos])
    logger.debug("RT %.4f -> spectrum %d (rt %.4f)", clicked_rt, index, rt_index.retention_times[pos])
    return index


def spectrum_to_mass_spectrum(spectrum: Spectrum) -> MassSpectrum:
    """Copy a spectrum's peak arrays, whatever level they are stored at.

    A spectrum without peak data gives an empty MassSpectrum.
    """
    data = spectrum.peaks()
    if data.level is PeakDataLevel.MISSING:
        logger.warning("Spectrum %d has no peak data", spectrum.index)
        return MassSpectrum.empty(index=spectrum.index, retention_time=spectrum.retention_time)
    return MassSpectrum(
        mz=data.mz.copy(),
        intensity=data.intensity.copy(),
        index=spectrum.index,
        retention_time=spectrum.retention_time,
    )


def locate_by_index(reader: RunReader, index: int) -> MassSpectrum:
    """Fetch the full peak arrays of the spectrum at ``index``.

    Raises:
        SpectrumMissing: if the index is out of range
    """
    spectrum = reader.spectrum_by_index(int(index))
    if spectrum is None:
        raise SpectrumMissing(f"No spectrum with index {index} ({len(reader)} spectra)")
    return spectrum_to_mass_spectrum(spectrum)


def locate_by_time(reader: RunReader, retention_time: float) -> MassSpectrum:
    """Fetch the spectrum nearest to ``retention_time`` directly from the reader.

    Raises:
        SpectrumMissing: if the run has no spectra
    """
    spectrum = reader.spectrum_by_time(float(retention_time))
    if spectrum is None:
        raise SpectrumMissing(f"No spectrum found at {retention_time} min")
    return spectrum_to_mass_spectrum(spectrum)
