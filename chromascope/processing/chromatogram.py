"""Chromatogram extraction (TIC, BPC, XIC) from a run file.

Every extraction is a full pass over the reader, restarting at the first
spectrum, and returns a new ChromatogramSeries. Nothing is cached here.
"""

import logging
from typing import Optional

import numpy as np

from chromascope.core.config import DEFAULTS
from chromascope.core.errors import InvalidParameter, NoMatchingPeaks
from chromascope.core.models import ChromatogramSeries, PlotType, Polarity, RetentionTimeIndex
from chromascope.loaders.base import RunReader, Tolerance

logger = logging.getLogger(__name__)


def extract_tic(reader: RunReader, polarity: Polarity) -> ChromatogramSeries:
    """Total ion chromatogram: summed intensity of every matching scan.

    Args:
        reader: Open run file
        polarity: Only scans of this polarity contribute

    Returns:
        Series with one sample per scan and an empty mz array
    """
    polarity = Polarity.parse(polarity)
    rts, intensities, indices = [], [], []

    for spectrum in reader:
        if spectrum.polarity != polarity:
            continue
        rts.append(spectrum.retention_time)
        intensities.append(spectrum.total_intensity())
        indices.append(spectrum.index)

    logger.info("TIC (%s): %d scans", polarity, len(rts))
    return ChromatogramSeries(
        retention_times=rts,
        intensities=intensities,
        indices=indices,
        plot_type=PlotType.TIC,
        polarity=polarity,
    )


def extract_bpc(reader: RunReader, polarity: Polarity) -> ChromatogramSeries:
    """Base peak chromatogram: most intense peak of every matching scan.

    Args:
        reader: Open run file
        polarity: Only scans of this polarity contribute

    Returns:
        Series with one sample per scan; mz holds the base-peak m/z
    """
    polarity = Polarity.parse(polarity)
    rts, intensities, indices, mzs = [], [], [], []

    for spectrum in reader:
        if spectrum.polarity != polarity:
            continue
        mz, intensity = spectrum.base_peak()
        rts.append(spectrum.retention_time)
        intensities.append(intensity)
        indices.append(spectrum.index)
        mzs.append(mz)

    logger.info("BPC (%s): %d scans", polarity, len(rts))
    return ChromatogramSeries(
        retention_times=rts,
        intensities=intensities,
        indices=indices,
        mz=mzs,
        plot_type=PlotType.BPC,
        polarity=polarity,
    )


def validate_xic_parameters(target_mass, tolerance_ppm) -> tuple[float, float]:
    """Check XIC parameters before any file access.

    Raises:
        InvalidParameter: if mass or tolerance is missing, not a number or not positive
    """
    if target_mass is None or tolerance_ppm is None:
        raise InvalidParameter("XIC needs both a target mass and a tolerance")
    try:
        mass = float(target_mass)
        tolerance = float(tolerance_ppm)
    except (TypeError, ValueError):
        raise InvalidParameter(f"Mass and tolerance must be numbers, got {target_mass!r}, {tolerance_ppm!r}") from None
    # "not > 0" also rejects NaN
    if not mass > 0:
        raise InvalidParameter(f"Target mass must be positive, got {mass}")
    if not tolerance > 0:
        raise InvalidParameter(f"Tolerance must be positive, got {tolerance} ppm")
    return mass, tolerance


def extract_xic(
    reader: RunReader,
    target_mass: float,
    polarity: Polarity,
    tolerance_ppm: float,
    ms_level: int = DEFAULTS.XIC_MS_LEVEL,
) -> ChromatogramSeries:
    """Extracted ion chromatogram for ``target_mass`` +/- ``tolerance_ppm``.

    Each MS1 scan of matching polarity is centroided and every peak inside
    the window becomes its own sample, so a scan with two matching peaks
    contributes two samples at the same retention time. The samples are
    sorted by retention time (stable, all arrays together) before returning.

    Raises:
        InvalidParameter: mass or tolerance not positive (checked before reading)
        CentroidingFailed: a scan could not be centroided; nothing is returned
        NoMatchingPeaks: no peak matched in any scan
    """
    mass, tolerance_ppm = validate_xic_parameters(target_mass, tolerance_ppm)
    polarity = Polarity.parse(polarity)
    tolerance = Tolerance.ppm(tolerance_ppm)
    logger.debug("XIC: mass=%s, polarity=%s, tolerance=%s ppm", mass, polarity, tolerance_ppm)

    rts, intensities, indices, mzs = [], [], [], []
    for spectrum in reader.iter_ms_level(ms_level):
        if spectrum.polarity != polarity:
            continue
        centroided = spectrum.to_centroid()
        for peak in centroided.peaks_near(mass, tolerance):
            rts.append(spectrum.retention_time)
            intensities.append(peak.intensity)
            indices.append(spectrum.index)
            mzs.append(peak.mz)

    if not rts:
        logger.info("XIC (%s): no peaks within %s ppm of %s", polarity, tolerance_ppm, mass)
        raise NoMatchingPeaks(mass, tolerance_ppm, polarity)

    order = np.argsort(np.asarray(rts, dtype=DEFAULTS.RT_DTYPE), kind="stable")
    series = ChromatogramSeries(
        retention_times=np.asarray(rts, dtype=DEFAULTS.RT_DTYPE)[order],
        intensities=np.asarray(intensities, dtype=DEFAULTS.INTENSITY_DTYPE)[order],
        indices=np.asarray(indices, dtype=DEFAULTS.INDEX_DTYPE)[order],
        mz=np.asarray(mzs, dtype=DEFAULTS.MZ_DTYPE)[order],
        plot_type=PlotType.XIC,
        polarity=polarity,
    )
    logger.info("XIC (%s): %d peaks in %d scans", polarity, len(series), len(np.unique(series.indices)))
    return series


def extract(
    reader: RunReader,
    plot_type: PlotType,
    polarity: Polarity,
    mass: Optional[float] = None,
    tolerance: Optional[float] = None,
) -> ChromatogramSeries:
    """Dispatch to the extractor for ``plot_type``.

    ``mass`` and ``tolerance`` (ppm) are only used for XIC, where both are
    required.
    """
    plot_type = PlotType.parse(plot_type)
    if plot_type is PlotType.TIC:
        return extract_tic(reader, polarity)
    if plot_type is PlotType.BPC:
        return extract_bpc(reader, polarity)
    return extract_xic(reader, mass, polarity, tolerance)


def build_retention_time_index(series: ChromatogramSeries) -> RetentionTimeIndex:
    """Pair each sample's retention time with its spectrum index, sorted by time."""
    order = np.argsort(series.retention_times, kind="stable")
    return RetentionTimeIndex(series.retention_times[order], series.indices[order])
