"""Collapse duplicate retention times into one plot point each."""

import numpy as np

from chromascope.core.errors import InvalidParameter
from chromascope.core.models import ChromatogramSeries, PlotSeries


def prepare_for_plot(series_or_rts, intensities=None) -> PlotSeries:
    """Average consecutive samples that share the exact same retention time.

    Samples are grouped only while they are adjacent, so the input must be
    sorted by retention time for every duplicate to end up in one point.
    Times compare with exact float equality in the dtype they were stored in.

    Args:
        series_or_rts: A ChromatogramSeries, or a retention-time array
        intensities: Intensity array when ``series_or_rts`` is an array

    Returns:
        PlotSeries with one (time, mean intensity) point per group

    Raises:
        InvalidParameter: if the two arrays differ in length
    """
    if isinstance(series_or_rts, ChromatogramSeries):
        rts = series_or_rts.retention_times
        values = series_or_rts.intensities
    else:
        rts = np.asarray(series_or_rts)
        values = np.asarray(intensities)

    if rts.shape != values.shape:
        raise InvalidParameter(
            f"retention times and intensities must have equal length ({len(rts)} != {len(values)})"
        )
    if len(rts) == 0:
        return PlotSeries.empty()

    starts = np.concatenate(([0], np.flatnonzero(rts[1:] != rts[:-1]) + 1))
    counts = np.diff(np.append(starts, len(rts)))
    sums = np.add.reduceat(values.astype(np.float64), starts)
    return PlotSeries(rts[starts].astype(np.float64), sums / counts)
