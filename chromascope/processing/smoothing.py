"""Centered moving-average smoothing of a plot series."""

import numpy as np

from chromascope.core.errors import InvalidParameter
from chromascope.core.models import PlotSeries


def smooth(series: PlotSeries, half_window: int) -> PlotSeries:
    """Replace each interior y-value by the mean of its ``2w + 1`` neighbors.

    Point ``i`` of a series of length ``n`` is kept as-is when
    ``i < w or i >= n - w``. x-values never change and the output has the
    same length as the input. A window wider than the series leaves every
    point unchanged.

    Args:
        series: Prepared plot series
        half_window: Number of neighbors on each side (w)

    Returns:
        New PlotSeries

    Raises:
        InvalidParameter: if half_window is negative
    """
    w = int(half_window)
    if w < 0:
        raise InvalidParameter(f"Smoothing half-window must be non-negative, got {half_window}")

    n = len(series)
    y = series.y.copy()
    if w == 0 or n <= 2 * w:
        return PlotSeries(series.x.copy(), y)

    # "valid" yields exactly the n - 2w interior window sums, centered on w .. n-w-1
    window_sums = np.convolve(series.y, np.ones(2 * w + 1), mode="valid")
    y[w : n - w] = window_sums / (2 * w + 1)
    return PlotSeries(series.x.copy(), y)
