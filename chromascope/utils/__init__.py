"""Utility helpers for chromascope."""

from chromascope.utils.coordinate_transform import PlotAxisTransform
from chromascope.utils.search import nearest_position

__all__ = ["PlotAxisTransform", "nearest_position"]
