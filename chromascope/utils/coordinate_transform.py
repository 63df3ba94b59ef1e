"""Coordinate transformation between chromatogram plot pixels and retention time."""


class PlotAxisTransform:
    """Maps a horizontal pixel position on a chromatogram plot to retention time.

    A click is reported by the UI in screen pixels; the plot covers
    ``[rt_min, rt_max]`` across ``width`` pixels starting at ``left``.
    """

    def __init__(self, left: float, width: float, rt_min: float, rt_max: float):
        """Initialize transformer.

        Args:
            left: Screen x-coordinate of the plot's left edge
            width: Plot width in pixels
            rt_min: Retention time at the left edge (minutes)
            rt_max: Retention time at the right edge (minutes)
        """
        self.left = left
        self.width = width
        self.rt_min = rt_min
        self.rt_max = rt_max

    def pixel_to_rt(self, pixel_x: float) -> float:
        """Convert a screen x-coordinate to retention time.

        Returns rt_min for a zero-width plot.
        """
        if self.width <= 0:
            return self.rt_min
        relative_x = (pixel_x - self.left) / self.width
        return self.rt_min + relative_x * (self.rt_max - self.rt_min)

    def rt_to_pixel(self, rt: float) -> float:
        """Convert retention time to a screen x-coordinate."""
        rt_range = self.rt_max - self.rt_min
        if rt_range == 0:
            return self.left
        return self.left + (rt - self.rt_min) / rt_range * self.width
