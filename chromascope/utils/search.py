"""Nearest-neighbor search over sorted arrays."""

import numpy as np


def nearest_position(sorted_values: np.ndarray, target: float) -> int:
    """Return the position of the value closest to ``target``.

    ``sorted_values`` must be ascending and non-empty. An exact match returns
    the first equal position; otherwise the insertion point decides between
    the two neighbors and a tie goes to the earlier one.

    Args:
        sorted_values: Ascending array
        target: Value to look up

    Returns:
        Position into ``sorted_values``
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("cannot search an empty array")

    values = np.asarray(sorted_values, dtype=np.float64)
    pos = int(np.searchsorted(values, target, side="left"))
    if pos < n and values[pos] == target:
        return pos
    if pos == 0:
        return 0
    if pos == n:
        return n - 1

    before = abs(target - values[pos - 1])
    after = abs(values[pos] - target)
    return pos - 1 if before <= after else pos
