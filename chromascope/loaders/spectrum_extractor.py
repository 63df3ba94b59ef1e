"""Spectrum metadata extraction for run summaries and spectrum tables."""

import numpy as np
import pandas as pd

from chromascope.core.models import RunSummary
from chromascope.loaders.base import RunReader

SPECTRUM_TABLE_COLUMNS = ["idx", "rt", "ms_level", "polarity", "n_peaks", "tic", "bpi", "mz_min", "mz_max"]


def extract_spectrum_table(reader: RunReader) -> pd.DataFrame:
    """Extract per-spectrum metadata in one pass over the run.

    Args:
        reader: Open run file

    Returns:
        DataFrame with one row per spectrum (columns SPECTRUM_TABLE_COLUMNS)
    """
    rows = []
    for spectrum in reader:
        data = spectrum.peaks()
        n_peaks = len(data)
        rows.append({
            "idx": spectrum.index,
            "rt": spectrum.retention_time,
            "ms_level": spectrum.ms_level,
            "polarity": spectrum.polarity.value,
            "n_peaks": n_peaks,
            "tic": float(np.sum(data.intensity, dtype=np.float64)) if n_peaks > 0 else 0.0,
            "bpi": float(np.max(data.intensity)) if n_peaks > 0 else 0.0,
            "mz_min": float(data.mz.min()) if n_peaks > 0 else np.nan,
            "mz_max": float(data.mz.max()) if n_peaks > 0 else np.nan,
        })
    return pd.DataFrame(rows, columns=SPECTRUM_TABLE_COLUMNS)


def summarize_run(reader: RunReader) -> RunSummary:
    """Summarize index range, retention-time range, MS levels and polarities."""
    table = extract_spectrum_table(reader)
    if table.empty:
        return RunSummary(path=str(reader.path), n_spectra=0)

    return RunSummary(
        path=str(reader.path),
        n_spectra=len(table),
        index_range=(int(table["idx"].iloc[0]), int(table["idx"].iloc[-1])),
        rt_range=(float(table["rt"].min()), float(table["rt"].max())),
        ms_levels={int(k): int(v) for k, v in table["ms_level"].value_counts().sort_index().items()},
        polarities={str(k): int(v) for k, v in table["polarity"].value_counts().items()},
    )
