"""Tests for TIC, BPC and XIC extraction."""

import numpy as np
import pytest

from chromascope.core.errors import CentroidingFailed, InvalidParameter, NoMatchingPeaks
from chromascope.core.models import PlotType, Polarity
from chromascope.loaders import MzMLRunReader
from chromascope.processing import build_retention_time_index, extract, extract_bpc, extract_tic, extract_xic


@pytest.fixture
def reader(small_mzml):
    with MzMLRunReader.open(small_mzml) as r:
        yield r


class TestExtractTIC:
    """Tests for total ion chromatograms from a real mzML file."""

    def test_tic_positive(self, reader):
        series = extract_tic(reader, Polarity.POSITIVE)

        assert series.plot_type is PlotType.TIC
        assert series.indices.tolist() == [0, 1, 3, 4]
        assert series.retention_times.tolist() == pytest.approx([1.0, 1.1, 2.0, 3.0], abs=1e-5)
        assert series.intensities.tolist() == pytest.approx([80.0, 10.0, 118.0, 12.0])
        assert len(series.mz) == 0

    def test_tic_negative(self, reader):
        series = extract_tic(reader, "negative")

        assert series.indices.tolist() == [2]
        assert series.intensities.tolist() == pytest.approx([70.0])

    def test_tic_is_repeatable(self, reader):
        """Each call re-reads from the first spectrum."""
        first = extract_tic(reader, Polarity.POSITIVE)
        second = extract_tic(reader, Polarity.POSITIVE)

        np.testing.assert_array_equal(first.intensities, second.intensities)
        np.testing.assert_array_equal(first.indices, second.indices)


class TestExtractBPC:
    """Tests for base peak chromatograms."""

    def test_bpc_positive(self, reader):
        series = extract_bpc(reader, Polarity.POSITIVE)

        assert series.plot_type is PlotType.BPC
        assert series.indices.tolist() == [0, 1, 3, 4]
        assert series.intensities.tolist() == pytest.approx([50.0, 5.0, 100.0, 12.0])
        assert series.mz.tolist() == pytest.approx([200.0, 150.0, 500.0, 200.0005])

    def test_bpc_empty_spectrum(self, fake_reader, fake_spectrum):
        """An empty scan contributes a zero-intensity point."""
        reader = fake_reader([fake_spectrum(0, 1.0), fake_spectrum(1, 2.0, [100.0], [3.0])])

        series = extract_bpc(reader, Polarity.POSITIVE)

        assert series.intensities.tolist() == [0.0, 3.0]
        assert series.mz.tolist() == [0.0, 100.0]


class TestExtractXIC:
    """Tests for extracted ion chromatograms."""

    def test_xic_matches_within_ppm(self, reader):
        series = extract_xic(reader, 200.0, Polarity.POSITIVE, 10.0)

        assert series.plot_type is PlotType.XIC
        # One peak in scan 0, three in scan 3, one in scan 4
        assert series.indices.tolist() == [0, 3, 3, 3, 4]
        assert series.intensities.tolist() == pytest.approx([50.0, 4.0, 6.0, 8.0, 12.0])
        assert series.retention_times.tolist() == pytest.approx([1.0, 2.0, 2.0, 2.0, 3.0], abs=1e-5)

    def test_xic_tolerance_narrows_match(self, reader):
        """At 1 ppm (0.0002 Da) only the exact peaks match."""
        series = extract_xic(reader, 200.0, Polarity.POSITIVE, 1.0)
        assert series.indices.tolist() == [0, 3]

    def test_xic_ignores_ms2(self, reader):
        """m/z 250 only occurs in an MS2 scan."""
        with pytest.raises(NoMatchingPeaks):
            extract_xic(reader, 250.0, Polarity.POSITIVE, 10.0)

    def test_xic_no_matching_peaks(self, reader):
        with pytest.raises(NoMatchingPeaks) as exc_info:
            extract_xic(reader, 5000.0, Polarity.POSITIVE, 10.0)
        assert exc_info.value.mass == 5000.0

    def test_xic_respects_polarity(self, reader):
        series = extract_xic(reader, 400.0, Polarity.NEGATIVE, 10.0)
        assert series.indices.tolist() == [2]

    @pytest.mark.parametrize("mass, tolerance", [(0.0, 10.0), (-5.0, 10.0), (200.0, 0.0), (200.0, -1.0),
                                                 (None, 10.0), (200.0, None), (float("nan"), 10.0)])
    def test_invalid_parameters_rejected_before_reading(self, fake_reader, mass, tolerance):
        reader = fake_reader([])

        with pytest.raises(InvalidParameter):
            extract_xic(reader, mass, Polarity.POSITIVE, tolerance)
        assert reader.passes == 0

    def test_centroiding_failure_aborts(self, fake_reader, fake_spectrum):
        reader = fake_reader([
            fake_spectrum(0, 1.0, [200.0], [1.0]),
            fake_spectrum(1, 2.0, [200.0], [1.0], fail_centroid=True),
        ])

        with pytest.raises(CentroidingFailed) as exc_info:
            extract_xic(reader, 200.0, Polarity.POSITIVE, 10.0)
        assert exc_info.value.index == 1

    def test_xic_reads_only_ms1_scans(self, fake_reader, fake_spectrum):
        """MS2 scans are never centroided for an XIC."""
        reader = fake_reader([
            fake_spectrum(0, 1.0, [200.0], [1.0]),
            fake_spectrum(1, 1.5, [200.0], [9.0], ms_level=2, fail_centroid=True),
        ])

        series = extract_xic(reader, 200.0, Polarity.POSITIVE, 10.0)

        assert series.indices.tolist() == [0]

    def test_xic_sorted_by_retention_time(self, fake_reader, fake_spectrum):
        """Samples come back time-ordered with all arrays permuted together."""
        reader = fake_reader([
            fake_spectrum(0, 3.0, [199.9995, 200.0], [1.0, 2.0]),
            fake_spectrum(1, 1.0, [200.0], [5.0]),
            fake_spectrum(2, 2.0, [200.001], [7.0]),
        ])

        series = extract_xic(reader, 200.0, Polarity.POSITIVE, 10.0)

        assert series.retention_times.tolist() == [1.0, 2.0, 3.0, 3.0]
        assert series.indices.tolist() == [1, 2, 0, 0]
        assert series.intensities.tolist() == [5.0, 7.0, 1.0, 2.0]
        assert series.mz.tolist() == pytest.approx([200.0, 200.001, 199.9995, 200.0])


class TestExtractDispatch:
    def test_dispatch_by_name(self, reader):
        assert extract(reader, "bpc", "positive").plot_type is PlotType.BPC
        assert extract(reader, PlotType.TIC, Polarity.POSITIVE).plot_type is PlotType.TIC
        assert extract(reader, "xic", "positive", mass=200.0, tolerance=10.0).plot_type is PlotType.XIC

    def test_xic_requires_mass(self, reader):
        with pytest.raises(InvalidParameter):
            extract(reader, PlotType.XIC, Polarity.POSITIVE)

    def test_unknown_plot_type(self, reader):
        with pytest.raises(InvalidParameter):
            extract(reader, "sic", Polarity.POSITIVE)


class TestRetentionTimeIndex:
    def test_index_pairs_times_and_indices(self, reader):
        series = extract_xic(reader, 200.0, Polarity.POSITIVE, 10.0)

        rt_index = build_retention_time_index(series)

        assert len(rt_index) == len(series)
        assert np.all(np.diff(rt_index.retention_times) >= 0)
        assert rt_index.indices.tolist() == [0, 3, 3, 3, 4]
