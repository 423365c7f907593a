"""Tests for band extraction and the smoothed history."""

import numpy as np
import pytest

from soundcanvas.core.features import (
    BandEnergy,
    BandLayout,
    FeatureExtractor,
    HistoryBuffer,
)


class TestBandLayout:
    def test_default_bin_count(self):
        layout = BandLayout.for_bins(1024)
        assert (layout.bass_end, layout.mid_end, layout.treble_end) == (51, 307, 716)

    @pytest.mark.parametrize("n_bins", [4, 5, 8, 16, 33, 128, 1024, 4096])
    def test_boundaries_ordered(self, n_bins):
        layout = BandLayout.for_bins(n_bins)
        assert 0 <= layout.bass_end < layout.mid_end < layout.treble_end <= n_bins

    def test_too_few_bins_rejected(self):
        with pytest.raises(ValueError, match="at least 4"):
            BandLayout.for_bins(3)


class TestFeatureExtractor:
    def test_energies_within_byte_range(self, rng):
        extractor = FeatureExtractor(1024)
        for _ in range(20):
            energy = extractor.extract(rng.integers(0, 256, 1024).astype(float))
            for value in (energy.bass, energy.mid, energy.treble, energy.overall):
                assert 0.0 <= value <= 255.0

    def test_constant_snapshot(self):
        energy = FeatureExtractor(1024).extract(np.full(1024, 100.0))
        assert energy == BandEnergy(100.0, 100.0, 100.0, 100.0)

    def test_bass_skips_dc_bin(self):
        snapshot = np.zeros(1024)
        snapshot[0] = 255.0
        energy = FeatureExtractor(1024).extract(snapshot)

        assert energy.bass == 0.0
        assert energy.overall == pytest.approx(255.0 / 1024)

    def test_bands_follow_their_bins(self):
        extractor = FeatureExtractor(1024)
        lay = extractor.layout
        snapshot = np.zeros(1024)
        snapshot[lay.mid_end:lay.treble_end] = 200.0

        energy = extractor.extract(snapshot)
        assert energy.treble == pytest.approx(200.0)
        assert energy.bass == 0.0
        assert energy.mid == 0.0

    def test_extract_pushes_history(self):
        extractor = FeatureExtractor(1024)
        extractor.extract(np.full(1024, 50.0))

        assert extractor.history.overall.values()[-1] == 50.0
        assert extractor.last.overall == 50.0

    def test_band_energy_leaves_history_alone(self):
        extractor = FeatureExtractor(1024)
        extractor.band_energy(np.full(1024, 50.0))
        assert not extractor.history.overall.values().any()

    def test_length_mismatch_rejected(self):
        extractor = FeatureExtractor(1024)
        with pytest.raises(ValueError, match="expected"):
            extractor.extract(np.zeros(512))

    def test_reset(self):
        extractor = FeatureExtractor(64)
        extractor.extract(np.full(64, 80.0))
        extractor.reset()

        assert extractor.smoothed_bands().overall == 0.0
        assert extractor.last == BandEnergy()


class TestHistoryBuffer:
    def test_initialized_to_zeros(self):
        buf = HistoryBuffer(60)
        assert len(buf) == 60
        assert buf.smoothed() == 0.0

    def test_length_invariant(self, rng):
        buf = HistoryBuffer(60)
        for value in rng.uniform(0, 255, 150):
            buf.push(value)
            assert len(buf.values()) == 60

    def test_fifo_order(self):
        buf = HistoryBuffer(3)
        for value in (1.0, 2.0, 3.0, 4.0):
            buf.push(value)
        np.testing.assert_array_equal(buf.values(), [2.0, 3.0, 4.0])

    @pytest.mark.parametrize("value", [0.0, 1.0, 100.0, 255.0])
    def test_constant_buffer_smooths_to_value(self, value):
        buf = HistoryBuffer(60)
        buf.fill(value)
        assert buf.smoothed() == pytest.approx(value)

    def test_oldest_sample_weight(self):
        """Only the oldest slot holds 100: it carries weight 1/60."""
        buf = HistoryBuffer(60)
        buf.push(100.0)
        for _ in range(59):
            buf.push(0.0)

        expected = 100.0 * (1 / 60) / sum(i / 60 for i in range(1, 61))
        assert buf.smoothed() == pytest.approx(expected, rel=1e-12)
        assert expected == pytest.approx(100.0 / 1830)

    def test_recent_samples_dominate(self):
        old = HistoryBuffer(60)
        old.push(100.0)
        for _ in range(59):
            old.push(0.0)

        new = HistoryBuffer(60)
        new.push(100.0)

        assert new.smoothed() == pytest.approx(60 * old.smoothed())

    def test_static_smoothed_matches_buffer(self):
        buf = HistoryBuffer(60)
        buf.fill(42.0)
        assert FeatureExtractor.smoothed(buf) == buf.smoothed()

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            HistoryBuffer(0)
