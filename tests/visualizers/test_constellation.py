"""Tests for constellation peak picking and star placement."""

import numpy as np
import pytest

from soundcanvas.visualizers.constellation import (
    ConstellationMode,
    peak_threshold,
    pick_peaks,
)


def spectrum_with_peaks(peaks: dict[int, float], n: int = 1024) -> np.ndarray:
    data = np.zeros(n)
    for idx, value in peaks.items():
        data[idx] = value
    return data


class TestPickPeaks:
    def test_threshold_rises_with_volume(self):
        assert peak_threshold(0.0) == 40.0
        assert peak_threshold(100.0) == pytest.approx(120.0)

    def test_single_peak(self):
        assert pick_peaks(spectrum_with_peaks({100: 200.0}), smoothed_volume=0.0) == [100]

    def test_below_threshold_ignored(self):
        assert pick_peaks(spectrum_with_peaks({100: 60.0}), smoothed_volume=50.0) == []

    def test_upper_half_ignored(self):
        assert pick_peaks(spectrum_with_peaks({700: 250.0}), smoothed_volume=0.0) == []

    def test_plateau_is_not_a_peak(self):
        assert pick_peaks(spectrum_with_peaks({100: 200.0, 101: 200.0}), smoothed_volume=0.0) == []

    def test_minimum_spacing(self):
        close = spectrum_with_peaks({100: 200.0, 103: 220.0})
        apart = spectrum_with_peaks({100: 200.0, 106: 220.0})
        assert pick_peaks(close, 0.0) == [100]
        assert pick_peaks(apart, 0.0) == [100, 106]

    def test_edges_excluded(self):
        assert pick_peaks(spectrum_with_peaks({0: 250.0, 511: 250.0}), 0.0) == []


class TestConstellationMode:
    def test_single_peak_single_star(self, surface, make_context):
        mode = ConstellationMode()
        mode.render(surface, make_context(spectrum_with_peaks({100: 200.0})))

        assert len(mode.stars) == 1
        star = mode.stars[0]
        assert star.bin == 100
        assert star.magnitude == 200.0

    def test_silence_has_no_stars(self, surface, make_context):
        mode = ConstellationMode()
        mode.render(surface, make_context())
        assert mode.stars == []

    def test_close_stars_are_linked(self, surface, make_context):
        mode = ConstellationMode()
        mode.render(surface, make_context(spectrum_with_peaks({100: 200.0, 106: 200.0})))

        assert len(mode.stars) == 2
        assert len(surface.ops("stroke_path")) == 1
