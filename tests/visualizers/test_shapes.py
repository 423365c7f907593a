"""Tests for the flower, orbital, spectrum, waveform and kaleidoscope modes."""

import numpy as np
import pytest

from soundcanvas.visualizers.flower import BloomForce, FlowerMode, petal_count, petal_radius
from soundcanvas.visualizers.kaleidoscope import ARCS, SEGMENTS, KaleidoscopeMode
from soundcanvas.visualizers.orbital import RINGS, OrbitalMode, moon_count, planet_size, ring_bin
from soundcanvas.visualizers.spectrum import BARS, SpectrumMode, bar_heights
from soundcanvas.visualizers.waveform import WaveformMode, waveform_points


class TestFlower:
    def test_petal_count(self):
        assert petal_count(0.0) == 7
        assert petal_count(24.9) == 7
        assert petal_count(100.0) == 11

    def test_radius_positive(self):
        for angle in np.linspace(0, 2 * np.pi, 50):
            for t in (0.0, 1.3, 7.7):
                assert petal_radius(angle, t, 50.0, 9, 1.0, 1.0, 1.0) > 0

    def test_bloom_repels_on_heavy_bass(self, particles, rng):
        cx, cy = particles.bounds.center
        p = particles[0]
        p.x, p.y = cx + 10.0, cy

        pull, _ = BloomForce(center=(cx, cy), bass=0.2).accelerate(p, 0, rng)
        push, _ = BloomForce(center=(cx, cy), bass=0.9).accelerate(p, 0, rng)
        assert pull < 0 < push

    def test_stamens_only_on_heavy_bass(self, surface, make_context):
        FlowerMode().render(surface, make_context())
        assert surface.ops("stroke_path") == []

        surface.reset()
        ctx = make_context(np.full(1024, 200.0))
        FlowerMode().render(surface, ctx)
        assert len(surface.ops("stroke_path")) == petal_count(ctx.smoothed.mid)

    def test_four_layers(self, surface, make_context):
        FlowerMode().render(surface, make_context())
        assert len(surface.ops("fill_path")) == 4


class TestOrbital:
    def test_planet_size(self):
        assert planet_size(0.0) == 3.0
        assert planet_size(1.0) == 13.0

    def test_moons_only_for_large_planets(self):
        assert moon_count(8.0) == 0
        assert moon_count(13.0) == 3

    def test_ring_bins_in_range(self):
        assert ring_bin(0, 1024) == 20
        for ring in range(RINGS):
            assert 0 <= ring_bin(ring, 1024) < 1024

    def test_one_stroke_per_ring(self, surface, make_context):
        OrbitalMode().render(surface, make_context(np.full(1024, 255.0)))
        assert len(surface.ops("stroke_arc")) == RINGS


class TestSpectrum:
    def test_silence_is_flat(self):
        assert not bar_heights(np.zeros(1024), 0.0, 300.0).any()

    def test_heights_capped(self):
        heights = bar_heights(np.full(1024, 255.0), 255.0, 300.0)
        assert len(heights) == BARS
        assert heights.max() == pytest.approx(300.0)

    def test_pairs_adjacent_bins(self):
        data = np.zeros(1024)
        data[8], data[9] = 100.0, 50.0
        heights = bar_heights(data, 0.0, 255.0)
        assert heights[2] == pytest.approx(75.0 * 0.6)
        assert heights[1] == 0.0

    def test_render_tracks_heights(self, surface, make_context):
        mode = SpectrumMode()
        mode.render(surface, make_context(np.full(1024, 255.0)))

        assert mode.last_heights.max() == pytest.approx(300.0)
        # up bar, down bar and cap per column
        assert len(surface.ops("fill_rect")) == 3 * BARS


class TestWaveform:
    def test_flat_signal_on_center_line(self):
        pts = waveform_points(np.full(1024, 128.0), 800, 600)
        assert pts.shape == (1024, 2)
        assert np.all(pts[:, 1] == 300.0)
        assert pts[0, 0] == 0.0 and pts[-1, 0] == 800.0

    def test_extremes(self):
        pts = waveform_points(np.array([0.0, 255.0]), 100, 100)
        assert pts[0, 1] == pytest.approx(10.0)
        assert pts[1, 1] == pytest.approx(50 + 127 / 128 * 40)

    def test_halo_then_line(self, surface, make_context):
        WaveformMode().render(surface, make_context())
        strokes = surface.ops("stroke_path")
        assert len(strokes) == 2
        assert strokes[0].line_width == pytest.approx(4 * strokes[1].line_width)


class TestKaleidoscope:
    def test_every_other_segment_mirrored(self, surface, make_context):
        KaleidoscopeMode().render(surface, make_context(np.full(1024, 128.0)))
        arcs = surface.ops("stroke_arc")
        assert len(arcs) == SEGMENTS * ARCS

        mirrored = [np.linalg.det(c.matrix[:2, :2]) < 0 for c in arcs]
        assert sum(mirrored) == SEGMENTS // 2 * ARCS
