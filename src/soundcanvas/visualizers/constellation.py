"""
Constellation mode.

Spectral peaks in the lower half of the snapshot become stars placed by
bin index (angle) and magnitude (radius). Nearby stars are linked, over
a faint drifting particle backdrop.
"""

import math
from dataclasses import dataclass

import numpy as np
from scipy import signal as scipy_signal

from soundcanvas.core.context import RenderContext
from soundcanvas.core.geometry import link_strength
from soundcanvas.core.palettes import adjust_opacity
from soundcanvas.core.particles import ForceModel, Particle
from soundcanvas.render.surface import Surface
from soundcanvas.visualizers.base import BaseMode, Mode

MIN_PEAK_SPACING = 5


@dataclass(frozen=True)
class Star:
    bin: int
    magnitude: float
    x: float
    y: float


def peak_threshold(smoothed_volume: float) -> float:
    """Peaks must clear a floor that rises with the overall volume."""
    return 40.0 + max(0.0, smoothed_volume) * 0.8


def pick_peaks(frequency: np.ndarray, smoothed_volume: float, spacing: int = MIN_PEAK_SPACING) -> list[int]:
    """
    Local maxima of the lower half of ``frequency``.

    A bin qualifies when it is strictly greater than both neighbours and
    above ``peak_threshold``; it is kept only if it lies at least
    ``spacing`` bins after the previously accepted peak.
    """
    data = np.asarray(frequency, dtype=np.float64)
    half = data[: len(data) // 2]
    if len(half) < 3:
        return []

    threshold = peak_threshold(smoothed_volume)
    candidates = scipy_signal.argrelmax(half, order=1, mode="clip")[0]

    peaks: list[int] = []
    for idx in candidates:
        if idx == 0 or idx == len(half) - 1 or half[idx] <= threshold:
            continue
        if peaks and idx - peaks[-1] < spacing:
            continue
        peaks.append(int(idx))
    return peaks


def place_stars(peaks: list[int], frequency: np.ndarray, n_half: int, center, min_dim: float, t: float) -> list[Star]:
    cx, cy = center
    stars = []
    for idx in peaks:
        magnitude = float(frequency[idx])
        angle = idx / max(1, n_half) * 2 * math.pi + t * 0.05
        radius = min_dim * 0.1 + magnitude / 255.0 * min_dim * 0.35
        x = cx + math.cos(angle) * radius + math.sin(t * 2.0 + idx) * 3.0
        y = cy + math.sin(angle) * radius + math.cos(t * 1.7 + idx) * 3.0
        stars.append(Star(idx, magnitude, x, y))
    return stars


@dataclass
class BackdropForce(ForceModel):
    """Barely-there drift; particles that wander off reappear anywhere."""

    wander: float = 0.01

    def accelerate(self, particle: Particle, index: int, rng: np.random.Generator) -> tuple[float, float]:
        return (rng.uniform(-self.wander, self.wander), rng.uniform(-self.wander, self.wander))


class ConstellationMode(BaseMode):
    mode = Mode.CONSTELLATION

    def __init__(self):
        self.stars: list[Star] = []

    def render(self, surface: Surface, ctx: RenderContext):
        t = ctx.elapsed
        palette = ctx.palette
        min_dim = ctx.bounds.min_dim

        ctx.particles.step(BackdropForce(
            damping=0.98,
            max_speed=0.6,
            decay=0.2,
            decay_gain=0.5,
            respawn="uniform",
            energy=ctx.energy,
        ))
        self.draw_particles(surface, ctx.particles.particles, alpha=0.15, size_scale=0.7)

        peaks = pick_peaks(ctx.frequency, ctx.smoothed.overall)
        self.stars = place_stars(peaks, ctx.frequency, ctx.n_bins // 2, ctx.bounds.center, min_dim, t)

        max_distance = min_dim * 0.1 + ctx.smoothed.mid * 0.6
        surface.line_width = 1.0
        for i, a in enumerate(self.stars):
            for b in self.stars[i + 1:]:
                strength = link_strength(a.x, a.y, b.x, b.y, max_distance)
                if strength > 0:
                    surface.line(a.x, a.y, b.x, b.y, adjust_opacity(palette[a.bin % len(palette)], strength * 0.6))

        surface.save()
        surface.composite = "lighter"
        for star in self.stars:
            level = star.magnitude / 255.0
            color = palette[star.bin % len(palette)]
            self.glow(surface, star.x, star.y, 4.0 + level * 14.0, color, alpha=0.5)
            surface.fill_arc(star.x, star.y, 1.5 + level * 2.5, "#ffffff")
        surface.restore()
