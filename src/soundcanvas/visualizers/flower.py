"""
Flower mode.

A polar "bloom" whose radius function mixes a petal harmonic driven by
the mids, a bass pulse, slow breathing and fine treble ripple. The
outline is sampled around the circle and joined with cubic segments,
then drawn as four nested gradient layers around a glowing core.
"""

import math
from dataclasses import dataclass

import numpy as np

from soundcanvas.core.context import RenderContext
from soundcanvas.core.geometry import unit_vector
from soundcanvas.core.palettes import adjust_opacity
from soundcanvas.core.particles import ForceModel, Particle
from soundcanvas.render.surface import Path, RadialGradient, Surface
from soundcanvas.visualizers.base import BaseMode, Mode

BASE_PETALS = 7
OUTLINE_SAMPLES = 96
LAYERS = 4
STAMEN_BASS = 100.0
REPEL_THRESHOLD = 0.7


def petal_count(smoothed_mid: float) -> int:
    return BASE_PETALS + int(max(0.0, smoothed_mid) // 25)


def petal_radius(
    angle: float,
    t: float,
    base: float,
    petals: int,
    bass: float,
    mid: float,
    treble: float,
) -> float:
    """
    Radius of the bloom outline at ``angle``.

    ``bass``, ``mid`` and ``treble`` are normalized smoothed energies.
    """
    harmonic = (0.35 + mid * 0.6) * base * abs(math.sin(petals * angle / 2))
    secondary = 0.15 * base * mid * math.sin(2 * petals * angle)
    bass_pulse = bass * base * 0.4 * (0.5 + 0.5 * math.sin(t * 4.0))
    slow_pulse = base * 0.05 * math.sin(t * 0.8)
    treble_detail = treble * base * 0.08 * math.sin(angle * petals * 4 + t * 6.0)
    asymmetry = base * 0.04 * math.sin(angle + t * 0.5)
    return base + harmonic + secondary + bass_pulse + slow_pulse + treble_detail + asymmetry


def smooth_closed_path(points: list[tuple[float, float]]) -> Path:
    """Closed Catmull-Rom spline through ``points`` as cubic segments."""
    n = len(points)
    path = Path().move_to(*points[0])
    for i in range(n):
        p0 = points[(i - 1) % n]
        p1 = points[i]
        p2 = points[(i + 1) % n]
        p3 = points[(i + 2) % n]
        c1 = (p1[0] + (p2[0] - p0[0]) / 6, p1[1] + (p2[1] - p0[1]) / 6)
        c2 = (p2[0] - (p3[0] - p1[0]) / 6, p2[1] - (p3[1] - p1[1]) / 6)
        path.bezier_curve_to(c1[0], c1[1], c2[0], c2[1], p2[0], p2[1])
    return path.close()


@dataclass
class BloomForce(ForceModel):
    """Pull toward the center, or push away once the bass is heavy."""

    center: tuple[float, float] = (0.0, 0.0)
    bass: float = 0.0

    def accelerate(self, particle: Particle, index: int, rng: np.random.Generator) -> tuple[float, float]:
        ux, uy, _ = unit_vector(self.center[0] - particle.x, self.center[1] - particle.y)
        if self.bass > REPEL_THRESHOLD:
            strength = -0.05 * self.bass
        else:
            strength = 0.02 * (1.0 - self.bass)
        return (ux * strength, uy * strength)


class FlowerMode(BaseMode):
    mode = Mode.FLOWER

    def render(self, surface: Surface, ctx: RenderContext):
        t = ctx.elapsed
        cx, cy = ctx.bounds.center
        sm = ctx.smoothed
        bass = sm.normalized("bass")
        mid = sm.normalized("mid")
        treble = sm.normalized("treble")
        palette = ctx.palette

        petals = petal_count(sm.mid)
        base = ctx.bounds.min_dim * 0.12 * (1.0 + bass * 0.5)

        ctx.particles.step(BloomForce(
            damping=0.96,
            max_speed=3.0 + bass * 4.0,
            decay=0.5,
            decay_gain=1.5,
            energy=ctx.energy,
            center=(cx, cy),
            bass=bass,
        ))
        self.draw_particles(surface, ctx.particles.particles, alpha=0.5)

        for layer in range(LAYERS):
            scale = 1.0 - layer * 0.2
            opacity = 0.8 - layer * 0.15
            twist = layer * math.pi / petals + t * 0.05 * (layer + 1)

            points = []
            max_r = 0.0
            for i in range(OUTLINE_SAMPLES):
                angle = 2 * math.pi * i / OUTLINE_SAMPLES
                r = petal_radius(angle + twist, t, base, petals, bass, mid, treble) * scale
                max_r = max(max_r, r)
                points.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))

            grad = RadialGradient(cx, cy, 0.0, max(max_r, 1.0))
            for j in range(3):
                grad.add_color_stop(j / 2, adjust_opacity(palette[(layer + j) % len(palette)], opacity * (1 - j * 0.3)))
            surface.fill_path(smooth_closed_path(points), grad)

        self._draw_core(surface, ctx, cx, cy, base, bass, petals)

    def _draw_core(self, surface, ctx, cx, cy, base, bass, petals):
        t = ctx.elapsed
        palette = ctx.palette
        core_r = base * 0.3 * (1.0 + 0.2 * math.sin(t * 3.0) + bass * 0.5)

        surface.save()
        surface.composite = "lighter"
        grad = RadialGradient(cx, cy, 0.0, core_r * 2)
        grad.add_color_stop(0.0, "rgba(255, 255, 255, 0.9)")
        grad.add_color_stop(0.4, adjust_opacity(palette[0], 0.6))
        grad.add_color_stop(1.0, adjust_opacity(palette[0], 0.0))
        surface.fill_arc(cx, cy, core_r * 2, grad)

        if ctx.smoothed.bass > STAMEN_BASS:
            reach = base * (0.6 + bass * 0.5)
            surface.line_width = 1.5
            surface.line_cap = "round"
            for i in range(petals):
                angle = 2 * math.pi * i / petals + t * 0.3
                tx = cx + math.cos(angle) * reach
                ty = cy + math.sin(angle) * reach
                color = palette[i % len(palette)]
                surface.line(cx, cy, tx, ty, adjust_opacity(color, 0.7))
                surface.fill_arc(tx, ty, 2.0 + bass * 3.0, adjust_opacity(color, 0.9))
        surface.restore()
