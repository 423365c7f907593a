"""
Kaleidoscope mode.

One set of arcs is drawn per angular segment with the transform rotated
to that segment (and mirrored on every other one), which turns a single
drawing routine into full radial symmetry.
"""

import math

from soundcanvas.core.context import RenderContext
from soundcanvas.core.palettes import adjust_opacity
from soundcanvas.render.surface import Surface
from soundcanvas.visualizers.base import BaseMode, DriftForce, Mode

SEGMENTS = 8
ARCS = 10


def arc_bin(arc: int, n_bins: int) -> int:
    return 1 + int(arc * n_bins * 0.5 / ARCS)


class KaleidoscopeMode(BaseMode):
    mode = Mode.KALEIDOSCOPE

    def render(self, surface: Surface, ctx: RenderContext):
        t = ctx.elapsed
        cx, cy = ctx.bounds.center
        min_dim = ctx.bounds.min_dim
        palette = ctx.palette
        mid = ctx.smoothed.normalized("mid")

        ctx.particles.step(DriftForce(
            damping=0.97,
            max_speed=1.2,
            decay=0.4,
            respawn="uniform",
            energy=ctx.energy,
        ))
        self.draw_particles(surface, ctx.particles.prefix(0.5), alpha=0.2, size_scale=0.5)

        energies = [ctx.bin(arc_bin(a, ctx.n_bins)) / 255.0 for a in range(ARCS)]
        segment = 2 * math.pi / SEGMENTS

        surface.save()
        surface.line_cap = "round"
        for s in range(SEGMENTS):
            surface.save()
            surface.translate(cx, cy)
            surface.rotate(s * segment)
            if s % 2 == 1:
                surface.scale(1, -1)

            for a, energy in enumerate(energies):
                radius = min_dim * (0.05 + a * 0.035 + energy * 0.08)
                start = t * 0.3 * (1 + a * 0.1) + mid * math.pi * 0.5
                span = segment * (0.3 + energy * 0.7 + mid * 0.3)
                surface.line_width = 1.0 + energy * 4.0
                surface.stroke_arc(
                    0.0, 0.0, radius,
                    adjust_opacity(palette[a % len(palette)], 0.4 + energy * 0.6),
                    start=start,
                    end=start + span,
                )
            surface.restore()
        surface.restore()
