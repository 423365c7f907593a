"""
Orbital mode: a bass-driven star with five rings of planets.

Each ring samples one frequency bin; that energy sets the ring stroke
and the size of its planets. Large planets carry moons.
"""

import math
from dataclasses import dataclass

import numpy as np

from soundcanvas.core.context import RenderContext
from soundcanvas.core.geometry import unit_vector
from soundcanvas.core.palettes import adjust_opacity
from soundcanvas.core.particles import ForceModel, Particle
from soundcanvas.render.surface import RadialGradient, Surface
from soundcanvas.visualizers.base import BaseMode, Mode

RINGS = 5
MOON_THRESHOLD = 8.0


def ring_bin(ring: int, n_bins: int) -> int:
    return int(n_bins * (0.02 + ring * 0.06))


def planet_size(energy: float) -> float:
    """Planet radius from a normalized bin energy."""
    return 3.0 + energy * 10.0


def moon_count(size: float) -> int:
    return int(size // 4) if size > MOON_THRESHOLD else 0


@dataclass
class BeltForce(ForceModel):
    """Tangential pull that keeps dust circling the star."""

    center: tuple[float, float] = (0.0, 0.0)
    spin: float = 0.02

    def accelerate(self, particle: Particle, index: int, rng: np.random.Generator) -> tuple[float, float]:
        ux, uy, dist = unit_vector(particle.x - self.center[0], particle.y - self.center[1])
        # Settle each grain on its own orbit radius.
        radial = (particle.orbit_radius * 2 - dist) * 0.0005
        return (-uy * self.spin + ux * radial, ux * self.spin + uy * radial)


class OrbitalMode(BaseMode):
    mode = Mode.ORBITAL

    def render(self, surface: Surface, ctx: RenderContext):
        t = ctx.elapsed
        cx, cy = ctx.bounds.center
        min_dim = ctx.bounds.min_dim
        palette = ctx.palette
        bass = ctx.smoothed.normalized("bass")
        mid = ctx.smoothed.normalized("mid")

        ctx.particles.step(BeltForce(
            damping=0.98,
            max_speed=2.0,
            decay=0.3,
            respawn="uniform",
            energy=ctx.energy,
            center=(cx, cy),
            spin=0.02 * (1.0 + mid),
        ))
        surface.save()
        surface.composite = "lighter"
        self.draw_particles(surface, ctx.particles.prefix(0.5), alpha=0.3, size_scale=0.5)
        surface.restore()

        star_r = min_dim * 0.05 * (1.0 + bass * 1.5)
        self.glow(surface, cx, cy, star_r * (2.5 + bass * 2.0), palette[0], alpha=0.4 + bass * 0.4)
        core = RadialGradient(cx, cy, 0.0, star_r)
        core.add_color_stop(0.0, "#ffffff")
        core.add_color_stop(1.0, palette[0])
        surface.fill_arc(cx, cy, star_r, core)

        for ring in range(RINGS):
            energy = ctx.bin(ring_bin(ring, ctx.n_bins)) / 255.0
            radius = min_dim * (0.12 + ring * 0.08) * (1.0 + 0.03 * math.sin(t * 0.5 + ring))
            color = palette[ring % len(palette)]

            surface.line_width = 1.0 + energy * 4.0
            surface.stroke_arc(cx, cy, radius, adjust_opacity(color, 0.15 + energy * 0.6))

            count = 2 + ring
            speed = 0.6 / (ring + 1)
            size = planet_size(energy)
            for j in range(count):
                angle = t * speed + j * 2 * math.pi / count
                px = cx + math.cos(angle) * radius
                py = cy + math.sin(angle) * radius
                self.glow(surface, px, py, size * 2.0, color, alpha=0.35)
                surface.fill_arc(px, py, size, color)

                for m in range(moon_count(size)):
                    moon_angle = t * 2.5 * (m + 1) + m
                    moon_r = size * 1.8 + m * 3.0
                    surface.fill_arc(
                        px + math.cos(moon_angle) * moon_r,
                        py + math.sin(moon_angle) * moon_r,
                        1.5,
                        adjust_opacity(palette[(ring + 2) % len(palette)], 0.85),
                    )
