"""
Nebula mode: the whole arena swirls under three superposed forces.

- Bass: radial push, inward near the center and outward beyond it
- Mids: tangential swirl, phase-shifted per particle
- Treble: random jitter

Particles are drawn as soft halos, and sampled pairs close enough to
each other are joined by fading lines.
"""

import math
from dataclasses import dataclass

import numpy as np

from soundcanvas.core.context import RenderContext
from soundcanvas.core.geometry import link_strength, unit_vector
from soundcanvas.core.palettes import adjust_opacity
from soundcanvas.core.particles import ForceModel, Particle
from soundcanvas.render.surface import Surface
from soundcanvas.visualizers.base import BaseMode, Mode

INNER_RADIUS = 200.0


def connect_distance(bass: float, mid: float) -> float:
    """Maximum link length from normalized smoothed bass and mid."""
    return 60.0 + (bass + mid) * 60.0


def sampled_pairs(positions: np.ndarray, max_distance: float, stride: int = 5):
    """
    Yield (i, j, strength) for pairs i < j where j is a multiple of
    ``stride`` and the points are closer than ``max_distance``.
    """
    n = len(positions)
    if n < 2 or max_distance <= 0:
        return
    stride = max(1, int(stride))
    for j in range(stride, n, stride):
        head = positions[:j]
        d = np.hypot(head[:, 0] - positions[j, 0], head[:, 1] - positions[j, 1])
        for i in np.nonzero(d < max_distance)[0]:
            strength = link_strength(positions[i, 0], positions[i, 1], positions[j, 0], positions[j, 1], max_distance)
            if strength > 0:
                yield int(i), j, strength


@dataclass
class NebulaForce(ForceModel):
    center: tuple[float, float] = (0.0, 0.0)
    time: float = 0.0
    bass: float = 0.0
    mid: float = 0.0
    treble: float = 0.0

    def accelerate(self, particle: Particle, index: int, rng: np.random.Generator) -> tuple[float, float]:
        ux, uy, dist = unit_vector(particle.x - self.center[0], particle.y - self.center[1])

        direction = -1.0 if dist < INNER_RADIUS else 1.0
        radial = direction * self.bass * 0.0005 * dist

        swirl = self.mid * 0.08 * math.sin(self.time * 1.5 + particle.angle)

        jitter = self.treble * 0.3
        ax = ux * radial - uy * swirl + rng.uniform(-jitter, jitter)
        ay = uy * radial + ux * swirl + rng.uniform(-jitter, jitter)
        return (ax, ay)


class NebulaMode(BaseMode):
    mode = Mode.NEBULA

    def render(self, surface: Surface, ctx: RenderContext):
        sm = ctx.smoothed
        bass = sm.normalized("bass")
        mid = sm.normalized("mid")
        volume = sm.normalized("overall")

        ctx.particles.step(NebulaForce(
            damping=0.97,
            max_speed=3.0 + volume * 5.0,
            decay=0.3,
            decay_gain=2.0,
            energy=ctx.energy,
            center=ctx.bounds.center,
            time=ctx.elapsed,
            bass=bass,
            mid=mid,
            treble=sm.normalized("treble"),
        ))
        particles = ctx.particles.particles

        surface.save()
        surface.composite = "lighter"
        for p in particles:
            life = p.life_ratio
            self.glow(surface, p.x, p.y, p.size * 4.0 * (1.0 + bass), p.color, alpha=0.4 * life)
            surface.fill_arc(p.x, p.y, p.size * 0.6, f"rgba(255, 255, 255, {round(0.8 * life, 3)})")
        surface.restore()

        if not particles:
            return
        positions = np.array([(p.x, p.y) for p in particles], dtype=np.float64)
        surface.line_width = 0.6
        for i, j, strength in sampled_pairs(positions, connect_distance(bass, mid), ctx.connection_stride):
            surface.line(
                positions[i, 0], positions[i, 1], positions[j, 0], positions[j, 1],
                adjust_opacity(particles[i].color, strength * 0.5),
            )
