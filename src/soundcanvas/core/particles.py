"""
Fixed-size particle arena shared by the render modes.

Particles live in a list whose length only changes on ``reinitialize``.
Dead, escaped or randomly chosen particles are respawned in place so
slot indices stay stable between ticks.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from soundcanvas.core.features import BandEnergy
from soundcanvas.core.geometry import Bounds
from soundcanvas.core.palettes import ColorSchemeRegistry

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 150
RESPAWN_CHANCE = 0.001

LIFE_RANGE = (100.0, 250.0)
SIZE_RANGE = (1.0, 4.0)
ORBIT_RANGE = (50.0, 150.0)
BURST_RADIUS = (20.0, 60.0)
SPAWN_SPREAD = 0.8


@dataclass
class Particle:
    """A single simulated point."""

    id: int
    x: float
    y: float
    vx: float
    vy: float
    ox: float
    oy: float
    size: float
    color: str
    life: float
    initial_life: float
    angle: float
    orbit_radius: float

    @property
    def life_ratio(self) -> float:
        if self.initial_life <= 0:
            return 0.0
        return min(1.0, max(0.0, self.life / self.initial_life))


@dataclass
class ForceModel:
    """
    Mode-specific motion rules handed to ``ParticleSystem.step``.

    Subclasses override ``accelerate``; the remaining fields tune the
    shared integration (damping, speed ceiling, life decay, respawn
    placement).
    """

    damping: float = 0.96
    max_speed: float = 3.0
    decay: float = 0.5
    decay_gain: float = 1.0
    respawn: str = "burst"  # "burst" or "uniform"
    energy: BandEnergy = BandEnergy()

    def __post_init__(self):
        if not 0.95 <= self.damping <= 0.98:
            raise ValueError(f"Damping must be in [0.95, 0.98], got {self.damping}")
        if not 0.1 <= self.decay <= 1.0:
            raise ValueError(f"Baseline decay must be in [0.1, 1.0], got {self.decay}")
        if self.respawn not in ("burst", "uniform"):
            raise ValueError(f"Unknown respawn placement {self.respawn!r}")

    def accelerate(self, particle: Particle, index: int, rng: np.random.Generator) -> tuple[float, float]:
        return (0.0, 0.0)

    def decay_rate(self) -> float:
        """Baseline decay, boosted by overall audio intensity."""
        intensity = min(1.0, max(0.0, self.energy.overall / 255.0))
        return self.decay * (1.0 + self.decay_gain * intensity)


class ParticleSystem:
    """Arena of particles with spawn, step and respawn rules."""

    def __init__(
        self,
        colors: ColorSchemeRegistry,
        bounds: Bounds,
        rng: np.random.Generator | None = None,
        respawn_chance: float = RESPAWN_CHANCE,
    ):
        self.colors = colors
        self.bounds = bounds
        self.rng = rng or np.random.default_rng()
        self.respawn_chance = respawn_chance
        self.particles: list[Particle] = []
        self.respawned = 0

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self):
        return iter(self.particles)

    def __getitem__(self, index: int) -> Particle:
        return self.particles[index]

    def prefix(self, fraction: float) -> list[Particle]:
        """First ``fraction`` of the arena, for lighter-weight passes."""
        count = max(0, min(len(self.particles), int(len(self.particles) * fraction)))
        return self.particles[:count]

    def reinitialize(self, count: int = DEFAULT_COUNT, bounds: Bounds | None = None):
        """Discard every particle and spawn ``count`` fresh ones near the center."""
        if count < 0:
            raise ValueError(f"Particle count must be non-negative, got {count}")
        if bounds is not None:
            self.bounds = bounds

        rng = self.rng
        cx, cy = self.bounds.center
        spread_x = self.bounds.width * SPAWN_SPREAD
        spread_y = self.bounds.height * SPAWN_SPREAD

        particles = []
        for i in range(count):
            x = cx + (rng.random() - 0.5) * spread_x
            y = cy + (rng.random() - 0.5) * spread_y
            life = rng.uniform(*LIFE_RANGE)
            particles.append(Particle(
                id=i,
                x=x,
                y=y,
                vx=rng.uniform(-0.5, 0.5),
                vy=rng.uniform(-0.5, 0.5),
                ox=x,
                oy=y,
                size=rng.uniform(*SIZE_RANGE),
                color=self.colors.sample(),
                life=life,
                initial_life=life,
                angle=rng.uniform(0, 2 * math.pi),
                orbit_radius=rng.uniform(*ORBIT_RANGE),
            ))
        self.particles = particles
        logger.debug("Reinitialized %d particles in %sx%s", count, self.bounds.width, self.bounds.height)

    def respawn(self, particle: Particle, placement: str = "burst"):
        """Re-roll every attribute of ``particle`` in place."""
        rng = self.rng
        if placement == "uniform":
            x = rng.uniform(0, self.bounds.width)
            y = rng.uniform(0, self.bounds.height)
        else:
            cx, cy = self.bounds.center
            angle = rng.uniform(0, 2 * math.pi)
            radius = rng.uniform(*BURST_RADIUS)
            x = cx + math.cos(angle) * radius
            y = cy + math.sin(angle) * radius

        life = rng.uniform(*LIFE_RANGE)
        particle.x, particle.y = x, y
        particle.ox, particle.oy = x, y
        particle.vx = rng.uniform(-0.5, 0.5)
        particle.vy = rng.uniform(-0.5, 0.5)
        particle.life = life
        particle.initial_life = life
        particle.size = rng.uniform(*SIZE_RANGE)
        particle.color = self.colors.sample()
        particle.angle = rng.uniform(0, 2 * math.pi)
        particle.orbit_radius = rng.uniform(*ORBIT_RANGE)
        self.respawned += 1

    def step(self, force: ForceModel):
        """Advance every particle by one tick under ``force``."""
        rng = self.rng
        bounds = self.bounds
        damping = force.damping
        max_speed = force.max_speed
        rate = force.decay_rate()

        for i, p in enumerate(self.particles):
            ax, ay = force.accelerate(p, i, rng)
            if not (math.isfinite(ax) and math.isfinite(ay)):
                ax = ay = 0.0

            p.vx = (p.vx + ax) * damping
            p.vy = (p.vy + ay) * damping

            speed = math.hypot(p.vx, p.vy)
            if speed > max_speed:
                scale = max_speed / speed
                p.vx *= scale
                p.vy *= scale

            p.x += p.vx
            p.y += p.vy
            p.life -= rate

            if (
                p.life <= 0
                or not bounds.contains(p.x, p.y, margin=p.size)
                or rng.random() < self.respawn_chance
            ):
                self.respawn(p, force.respawn)
