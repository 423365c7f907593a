"""
Base classes for the render modes.

Every mode implements ``render(surface, ctx)``: draw one frame from the
render context and advance the shared particle arena under the mode's
own force model.
"""

import abc
import enum
import math
from dataclasses import dataclass

import numpy as np

from soundcanvas.core.context import RenderContext
from soundcanvas.core.palettes import adjust_opacity
from soundcanvas.core.particles import ForceModel, Particle
from soundcanvas.render.surface import RadialGradient, Surface


class Mode(str, enum.Enum):
    FLOWER = "flower"
    ORBITAL = "orbital"
    SPECTRUM = "spectrum"
    NEBULA = "nebula"
    WAVEFORM = "waveform"
    KALEIDOSCOPE = "kaleidoscope"
    CONSTELLATION = "constellation"

    @classmethod
    def parse(cls, value: "str | Mode") -> "Mode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown mode {value!r}; choose from {valid}") from None


# Modes that expect a freshly spread, full-density particle field.
REINIT_ON_SELECT = frozenset({Mode.NEBULA, Mode.CONSTELLATION})
REINIT_ON_RESIZE = frozenset({Mode.NEBULA, Mode.CONSTELLATION, Mode.FLOWER})


@dataclass
class DriftForce(ForceModel):
    """Slow upward drift with a little sideways wander."""

    lift: float = 0.01
    wander: float = 0.02

    def accelerate(self, particle: Particle, index: int, rng: np.random.Generator) -> tuple[float, float]:
        return (rng.uniform(-self.wander, self.wander), -self.lift)


class BaseMode(abc.ABC):
    """Abstract render mode."""

    mode: Mode

    @abc.abstractmethod
    def render(self, surface: Surface, ctx: RenderContext):
        """Draw one frame and step the particles."""

    def draw_particles(
        self,
        surface: Surface,
        particles: list[Particle],
        alpha: float = 0.6,
        size_scale: float = 1.0,
    ):
        """Plain dots fading with remaining life."""
        for p in particles:
            a = alpha * p.life_ratio
            if a <= 0.01:
                continue
            surface.fill_arc(p.x, p.y, p.size * size_scale, adjust_opacity(p.color, a))

    def glow(self, surface: Surface, x: float, y: float, radius: float, color: str, alpha: float = 0.5):
        """Soft radial halo fading to transparent."""
        if not (radius > 0 and math.isfinite(radius)):
            return
        grad = RadialGradient(x, y, 0.0, radius)
        grad.add_color_stop(0.0, adjust_opacity(color, alpha))
        grad.add_color_stop(1.0, adjust_opacity(color, 0.0))
        surface.fill_arc(x, y, radius, grad)
