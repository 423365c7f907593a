"""Waveform mode: the time-domain snapshot as a glowing line."""

import numpy as np

from soundcanvas.core.context import RenderContext
from soundcanvas.render.surface import Path, Surface
from soundcanvas.visualizers.base import BaseMode, DriftForce, Mode


def waveform_points(time_domain: np.ndarray, width: float, height: float, amplitude: float = 0.4) -> np.ndarray:
    """(N, 2) polyline of the samples, 128 mapped to the vertical center."""
    data = np.clip(np.asarray(time_domain, dtype=np.float64), 0.0, 255.0)
    n = len(data)
    if n == 0:
        return np.zeros((0, 2))
    xs = np.linspace(0.0, width, n) if n > 1 else np.array([width / 2])
    ys = height / 2 + (data - 128.0) / 128.0 * height * amplitude
    return np.column_stack([xs, ys])


class WaveformMode(BaseMode):
    mode = Mode.WAVEFORM

    def render(self, surface: Surface, ctx: RenderContext):
        volume = ctx.smoothed.normalized("overall")

        ctx.particles.step(DriftForce(
            damping=0.97,
            max_speed=1.5,
            decay=0.4,
            respawn="uniform",
            energy=ctx.energy,
        ))
        self.draw_particles(surface, ctx.particles.prefix(0.5), alpha=0.2, size_scale=0.6)

        points = waveform_points(ctx.time_domain, ctx.bounds.width, ctx.bounds.height)
        if len(points) < 2:
            return
        path = Path.polyline(points)
        width = 2.0 + volume * 6.0

        surface.save()
        surface.line_cap = "round"
        surface.line_width = width * 4.0
        surface.stroke_path(path, ctx.colors.sample(alpha=0.2))
        surface.line_width = width
        surface.stroke_path(path, ctx.palette[0])
        surface.restore()
