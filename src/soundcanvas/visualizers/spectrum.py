"""
Spectrum mode: 256 mirrored bars around the horizontal center line.
"""

import numpy as np

from soundcanvas.core.context import RenderContext
from soundcanvas.core.palettes import adjust_opacity
from soundcanvas.render.surface import LinearGradient, Surface
from soundcanvas.visualizers.base import BaseMode, DriftForce, Mode

BARS = 256
CAP_FRACTION = 0.7


def bar_heights(frequency: np.ndarray, smoothed_volume: float, half_height: float, bars: int = BARS) -> np.ndarray:
    """
    Bar heights for ``bars`` evenly strided bins.

    Each bar averages a bin with its right neighbour; the scale grows
    with the smoothed overall volume. Heights never exceed ``half_height``.
    """
    data = np.asarray(frequency, dtype=np.float64)
    n = len(data)
    if n == 0:
        return np.zeros(bars)
    stride = max(1, n // bars)
    idx = np.minimum(np.arange(bars) * stride, n - 1)
    pair = np.minimum(idx + 1, n - 1)
    avg = (data[idx] + data[pair]) / 2.0
    multiplier = (half_height / 255.0) * (0.6 + min(1.0, max(0.0, smoothed_volume / 255.0)) * 0.8)
    return np.clip(avg * multiplier, 0.0, half_height)


class SpectrumMode(BaseMode):
    mode = Mode.SPECTRUM

    def __init__(self):
        self.last_heights = np.zeros(BARS)

    def render(self, surface: Surface, ctx: RenderContext):
        width, height = ctx.bounds.width, ctx.bounds.height
        cy = height / 2
        palette = ctx.palette

        ctx.particles.step(DriftForce(
            damping=0.97,
            max_speed=1.5,
            decay=0.4,
            respawn="uniform",
            energy=ctx.energy,
        ))
        self.draw_particles(surface, ctx.particles.prefix(0.5), alpha=0.25, size_scale=0.6)

        heights = bar_heights(ctx.frequency, ctx.smoothed.overall, cy)
        self.last_heights = heights
        bar_w = width / BARS

        for i, h in enumerate(heights):
            if h < 0.5:
                continue
            x = i * bar_w
            top = palette[i * len(palette) // BARS]
            bottom = palette[(i * len(palette) // BARS + 1) % len(palette)]

            up = LinearGradient(x, cy - h, x, cy)
            up.add_color_stop(0.0, top)
            up.add_color_stop(1.0, adjust_opacity(bottom, 0.3))
            surface.fill_rect(x, cy - h, bar_w * 0.8, h, up)

            down = LinearGradient(x, cy, x, cy + h)
            down.add_color_stop(0.0, adjust_opacity(bottom, 0.35))
            down.add_color_stop(1.0, adjust_opacity(top, 0.0))
            surface.fill_rect(x, cy, bar_w * 0.8, h, down)

            if h > CAP_FRACTION * cy:
                surface.fill_rect(x, cy - h - 3, bar_w * 0.8, 3, "rgba(255, 255, 255, 0.9)")
