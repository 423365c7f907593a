"""
pygame drawing backend.

Shapes are transformed to device space and rasterized with pygame.draw
onto a scratch layer covering only their bounding box. Solid colors are
drawn straight into the layer; gradients rasterize a coverage mask and
are shaded per pixel with numpy before the layer is blended onto the
target (alpha blending, or additive for the "lighter" composite mode).
"""

import math

import numpy as np
import pygame

from soundcanvas.core.palettes import parse_color
from soundcanvas.render.surface import (
    DrawState,
    LinearGradient,
    Paint,
    Path,
    RadialGradient,
    Surface,
)

WHITE = (255, 255, 255, 255)


class PygameSurface(Surface):
    """Surface backed by a ``pygame.Surface``."""

    def __init__(self, width: int, height: int, target: pygame.Surface | None = None):
        super().__init__(width, height)
        self.target = target if target is not None else pygame.Surface((self.width, self.height))
        self._color_cache: dict[str, tuple[int, int, int, float]] = {}

    @classmethod
    def wrap(cls, target: pygame.Surface) -> "PygameSurface":
        """Draw directly onto an existing surface such as the display."""
        w, h = target.get_size()
        return cls(w, h, target=target)

    def resize(self, width: int, height: int, target: pygame.Surface | None = None):
        super().resize(width, height)
        self.target = target if target is not None else pygame.Surface((self.width, self.height))

    def to_array(self) -> np.ndarray:
        """Current pixels as an (H, W, 3) uint8 array."""
        arr = pygame.surfarray.array3d(self.target)
        return np.transpose(arr, (1, 0, 2))

    # -- helpers ---------------------------------------------------------

    def _color(self, color: str) -> tuple[int, int, int, float]:
        cached = self._color_cache.get(color)
        if cached is None:
            cached = parse_color(color)
            if len(self._color_cache) > 4096:
                self._color_cache.clear()
            self._color_cache[color] = cached
        return cached

    def _device_width(self) -> int:
        m = self.state.matrix
        scale = math.sqrt(abs(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]))
        return max(1, int(round(self.state.line_width * scale)))

    def _arc_points(self, cx, cy, r, start, end) -> np.ndarray:
        sweep = end - start
        m = self.state.matrix
        device_r = r * math.sqrt(abs(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]))
        n = int(min(360, max(8, abs(sweep) * device_r / 3 + 8)))
        angles = start + sweep * np.linspace(0.0, 1.0, n)
        pts = np.column_stack([cx + r * np.cos(angles), cy + r * np.sin(angles)])
        return self.transform_points(pts)

    def _is_full_circle(self, start, end) -> bool:
        return abs(end - start) >= 2 * math.pi - 1e-9

    def _stroke_fn(self, closed: bool, width: int):
        round_cap = self.state.line_cap == "round" or width > 3

        def draw(layer, color, subpaths):
            for pts in subpaths:
                if len(pts) < 2:
                    continue
                ipts = [(float(x), float(y)) for x, y in pts]
                pygame.draw.lines(layer, color, closed, ipts, width)
                if round_cap:
                    for x, y in (ipts if width > 3 else (ipts[0], ipts[-1])):
                        pygame.draw.circle(layer, color, (x, y), width / 2)

        return draw

    @staticmethod
    def _fill_fn(layer, color, subpaths):
        for pts in subpaths:
            if len(pts) >= 3:
                pygame.draw.polygon(layer, color, [(float(x), float(y)) for x, y in pts])

    def _paint(self, subpaths: list[np.ndarray], draw_fn, paint: Paint, pad: float = 2.0):
        subpaths = [p for p in subpaths if len(p)]
        if not subpaths:
            return
        allpts = np.vstack(subpaths)
        if not np.all(np.isfinite(allpts)):
            self.skipped += 1
            return

        x0 = max(0, int(math.floor(allpts[:, 0].min() - pad)))
        y0 = max(0, int(math.floor(allpts[:, 1].min() - pad)))
        x1 = min(self.target.get_width(), int(math.ceil(allpts[:, 0].max() + pad)))
        y1 = min(self.target.get_height(), int(math.ceil(allpts[:, 1].max() + pad)))
        w, h = x1 - x0, y1 - y0
        if w <= 0 or h <= 0:
            return

        local = [p - (x0, y0) for p in subpaths]
        lighter = self.state.composite == "lighter"
        global_alpha = self.state.global_alpha

        if isinstance(paint, str):
            r, g, b, a = self._color(paint)
            a *= global_alpha
            if a <= 0:
                return
            if lighter:
                layer = pygame.Surface((w, h))
                layer.fill((0, 0, 0))
                draw_fn(layer, (int(r * a), int(g * a), int(b * a)), local)
                self.target.blit(layer, (x0, y0), special_flags=pygame.BLEND_RGB_ADD)
            else:
                layer = pygame.Surface((w, h), pygame.SRCALPHA)
                layer.fill((0, 0, 0, 0))
                draw_fn(layer, (r, g, b, int(round(a * 255))), local)
                self.target.blit(layer, (x0, y0))
            return

        mask = pygame.Surface((w, h), pygame.SRCALPHA)
        mask.fill((0, 0, 0, 0))
        draw_fn(mask, WHITE, local)
        coverage = pygame.surfarray.array_alpha(mask).astype(np.float32) / 255.0
        shaded = self._shade(paint, x0, y0, w, h)
        if shaded is None:
            return
        rgb, alpha = shaded
        alpha = alpha * coverage * global_alpha
        self._blit_rgba(rgb, alpha, x0, y0, lighter)

    def _shade(self, paint: Paint, x0: int, y0: int, w: int, h: int):
        """Per-pixel gradient colors for a device-space box, or None."""
        if not paint.stops:
            return None
        m = self.state.matrix
        if abs(np.linalg.det(m)) < 1e-12:
            return None
        inv = np.linalg.inv(m)

        xs = x0 + np.arange(w, dtype=np.float64) + 0.5
        ys = y0 + np.arange(h, dtype=np.float64) + 0.5
        X, Y = np.meshgrid(xs, ys, indexing="ij")
        ux = inv[0, 0] * X + inv[0, 1] * Y + inv[0, 2]
        uy = inv[1, 0] * X + inv[1, 1] * Y + inv[1, 2]

        if isinstance(paint, LinearGradient):
            dx, dy = paint.x1 - paint.x0, paint.y1 - paint.y0
            denom = dx * dx + dy * dy
            if denom > 0:
                t = ((ux - paint.x0) * dx + (uy - paint.y0) * dy) / denom
            else:
                t = np.zeros_like(ux)
        elif isinstance(paint, RadialGradient):
            dist = np.hypot(ux - paint.x, uy - paint.y)
            span = paint.r1 - paint.r0
            if span != 0:
                t = (dist - paint.r0) / span
            else:
                t = (dist >= paint.r1).astype(np.float64)
        else:
            raise TypeError(f"Unsupported paint {type(paint).__name__}")

        t = np.clip(t, 0.0, 1.0)
        stops = sorted(paint.stops, key=lambda s: s[0])
        offsets = np.array([s[0] for s in stops])
        cols = np.array([self._color(s[1]) for s in stops], dtype=np.float64)

        rgb = np.stack([np.interp(t, offsets, cols[:, c]) for c in range(3)], axis=-1)
        alpha = np.interp(t, offsets, cols[:, 3])
        return rgb, alpha

    def _blit_rgba(self, rgb: np.ndarray, alpha: np.ndarray, x0: int, y0: int, lighter: bool):
        if not np.any(alpha > 0):
            return
        if lighter:
            added = np.clip(rgb * alpha[..., None], 0, 255).astype(np.uint8)
            layer = pygame.surfarray.make_surface(added)
            self.target.blit(layer, (x0, y0), special_flags=pygame.BLEND_RGB_ADD)
            return

        w, h = alpha.shape
        layer = pygame.Surface((w, h), pygame.SRCALPHA)
        px = pygame.surfarray.pixels3d(layer)
        px[...] = np.clip(rgb, 0, 255).astype(np.uint8)
        del px
        pa = pygame.surfarray.pixels_alpha(layer)
        pa[...] = np.clip(alpha * 255.0, 0, 255).astype(np.uint8)
        del pa
        self.target.blit(layer, (x0, y0))

    # -- backend hooks ---------------------------------------------------

    def _clear(self, paint: Paint):
        if isinstance(paint, str):
            r, g, b, a = self._color(paint)
            if a >= 1.0:
                self.target.fill((r, g, b))
                return
            veil = pygame.Surface(self.target.get_size(), pygame.SRCALPHA)
            veil.fill((r, g, b, int(round(a * 255))))
            self.target.blit(veil, (0, 0))
            return

        saved, stack = self.state, self._stack
        self.state, self._stack = DrawState(), []
        w, h = self.target.get_size()
        self._fill_rect(0, 0, w, h, paint)
        self.state, self._stack = saved, stack

    def _rect_points(self, x, y, w, h) -> np.ndarray:
        return self.transform_points([(x, y), (x + w, y), (x + w, y + h), (x, y + h)])

    def _fill_rect(self, x, y, w, h, paint):
        self._paint([self._rect_points(x, y, w, h)], self._fill_fn, paint)

    def _stroke_rect(self, x, y, w, h, paint):
        width = self._device_width()
        self._paint([self._rect_points(x, y, w, h)], self._stroke_fn(True, width), paint, pad=width + 2)

    def _fill_arc(self, cx, cy, r, start, end, paint):
        self._paint([self._arc_points(cx, cy, r, start, end)], self._fill_fn, paint)

    def _stroke_arc(self, cx, cy, r, start, end, paint):
        width = self._device_width()
        closed = self._is_full_circle(start, end)
        self._paint([self._arc_points(cx, cy, r, start, end)], self._stroke_fn(closed, width), paint, pad=width + 2)

    def _fill_path(self, path: Path, paint):
        subpaths = [self.transform_points(pts) for pts, _ in path.flatten()]
        self._paint(subpaths, self._fill_fn, paint)

    def _stroke_path(self, path: Path, paint):
        width = self._device_width()
        for pts, closed in path.flatten():
            self._paint([self.transform_points(pts)], self._stroke_fn(closed, width), paint, pad=width + 2)
