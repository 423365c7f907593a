"""
Drawing surface contract.

A canvas-style 2D surface: rectangles, arcs and cubic paths painted with
colors or gradients, plus line and compositing state and an affine
transform stack. Geometry is validated here once for every backend:
a primitive with a non-finite coordinate or a negative size is skipped
instead of reaching the rasterizer.
"""

import abc
import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Union

import numpy as np

logger = logging.getLogger(__name__)

COMPOSITE_MODES = ("source-over", "lighter")
LINE_CAPS = ("butt", "round", "square")


@dataclass
class LinearGradient:
    x0: float
    y0: float
    x1: float
    y1: float
    stops: list[tuple[float, str]] = field(default_factory=list)

    def add_color_stop(self, offset: float, color: str) -> "LinearGradient":
        self.stops.append((min(1.0, max(0.0, offset)), color))
        return self

    def coordinates(self) -> tuple[float, ...]:
        return (self.x0, self.y0, self.x1, self.y1, *(s[0] for s in self.stops))


@dataclass
class RadialGradient:
    """Concentric radial gradient from radius ``r0`` to ``r1``."""

    x: float
    y: float
    r0: float
    r1: float
    stops: list[tuple[float, str]] = field(default_factory=list)

    def add_color_stop(self, offset: float, color: str) -> "RadialGradient":
        self.stops.append((min(1.0, max(0.0, offset)), color))
        return self

    def coordinates(self) -> tuple[float, ...]:
        return (self.x, self.y, self.r0, self.r1, *(s[0] for s in self.stops))


Paint = Union[str, LinearGradient, RadialGradient]


class Path:
    """Sequence of move/line/cubic segments, split into subpaths."""

    def __init__(self):
        self.commands: list[tuple] = []

    def move_to(self, x: float, y: float) -> "Path":
        self.commands.append(("M", x, y))
        return self

    def line_to(self, x: float, y: float) -> "Path":
        self.commands.append(("L", x, y))
        return self

    def bezier_curve_to(self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float) -> "Path":
        self.commands.append(("C", c1x, c1y, c2x, c2y, x, y))
        return self

    def close(self) -> "Path":
        self.commands.append(("Z",))
        return self

    @classmethod
    def polyline(cls, points: Iterable[tuple[float, float]], closed: bool = False) -> "Path":
        path = cls()
        for i, (x, y) in enumerate(points):
            if i == 0:
                path.move_to(x, y)
            else:
                path.line_to(x, y)
        if closed:
            path.close()
        return path

    def coordinates(self) -> tuple[float, ...]:
        return tuple(v for cmd in self.commands for v in cmd[1:])

    def flatten(self, bezier_steps: int = 12) -> list[tuple[list[tuple[float, float]], bool]]:
        """Subpaths as (points, closed) with cubic segments sampled."""
        subpaths = []
        points: list[tuple[float, float]] = []
        closed = False
        for cmd in self.commands:
            op = cmd[0]
            if op == "M":
                if len(points) > 1:
                    subpaths.append((points, closed))
                points, closed = [(cmd[1], cmd[2])], False
            elif op == "L":
                points.append((cmd[1], cmd[2]))
            elif op == "C":
                if not points:
                    points = [(cmd[1], cmd[2])]
                x0, y0 = points[-1]
                c1x, c1y, c2x, c2y, x3, y3 = cmd[1:]
                for s in range(1, bezier_steps + 1):
                    t = s / bezier_steps
                    mt = 1 - t
                    a, b, c, d = mt * mt * mt, 3 * mt * mt * t, 3 * mt * t * t, t * t * t
                    points.append((
                        a * x0 + b * c1x + c * c2x + d * x3,
                        a * y0 + b * c1y + c * c2y + d * y3,
                    ))
            elif op == "Z":
                closed = True
        if len(points) > 1:
            subpaths.append((points, closed))
        return subpaths


@dataclass
class DrawState:
    line_width: float = 1.0
    line_cap: str = "butt"
    composite: str = "source-over"
    global_alpha: float = 1.0
    matrix: np.ndarray = field(default_factory=lambda: np.eye(3))


def _is_finite(values: Iterable[float]) -> bool:
    return all(math.isfinite(v) for v in values)


class Surface(abc.ABC):
    """
    Abstract drawing surface.

    Public drawing methods validate their geometry and forward to the
    ``_``-prefixed backend hooks. ``skipped`` counts rejected calls.
    """

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.state = DrawState()
        self._stack: list[DrawState] = []
        self.skipped = 0

    # -- state -----------------------------------------------------------

    @property
    def line_width(self) -> float:
        return self.state.line_width

    @line_width.setter
    def line_width(self, value: float):
        if math.isfinite(value) and value > 0:
            self.state.line_width = float(value)

    @property
    def line_cap(self) -> str:
        return self.state.line_cap

    @line_cap.setter
    def line_cap(self, value: str):
        if value not in LINE_CAPS:
            raise ValueError(f"Unknown line cap {value!r}")
        self.state.line_cap = value

    @property
    def composite(self) -> str:
        return self.state.composite

    @composite.setter
    def composite(self, value: str):
        if value not in COMPOSITE_MODES:
            raise ValueError(f"Unknown composite mode {value!r}")
        self.state.composite = value

    @property
    def global_alpha(self) -> float:
        return self.state.global_alpha

    @global_alpha.setter
    def global_alpha(self, value: float):
        if math.isfinite(value):
            self.state.global_alpha = min(1.0, max(0.0, float(value)))

    def save(self):
        self._stack.append(copy.deepcopy(self.state))

    def restore(self):
        if self._stack:
            self.state = self._stack.pop()

    def reset_state(self):
        self.state = DrawState()
        self._stack.clear()

    def _concat(self, m: np.ndarray):
        self.state.matrix = self.state.matrix @ m

    def translate(self, dx: float, dy: float):
        if _is_finite((dx, dy)):
            self._concat(np.array([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]]))

    def rotate(self, angle: float):
        if math.isfinite(angle):
            c, s = math.cos(angle), math.sin(angle)
            self._concat(np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]))

    def scale(self, sx: float, sy: float):
        if _is_finite((sx, sy)):
            self._concat(np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]]))

    def transform_points(self, points) -> np.ndarray:
        """Map user-space points (N, 2) to device space."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        m = self.state.matrix
        return pts @ m[:2, :2].T + m[:2, 2]

    # -- guarded drawing -------------------------------------------------

    def _accept(self, op: str, values: Iterable[float], paint: Paint, sizes: Iterable[float] = ()) -> bool:
        values = tuple(values)
        sizes = tuple(sizes)
        ok = _is_finite(values) and _is_finite(sizes) and all(s >= 0 for s in sizes)
        if ok and not isinstance(paint, str):
            coords = paint.coordinates()
            ok = _is_finite(coords)
            if ok and isinstance(paint, RadialGradient):
                ok = paint.r0 >= 0 and paint.r1 >= 0
        if not ok:
            self.skipped += 1
            logger.debug("Skipped %s with invalid geometry %s", op, values + sizes)
        return ok

    def clear(self, paint: Paint):
        """Paint the whole surface, ignoring the transform."""
        self._clear(paint)

    def fill_rect(self, x: float, y: float, w: float, h: float, paint: Paint):
        if self._accept("fill_rect", (x, y), paint, (w, h)):
            self._fill_rect(x, y, w, h, paint)

    def stroke_rect(self, x: float, y: float, w: float, h: float, paint: Paint):
        if self._accept("stroke_rect", (x, y), paint, (w, h)):
            self._stroke_rect(x, y, w, h, paint)

    def fill_arc(self, cx: float, cy: float, r: float, paint: Paint,
                 start: float = 0.0, end: float = 2 * math.pi):
        if self._accept("fill_arc", (cx, cy, start, end), paint, (r,)):
            self._fill_arc(cx, cy, r, start, end, paint)

    def stroke_arc(self, cx: float, cy: float, r: float, paint: Paint,
                   start: float = 0.0, end: float = 2 * math.pi):
        if self._accept("stroke_arc", (cx, cy, start, end), paint, (r,)):
            self._stroke_arc(cx, cy, r, start, end, paint)

    def fill_path(self, path: Path, paint: Paint):
        if self._accept("fill_path", path.coordinates(), paint):
            self._fill_path(path, paint)

    def stroke_path(self, path: Path, paint: Paint):
        if self._accept("stroke_path", path.coordinates(), paint):
            self._stroke_path(path, paint)

    def line(self, x0: float, y0: float, x1: float, y1: float, paint: Paint):
        self.stroke_path(Path().move_to(x0, y0).line_to(x1, y1), paint)

    # -- backend hooks ---------------------------------------------------

    @abc.abstractmethod
    def _clear(self, paint: Paint):
        pass

    @abc.abstractmethod
    def _fill_rect(self, x, y, w, h, paint: Paint):
        pass

    @abc.abstractmethod
    def _stroke_rect(self, x, y, w, h, paint: Paint):
        pass

    @abc.abstractmethod
    def _fill_arc(self, cx, cy, r, start, end, paint: Paint):
        pass

    @abc.abstractmethod
    def _stroke_arc(self, cx, cy, r, start, end, paint: Paint):
        pass

    @abc.abstractmethod
    def _fill_path(self, path: Path, paint: Paint):
        pass

    @abc.abstractmethod
    def _stroke_path(self, path: Path, paint: Paint):
        pass

    def resize(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
