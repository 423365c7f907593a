"""Headless surface that records accepted draw calls."""

from dataclasses import dataclass

import numpy as np

from soundcanvas.render.surface import Paint, Path, Surface


@dataclass
class DrawCall:
    op: str
    args: tuple
    paint: Paint
    line_width: float
    composite: str
    global_alpha: float
    matrix: np.ndarray


class RecordingSurface(Surface):
    """
    Keeps every draw call that passed validation.

    ``max_calls`` bounds memory for long headless runs; the oldest
    calls are dropped first. ``total`` keeps counting regardless.
    """

    def __init__(self, width: int, height: int, max_calls: int | None = None):
        super().__init__(width, height)
        self.calls: list[DrawCall] = []
        self.max_calls = max_calls
        self.total = 0

    def _record(self, op: str, args: tuple, paint: Paint):
        s = self.state
        self.calls.append(DrawCall(op, args, paint, s.line_width, s.composite, s.global_alpha, s.matrix.copy()))
        self.total += 1
        if self.max_calls is not None and len(self.calls) > self.max_calls:
            del self.calls[: len(self.calls) - self.max_calls]

    def ops(self, name: str) -> list[DrawCall]:
        return [c for c in self.calls if c.op == name]

    def reset(self):
        self.calls.clear()
        self.total = 0
        self.skipped = 0

    def _clear(self, paint):
        self._record("clear", (), paint)

    def _fill_rect(self, x, y, w, h, paint):
        self._record("fill_rect", (x, y, w, h), paint)

    def _stroke_rect(self, x, y, w, h, paint):
        self._record("stroke_rect", (x, y, w, h), paint)

    def _fill_arc(self, cx, cy, r, start, end, paint):
        self._record("fill_arc", (cx, cy, r, start, end), paint)

    def _stroke_arc(self, cx, cy, r, start, end, paint):
        self._record("stroke_arc", (cx, cy, r, start, end), paint)

    def _fill_path(self, path: Path, paint):
        self._record("fill_path", path.coordinates(), paint)

    def _stroke_path(self, path: Path, paint):
        self._record("stroke_path", path.coordinates(), paint)
