"""Viewport bounds and small geometry helpers shared by the renderers."""

import math
from dataclasses import dataclass

# Direction vectors shorter than this are treated as having no direction.
EPSILON = 1e-6


@dataclass(frozen=True)
class Bounds:
    width: float
    height: float

    def __post_init__(self):
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"Bounds must be positive, got {self.width}x{self.height}")

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)

    @property
    def min_dim(self) -> float:
        return min(self.width, self.height)

    def contains(self, x: float, y: float, margin: float = 0.0) -> bool:
        return -margin <= x <= self.width + margin and -margin <= y <= self.height + margin


def clamp_index(index: float, length: int) -> int:
    """Clamp a computed index into ``[0, length - 1]``."""
    if length <= 0:
        raise ValueError("Cannot index an empty sequence")
    if not math.isfinite(index):
        return 0
    return min(length - 1, max(0, int(index)))


def unit_vector(dx: float, dy: float) -> tuple[float, float, float]:
    """
    Normalize (dx, dy).

    Returns:
        (ux, uy, length). A near-zero vector yields (0, 0, length).
    """
    length = math.hypot(dx, dy)
    if length < EPSILON or not math.isfinite(length):
        return 0.0, 0.0, length
    return dx / length, dy / length, length


def link_strength(ax: float, ay: float, bx: float, by: float, max_distance: float) -> float:
    """
    Opacity of a connection line between two points.

    Falls off linearly from 1 at zero distance to 0 at ``max_distance``.
    Symmetric in its two endpoints.
    """
    if max_distance <= 0:
        return 0.0
    distance = math.hypot(ax - bx, ay - by)
    if distance >= max_distance:
        return 0.0
    return 1.0 - distance / max_distance


def polar(cx: float, cy: float, radius: float, angle: float) -> tuple[float, float]:
    return (cx + radius * math.cos(angle), cy + radius * math.sin(angle))
