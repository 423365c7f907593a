"""Drawing surfaces: the abstract contract and its backends."""

from soundcanvas.render.recording import DrawCall, RecordingSurface
from soundcanvas.render.surface import (
    LinearGradient,
    Path,
    RadialGradient,
    Surface,
)

__all__ = [
    "DrawCall",
    "LinearGradient",
    "Path",
    "RadialGradient",
    "RecordingSurface",
    "Surface",
]
