"""
Color scheme registry.

Holds the named 5-color palettes, tracks the current one, and converts
between the hex / rgb / rgba string forms the renderers pass around.
"""

import logging
import re

import numpy as np

logger = logging.getLogger(__name__)

PALETTE_SIZE = 5

COLOR_SCHEMES: dict[str, tuple[str, ...]] = {
    "aurora": ("#00ffa3", "#03e1ff", "#7a5cff", "#dc1fff", "#ff6fd8"),
    "sunset": ("#ff6b6b", "#ffa36c", "#ffd93d", "#c56cf0", "#6c5ce7"),
    "ocean": ("#0077b6", "#00b4d8", "#90e0ef", "#caf0f8", "#48cae4"),
    "neon": ("#f72585", "#b5179e", "#7209b7", "#4361ee", "#4cc9f0"),
    "forest": ("#2d6a4f", "#40916c", "#52b788", "#95d5b2", "#d8f3dc"),
    "ember": ("#370617", "#9d0208", "#dc2f02", "#f48c06", "#ffba08"),
}

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$"
)


def _format_alpha(alpha: float) -> str:
    alpha = min(1.0, max(0.0, float(alpha)))
    return f"{round(alpha, 4):g}"


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """Decode a 3- or 6-digit hex color into RGB components."""
    match = _HEX_RE.match(color.strip())
    if not match:
        raise ValueError(f"Not a hex color: {color!r}")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def parse_color(color: str) -> tuple[int, int, int, float]:
    """
    Parse a hex, rgb() or rgba() string.

    Returns:
        (r, g, b, a) with channels 0-255 and alpha in [0, 1].
    """
    text = color.strip()
    if text.startswith("#"):
        r, g, b = hex_to_rgb(text)
        return (r, g, b, 1.0)

    match = _RGB_RE.match(text)
    if not match:
        raise ValueError(f"Unsupported color format: {color!r}")

    r, g, b = (min(255, int(match.group(i))) for i in (1, 2, 3))
    alpha = match.group(4)
    is_rgba = text.startswith("rgba")
    if is_rgba and alpha is None:
        raise ValueError(f"rgba() color without alpha: {color!r}")
    if not is_rgba and alpha is not None:
        raise ValueError(f"rgb() color with alpha: {color!r}")
    return (r, g, b, min(1.0, float(alpha)) if alpha is not None else 1.0)


def adjust_opacity(color: str, alpha: float) -> str:
    """
    Return ``color`` as an rgba() string carrying ``alpha``.

    hex -> rgba, rgb -> rgba, rgba -> rgba with the alpha replaced.
    """
    r, g, b, _ = parse_color(color)
    return f"rgba({r}, {g}, {b}, {_format_alpha(alpha)})"


class ColorSchemeRegistry:
    """
    Fixed set of named palettes with one current selection.

    Sampling draws from the current palette using the registry's own
    random generator so runs can be made reproducible with a seed.
    """

    def __init__(
        self,
        schemes: dict[str, tuple[str, ...]] | None = None,
        current: str = "aurora",
        rng: np.random.Generator | None = None,
    ):
        self._schemes = dict(schemes or COLOR_SCHEMES)
        for name, colors in self._schemes.items():
            if len(colors) != PALETTE_SIZE:
                raise ValueError(
                    f"Color scheme {name!r} has {len(colors)} colors, expected {PALETTE_SIZE}"
                )
            for c in colors:
                hex_to_rgb(c)
        self.rng = rng or np.random.default_rng()
        self._current = ""
        self.set_current(current)

    @property
    def current(self) -> str:
        return self._current

    def names(self) -> list[str]:
        return list(self._schemes)

    def palette(self, name: str | None = None) -> tuple[str, ...]:
        """Return the 5 colors of ``name`` (or of the current scheme)."""
        key = self._current if name is None else name
        try:
            return self._schemes[key]
        except KeyError:
            raise ValueError(
                f"Unknown color scheme {key!r}; choose from {', '.join(self._schemes)}"
            ) from None

    def set_current(self, name: str):
        if name not in self._schemes:
            raise ValueError(
                f"Unknown color scheme {name!r}; choose from {', '.join(self._schemes)}"
            )
        if name != self._current:
            logger.debug("Color scheme -> %s", name)
        self._current = name

    def color(self, index: int, alpha: float = 1.0) -> str:
        """Palette color at ``index`` (wrapping), optionally translucent."""
        colors = self._schemes[self._current]
        base = colors[int(index) % PALETTE_SIZE]
        return base if alpha >= 1.0 else adjust_opacity(base, alpha)

    def sample(self, alpha: float = 1.0) -> str:
        """Uniformly random color from the current palette."""
        colors = self._schemes[self._current]
        base = colors[int(self.rng.integers(0, len(colors)))]
        if alpha < 1.0:
            r, g, b = hex_to_rgb(base)
            return f"rgba({r}, {g}, {b}, {_format_alpha(alpha)})"
        return base

    @staticmethod
    def adjust_opacity(color: str, alpha: float) -> str:
        return adjust_opacity(color, alpha)
