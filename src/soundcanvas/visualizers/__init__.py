"""Render modes and the single point that maps a Mode to its renderer."""

from soundcanvas.visualizers.base import REINIT_ON_RESIZE, REINIT_ON_SELECT, BaseMode, Mode
from soundcanvas.visualizers.constellation import ConstellationMode
from soundcanvas.visualizers.flower import FlowerMode
from soundcanvas.visualizers.kaleidoscope import KaleidoscopeMode
from soundcanvas.visualizers.nebula import NebulaMode
from soundcanvas.visualizers.orbital import OrbitalMode
from soundcanvas.visualizers.spectrum import SpectrumMode
from soundcanvas.visualizers.waveform import WaveformMode

MODE_RENDERERS: dict[Mode, type[BaseMode]] = {
    Mode.FLOWER: FlowerMode,
    Mode.ORBITAL: OrbitalMode,
    Mode.SPECTRUM: SpectrumMode,
    Mode.NEBULA: NebulaMode,
    Mode.WAVEFORM: WaveformMode,
    Mode.KALEIDOSCOPE: KaleidoscopeMode,
    Mode.CONSTELLATION: ConstellationMode,
}

_missing = set(Mode) - set(MODE_RENDERERS)
if _missing:
    raise RuntimeError(f"No renderer registered for {sorted(m.value for m in _missing)}")


def create_renderer(mode: "Mode | str") -> BaseMode:
    return MODE_RENDERERS[Mode.parse(mode)]()


__all__ = [
    "BaseMode",
    "MODE_RENDERERS",
    "Mode",
    "REINIT_ON_RESIZE",
    "REINIT_ON_SELECT",
    "create_renderer",
]
