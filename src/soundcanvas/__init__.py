"""Audio-reactive generative canvas engine."""

from soundcanvas.config import EngineConfig
from soundcanvas.core.features import FeatureExtractor
from soundcanvas.core.palettes import ColorSchemeRegistry
from soundcanvas.core.particles import ParticleSystem
from soundcanvas.driver import FrameDriver, ManualScheduler
from soundcanvas.visualizers import Mode, create_renderer

__version__ = "0.1.0"
__all__ = [
    "ColorSchemeRegistry",
    "EngineConfig",
    "FeatureExtractor",
    "FrameDriver",
    "ManualScheduler",
    "Mode",
    "ParticleSystem",
    "create_renderer",
]
