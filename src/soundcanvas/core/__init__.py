"""Audio-reactive engine core: features, palettes, particles."""

from soundcanvas.core.features import BandEnergy, FeatureExtractor, HistoryBuffer
from soundcanvas.core.geometry import Bounds
from soundcanvas.core.palettes import ColorSchemeRegistry, adjust_opacity
from soundcanvas.core.particles import ForceModel, Particle, ParticleSystem

__all__ = [
    "BandEnergy",
    "Bounds",
    "ColorSchemeRegistry",
    "FeatureExtractor",
    "ForceModel",
    "HistoryBuffer",
    "Particle",
    "ParticleSystem",
    "adjust_opacity",
]
