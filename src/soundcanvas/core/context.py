"""Per-tick render context handed from the frame driver to a renderer."""

from dataclasses import dataclass

import numpy as np

from soundcanvas.core.features import BandEnergy, BandHistory, SmoothedBands
from soundcanvas.core.geometry import Bounds, clamp_index
from soundcanvas.core.palettes import ColorSchemeRegistry
from soundcanvas.core.particles import ParticleSystem


@dataclass
class RenderContext:
    frequency: np.ndarray
    time_domain: np.ndarray
    energy: BandEnergy
    history: BandHistory
    smoothed: SmoothedBands
    particles: ParticleSystem
    colors: ColorSchemeRegistry
    elapsed: float
    bounds: Bounds
    rng: np.random.Generator
    connection_stride: int = 5

    @property
    def palette(self) -> tuple[str, ...]:
        return self.colors.palette()

    @property
    def n_bins(self) -> int:
        return len(self.frequency)

    def bin(self, index: float) -> float:
        """Magnitude of a computed bin index, clamped into range."""
        if len(self.frequency) == 0:
            return 0.0
        return float(self.frequency[clamp_index(index, len(self.frequency))])
