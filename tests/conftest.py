"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from soundcanvas.config import EngineConfig
from soundcanvas.core.context import RenderContext
from soundcanvas.core.features import FeatureExtractor
from soundcanvas.core.geometry import Bounds
from soundcanvas.core.palettes import ColorSchemeRegistry
from soundcanvas.core.particles import ParticleSystem
from soundcanvas.render.recording import RecordingSurface

# Default sample rate for test audio
TEST_SR = 22050

# Bins per snapshot at the default fft size
N_BINS = 1024

WIDTH, HEIGHT = 800, 600


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def white_noise(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate white noise.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    gen = np.random.default_rng(42)
    samples = int(sample_rate * 2.0)
    y = gen.standard_normal(samples).astype(np.float32) * 0.3
    return y, sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, pure_sine):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = pure_sine
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def bounds() -> Bounds:
    return Bounds(WIDTH, HEIGHT)


@pytest.fixture
def colors(rng) -> ColorSchemeRegistry:
    return ColorSchemeRegistry(rng=rng)


@pytest.fixture
def particles(colors, bounds, rng) -> ParticleSystem:
    """A freshly initialized arena of 150 particles."""
    system = ParticleSystem(colors, bounds, rng=rng)
    system.reinitialize(150, bounds)
    return system


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface(WIDTH, HEIGHT)


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(width=WIDTH, height=HEIGHT, seed=7)


@pytest.fixture
def make_context(colors, bounds, particles, rng):
    """
    Factory building a RenderContext from a frequency snapshot.

    The snapshot is pushed ``warmup`` times so the smoothed history
    reflects it.
    """

    def _make(frequency=None, time_domain=None, elapsed: float = 1.0, warmup: int = 60):
        if frequency is None:
            frequency = np.zeros(N_BINS)
        frequency = np.asarray(frequency, dtype=np.float64)
        if time_domain is None:
            time_domain = np.full(len(frequency), 128.0)

        extractor = FeatureExtractor(len(frequency))
        energy = extractor.extract(frequency)
        for _ in range(warmup - 1):
            extractor.extract(frequency)

        return RenderContext(
            frequency=frequency,
            time_domain=np.asarray(time_domain, dtype=np.float64),
            energy=energy,
            history=extractor.history,
            smoothed=extractor.smoothed_bands(),
            particles=particles,
            colors=colors,
            elapsed=elapsed,
            bounds=bounds,
            rng=rng,
        )

    return _make
