"""Contract tests shared by every render mode."""

import math

import numpy as np
import pytest

from soundcanvas.visualizers import MODE_RENDERERS, BaseMode, Mode, create_renderer
from soundcanvas.visualizers.flower import FlowerMode
from soundcanvas.visualizers.nebula import NebulaMode


def loud_spectrum(seed: int = 0) -> np.ndarray:
    return np.random.default_rng(seed).integers(150, 256, 1024).astype(float)


class TestDispatch:
    def test_every_mode_has_a_renderer(self):
        assert set(MODE_RENDERERS) == set(Mode)
        for mode, cls in MODE_RENDERERS.items():
            assert issubclass(cls, BaseMode)
            assert cls.mode is mode

    def test_create_renderer(self):
        assert isinstance(create_renderer("flower"), FlowerMode)
        assert isinstance(create_renderer(Mode.NEBULA), NebulaMode)
        assert isinstance(create_renderer("NEBULA"), NebulaMode)

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="choose from"):
            create_renderer("plasma")


@pytest.mark.parametrize("mode", list(Mode))
class TestRenderContract:
    def test_silence(self, mode, surface, make_context):
        renderer = create_renderer(mode)
        ctx = make_context()
        for i in range(30):
            ctx.elapsed = i / 60
            renderer.render(surface, ctx)

        assert surface.skipped == 0
        assert len(ctx.particles) == 150

    def test_loud(self, mode, surface, make_context):
        renderer = create_renderer(mode)
        ctx = make_context(loud_spectrum(), time_domain=np.random.default_rng(1).integers(0, 256, 1024))
        for i in range(30):
            ctx.elapsed = i / 60
            renderer.render(surface, ctx)

        assert surface.skipped == 0
        assert surface.calls
        for p in ctx.particles:
            assert 0.0 <= p.life <= p.initial_life
            assert math.isfinite(p.x) and math.isfinite(p.y)

    def test_empty_arena(self, mode, surface, make_context, particles):
        particles.reinitialize(0)
        create_renderer(mode).render(surface, make_context(loud_spectrum()))
        assert surface.skipped == 0

    def test_small_snapshot(self, mode, surface, make_context):
        create_renderer(mode).render(surface, make_context(np.full(8, 200.0)))
        assert surface.skipped == 0
