"""
Frame driver: the single-threaded loop tying the engine together.

One tick pulls a snapshot from the source, updates the band history,
fades the previous frame and lets the active mode draw. The driver then
asks its scheduler for the next frame; pausing cancels that request.
Commands (mode, color scheme, resize, particle reset) are plain method
calls made between ticks.
"""

import logging
from typing import Callable, Protocol

import numpy as np

from soundcanvas.config import EngineConfig
from soundcanvas.core.context import RenderContext
from soundcanvas.core.features import FeatureExtractor
from soundcanvas.core.geometry import Bounds
from soundcanvas.core.palettes import ColorSchemeRegistry
from soundcanvas.core.particles import ParticleSystem
from soundcanvas.render.surface import Surface
from soundcanvas.visualizers import (
    MODE_RENDERERS,
    REINIT_ON_RESIZE,
    REINIT_ON_SELECT,
    BaseMode,
    Mode,
)

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    def capture_snapshot(self) -> tuple[np.ndarray, np.ndarray]:
        ...

    def current_time(self) -> float:
        ...


class ManualScheduler:
    """
    Frame scheduler pumped explicitly by its owner.

    ``request_frame`` queues a callback for the next ``run_frame``;
    callbacks requested while a frame runs wait for the following one.
    """

    def __init__(self):
        self._pending: dict[int, Callable[[], None]] = {}
        self._next_handle = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: Callable[[], None]) -> int:
        self._next_handle += 1
        self._pending[self._next_handle] = callback
        return self._next_handle

    def cancel_frame(self, handle: int):
        self._pending.pop(handle, None)

    def run_frame(self) -> int:
        """Run every queued callback once; returns how many ran."""
        callbacks = list(self._pending.values())
        self._pending.clear()
        for callback in callbacks:
            callback()
        return len(callbacks)

    def run(self, frames: int) -> int:
        ran = 0
        for _ in range(frames):
            if not self.run_frame():
                break
            ran += 1
        return ran


class FrameDriver:
    """Owns the session state and exposes the engine's command surface."""

    def __init__(
        self,
        config: EngineConfig,
        source: SnapshotSource,
        surface: Surface,
        scheduler: ManualScheduler | None = None,
    ):
        self.config = config.validate()
        self.source = source
        self.surface = surface
        self.scheduler = scheduler or ManualScheduler()
        self.rng = np.random.default_rng(config.seed)

        self.bounds = Bounds(surface.width, surface.height)
        self.colors = ColorSchemeRegistry(current=config.color_scheme, rng=self.rng)
        self.extractor = FeatureExtractor(config.n_bins, config.history_length)
        self.particles = ParticleSystem(
            self.colors, self.bounds, rng=self.rng, respawn_chance=config.respawn_chance
        )
        self.particles.reinitialize(config.particle_count, self.bounds)

        self._renderers: dict[Mode, BaseMode] = {}
        self.mode = Mode.parse(config.mode)
        self.frames = 0
        self.running = False
        self._handle: int | None = None
        self.last_context: RenderContext | None = None

    @property
    def renderer(self) -> BaseMode:
        if self.mode not in self._renderers:
            self._renderers[self.mode] = MODE_RENDERERS[self.mode]()
        return self._renderers[self.mode]

    # -- commands --------------------------------------------------------

    def set_mode(self, mode: "Mode | str"):
        mode = Mode.parse(mode)
        logger.info("Mode %s -> %s", self.mode.value, mode.value)
        self.mode = mode
        if mode in REINIT_ON_SELECT:
            self.particles.reinitialize(self.config.particle_count, self.bounds)

    def set_color_scheme(self, name: str):
        self.colors.set_current(name)
        logger.info("Color scheme -> %s", name)

    def on_resize(self, width: int, height: int):
        bounds = Bounds(width, height)
        if (self.surface.width, self.surface.height) != (int(width), int(height)):
            self.surface.resize(width, height)
        self.bounds = bounds
        self.particles.bounds = bounds
        if self.mode in REINIT_ON_RESIZE:
            self.particles.reinitialize(self.config.particle_count, bounds)
        logger.debug("Resized to %sx%s", width, height)

    def reinitialize_particles(self, count: int | None = None):
        self.particles.reinitialize(self.config.particle_count if count is None else count, self.bounds)

    # -- loop ------------------------------------------------------------

    def tick(self) -> RenderContext:
        """Render exactly one frame."""
        frequency, time_domain = self.source.capture_snapshot()
        frequency = np.asarray(frequency, dtype=np.float64)
        time_domain = np.asarray(time_domain, dtype=np.float64)
        if len(time_domain) != self.extractor.n_bins:
            raise ValueError(
                f"Time-domain snapshot has {len(time_domain)} samples, expected {self.extractor.n_bins}"
            )

        energy = self.extractor.extract(frequency)
        ctx = RenderContext(
            frequency=frequency,
            time_domain=time_domain,
            energy=energy,
            history=self.extractor.history,
            smoothed=self.extractor.smoothed_bands(),
            particles=self.particles,
            colors=self.colors,
            elapsed=float(self.source.current_time()),
            bounds=self.bounds,
            rng=self.rng,
            connection_stride=self.config.connection_stride,
        )

        surface = self.surface
        surface.reset_state()
        surface.clear(self.config.trail_color)
        self.renderer.render(surface, ctx)
        surface.reset_state()

        self.frames += 1
        self.last_context = ctx
        return ctx

    def _on_frame(self):
        self._handle = None
        if not self.running:
            return
        self.tick()
        if self.running:
            self._handle = self.scheduler.request_frame(self._on_frame)

    def resume(self):
        if self.running:
            return
        self.running = True
        self._handle = self.scheduler.request_frame(self._on_frame)
        logger.debug("Resumed at frame %d", self.frames)

    def pause(self):
        if not self.running:
            return
        self.running = False
        if self._handle is not None:
            self.scheduler.cancel_frame(self._handle)
            self._handle = None
        logger.debug("Paused at frame %d", self.frames)
