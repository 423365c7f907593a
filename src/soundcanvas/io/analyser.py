"""
Snapshot sources built on a browser-style spectrum analyser.

The analyser reproduces the byte-scaled output of a Web Audio
``AnalyserNode``: a Blackman-windowed FFT over the most recent
``fft_size`` samples, magnitudes normalized by the window length,
exponentially smoothed against the previous frame, then mapped from
decibels onto 0-255. Time-domain bytes are the raw samples recentered
on 128.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Union

import librosa
import numpy as np
from scipy import signal as scipy_signal

logger = logging.getLogger(__name__)


class Analyser:
    """Stateful frequency/time-domain analysis of fixed-size frames."""

    def __init__(
        self,
        fft_size: int = 2048,
        smoothing: float = 0.8,
        min_db: float = -100.0,
        max_db: float = -30.0,
    ):
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two >= 32, got {fft_size}")
        if not 0.0 <= smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {smoothing}")
        if min_db >= max_db:
            raise ValueError(f"min_db ({min_db}) must be below max_db ({max_db})")

        self.fft_size = fft_size
        self.smoothing = smoothing
        self.min_db = min_db
        self.max_db = max_db
        self.window = scipy_signal.get_window("blackman", fft_size)
        self._previous = np.zeros(self.n_bins)

    @classmethod
    def from_config(cls, config) -> "Analyser":
        return cls(config.fft_size, config.smoothing, config.min_db, config.max_db)

    @property
    def n_bins(self) -> int:
        return self.fft_size // 2

    def reset(self):
        self._previous = np.zeros(self.n_bins)

    def frequency_bytes(self, frame: np.ndarray) -> np.ndarray:
        spectrum = np.fft.rfft(frame * self.window)[: self.n_bins]
        magnitude = np.abs(spectrum) / self.fft_size

        smoothed = self.smoothing * self._previous + (1.0 - self.smoothing) * magnitude
        smoothed[~np.isfinite(smoothed)] = 0.0
        self._previous = smoothed

        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(smoothed)
        scaled = (db - self.min_db) * (255.0 / (self.max_db - self.min_db))
        return np.clip(np.floor(scaled), 0.0, 255.0)

    def time_domain_bytes(self, frame: np.ndarray) -> np.ndarray:
        recent = frame[-self.n_bins:]
        return np.clip(np.floor(128.0 * (recent + 1.0)), 0.0, 255.0)

    def analyse(self, frame: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Analyse one frame of exactly ``fft_size`` samples.

        Returns:
            Tuple of (frequency, time_domain), each ``n_bins`` long with
            values in [0, 255].
        """
        frame = np.asarray(frame, dtype=np.float64)
        if frame.shape != (self.fft_size,):
            raise ValueError(f"Expected a frame of {self.fft_size} samples, got shape {frame.shape}")
        frame = np.nan_to_num(frame, nan=0.0, posinf=0.0, neginf=0.0)
        return self.frequency_bytes(frame), self.time_domain_bytes(frame)


class PlaybackClock:
    """Monotonic seconds since ``start``, frozen while paused."""

    def __init__(self, timer: Callable[[], float] = time.monotonic):
        self._timer = timer
        self._origin: float | None = None
        self._paused_at: float | None = None

    def start(self):
        self._origin = self._timer()
        self._paused_at = None

    def pause(self):
        if self._origin is not None and self._paused_at is None:
            self._paused_at = self._timer()

    def resume(self):
        if self._paused_at is not None:
            self._origin += self._timer() - self._paused_at
            self._paused_at = None

    def __call__(self) -> float:
        if self._origin is None:
            return 0.0
        now = self._paused_at if self._paused_at is not None else self._timer()
        return now - self._origin


class AnalyserSource:
    """
    Snapshot source over a decoded mono PCM buffer.

    The playhead follows ``clock`` (seconds); frames before the start or
    past the end of the buffer are zero-padded.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        analyser: Analyser | None = None,
        clock: Callable[[], float] | None = None,
    ):
        samples = np.asarray(samples, dtype=np.float32)
        if samples.ndim != 1:
            raise ValueError(f"Expected mono samples, got shape {samples.shape}")
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self.samples = samples
        self.sample_rate = int(sample_rate)
        self.analyser = analyser or Analyser()
        self.clock = clock or PlaybackClock()

    @classmethod
    def from_file(
        cls,
        audio_path: Union[str, Path],
        sr: int | None = None,
        **kwargs,
    ) -> "AnalyserSource":
        """
        Load audio from file.

        Args:
            audio_path: Path to audio file (wav, mp3, flac).
            sr: Target sample rate. None preserves original.
            **kwargs: Passed to the constructor (analyser, clock).
        """
        y, sr_out = librosa.load(audio_path, sr=sr, mono=True)
        logger.info("Loaded %s: %.2fs at %d Hz", audio_path, len(y) / sr_out, sr_out)
        return cls(y, sr_out, **kwargs)

    @property
    def n_bins(self) -> int:
        return self.analyser.n_bins

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate

    @property
    def finished(self) -> bool:
        return self.current_time() >= self.duration

    def current_time(self) -> float:
        return float(self.clock())

    def playhead(self) -> int:
        return int(self.current_time() * self.sample_rate)

    def frame_at(self, position: int) -> np.ndarray:
        """The ``fft_size`` samples ending at ``position``."""
        size = self.analyser.fft_size
        start = position - size
        frame = np.zeros(size, dtype=np.float32)

        lo = max(start, 0)
        hi = min(position, len(self.samples))
        if hi > lo:
            frame[lo - start:hi - start] = self.samples[lo:hi]
        return frame

    def capture_snapshot(self) -> tuple[np.ndarray, np.ndarray]:
        return self.analyser.analyse(self.frame_at(self.playhead()))


class SilentSource:
    """Constant silence on a simulated clock advancing one frame per capture."""

    def __init__(self, n_bins: int = 1024, fps: int = 60):
        if n_bins < 1:
            raise ValueError(f"n_bins must be positive, got {n_bins}")
        self.n_bins = n_bins
        self.fps = fps
        self.frames = 0

    def capture_snapshot(self) -> tuple[np.ndarray, np.ndarray]:
        self.frames += 1
        return np.zeros(self.n_bins), np.full(self.n_bins, 128.0)

    def current_time(self) -> float:
        return self.frames / self.fps
