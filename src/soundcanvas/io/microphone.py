"""
Live microphone input.

The audio callback runs on the stream's own thread and only appends to a
ring buffer under a lock; analysis happens on the render thread when the
driver asks for a snapshot.
"""

import logging
import threading
import time

import numpy as np

from soundcanvas.io.analyser import Analyser

logger = logging.getLogger(__name__)


class MicrophoneSource:
    def __init__(
        self,
        analyser: Analyser | None = None,
        sample_rate: int = 44100,
        device: int | str | None = None,
        blocksize: int = 512,
    ):
        self.analyser = analyser or Analyser()
        self.sample_rate = sample_rate
        self.device = device
        self.blocksize = blocksize

        self._ring = np.zeros(self.analyser.fft_size, dtype=np.float32)
        self._lock = threading.Lock()
        self._stream = None
        self._started: float | None = None

    def _callback(self, indata, frames, time_info, status):
        if status:
            logger.warning("Input stream status: %s", status)
        block = np.asarray(indata, dtype=np.float32)
        if block.ndim > 1:
            block = block.mean(axis=1)

        size = len(self._ring)
        n = min(len(block), size)
        if n == 0:
            return
        with self._lock:
            self._ring[: size - n] = self._ring[n:]
            self._ring[size - n:] = block[-n:]

    def start(self):
        import sounddevice as sd

        self._stream = sd.InputStream(
            samplerate=self.sample_rate,
            device=self.device,
            channels=1,
            blocksize=self.blocksize,
            dtype="float32",
            callback=self._callback,
        )
        self._stream.start()
        self._started = time.monotonic()
        logger.info("Microphone capture started at %d Hz", self.sample_rate)

    def stop(self):
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
            logger.info("Microphone capture stopped")

    def __enter__(self) -> "MicrophoneSource":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    def capture_snapshot(self) -> tuple[np.ndarray, np.ndarray]:
        with self._lock:
            frame = self._ring.copy()
        return self.analyser.analyse(frame)

    def current_time(self) -> float:
        if self._started is None:
            return 0.0
        return time.monotonic() - self._started
