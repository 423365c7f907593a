"""
Banded spectral energy with smoothed rolling history.

Each tick the frequency snapshot is reduced to four band means
(bass, mid, treble, overall). The means are pushed into fixed-length
histories whose linearly recency-weighted average gives renderers a
steadier signal than the raw per-tick energy.
"""

from dataclasses import dataclass

import numpy as np

HISTORY_LENGTH = 60

BASS_FRACTION = 0.05
MID_FRACTION = 0.3
TREBLE_FRACTION = 0.7


@dataclass(frozen=True)
class BandEnergy:
    """Mean magnitudes (0-255) over the band bin ranges."""

    bass: float = 0.0
    mid: float = 0.0
    treble: float = 0.0
    overall: float = 0.0


@dataclass(frozen=True)
class BandLayout:
    """Bin boundaries for a snapshot of ``n_bins`` bins."""

    n_bins: int
    bass_end: int
    mid_end: int
    treble_end: int

    @classmethod
    def for_bins(cls, n_bins: int) -> "BandLayout":
        """
        Compute boundaries as fixed fractions of ``n_bins``.

        Bin 0 (DC) is excluded from the bass band. Very small snapshots
        get each band widened to at least one bin so the ordering
        ``bass_end < mid_end < treble_end <= n_bins`` always holds.
        """
        if n_bins < 4:
            raise ValueError(f"Need at least 4 frequency bins, got {n_bins}")

        bass_end = max(2, int(n_bins * BASS_FRACTION))
        mid_end = max(bass_end + 1, int(n_bins * MID_FRACTION))
        treble_end = min(n_bins, max(mid_end + 1, int(n_bins * TREBLE_FRACTION)))
        return cls(n_bins=n_bins, bass_end=bass_end, mid_end=mid_end, treble_end=treble_end)


class HistoryBuffer:
    """Fixed-capacity FIFO of scalar energies, zero-initialized."""

    def __init__(self, capacity: int = HISTORY_LENGTH):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._values = np.zeros(capacity, dtype=np.float64)
        weights = np.arange(1, capacity + 1, dtype=np.float64) / capacity
        self._weights = weights
        self._weight_sum = float(weights.sum())

    def __len__(self) -> int:
        return len(self._values)

    @property
    def capacity(self) -> int:
        return len(self._values)

    def push(self, value: float):
        """Append ``value`` and evict the oldest sample."""
        self._values[:-1] = self._values[1:]
        self._values[-1] = value

    def fill(self, value: float):
        self._values[:] = value

    def values(self) -> np.ndarray:
        """Copy of the samples, oldest first."""
        return self._values.copy()

    def smoothed(self) -> float:
        """Linearly weighted mean; sample i (0 = oldest) weighs (i+1)/n."""
        return float(np.dot(self._values, self._weights) / self._weight_sum)


@dataclass(frozen=True)
class SmoothedBands:
    bass: float = 0.0
    mid: float = 0.0
    treble: float = 0.0
    overall: float = 0.0

    def normalized(self, band: str) -> float:
        """Smoothed band value scaled to [0, 1]."""
        return min(1.0, max(0.0, getattr(self, band) / 255.0))


class BandHistory:
    """The four per-band history buffers."""

    BANDS = ("bass", "mid", "treble", "overall")

    def __init__(self, capacity: int = HISTORY_LENGTH):
        self.bass = HistoryBuffer(capacity)
        self.mid = HistoryBuffer(capacity)
        self.treble = HistoryBuffer(capacity)
        self.overall = HistoryBuffer(capacity)

    def push(self, energy: BandEnergy):
        for band in self.BANDS:
            getattr(self, band).push(getattr(energy, band))

    def smoothed(self) -> SmoothedBands:
        return SmoothedBands(*(getattr(self, band).smoothed() for band in self.BANDS))

    def reset(self):
        for band in self.BANDS:
            getattr(self, band).fill(0.0)


class FeatureExtractor:
    """
    Reduces frequency snapshots to band energies and keeps their history.

    The number of bins is fixed for the session; a snapshot of a
    different length is a caller error.
    """

    def __init__(self, n_bins: int, history_length: int = HISTORY_LENGTH):
        self.layout = BandLayout.for_bins(n_bins)
        self.history = BandHistory(history_length)
        self.last = BandEnergy()

    @property
    def n_bins(self) -> int:
        return self.layout.n_bins

    def band_energy(self, snapshot: np.ndarray) -> BandEnergy:
        """Band means of ``snapshot`` without touching the history."""
        data = np.asarray(snapshot, dtype=np.float64)
        if data.ndim != 1 or len(data) != self.layout.n_bins:
            raise ValueError(
                f"Frequency snapshot has shape {data.shape}, expected ({self.layout.n_bins},)"
            )

        lay = self.layout
        return BandEnergy(
            bass=float(data[1:lay.bass_end].mean()),
            mid=float(data[lay.bass_end:lay.mid_end].mean()),
            treble=float(data[lay.mid_end:lay.treble_end].mean()),
            overall=float(data.mean()),
        )

    def extract(self, snapshot: np.ndarray) -> BandEnergy:
        """Compute band energies and push them into the histories."""
        energy = self.band_energy(snapshot)
        self.history.push(energy)
        self.last = energy
        return energy

    @staticmethod
    def smoothed(history: HistoryBuffer) -> float:
        return history.smoothed()

    def smoothed_bands(self) -> SmoothedBands:
        return self.history.smoothed()

    def reset(self):
        self.history.reset()
        self.last = BandEnergy()
