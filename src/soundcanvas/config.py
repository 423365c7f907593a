"""Engine configuration."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Union

from soundcanvas.core.palettes import COLOR_SCHEMES, parse_color
from soundcanvas.visualizers.base import Mode

PROFILES = {
    "low": {"width": 1280, "height": 720, "fps": 30},
    "medium": {"width": 1920, "height": 1080, "fps": 60},
    "high": {"width": 3840, "height": 2160, "fps": 60},
}


@dataclass
class EngineConfig:
    """Session-wide settings, fixed before the first frame."""

    width: int = 1280
    height: int = 720
    fps: int = 60

    # Analyser (browser AnalyserNode defaults)
    fft_size: int = 2048
    smoothing: float = 0.8
    min_db: float = -100.0
    max_db: float = -30.0

    # Engine
    particle_count: int = 150
    history_length: int = 60
    mode: str = "flower"
    color_scheme: str = "aurora"
    trail_color: str = "rgba(26, 26, 26, 0.2)"  # Translucent fill leaves fading trails
    connection_stride: int = 5
    respawn_chance: float = 0.001
    seed: int | None = None

    @property
    def n_bins(self) -> int:
        return self.fft_size // 2

    def validate(self) -> "EngineConfig":
        """Raise ValueError on out-of-range settings."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.fft_size < 32 or self.fft_size & (self.fft_size - 1):
            raise ValueError(f"fft_size must be a power of two >= 32, got {self.fft_size}")
        if not 0.0 <= self.smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {self.smoothing}")
        if self.min_db >= self.max_db:
            raise ValueError(f"min_db ({self.min_db}) must be below max_db ({self.max_db})")
        if self.particle_count < 0:
            raise ValueError(f"particle_count must be non-negative, got {self.particle_count}")
        if self.history_length < 1:
            raise ValueError(f"history_length must be positive, got {self.history_length}")
        if self.connection_stride < 1:
            raise ValueError(f"connection_stride must be positive, got {self.connection_stride}")
        if not 0.0 <= self.respawn_chance <= 1.0:
            raise ValueError(f"respawn_chance must be in [0, 1], got {self.respawn_chance}")
        if self.color_scheme not in COLOR_SCHEMES:
            raise ValueError(f"Unknown color scheme {self.color_scheme!r}")
        Mode.parse(self.mode)
        parse_color(self.trail_color)
        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data).validate()

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "EngineConfig":
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_profile(cls, profile: str, **overrides) -> "EngineConfig":
        if profile not in PROFILES:
            raise ValueError(f"Unknown profile {profile!r}; choose from {', '.join(PROFILES)}")
        values = {**PROFILES[profile], **{k: v for k, v in overrides.items() if v is not None}}
        return cls.from_dict(values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
