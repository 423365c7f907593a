"""Snapshot sources: decoded files, silence and live input."""

from soundcanvas.io.analyser import Analyser, AnalyserSource, PlaybackClock, SilentSource

__all__ = ["Analyser", "AnalyserSource", "PlaybackClock", "SilentSource"]
