"""Harmonic resonance patterns between the points of one or several charts."""

from .analysis import HarmonicService, Pattern, PatternTable, ResonanceBatch, ResonanceMatrix
from .config import Settings, load_settings
from .errors import ChartFormatError, ResonanceError, SettingsError
from .models import Aspect, Astra, Chart, MultiChart

__all__ = [
    "Aspect",
    "Astra",
    "Chart",
    "ChartFormatError",
    "HarmonicService",
    "MultiChart",
    "Pattern",
    "PatternTable",
    "ResonanceBatch",
    "ResonanceError",
    "ResonanceMatrix",
    "Settings",
    "SettingsError",
    "load_settings",
]
