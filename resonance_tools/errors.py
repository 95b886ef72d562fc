"""Exception types raised by the resonance core and its input readers."""

from __future__ import annotations


class ResonanceError(ValueError):
    """Invalid pair request: an astra against itself, or an astra absent from the matrix."""


class ChartFormatError(ValueError):
    """Chart or album text that cannot be parsed."""


class SettingsError(ValueError):
    """Non-positive or unparsable configuration value."""
