from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

from ..config import Settings, load_settings
from ..models import ChartObject
from .matrix import ResonanceMatrix
from .patterns import Cluster, Pattern
from .resonance import ResonanceBatch
from .tables import AspectTable, PatternAnalysis, PatternTable

logger = logging.getLogger(__name__)

__all__ = [
    "AspectTable",
    "Cluster",
    "HarmonicService",
    "Pattern",
    "PatternAnalysis",
    "PatternTable",
    "ResonanceBatch",
    "ResonanceMatrix",
    "build_matrix",
]


def build_matrix(chart: ChartObject, settings: Optional[Settings] = None) -> ResonanceMatrix:
    """Matrix over the charts of a Chart or MultiChart."""
    return ResonanceMatrix(chart.charts, settings)


class HarmonicService:
    """
    Keeps one matrix per chart object and hands out tables built from it.

    Settings are fetched from ``settings_provider`` on every request; a matrix
    built under different settings is rebuilt. Charts edited in place must be
    passed to ``invalidate``.
    """

    def __init__(self, settings_provider: Optional[Callable[[], Settings]] = None) -> None:
        self._settings_provider = settings_provider or load_settings
        self._matrices: Dict[int, Tuple[ChartObject, ResonanceMatrix]] = {}

    def matrix_for(self, chart: ChartObject) -> ResonanceMatrix:
        settings = self._settings_provider()
        cached = self._matrices.get(id(chart))
        if cached is not None and cached[0] is chart and cached[1].settings == settings:
            return cached[1]
        if cached is not None:
            logger.debug("Rebuilding matrix for %s", chart.name)
        matrix = build_matrix(chart, settings)
        # The chart is kept alongside so its id cannot be reused while cached.
        self._matrices[id(chart)] = (chart, matrix)
        return matrix

    def invalidate(self, chart: ChartObject) -> None:
        self._matrices.pop(id(chart), None)

    def clear(self) -> None:
        self._matrices.clear()

    def pattern_table(self, chart: ChartObject) -> PatternTable:
        return self.matrix_for(chart).build_pattern_table()

    def aspect_table(self, chart: ChartObject) -> AspectTable:
        return self.matrix_for(chart).build_aspect_table()

    def patterns(self, chart: ChartObject, harmonic: int):
        return self.matrix_for(chart).find_patterns(harmonic)
