"""Aggregations of matrix results per chart subset."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterator, List, Sequence, Tuple

from ..models import Chart
from .patterns import Pattern
from .resonance import ResonanceBatch

if TYPE_CHECKING:
    from .matrix import ResonanceMatrix

logger = logging.getLogger(__name__)

ChartSet = Tuple[Chart, ...]


class PatternAnalysis:
    """Patterns found for one chart subset, grouped by harmonic."""

    def __init__(self) -> None:
        self._by_harmonic: Dict[int, List[Pattern]] = {}

    def add_pattern(self, pattern: Pattern) -> None:
        self._by_harmonic.setdefault(pattern.harmonic, []).append(pattern)

    def patterns_for(self, harmonic: int) -> List[Pattern]:
        return list(self._by_harmonic.get(harmonic, []))

    @property
    def harmonics(self) -> List[int]:
        return sorted(self._by_harmonic)

    def __len__(self) -> int:
        """Number of harmonics that produced at least one pattern."""
        return len(self._by_harmonic)

    def average_strength_for(self, harmonic: int) -> float:
        patterns = self._by_harmonic.get(harmonic)
        if not patterns:
            return 0.0
        return sum(p.average_strength for p in patterns) / len(patterns)

    def astras_quantity_for(self, harmonic: int) -> int:
        return sum(p.size for p in self._by_harmonic.get(harmonic, []))


class PatternTable:
    """One PatternAnalysis for every chart subset of a matrix."""

    def __init__(self, matrix: "ResonanceMatrix") -> None:
        self.matrix = matrix
        self.charts: ChartSet = matrix.charts
        self.tables: Dict[ChartSet, PatternAnalysis] = {}
        for combination in matrix.chart_combinations(for_aspects=False):
            self.tables[combination] = matrix.pattern_analysis(combination)
        logger.debug("Pattern table built for %d chart combinations", len(self.tables))

    @property
    def edge_harmonic(self) -> int:
        return self.matrix.settings.edge_harmonic

    def analysis_for(self, charts: Sequence[Chart]) -> PatternAnalysis:
        return self.tables[tuple(charts)]

    def items(self) -> Iterator[Tuple[ChartSet, PatternAnalysis]]:
        return iter(self.tables.items())

    def __len__(self) -> int:
        return len(self.tables)


class AspectTable:
    """
    Pairwise resonances per chart subset of size one or two.

    A single chart lists its inner pairs; a pair of charts lists the
    cross-chart pairs only.
    """

    def __init__(self, matrix: "ResonanceMatrix") -> None:
        self.matrix = matrix
        self.charts: ChartSet = matrix.charts
        self.tables: Dict[ChartSet, List[ResonanceBatch]] = {}
        for combination in matrix.chart_combinations(for_aspects=True):
            if len(combination) == 1:
                batches = matrix.resonances_within(combination[0])
            else:
                batches = matrix.resonances_between(*combination)
            self.tables[combination] = [b for b in batches if b.has_resonance()]

    def resonances_for(self, charts: Sequence[Chart]) -> List[ResonanceBatch]:
        return self.tables[tuple(charts)]

    def items(self) -> Iterator[Tuple[ChartSet, List[ResonanceBatch]]]:
        return iter(self.tables.items())

    def __len__(self) -> int:
        return len(self.tables)
