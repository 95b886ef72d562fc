from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..config import Settings
from ..errors import ResonanceError
from ..models import Astra, Chart, ChartObject, flatten_charts
from .patterns import Pattern
from .resonance import ResonanceBatch

logger = logging.getLogger(__name__)

ChartSet = Tuple[Chart, ...]


class ResonanceMatrix:
    """
    Resonance batches for every pair of astras drawn from a fixed tuple of charts.

    Astras are flattened in chart order, then in the order of each chart; the
    flat index of an astra stays fixed for the life of the matrix. Editing a
    chart after construction makes the matrix stale; build a new one.
    """

    def __init__(self, charts: Iterable[ChartObject], settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.charts: ChartSet = flatten_charts(charts)
        self.astras: List[Astra] = [astra for chart in self.charts for astra in chart.astras]
        logger.info("Building resonance matrix for [%s]", ", ".join(c.name for c in self.charts))

        started = time.perf_counter()
        self._index: Dict[Astra, int] = {astra: i for i, astra in enumerate(self.astras)}
        # Row i holds the batches (i, j) for j > i, stored at position j - i - 1.
        self._table: List[List[ResonanceBatch]] = [
            [ResonanceBatch(self.astras[i], self.astras[j], self.settings) for j in range(i + 1, len(self.astras))]
            for i in range(len(self.astras))
        ]
        logger.debug(
            "Matrix of %d astras (%d pairs) built in %.1f ms",
            len(self.astras),
            len(self.astras) * (len(self.astras) - 1) // 2,
            (time.perf_counter() - started) * 1000,
        )

    def __len__(self) -> int:
        return len(self.astras)

    def index_of(self, astra: Astra) -> int:
        """Flat index of an astra; ResonanceError if the matrix does not hold it."""
        try:
            return self._index[astra]
        except KeyError:
            raise ResonanceError(f"astra {astra.label_with_owner()} is not in the matrix") from None

    def _batch(self, i: int, j: int) -> ResonanceBatch:
        if i > j:
            i, j = j, i
        return self._table[i][j - i - 1]

    def resonance_for(self, a: Astra, b: Astra) -> ResonanceBatch:
        """The batch computed for two astras, in either order."""
        if a is b:
            raise ResonanceError(f"{a.name} does not resonate with itself")
        missing = [astra for astra in (a, b) if astra not in self._index]
        if missing:
            raise ResonanceError(
                "astra not found in the matrix: " + ", ".join(m.label_with_owner() for m in missing)
            )
        return self._batch(self._index[a], self._index[b])

    def in_resonance(self, a: Astra, b: Astra, harmonic: int) -> bool:
        """A base aspect exactly at ``harmonic`` between the two astras."""
        return self.resonance_for(a, b).has_exact_harmonic(harmonic)

    def resonances_for(self, astra: Astra, acceptable: Optional[Sequence[bool]] = None) -> List[ResonanceBatch]:
        """Batches pairing ``astra`` with every other astra, optionally limited by a mask."""
        index = self.index_of(astra)
        if acceptable is not None and not acceptable[index]:
            return []
        return [
            self._batch(index, other)
            for other in range(len(self.astras))
            if other != index and (acceptable is None or acceptable[other])
        ]

    def connected_astras(self, astra: Astra, harmonic: int, acceptable: Optional[Sequence[bool]] = None) -> List[Astra]:
        """Astras in resonance with ``astra`` at ``harmonic``, directly or as an echo of a lower one."""
        return [
            batch.counterpart(astra)
            for batch in self.resonances_for(astra, acceptable)
            if batch.has_harmonic_resonance(harmonic)
        ]

    def __iter__(self) -> Iterator[ResonanceBatch]:
        """Batches row by row: (0,1), (0,2) ... (1,2) ..."""
        for row in self._table:
            yield from row

    def all_resonances(self) -> List[ResonanceBatch]:
        return list(self)

    def resonances_within(self, chart: Chart) -> List[ResonanceBatch]:
        """Batches between astras of one chart."""
        return [b for b in self if not b.is_synastric and b.astra_a.chart is chart]

    def resonances_between(self, first: Chart, second: Chart) -> List[ResonanceBatch]:
        """Batches pairing an astra of ``first`` with an astra of ``second``."""
        wanted = {id(first), id(second)}
        return [b for b in self if b.is_synastric and {id(c) for c in b.charts} == wanted]

    def acceptance_mask(self, charts: Iterable[Chart]) -> List[bool]:
        """Per flat index: does the astra belong to one of ``charts``."""
        wanted = {id(c) for c in charts}
        return [id(astra.chart) in wanted for astra in self.astras]

    def chart_combinations(self, for_aspects: bool = False) -> List[ChartSet]:
        """
        Non-empty subsets of the matrix charts, smallest first.

        With ``for_aspects`` only singles and pairs are returned (K*(K+1)/2 of
        them), otherwise all 2^K - 1 subsets: for (A, B, C) that is
        A, B, C, AB, AC, BC, ABC.
        """
        combinations: List[ChartSet] = []
        for cypher in range(1, 2 ** len(self.charts)):
            combination = tuple(chart for n, chart in enumerate(self.charts) if cypher >> n & 1)
            if for_aspects and len(combination) > 2:
                continue
            combinations.append(combination)
        combinations.sort(key=len)
        return combinations

    def find_patterns(self, harmonic: int, charts: Optional[Iterable[Chart]] = None) -> List[Pattern]:
        """
        Valid patterns among astras of ``charts`` at one harmonic, strongest first.

        Each unvisited astra seeds a pattern that takes in everything reachable
        through resonance at ``harmonic``; lone astras and groups without a base
        aspect at this harmonic are dropped.
        """
        acceptable = self.acceptance_mask(self.charts if charts is None else charts)
        visited = [False] * len(self.astras)
        patterns: List[Pattern] = []
        for index in range(len(self.astras)):
            if acceptable[index] and not visited[index]:
                pattern = self._gather_resonants(index, harmonic, visited, acceptable)
                if pattern.is_valid():
                    patterns.append(pattern)
        patterns.sort(key=lambda p: p.average_strength, reverse=True)
        return patterns

    def _gather_resonants(self, start: int, harmonic: int, visited: List[bool], acceptable: Sequence[bool]) -> Pattern:
        pattern = Pattern(harmonic, self)
        visited[start] = True
        stack = [start]
        while stack:
            astra = self.astras[stack.pop()]
            pattern.add_astra(astra)
            for other in reversed(self.connected_astras(astra, harmonic, acceptable)):
                other_index = self._index[other]
                if not visited[other_index]:
                    visited[other_index] = True
                    stack.append(other_index)
        return pattern

    def pattern_analysis(self, charts: Sequence[Chart]):
        """Patterns over harmonics 1..edge whose astras come from exactly ``charts``."""
        from .tables import PatternAnalysis

        analysis = PatternAnalysis()
        for harmonic in range(1, self.settings.edge_harmonic + 1):
            for pattern in self.find_patterns(harmonic, charts):
                if pattern.of_chart_set(charts):
                    analysis.add_pattern(pattern)
        return analysis

    def build_pattern_table(self):
        from .tables import PatternTable

        return PatternTable(self)

    def build_aspect_table(self):
        from .tables import AspectTable

        return AspectTable(self)
