from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..config import Settings
from ..errors import ResonanceError
from ..harmonics import EPSILON, find_multiplier, is_echo, is_reducible
from ..mechanics import arc, arc_for_harmonic
from ..models import Aspect, Astra, Chart


class ResonanceBatch:
    """
    All aspects one unordered pair of astras sustains across harmonics 1..edge.

    Only base harmonics are stored. A harmonic that a recorded aspect still
    reaches within its depth is an echo and is answered through
    ``Aspect.has_resonance``; once that depth runs out, a new alignment at a
    higher multiple is recorded as a base of its own.
    """

    def __init__(self, a: Astra, b: Astra, settings: Settings) -> None:
        if a is b:
            raise ResonanceError(f"{a.name} cannot resonate with itself")
        self.astra_a = a
        self.astra_b = b
        self.arc = arc(a, b)
        self.orb = settings.orb_for(same_chart=a.chart is b.chart)
        self.edge_harmonic = settings.edge_harmonic
        self.aspects: List[Aspect] = []
        self._by_numeric: Dict[int, Aspect] = {}
        self._find_aspects()

    def _find_aspects(self) -> None:
        for harmonic in range(1, self.edge_harmonic + 1):
            clearance = arc_for_harmonic(self.astra_a, self.astra_b, harmonic)
            if clearance > self.orb + EPSILON:
                continue
            if is_echo(harmonic, self.aspects):
                continue
            multiplicity = find_multiplier(harmonic, self.arc, self.orb)
            if harmonic > 1 and is_reducible(multiplicity, harmonic):
                continue
            aspect = Aspect.build(harmonic, clearance, self.arc, self.orb)
            if aspect.depth < 1:
                continue
            self.aspects.append(aspect)
            self._by_numeric[harmonic] = aspect

    @property
    def astras(self) -> Tuple[Astra, Astra]:
        return self.astra_a, self.astra_b

    @property
    def charts(self) -> Tuple[Optional[Chart], Optional[Chart]]:
        return self.astra_a.chart, self.astra_b.chart

    @property
    def is_synastric(self) -> bool:
        return self.astra_a.chart is not self.astra_b.chart

    def involves(self, astra: Astra) -> bool:
        return astra is self.astra_a or astra is self.astra_b

    def counterpart(self, astra: Astra) -> Astra:
        """The other side of the pair."""
        if astra is self.astra_a:
            return self.astra_b
        if astra is self.astra_b:
            return self.astra_a
        raise ResonanceError(f"{astra.name} is not part of the pair {self.astra_a.name}-{self.astra_b.name}")

    def aspect_for(self, harmonic: int) -> Optional[Aspect]:
        """The base aspect recorded exactly at ``harmonic``, if any."""
        return self._by_numeric.get(harmonic)

    def has_exact_harmonic(self, harmonic: int) -> bool:
        aspect = self._by_numeric.get(harmonic)
        return aspect is not None and aspect.depth >= 1

    def has_harmonic_resonance(self, harmonic: int) -> bool:
        return any(aspect.has_resonance(harmonic) for aspect in self.aspects)

    def has_resonance(self) -> bool:
        return bool(self.aspects)

    def __repr__(self) -> str:
        numerics = ", ".join(a.fraction for a in self.aspects) or "-"
        return f"ResonanceBatch({self.astra_a.name}, {self.astra_b.name}: {numerics})"
