"""Patterns: groups of astras connected by resonance at one harmonic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Set

from ..config import Settings
from ..mechanics import are_conjuncted, arc_for_harmonic, arrange_as_chain, calculate_strength, centroid, conjuncting
from ..models import Astra, Chart

if TYPE_CHECKING:
    from .matrix import ResonanceMatrix


class Cluster:
    """Astras of one pattern standing in conjunction within a single chart."""

    def __init__(self, astra: Astra, pattern: "Pattern") -> None:
        self.pattern = pattern
        self.astras: List[Astra] = [astra]

    def add(self, astra: Astra) -> None:
        self.astras.append(astra)

    @property
    def chart(self) -> Optional[Chart]:
        return self.astras[0].chart

    @property
    def position(self) -> float:
        """Centroid of the conjoined astras."""
        return centroid(self.astras)

    def in_conjunction(self, astra: Astra) -> bool:
        orb = self.pattern.settings.primary_orb
        return any(are_conjuncted(member, astra, orb) for member in self.astras)

    def conjuncts_cluster(self, other: "Cluster") -> bool:
        """True if some astra here is conjunct an astra of another chart in ``other``."""
        settings = self.pattern.settings
        return any(
            a.chart is not b.chart and conjuncting(a, b, settings)
            for a in self.astras
            for b in other.astras
        )

    def astras_in_order(self) -> List[Astra]:
        return arrange_as_chain(self.astras)

    def __len__(self) -> int:
        return len(self.astras)

    def __str__(self) -> str:
        if len(self.astras) == 1:
            return self.astras[0].name
        line = "+".join(a.name for a in self.astras_in_order())
        return line if self.pattern.harmonic == 1 else f"{{{line}}}"


class Pattern:
    """
    Astras connected, directly or through one another, by resonance at one harmonic.

    For every member the pattern keeps the sum of its harmonic clearances to the
    other members and the sum of the orbs those pairs are judged by; the
    pattern-wide totals feed ``average_strength``.
    """

    def __init__(self, harmonic: int, matrix: "ResonanceMatrix", astras: Iterable[Astra] = ()) -> None:
        self.harmonic = harmonic
        self.matrix = matrix
        self.settings: Settings = matrix.settings
        self._clearances: Dict[Astra, float] = {}
        self._orbs: Dict[Astra, float] = {}
        self.charts: List[Chart] = []
        self.clusters: List[Cluster] = []
        self.total_clearance = 0.0
        self.total_orb = 0.0
        for astra in astras:
            self.add_astra(astra)

    def add_astra(self, astra: Astra) -> None:
        """Add an astra, ignoring it if one of the same name and chart is present."""
        if any(member.is_same(astra) for member in self._clearances):
            return

        if not any(astra.chart is chart for chart in self.charts):
            self.charts.append(astra.chart)

        clearance_sum = 0.0
        orb_sum = 0.0
        for member in self._clearances:
            clearance = arc_for_harmonic(astra, member, self.harmonic)
            orb = self.settings.orb_for(same_chart=astra.chart is member.chart)
            self._clearances[member] += clearance
            self._orbs[member] += orb
            clearance_sum += clearance
            orb_sum += orb
        self._clearances[astra] = clearance_sum
        self._orbs[astra] = orb_sum
        self.total_clearance += clearance_sum
        self.total_orb += orb_sum

        for cluster in self.clusters:
            if cluster.in_conjunction(astra):
                cluster.add(astra)
                break
        else:
            self.clusters.append(Cluster(astra, self))

    def add_all(self, other: "Pattern") -> None:
        for astra in other.astras:
            self.add_astra(astra)

    @property
    def astras(self) -> List[Astra]:
        return list(self._clearances)

    def __len__(self) -> int:
        return len(self._clearances)

    def __contains__(self, astra: Astra) -> bool:
        return astra in self._clearances

    @property
    def size(self) -> int:
        return len(self._clearances)

    @property
    def dimension(self) -> int:
        """Number of charts the members belong to."""
        return len(self.charts)

    def is_empty(self) -> bool:
        return not self._clearances

    def possible_pairs(self) -> int:
        return self.size * (self.size - 1) // 2

    def clearance_sum(self, astra: Astra) -> float:
        return self._clearances[astra]

    @property
    def average_strength(self) -> float:
        """Mean strength of all pairwise relations, -100 .. 100; 0 for a lone astra."""
        if self.size < 2:
            return 0.0
        pairs = self.possible_pairs()
        return calculate_strength(self.total_orb / pairs, self.total_clearance / pairs)

    def connectivity_of(self, astra: Astra) -> float:
        """Average strength of one member's relations to the rest of the pattern."""
        others = self.size - 1
        if others < 1:
            return 0.0
        return calculate_strength(self._orbs[astra] / others, self._clearances[astra] / others)

    def astras_by_connectivity(self) -> List[Astra]:
        """Members from the most to the least connected."""
        return sorted(self._clearances, key=self.connectivity_of, reverse=True)

    def is_valid(self) -> bool:
        """At least one pair of members holds a base aspect at this very harmonic."""
        members = self.astras
        return any(
            self.matrix.in_resonance(members[i], members[j], self.harmonic)
            for i in range(len(members) - 1)
            for j in range(i + 1, len(members))
        )

    def of_chart_set(self, charts: Sequence[Chart]) -> bool:
        """True if the members come from exactly the given charts."""
        wanted: Set[int] = {id(c) for c in charts}
        return self.dimension == len(wanted) and {id(c) for c in self.charts} == wanted

    def clusters_in_order(self) -> List[Cluster]:
        return arrange_as_chain(self.clusters)

    def names(self) -> str:
        """Member names from the most to the least connected."""
        return " ".join(a.name for a in self.astras_by_connectivity())

    def __repr__(self) -> str:
        return f"Pattern(h={self.harmonic}, astras={[a.name for a in self.astras]}, strength={self.average_strength:.1f})"
