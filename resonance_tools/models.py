"""Dataclasses for points, charts and aspects used throughout the project."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from . import harmonics
from .errors import ChartFormatError
from .mechanics import calculate_strength, degrees_to_coords, normalize, sign_index, zodiac_degree

# Depth assigned to an exact (zero clearance) aspect; any value above the edge
# harmonic behaves the same in resonance checks.
EXACT_DEPTH = 10_000

LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@dataclass(eq=False)
class Astra:
    """A named zodiac position belonging to one chart."""

    name: str
    position: float
    chart: Optional["Chart"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.position = normalize(self.position)

    @classmethod
    def from_coordinates(cls, name: str, *coords: float) -> "Astra":
        """
        Build an astra from 1 - 4 numbers:
          deg | deg min | deg min sec | sign(1-12) deg min sec
        """
        if not coords:
            raise ValueError("no coordinates given")
        if len(coords) > 4:
            raise ValueError("too many coordinates")
        if len(coords) == 4:
            sign, degree, minute, second = coords
            if not 1 <= sign <= 12:
                raise ValueError("sign number must be 1 - 12")
            return cls(name, (int(sign) - 1) * 30 + degree + minute / 60 + second / 3600)
        degree, minute, second = (list(coords) + [0.0, 0.0])[:3]
        return cls(name, degree + minute / 60 + second / 3600)

    @classmethod
    def from_line(cls, line: str) -> "Astra":
        """Parse ``"Name d [m [s]]"`` or ``"Name sign d m s"``."""
        parts = line.split()
        if not parts:
            raise ChartFormatError("empty astra line")
        try:
            coords = [float(p) for p in parts[1:]]
            return cls.from_coordinates(parts[0], *coords)
        except ValueError as exc:
            raise ChartFormatError(f"cannot read astra line {line.strip()!r}: {exc}") from None

    def advance(self, delta: float) -> "Astra":
        self.position = normalize(self.position + delta)
        return self

    def is_same(self, other: Optional["Astra"]) -> bool:
        """Same name within the same chart, whatever the current position."""
        return other is not None and self.name == other.name and self.chart is other.chart

    @property
    def sign_index(self) -> int:
        return sign_index(self.position)

    @property
    def zodiac_degree(self) -> str:
        return zodiac_degree(self.position)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.zodiac_degree})"

    def label_with_owner(self, limit: int = 8) -> str:
        owner = self.chart.shortened_name(limit) if self.chart else "?"
        return f"{self.name} <{owner}>"

    def to_line(self) -> str:
        degrees, minutes, seconds = degrees_to_coords(self.position)
        return f"{self.name} {degrees} {minutes} {seconds}"

    def __str__(self) -> str:
        owner = self.chart.name if self.chart else "-"
        return f"{self.name} ({owner}) {self.zodiac_degree}"


class ChartObject:
    """Common surface of single charts and multi-charts."""

    name: str

    @property
    def charts(self) -> Tuple["Chart", ...]:
        raise NotImplementedError

    @property
    def dimension(self) -> int:
        return len(self.charts)

    def shortened_name(self, limit: int) -> str:
        return self.name if len(self.name) <= limit else self.name[: limit - 1] + "…"


@dataclass(eq=False)
class Chart(ChartObject):
    """Named ordered collection of astras with unique names."""

    name: str
    astras: List[Astra] = field(default_factory=list)

    def __post_init__(self) -> None:
        initial, self.astras = self.astras, []
        for astra in initial:
            self.add_astra(astra)

    @property
    def charts(self) -> Tuple["Chart", ...]:
        return (self,)

    def add_astra(self, astra: Astra) -> None:
        """Add an astra, replacing in place any astra of the same name."""
        astra.chart = self
        for i, existing in enumerate(self.astras):
            if existing.name == astra.name:
                self.astras[i] = astra
                return
        self.astras.append(astra)

    def get_astra(self, name: str) -> Optional[Astra]:
        return next((a for a in self.astras if a.name == name), None)

    def __iter__(self):
        return iter(self.astras)

    def __len__(self) -> int:
        return len(self.astras)


class MultiChart(ChartObject):
    """Several charts analysed together without merging their astras."""

    def __init__(self, *components: ChartObject, name: str | None = None) -> None:
        flattened: list[Chart] = []
        for component in components:
            flattened.extend(component.charts)
        self._charts = tuple(flattened)
        self.name = name if name else "Synastry: " + " + ".join(c.name for c in self._charts)

    @property
    def charts(self) -> Tuple[Chart, ...]:
        return self._charts

    @staticmethod
    def letter_for(index: int) -> str:
        """Letter label for a component: A, B, ... Z, A1, B1, ..."""
        octave, number = divmod(index, len(LETTERS))
        return LETTERS[number] + (str(octave) if octave else "")

    def caption_lines(self) -> list[str]:
        return [f"{self.letter_for(i)}: {chart.name}" for i, chart in enumerate(self._charts)]

    def __repr__(self) -> str:
        return f"MultiChart(name={self.name!r}, charts={[c.name for c in self._charts]!r})"


AnyChart = Union[Chart, MultiChart]


class PrecisionClass(Enum):
    """Qualitative precision of an aspect, derived from its depth."""

    NONE = ("none", "_")
    APPROXIMATE = ("approximate", "★")
    CONFIDENT = ("confident", "★★")
    DEEP = ("deep", "★★★")
    ACCURATE = ("accurate", "★★★★")
    PRECISE = ("deeply accurate", "★★★★★")
    EXACT = ("exact", "✰✰✰✰✰")

    def __init__(self, description: str, rating: str) -> None:
        self.description = description
        self.rating = rating

    @classmethod
    def for_depth(cls, depth: int) -> "PrecisionClass":
        if depth <= 0:
            return cls.NONE
        if depth == 1:
            return cls.APPROXIMATE
        if depth == 2:
            return cls.CONFIDENT
        if depth <= 5:
            return cls.DEEP
        if depth <= 12:
            return cls.ACCURATE
        if depth <= 24:
            return cls.PRECISE
        return cls.EXACT


@dataclass(frozen=True)
class Aspect:
    """
    One harmonic relationship detected in a physical arc.

    ``numeric`` is the harmonic in which the pair stands in conjunction,
    ``multiplicity`` how many unit arcs of that harmonic make up the aspect
    (45° -> 1/8, 135° -> 3/8), ``clearance`` the effective orb in the harmonic
    chart, ``strength`` its percentage closeness to exact and ``depth`` how many
    multiples of the harmonic the relationship survives.
    """

    numeric: int
    multiplicity: int
    clearance: float
    strength: float
    depth: int

    @classmethod
    def build(cls, numeric: int, clearance: float, from_arc: float, orb: float) -> "Aspect":
        return cls(
            numeric=numeric,
            multiplicity=harmonics.find_multiplier(numeric, from_arc, orb),
            clearance=clearance,
            strength=calculate_strength(orb, clearance),
            depth=aspect_depth(orb, clearance),
        )

    @property
    def multipliers(self) -> list[int]:
        return harmonics.prime_factors(self.numeric)

    def has_multiplier(self, base_harmonic: int) -> bool:
        return base_harmonic in self.multipliers

    def has_resonance(self, harmonic: int) -> bool:
        """Whether the aspect still shows in the chart of ``harmonic``."""
        return harmonic % self.numeric == 0 and harmonic // self.numeric <= self.depth

    @property
    def precision(self) -> PrecisionClass:
        return PrecisionClass.for_depth(self.depth)

    @property
    def strength_level(self) -> str:
        return self.precision.description

    @property
    def strength_rating(self) -> str:
        return self.precision.rating

    @property
    def fraction(self) -> str:
        return f"{self.multiplicity}/{self.numeric}"

    @property
    def exact_arc(self) -> float:
        """Arc of the pure aspect, ``360 / numeric * multiplicity``."""
        return 360.0 / self.numeric * self.multiplicity


def aspect_depth(orb: float, clearance: float) -> int:
    """``floor(orb / clearance)``, capped for exact aspects."""
    if clearance <= 0:
        return EXACT_DEPTH
    return min(EXACT_DEPTH, int(math.floor(orb / clearance)))


def flatten_charts(charts: Iterable[ChartObject]) -> Tuple[Chart, ...]:
    flattened: list[Chart] = []
    for chart in charts:
        flattened.extend(chart.charts)
    return tuple(flattened)


def chart_names(charts: Sequence[ChartObject]) -> str:
    return " and ".join(c.name for c in charts)
