"""Circular (mod 360°) geometry used by the resonance model."""

from __future__ import annotations

import math
from typing import Iterable, List, Protocol, Sequence, TypeVar, Union

CIRCLE = 360.0
HALF_CIRCLE = 180.0

SIGN_SYMBOLS = ["♈", "♉", "♊", "♋", "♌", "♍", "♎", "♏", "♐", "♑", "♒", "♓"]


class ZodiacPoint(Protocol):
    @property
    def position(self) -> float: ...


PointLike = Union[float, ZodiacPoint]
P = TypeVar("P")


def _position(point: PointLike) -> float:
    return point if isinstance(point, (int, float)) else point.position


def normalize(position: float) -> float:
    """Reduce any degree value to [0, 360)."""
    p = math.fmod(position, CIRCLE)
    if p < 0:
        p += CIRCLE
    # fmod of a tiny negative can land exactly on 360 after the shift
    return 0.0 if p >= CIRCLE else p


def arc(a: PointLike, b: PointLike) -> float:
    """Shortest undirected distance between two points, 0 - 180°."""
    diff = abs(normalize(_position(a)) - normalize(_position(b)))
    return CIRCLE - diff if diff > HALF_CIRCLE else diff


def vector_arc(a: PointLike, b: PointLike) -> float:
    """Distance travelling forward through the zodiac from ``a`` to ``b``, 0 - 360°."""
    return normalize(_position(b) - _position(a))


def normalize_arc(value: float) -> float:
    """Express an arbitrary arc as the distance between its ends, 0 - 180°."""
    return arc(normalize(value), 0.0)


def arc_for_harmonic(a: PointLike, b: PointLike, harmonic: int) -> float:
    """Distance between two points as seen in the chart of the given harmonic."""
    return normalize_arc(arc(a, b) * harmonic)


def calculate_strength(orb: float, clearance: float) -> float:
    """
    Percentage closeness of a clearance to exact.

    100 for an exact aspect, 0 at the orb boundary, negative beyond it down to
    -100 at 180°.
    """
    delta = orb - clearance
    if delta >= 0:
        return delta / orb * 100
    return delta / (HALF_CIRCLE - orb) * 100


def arrange_as_chain(points: Iterable[P]) -> List[P]:
    """
    Return the points in zodiacal order, rotated so the widest gap between
    neighbours falls between the last and the first element.
    """
    chain = sorted(points, key=_position)
    if len(chain) < 2:
        return chain

    max_dist = vector_arc(chain[-1], chain[0])
    max_index = 0
    for i in range(1, len(chain)):
        dist = vector_arc(chain[i - 1], chain[i])
        if dist > max_dist:
            max_dist = dist
            max_index = i
    return chain[max_index:] + chain[:max_index]


def centroid(points: Sequence[PointLike]) -> float:
    """Average position of several points, measured along their chain."""
    if not points:
        raise ValueError("centroid of an empty point set")
    if len(points) == 1:
        return normalize(_position(points[0]))

    chain = arrange_as_chain(points)
    first = chain[0]
    total = sum(vector_arc(first, other) for other in chain[1:])
    return normalize(_position(first) + total / len(chain))


def find_median(a: float, b: float) -> float:
    """
    Midpoint of two positions on the shorter arc between them.

    For an exact opposition the point a quarter circle after ``a`` is returned.
    """
    distance = arc(a, b)
    back = a if math.isclose(normalize(a + distance), normalize(b), abs_tol=1e-9) else b
    return normalize(back + distance / 2)


def are_conjuncted(a, b, primary_orb: float) -> bool:
    """Two astras of the same chart standing within the primary orb of each other."""
    return a.chart is b.chart and arc(a, b) <= primary_orb


def conjuncting(a, b, settings) -> bool:
    """Two astras of any charts within the conjunction orb appropriate to their pair."""
    return arc(a, b) <= settings.orb_for(same_chart=a.chart is b.chart)


def is_ahead(from_position: float, position: float) -> bool:
    """True if ``position`` lies less than 180° forward of ``from_position``."""
    delta = position - from_position
    return 0 <= delta < HALF_CIRCLE or delta < -HALF_CIRCLE


def degrees_to_coords(position: float) -> tuple[int, int, int]:
    """Split a position into whole degrees, minutes and seconds."""
    in_seconds = int(round(normalize(position) * 3600)) % int(CIRCLE * 3600)
    return in_seconds // 3600, in_seconds % 3600 // 60, in_seconds % 60


def degrees_to_sign_coords(position: float) -> tuple[int, int, int, int]:
    """Return (sign number 1 - 12, degree in sign, minutes, seconds)."""
    degrees, minutes, seconds = degrees_to_coords(position)
    return degrees // 30 + 1, degrees % 30, minutes, seconds


def sign_index(position: float) -> int:
    return int(normalize(position) // 30) % 12


def zodiac_degree(position: float) -> str:
    """Compact ``degree°sign`` label, counting the degree in progress (1 - 30)."""
    return f"{math.ceil(normalize(position) % 30)}°{SIGN_SYMBOLS[sign_index(position)]}"


def format_position(position: float) -> str:
    """Position as ``DD°MM'SS" ♌``."""
    sign, degree, minutes, seconds = degrees_to_sign_coords(position)
    return f"{degree:02d}°{minutes:02d}'{seconds:02d}\" {SIGN_SYMBOLS[sign - 1]}"


def format_arc(value: float) -> str:
    """Arc as ``D°MM'SS"`` without a sign glyph."""
    degrees, minutes, seconds = degrees_to_coords(value)
    return f"{degrees}°{minutes:02d}'{seconds:02d}\""
