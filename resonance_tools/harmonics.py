"""Integer helpers for harmonic numbers: factorization and aspect multipliers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List

from .mechanics import CIRCLE, arc

if TYPE_CHECKING:
    from .models import Aspect

# Float slack when comparing a harmonic clearance to the orb.
EPSILON = 1e-9


def prime_factors(n: int) -> List[int]:
    """Prime factors of ``n`` in ascending order, with repetition (12 -> [2, 2, 3])."""
    if n < 1:
        raise ValueError(f"harmonic number must be positive, got {n}")
    factors: List[int] = []
    divisor = 2
    while divisor * divisor <= n:
        while n % divisor == 0:
            factors.append(divisor)
            n //= divisor
        divisor += 1
    if n > 1:
        factors.append(n)
    return factors


def reduce_fraction(multiplicity: int, numeric: int) -> tuple[int, int]:
    """Bring ``multiplicity/numeric`` to lowest terms by dropping shared prime factors."""
    remaining = list(prime_factors(multiplicity)) if multiplicity > 1 else []
    for factor in prime_factors(numeric):
        if factor in remaining:
            remaining.remove(factor)
            multiplicity //= factor
            numeric //= factor
    return multiplicity, numeric


def is_reducible(multiplicity: int, numeric: int) -> bool:
    return reduce_fraction(multiplicity, numeric) != (multiplicity, numeric)


def find_multiplier(numeric: int, from_arc: float, orb: float) -> int:
    """
    Repetition count of the harmonic's unit arc that explains a physical arc.

    Returns the smallest m >= 1 for which ``m * 360 / numeric`` lies within the
    harmonic orb of ``from_arc``; if none does, the nearest whole count.
    E.g. 45° in the 8th harmonic gives 1, 135° gives 3.
    """
    unit = CIRCLE / numeric
    for m in range(1, max(1, numeric // 2) + 1):
        if arc(from_arc, m * unit) * numeric <= orb + EPSILON:
            return m
    return max(1, round(from_arc / unit))


def is_echo(harmonic: int, aspects: Iterable[Aspect]) -> bool:
    """
    True if an already recorded aspect still resonates at ``harmonic``.

    A multiple of a recorded base counts only while it is within that base's
    depth; past it the pair has to line up again on its own.
    """
    return any(aspect.has_resonance(harmonic) for aspect in aspects)
