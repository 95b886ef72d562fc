import unittest

import pytest

from resonance_tools.analysis.matrix import ResonanceMatrix
from resonance_tools.analysis.resonance import ResonanceBatch
from resonance_tools.config import Settings
from resonance_tools.errors import ResonanceError
from resonance_tools.models import Astra, Chart


def _chart(name: str, **positions: float) -> Chart:
    return Chart(name, [Astra(astra, position) for astra, position in positions.items()])


class ResonanceBatchTest(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = Settings()

    def test_trine_is_a_single_base_aspect(self) -> None:
        chart = _chart("Trine", Sun=0.0, Moon=120.0)
        batch = ResonanceBatch(chart.get_astra("Sun"), chart.get_astra("Moon"), self.settings)

        self.assertEqual([a.numeric for a in batch.aspects], [3])
        aspect = batch.aspect_for(3)
        self.assertEqual(aspect.fraction, "1/3")
        self.assertEqual(aspect.strength, 100.0)
        self.assertTrue(batch.has_exact_harmonic(3))
        self.assertFalse(batch.has_exact_harmonic(6))
        # 6, 9, 12 ... are echoes of the trine
        self.assertTrue(batch.has_harmonic_resonance(6))
        self.assertTrue(batch.has_harmonic_resonance(108))
        self.assertFalse(batch.has_harmonic_resonance(4))

    def test_no_aspect_beyond_edge(self) -> None:
        chart = _chart("Wide", Sun=0.0, Moon=120.0)
        batch = ResonanceBatch(chart.get_astra("Sun"), chart.get_astra("Moon"), Settings(edge_harmonic=2))
        self.assertFalse(batch.has_resonance())
        self.assertEqual(batch.aspects, [])

    def test_conjunction_within_one_chart(self) -> None:
        chart = _chart("Close", Sun=10.0, Moon=14.0)
        batch = ResonanceBatch(chart.get_astra("Sun"), chart.get_astra("Moon"), Settings(edge_harmonic=12))

        self.assertEqual(len(batch.aspects), 1)
        aspect = batch.aspects[0]
        self.assertEqual((aspect.numeric, aspect.multiplicity), (1, 1))
        self.assertEqual(aspect.depth, 3)
        self.assertAlmostEqual(aspect.strength, 200 / 3)
        self.assertTrue(batch.has_harmonic_resonance(3))
        self.assertFalse(batch.has_harmonic_resonance(4))

    def test_conjunction_does_not_hide_later_alignments(self) -> None:
        chart = _chart("Close", Sun=10.0, Moon=14.0)
        batch = ResonanceBatch(chart.get_astra("Sun"), chart.get_astra("Moon"), self.settings)

        self.assertEqual(batch.aspects[0].numeric, 1)
        # 4° fits 90 times into the circle, far past the conjunction's depth of 3
        self.assertTrue(batch.has_exact_harmonic(90))
        self.assertEqual(batch.aspect_for(90).fraction, "1/90")
        self.assertTrue(batch.has_harmonic_resonance(90))
        self.assertFalse(batch.has_harmonic_resonance(45))

    def test_exact_harmonic_past_conjunction_depth(self) -> None:
        chart = _chart("Decile", Sun=0.0, Moon=10.0)
        batch = ResonanceBatch(chart.get_astra("Sun"), chart.get_astra("Moon"), self.settings)

        self.assertEqual(batch.aspect_for(1).depth, 1)
        self.assertEqual(batch.aspect_for(36).fraction, "1/36")
        self.assertEqual(batch.aspect_for(36).strength, 100.0)
        self.assertTrue(batch.has_exact_harmonic(36))
        self.assertTrue(batch.has_harmonic_resonance(36))
        self.assertTrue(batch.has_harmonic_resonance(72))

        patterns = ResonanceMatrix([chart]).find_patterns(36)
        self.assertEqual([sorted(a.name for a in p.astras) for p in patterns], [["Moon", "Sun"]])
        self.assertEqual(patterns[0].average_strength, 100.0)

    def test_cross_chart_orb_is_halved(self) -> None:
        first = _chart("First", Sun=10.0)
        second = _chart("Second", Moon=14.0)
        batch = ResonanceBatch(first.get_astra("Sun"), second.get_astra("Moon"), self.settings)

        self.assertTrue(batch.is_synastric)
        self.assertEqual(batch.orb, 6.0)
        aspect = batch.aspect_for(1)
        self.assertEqual(aspect.depth, 1)
        self.assertAlmostEqual(aspect.strength, 100 / 3)
        self.assertFalse(batch.has_harmonic_resonance(2))

    def test_full_orbs_across_charts(self) -> None:
        first = _chart("First", Sun=10.0)
        second = _chart("Second", Moon=14.0)
        settings = Settings(half_orbs_for_doubles=False)
        batch = ResonanceBatch(first.get_astra("Sun"), second.get_astra("Moon"), settings)
        self.assertEqual(batch.orb, 12.0)
        self.assertEqual(batch.aspect_for(1).depth, 3)

    def test_sesquiquadrate_is_kept_as_three_eighths(self) -> None:
        chart = _chart("Octile", Sun=0.0, Mars=135.0)
        batch = ResonanceBatch(chart.get_astra("Sun"), chart.get_astra("Mars"), self.settings)
        aspect = batch.aspect_for(8)
        self.assertIsNotNone(aspect)
        self.assertEqual(aspect.fraction, "3/8")

    def test_counterpart(self) -> None:
        chart = _chart("Pair", Sun=0.0, Moon=90.0, Mars=180.0)
        sun, moon, mars = chart.astras
        batch = ResonanceBatch(sun, moon, self.settings)
        self.assertIs(batch.counterpart(sun), moon)
        self.assertIs(batch.counterpart(moon), sun)
        self.assertTrue(batch.involves(sun))
        self.assertFalse(batch.involves(mars))
        with self.assertRaises(ResonanceError):
            batch.counterpart(mars)

    def test_astra_cannot_resonate_with_itself(self) -> None:
        chart = _chart("Solo", Sun=0.0)
        with self.assertRaises(ResonanceError):
            ResonanceBatch(chart.astras[0], chart.astras[0], self.settings)


def test_base_aspects_are_never_echoes_of_each_other():
    chart = _chart("Mixed", Sun=0.0, Venus=72.5, Mars=133.0)
    settings = Settings()
    for a, b in [(0, 1), (0, 2), (1, 2)]:
        batch = ResonanceBatch(chart.astras[a], chart.astras[b], settings)
        numerics = [aspect.numeric for aspect in batch.aspects]
        assert numerics == sorted(numerics)
        for i, aspect in enumerate(batch.aspects):
            assert not any(earlier.has_resonance(aspect.numeric) for earlier in batch.aspects[:i])
        for aspect in batch.aspects:
            assert aspect.clearance <= batch.orb + 1e-9
            assert aspect.depth >= 1
            assert 0 <= aspect.strength <= 100


def test_quintile_strength():
    chart = _chart("Quintile", Sun=0.0, Venus=73.0)
    batch = ResonanceBatch(chart.astras[0], chart.astras[1], Settings())
    aspect = batch.aspect_for(5)
    assert aspect is not None
    assert aspect.fraction == "1/5"
    assert aspect.clearance == pytest.approx(5.0)
    assert aspect.strength == pytest.approx(7 / 12 * 100)
