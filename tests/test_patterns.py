import unittest

import pytest

from resonance_tools.analysis.matrix import ResonanceMatrix
from resonance_tools.analysis.patterns import Pattern
from resonance_tools.config import Settings
from resonance_tools.models import Astra, Chart


def _chart(name: str, **positions: float) -> Chart:
    return Chart(name, [Astra(astra, position) for astra, position in positions.items()])


class FindPatternsTest(unittest.TestCase):
    def test_grand_trine(self) -> None:
        chart = _chart("Natal", Sun=0.0, Moon=120.0, Mars=240.0)
        matrix = ResonanceMatrix([chart])

        patterns = matrix.find_patterns(3)
        self.assertEqual(len(patterns), 1)
        pattern = patterns[0]
        self.assertEqual([a.name for a in pattern.astras], ["Sun", "Moon", "Mars"])
        self.assertEqual(pattern.average_strength, 100.0)
        self.assertTrue(pattern.is_valid())

        self.assertEqual(matrix.find_patterns(1), [])
        # Only echoes of the trine remain at 6.
        self.assertEqual(matrix.find_patterns(6), [])

    def test_sextile_chain_closes_at_six(self) -> None:
        chart = _chart("Natal", Sun=0.0, Moon=60.0, Mars=120.0)
        matrix = ResonanceMatrix([chart])

        sixth = matrix.find_patterns(6)
        self.assertEqual(len(sixth), 1)
        self.assertEqual(sixth[0].size, 3)
        self.assertEqual(sixth[0].average_strength, 100.0)

        third = matrix.find_patterns(3)
        self.assertEqual(len(third), 1)
        self.assertEqual(sorted(a.name for a in third[0].astras), ["Mars", "Sun"])

    def test_patterns_sorted_by_strength(self) -> None:
        chart = _chart("Natal", Sun=0.0, Moon=121.0, Venus=200.0, Mars=320.0)
        patterns = ResonanceMatrix([chart]).find_patterns(3)

        self.assertEqual([p.names() for p in patterns], ["Venus Mars", "Sun Moon"])
        self.assertEqual(patterns[0].average_strength, 100.0)
        self.assertAlmostEqual(patterns[1].average_strength, 75.0)
        self.assertAlmostEqual(patterns[1].clearance_sum(chart.get_astra("Sun")), 3.0)

    def test_patterns_are_disjoint(self) -> None:
        chart = _chart("Natal", Sun=0.0, Moon=121.0, Venus=200.0, Mars=320.0, Saturn=90.0)
        patterns = ResonanceMatrix([chart]).find_patterns(3)
        seen = [id(a) for p in patterns for a in p.astras]
        self.assertEqual(len(seen), len(set(seen)))
        self.assertTrue(all(p.size >= 2 for p in patterns))


class PatternMembershipTest(unittest.TestCase):
    def setUp(self) -> None:
        self.chart = _chart("Natal", Sun=0.0, Mercury=2.0, Moon=120.0)
        self.matrix = ResonanceMatrix([self.chart])

    def test_conjunction_joins_through_lower_harmonic(self) -> None:
        patterns = self.matrix.find_patterns(3)
        self.assertEqual(len(patterns), 1)
        pattern = patterns[0]
        self.assertEqual(pattern.size, 3)
        self.assertAlmostEqual(pattern.average_strength, 200 / 3)

    def test_connectivity_order(self) -> None:
        pattern = self.matrix.find_patterns(3)[0]
        sun, mercury, moon = (self.chart.get_astra(n) for n in ("Sun", "Mercury", "Moon"))
        self.assertAlmostEqual(pattern.connectivity_of(sun), 75.0)
        self.assertAlmostEqual(pattern.connectivity_of(moon), 75.0)
        self.assertAlmostEqual(pattern.connectivity_of(mercury), 50.0)
        self.assertEqual(pattern.names(), "Sun Moon Mercury")

    def test_clusters(self) -> None:
        pattern = self.matrix.find_patterns(3)[0]
        self.assertEqual(len(pattern.clusters), 2)
        conjunction = pattern.clusters[0]
        self.assertEqual([a.name for a in conjunction.astras], ["Sun", "Mercury"])
        self.assertAlmostEqual(conjunction.position, 1.0)
        self.assertEqual(str(conjunction), "{Sun+Mercury}")
        self.assertEqual(str(pattern.clusters[1]), "Moon")

    def test_adding_twice_changes_nothing(self) -> None:
        pattern = self.matrix.find_patterns(3)[0]
        total_clearance, total_orb = pattern.total_clearance, pattern.total_orb
        pattern.add_astra(self.chart.get_astra("Moon"))
        self.assertEqual(pattern.size, 3)
        self.assertEqual((pattern.total_clearance, pattern.total_orb), (total_clearance, total_orb))

    def test_single_astra_is_not_a_pattern(self) -> None:
        pattern = Pattern(3, self.matrix, [self.chart.get_astra("Sun")])
        self.assertFalse(pattern.is_valid())
        self.assertEqual(pattern.average_strength, 0.0)
        self.assertFalse(pattern.is_empty())
        self.assertTrue(Pattern(3, self.matrix).is_empty())

    def test_add_all(self) -> None:
        first = Pattern(3, self.matrix, [self.chart.get_astra("Sun")])
        second = Pattern(3, self.matrix, [self.chart.get_astra("Moon"), self.chart.get_astra("Sun")])
        first.add_all(second)
        self.assertEqual([a.name for a in first.astras], ["Sun", "Moon"])
        self.assertTrue(first.is_valid())


class CrossChartPatternTest(unittest.TestCase):
    def setUp(self) -> None:
        self.first = _chart("First", Sun=10.0)
        self.second = _chart("Second", Moon=14.0)
        self.matrix = ResonanceMatrix([self.first, self.second], Settings(edge_harmonic=12))

    def test_cross_chart_strength(self) -> None:
        patterns = self.matrix.find_patterns(1)
        self.assertEqual(len(patterns), 1)
        pattern = patterns[0]
        self.assertEqual(pattern.dimension, 2)
        self.assertAlmostEqual(pattern.average_strength, 100 / 3)
        self.assertTrue(pattern.of_chart_set([self.first, self.second]))
        self.assertFalse(pattern.of_chart_set([self.first]))

    def test_single_chart_mask_excludes_the_pair(self) -> None:
        self.assertEqual(self.matrix.find_patterns(1, [self.first]), [])

    def test_analysis_keeps_only_exact_chart_sets(self) -> None:
        both = self.matrix.pattern_analysis((self.first, self.second))
        self.assertEqual(both.harmonics, [1])
        self.assertEqual(len(self.matrix.pattern_analysis((self.first,))), 0)


def test_cross_chart_conjunction_stays_in_separate_clusters():
    first = _chart("First", Sun=0.0)
    second = _chart("Second", Moon=2.0)
    matrix = ResonanceMatrix([first, second])
    pattern = matrix.find_patterns(1)[0]
    assert len(pattern.clusters) == 2
    assert pattern.clusters[0].conjuncts_cluster(pattern.clusters[1])
    assert pattern.average_strength == pytest.approx((6 - 2) / 6 * 100)
