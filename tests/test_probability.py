# tests/test_probability.py

import math
import random
import unittest

from autosweep.board import Board
from autosweep.constraints import Constraint, normalize
from autosweep.engine import Minesweeper
from autosweep.errors import InconsistentConstraintsError
from autosweep.frontier import partition_frontier
from autosweep.probability import (
    ProbabilityMap,
    board_probabilities,
    enumerate_component,
    estimate_probabilities,
    local_density_probabilities,
)

A, B, C = (0, 0), (0, 1), (0, 2)
INTERIOR = [(3, col) for col in range(5)]


def chain():
    """{a,b}=1 and {b,c}=1: either b alone or a and c together."""
    return partition_frontier(normalize([
        Constraint(frozenset({A, B}), 1),
        Constraint(frozenset({B, C}), 1),
    ]))


class TestEnumeration(unittest.TestCase):

    def test_counts(self):
        counts = enumerate_component(chain()[0])
        self.assertEqual(counts.assignments, {1: 1, 2: 1})
        self.assertEqual(counts.total, 2)
        self.assertEqual(counts.weights(), [0, 1, 1])
        self.assertEqual(counts.conditional_probabilities(1), {A: 0.0, B: 1.0, C: 0.0})
        self.assertEqual(counts.conditional_probabilities(2), {A: 1.0, B: 0.0, C: 1.0})

    def test_conditional_probabilities_sum_to_mine_count(self):
        constraints = normalize([
            Constraint(frozenset({(0, 0), (0, 1), (1, 0)}), 1),
            Constraint(frozenset({(0, 1), (0, 2), (1, 2)}), 2),
            Constraint(frozenset({(1, 0), (2, 0), (2, 1)}), 1),
        ])
        counts = enumerate_component(partition_frontier(constraints)[0])
        for k in counts.assignments:
            self.assertAlmostEqual(sum(counts.conditional_probabilities(k).values()), k)

    def test_mine_limit(self):
        counts = enumerate_component(chain()[0], mine_limit=1)
        self.assertEqual(counts.assignments, {1: 1})

    def test_no_solution(self):
        component = partition_frontier([
            Constraint(frozenset({A, B}), 2),
            Constraint(frozenset({B, C}), 0),
        ])[0]
        with self.assertRaises(InconsistentConstraintsError):
            enumerate_component(component)


class TestEstimateProbabilities(unittest.TestCase):

    def test_fifty_fifty_corner(self):
        board = Board(Minesweeper.from_layout(["*..", "..."]))
        board.reveal((0, 2))
        pmap = board_probabilities(board)
        self.assertEqual(pmap.probability((0, 0)), 0.5)
        self.assertEqual(pmap.probability((1, 0)), 0.5)
        self.assertEqual(len(pmap), 2)
        self.assertFalse(pmap.certain_safe or pmap.certain_mines)

    def test_budget_weighting(self):
        pmap = estimate_probabilities(chain(), INTERIOR, mines_remaining=3)
        self.assertAlmostEqual(pmap.probability(A), 1 / 3)
        self.assertAlmostEqual(pmap.probability(B), 2 / 3)
        self.assertAlmostEqual(pmap.probability(C), 1 / 3)
        self.assertAlmostEqual(pmap.interior_probability, 1 / 3)
        self.assertAlmostEqual(pmap.expected_mines(), 3)
        self.assertFalse(pmap.approximated)

    def test_budget_forces_certainty(self):
        pmap = estimate_probabilities(chain(), [], mines_remaining=2)
        self.assertEqual(pmap.certain_safe, frozenset({B}))
        self.assertEqual(pmap.certain_mines, frozenset({A, C}))
        self.assertIsNone(pmap.interior_probability)

    def test_no_board_fits_the_budget(self):
        with self.assertRaises(InconsistentConstraintsError):
            estimate_probabilities(chain(), [], mines_remaining=0)

    def test_untouched_board(self):
        board = Board(Minesweeper.from_mines(4, 3, [(1, 1), (2, 3)]))
        pmap = board_probabilities(board)
        self.assertEqual(len(pmap), 12)
        for _, p in pmap.items():
            self.assertAlmostEqual(p, 2 / 12)

    def test_expected_mines_match_remaining(self):
        for seed in range(10):
            game = Minesweeper(6, 6, 6, rng=random.Random(seed))
            board = Board(game)
            board.reveal((0, 0))
            if board.is_over:
                continue
            pmap = board_probabilities(board, max_component_size=36)
            self.assertFalse(pmap.approximated)
            self.assertTrue(math.isclose(pmap.expected_mines(), board.mines_remaining))
            for pos in pmap.certain_mines:
                self.assertIn(pos, game.mines())
            for pos in pmap.certain_safe:
                self.assertNotIn(pos, game.mines())

    def test_oversized_component_is_approximated(self):
        with self.assertLogs("autosweep.probability", level="INFO"):
            pmap = estimate_probabilities(chain(), [], mines_remaining=2, max_component_size=2)
        self.assertTrue(pmap.approximated)
        self.assertFalse(pmap.certain_safe or pmap.certain_mines)
        for _, p in pmap.items():
            self.assertGreaterEqual(p, 0.0)
            self.assertLessEqual(p, 1.0)
        self.assertAlmostEqual(pmap.probability(A) + pmap.probability(B), 1.0, places=3)
        self.assertAlmostEqual(pmap.probability(B) + pmap.probability(C), 1.0, places=3)

    def test_infeasible_budget_falls_back_to_marginals(self):
        # the relaxed chain takes both remaining mines, leaving none for the pair
        components = partition_frontier(normalize([
            Constraint(frozenset({(0, 0), (0, 1)}), 1),
            Constraint(frozenset({(0, 1), (0, 2)}), 1),
            Constraint(frozenset({(0, 2), (0, 3)}), 1),
            Constraint(frozenset({(5, 0), (5, 1)}), 1),
        ]))
        self.assertEqual([c.size for c in components], [4, 2])

        with self.assertLogs("autosweep.probability", level="INFO") as logs:
            pmap = estimate_probabilities(
                components, [(9, 9)], mines_remaining=2, max_component_size=3
            )
        self.assertTrue(any("infeasible" in line for line in logs.output))
        self.assertTrue(pmap.approximated)
        self.assertEqual(pmap.probability((5, 0)), 0.5)
        self.assertEqual(pmap.probability((5, 1)), 0.5)
        self.assertEqual(pmap.interior_probability, 0.0)
        self.assertFalse(pmap.certain_safe or pmap.certain_mines)
        for _, p in pmap.items():
            self.assertGreaterEqual(p, 0.0)
            self.assertLessEqual(p, 1.0)

    def test_marginal_probabilities(self):
        counts = enumerate_component(chain()[0])
        self.assertEqual(counts.marginal_probabilities(), {A: 0.5, B: 0.5, C: 0.5})

    def test_approximated_interior_stays_in_range(self):
        pmap = estimate_probabilities(chain(), INTERIOR, mines_remaining=6, max_component_size=1)
        self.assertTrue(pmap.approximated)
        self.assertGreaterEqual(pmap.interior_probability, 0.0)
        self.assertLessEqual(pmap.interior_probability, 1.0)


class TestLocalDensity(unittest.TestCase):

    def test_densities(self):
        pmap = local_density_probabilities(
            [Constraint(frozenset({A, B}), 1), Constraint(frozenset({B, C}), 0)],
            INTERIOR,
            mines_remaining=2,
            hidden_count=8,
        )
        self.assertEqual(pmap.probability(A), 0.5)
        self.assertEqual(pmap.probability(B), 0.25)
        self.assertEqual(pmap.probability(C), 0.0)
        self.assertEqual(pmap.interior_probability, 0.25)
        self.assertTrue(pmap.approximated)

    def test_board_strategy_switch(self):
        board = Board(Minesweeper.from_layout(["*..", "..."]))
        board.reveal((0, 2))
        pmap = board_probabilities(board, guessing_strategy="local_density")
        self.assertTrue(pmap.approximated)
        with self.assertRaises(ValueError):
            board_probabilities(board, guessing_strategy="oracle")


class TestProbabilityMap(unittest.TestCase):

    def test_lookup(self):
        pmap = ProbabilityMap({A: 0.25}, [B], 0.5)
        self.assertIn(A, pmap)
        self.assertIn(B, pmap)
        self.assertNotIn(C, pmap)
        self.assertEqual(pmap.probability(B), 0.5)
        with self.assertRaises(KeyError):
            pmap.probability(C)

    def test_interior_needs_probability(self):
        with self.assertRaises(ValueError):
            ProbabilityMap({}, [A])


if __name__ == "__main__":
    unittest.main()
