# tests/test_selector.py

import random
import unittest

from autosweep.probability import ProbabilityMap
from autosweep.selector import select_move


class TestSelectMove(unittest.TestCase):

    def setUp(self):
        self.pmap = ProbabilityMap(
            {(0, 0): 0.3, (0, 2): 0.1, (1, 1): 0.1},
            interior=[(2, 2)],
            interior_probability=0.2,
        )
        self.candidates = [(0, 0), (0, 2), (1, 1), (2, 2)]

    def test_minimum_with_row_major_tie_break(self):
        self.assertEqual(select_move(self.candidates, self.pmap), ((0, 2), 0.1))

    def test_seeded_tie_break(self):
        chosen = {
            select_move(self.candidates, self.pmap, random.Random(seed))[0]
            for seed in range(20)
        }
        self.assertTrue(chosen <= {(0, 2), (1, 1)})
        self.assertEqual(len(chosen), 2)

    def test_seeded_choice_is_reproducible(self):
        a = select_move(self.candidates, self.pmap, random.Random(4))
        b = select_move(self.candidates, self.pmap, random.Random(4))
        self.assertEqual(a, b)

    def test_interior_can_win(self):
        pmap = ProbabilityMap({(0, 0): 0.5}, interior=[(3, 3)], interior_probability=0.1)
        self.assertEqual(select_move([(0, 0), (3, 3)], pmap), ((3, 3), 0.1))

    def test_no_candidates(self):
        with self.assertRaises(ValueError):
            select_move([], self.pmap)

    def test_unknown_candidate(self):
        with self.assertRaises(KeyError):
            select_move([(5, 5)], self.pmap)


if __name__ == "__main__":
    unittest.main()
