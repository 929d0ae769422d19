# tests/test_engine.py

import random
import unittest

from autosweep.engine import MINE_CELL, Minesweeper


class TestMinesweeper(unittest.TestCase):

    def test_layout_clues(self):
        game = Minesweeper.from_layout(["*..", "..."])
        self.assertEqual(game.mines_count, 1)
        self.assertEqual(game.board[0][0], MINE_CELL)
        self.assertEqual(game.board[0][1], 1)
        self.assertEqual(game.board[1][0], 1)
        self.assertEqual(game.board[1][1], 1)
        self.assertEqual(game.board[0][2], 0)
        self.assertEqual(game.board[1][2], 0)

    def test_layout_rows_must_match(self):
        with self.assertRaises(ValueError):
            Minesweeper.from_layout(["*..", ".."])

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            Minesweeper(0, 5, 1)
        with self.assertRaises(ValueError):
            Minesweeper(5, 5, 1, "no_such_rule")
        with self.assertRaises(ValueError):
            Minesweeper(3, 3, 9)

    def test_flood_fill_cascade(self):
        game = Minesweeper.from_layout(["...", "...", "..*"])
        status, payload = game.reveal(0, 0)
        self.assertEqual(status, 1)
        revealed = {(r, c) for r, c, _ in payload["revealed_cells"]}
        self.assertEqual(len(revealed), 8)
        self.assertNotIn((2, 2), revealed)

    def test_mine_hit(self):
        game = Minesweeper.from_layout(["*.", ".."])
        status, payload = game.reveal(0, 0)
        self.assertEqual(status, -1)
        self.assertEqual(payload["all_mines"], frozenset({(0, 0)}))
        self.assertTrue(game.game_over)
        # further reveals are no-ops
        self.assertEqual(game.reveal(1, 1), (0, {"revealed_cells": []}))

    def test_safe_neighborhood_first_click(self):
        for seed in range(10):
            game = Minesweeper(9, 9, 10, "safe_neighborhood_rule", rng=random.Random(seed))
            status, _ = game.reveal(4, 4)
            self.assertIn(status, (0, 1))
            self.assertEqual(game.board[4][4], 0)
            self.assertEqual(len(game.mines()), 10)
            for pos in game.neighbors(4, 4):
                self.assertNotIn(pos, game.mines())

    def test_safe_first_action(self):
        for seed in range(10):
            game = Minesweeper(4, 4, 15, "safe_first_action_rule", rng=random.Random(seed))
            status, _ = game.reveal(0, 0)
            self.assertEqual(status, 1)
            self.assertEqual(len(game.mines()), 15)

    def test_seeded_placement_is_reproducible(self):
        a = Minesweeper(16, 16, 40, rng=random.Random(3))
        b = Minesweeper(16, 16, 40, rng=random.Random(3))
        a.reveal(8, 8)
        b.reveal(8, 8)
        self.assertEqual(a.mines(), b.mines())

    def test_reset_keeps_mines(self):
        game = Minesweeper(9, 9, 10, rng=random.Random(1))
        game.reveal(0, 0)
        mines = game.mines()
        game.reset()
        self.assertEqual(game.mines(), mines)
        self.assertEqual(game.unrevealed_count, 71)
        self.assertFalse(game.game_over)

    def test_format_board_plain(self):
        game = Minesweeper.from_layout(["*."])
        text = game.format_board(reveal_all=True, color=False)
        self.assertIn("M", text)
        self.assertNotIn("\033", text)


if __name__ == "__main__":
    unittest.main()
