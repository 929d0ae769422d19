# tests/test_solver.py

import random
import unittest

from autosweep.board import Board
from autosweep.deduction import BUDGET_INFER, SINGLE_INFER
from autosweep.engine import Minesweeper
from autosweep.errors import ProofViolation
from autosweep.solver import (
    FIRST_MOVE,
    PROBABILISTIC_GUESS,
    ActionKind,
    MinesweeperSolver,
)


class TestSolverSteps(unittest.TestCase):

    def test_flag_then_budget(self):
        game = Minesweeper.from_layout(["..*.."])
        solver = MinesweeperSolver(Board(game), first_move=(0, 0))

        action = solver.step()
        self.assertEqual(action.kind, ActionKind.REVEALED)
        self.assertEqual((action.position, action.clue, action.method), ((0, 0), 0, FIRST_MOVE))
        self.assertAlmostEqual(action.probability, 0.2)
        self.assertFalse(action.is_guess)

        action = solver.step()
        self.assertEqual((action.kind, action.position, action.method),
                         (ActionKind.FLAGGED, (0, 2), SINGLE_INFER))

        action = solver.step()
        self.assertEqual((action.kind, action.position, action.clue, action.method),
                         (ActionKind.REVEALED, (0, 3), 1, BUDGET_INFER))

        action = solver.step()
        self.assertEqual((action.kind, action.position, action.clue),
                         (ActionKind.REVEALED, (0, 4), 0))

        action = solver.step()
        self.assertEqual(action.kind, ActionKind.SOLVED)
        self.assertTrue(action.is_terminal)
        # terminal state is sticky
        self.assertEqual(solver.step().kind, ActionKind.SOLVED)

        stats = solver.stats()
        self.assertEqual(stats["guesses_count"], 1)
        self.assertEqual(stats["flags_count"], 1)
        self.assertEqual(stats["reveal_moves_count"], 3)
        self.assertEqual(stats["inferred_counts"][SINGLE_INFER], 1)
        self.assertEqual(stats["inferred_counts"][BUDGET_INFER], 2)
        self.assertAlmostEqual(stats["luck"], 0.8)

    def test_fifty_fifty_loss(self):
        game = Minesweeper.from_layout(["*..", "..."])
        solver = MinesweeperSolver(Board(game), first_move=(0, 2))
        self.assertEqual(solver.step().clue, 0)

        action = solver.step()
        self.assertEqual(action.kind, ActionKind.GUESSED_AND_LOST)
        self.assertEqual(action.position, (0, 0))
        self.assertEqual(action.method, PROBABILISTIC_GUESS)
        self.assertEqual(action.probability, 0.5)
        self.assertTrue(action.is_guess)

        outcome = solver.run()
        self.assertFalse(outcome.won)
        self.assertEqual(outcome.position, (0, 0))

    def test_fifty_fifty_with_seeded_tie_break(self):
        outcomes = []
        for seed in range(20):
            game = Minesweeper.from_layout(["*..", "..."])
            solver = MinesweeperSolver(Board(game), rng=random.Random(seed), first_move=(0, 2))
            outcome = solver.run()
            guess = solver.moves_sequence[1][0]
            self.assertEqual(outcome.won, guess == (1, 0))
            outcomes.append(outcome.won)
        self.assertIn(True, outcomes)
        self.assertIn(False, outcomes)

    def test_mine_free_board_needs_no_guess(self):
        game = Minesweeper.from_mines(4, 3, [])
        outcome = MinesweeperSolver(Board(game)).run()
        self.assertTrue(outcome.won)
        self.assertIsNone(outcome.position)
        self.assertEqual(outcome.stats["guesses_count"], 0)
        self.assertEqual(outcome.stats["revealed_cells_count"], 12)

    def test_zero_cascade_wins_from_first_move(self):
        game = Minesweeper.from_layout(["...", "...", "..*"])
        outcome = MinesweeperSolver(Board(game), first_move=(0, 0)).run()
        self.assertTrue(outcome.won)
        self.assertEqual(outcome.stats["reveal_moves_count"], 1)

    def test_wrong_flag_breaks_the_proof(self):
        board = Board(Minesweeper.from_layout(["*.", ".."]))
        board.reveal((1, 1))
        board.flag((0, 1))
        with self.assertRaises(ProofViolation):
            MinesweeperSolver(board).step()

    def test_invalid_options(self):
        board = Board(Minesweeper.from_layout(["*."]))
        with self.assertRaises(ValueError):
            MinesweeperSolver(board, guessing_strategy="oracle")
        with self.assertRaises(ValueError):
            MinesweeperSolver(board, max_component_size=0)

    def test_record_steps(self):
        game = Minesweeper.from_layout(["..*.."])
        solver = MinesweeperSolver(Board(game), first_move=(0, 0), record_steps=True)
        solver.run()
        self.assertEqual(len(solver.steps_history), 4)
        self.assertEqual(solver.steps_history[1]["action"], "flagged")
        self.assertEqual(solver.steps_history[1]["snapshot"], [["0", "1", "F", ".", "."]])


class TestSolverGames(unittest.TestCase):

    def test_random_games_are_sound(self):
        wins = 0
        for seed in range(15):
            game = Minesweeper(9, 9, 10, "safe_neighborhood_rule", rng=random.Random(seed))
            solver = MinesweeperSolver.for_game(game, max_component_size=16)
            outcome = solver.run()

            mines = game.mines()
            for pos, kind, method in solver.moves_sequence:
                if kind == "flag":
                    self.assertIn(pos, mines)
            if outcome.won:
                wins += 1
                self.assertEqual(solver.board.hidden_count + solver.board.flagged_count, 10)
            else:
                self.assertIn(outcome.position, mines)
                self.assertEqual(solver.moves_sequence[-1][2], PROBABILISTIC_GUESS)
            self.assertGreater(outcome.stats["luck"], 0.0)
            self.assertLessEqual(outcome.stats["luck"], 1.0)
        self.assertGreater(wins, 0)

    def test_seeded_games_are_reproducible(self):
        runs = []
        for _ in range(2):
            game = Minesweeper(16, 16, 40, rng=random.Random(11))
            solver = MinesweeperSolver(Board(game), rng=random.Random(11), max_component_size=16)
            solver.run()
            runs.append(solver.moves_sequence)
        self.assertEqual(runs[0], runs[1])

    def test_local_density_strategy(self):
        game = Minesweeper(9, 9, 10, rng=random.Random(2))
        outcome = MinesweeperSolver(Board(game), guessing_strategy="local_density").run()
        self.assertIn(outcome.won, (True, False))
        self.assertGreaterEqual(outcome.stats["reveal_moves_count"], 1)


if __name__ == "__main__":
    unittest.main()
