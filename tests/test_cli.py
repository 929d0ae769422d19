# tests/test_cli.py

import contextlib
import io
import unittest

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt

from autosweep.analysis import (
    plot_difficulty_results,
    run_solver_difficulty_analysis,
    run_solver_many_tests,
    run_solver_single_test,
    summarize_inference_mix,
)
from autosweep.cli import build_parser, main
from autosweep.config import get_difficulty


class TestAnalysis(unittest.TestCase):

    def test_single_test_payload(self):
        payload = run_solver_single_test(9, 9, 10, seed=5, max_component_size=16)
        self.assertIn("won", payload)
        self.assertIn("loss_position", payload)
        self.assertGreaterEqual(payload["revealed_cells_count"], 1)

    def test_many_tests_summary(self):
        results = run_solver_many_tests(9, 9, 10, 4, seed=1, max_component_size=16)
        self.assertGreaterEqual(results["win_rate"], 0.0)
        self.assertLessEqual(results["win_rate"], 1.0)
        self.assertIn("avg_guesses_count", results)
        self.assertIn("avg_inferred_single_infer", results)

        mix = summarize_inference_mix({"beginner": results}, level="beginner")
        fractions = [v for k, v in mix.items() if k.endswith("_frac")]
        self.assertAlmostEqual(sum(fractions), 1.0)

    def test_many_tests_needs_runs(self):
        with self.assertRaises(ValueError):
            run_solver_many_tests(9, 9, 10, 0)

    def test_difficulty_analysis(self):
        results = run_solver_difficulty_analysis(
            1, seed=0, max_component_size=16, show_plots=False
        )
        self.assertEqual(list(results), ["beginner", "intermediate", "expert"])
        for metrics in results.values():
            self.assertIn(metrics["win_rate"], (0.0, 1.0))
            self.assertIn("avg_luck", metrics)

        plt.close("all")
        plot_difficulty_results(results)
        self.assertEqual(len(plt.get_fignums()), 3)
        plt.close("all")

    def test_unknown_difficulty(self):
        self.assertEqual(get_difficulty("Expert"), (30, 16, 99))
        with self.assertRaises(ValueError):
            get_difficulty("impossible")


class TestCli(unittest.TestCase):

    def test_parser(self):
        args = build_parser().parse_args(["beginner", "--iterations", "3", "--seed", "2"])
        self.assertEqual((args.mode, args.iterations, args.seed), ("beginner", 3, 2))
        self.assertEqual(args.strategy, "bayesian")

    def test_benchmark_mode(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(["beginner", "-i", "2", "-s", "0", "--max-component-size", "16"])
        self.assertEqual(code, 0)
        self.assertTrue(out.getvalue().startswith("Solved "))
        self.assertIn("/2 successful", out.getvalue())

    def test_single_game_mode(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(["beginner", "-s", "3", "--no-color", "--max-component-size", "16"])
        self.assertEqual(code, 0)
        self.assertIn("Solved: ", out.getvalue())
        self.assertNotIn("\033", out.getvalue())


if __name__ == "__main__":
    unittest.main()
