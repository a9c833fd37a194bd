"""Tests for OLS fitting and the RMSE metric."""
import math
import unittest
import sys
import os
import numpy as np
import pandas as pd

# Add the repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from stock_predictor.regression import LinearModel, fit, rmse


class TestFit(unittest.TestCase):
    """Test cases for fit()."""

    def test_recovers_perfect_line(self):
        """A noiseless 3x + 7 line is recovered exactly for any n >= 2."""
        for n in (2, 3, 10, 250):
            xs = list(range(n))
            ys = [3 * x + 7 for x in xs]
            model = fit(xs, ys)
            self.assertAlmostEqual(model.slope, 3.0, delta=1e-9)
            self.assertAlmostEqual(model.intercept, 7.0, delta=1e-9)
            self.assertAlmostEqual(rmse(ys, [model.predict(x) for x in xs]), 0.0, delta=1e-9)

    def test_single_point_is_degenerate(self):
        model = fit([0], [5])
        self.assertEqual(model.slope, 0)
        self.assertEqual(model.intercept, 5)

    def test_identical_x_uses_mean(self):
        model = fit([2, 2, 2], [1.0, 2.0, 6.0])
        self.assertEqual(model.slope, 0)
        self.assertAlmostEqual(model.intercept, 3.0)

    def test_noisy_data_matches_normal_equations(self):
        xs = [0, 1, 2, 3]
        ys = [1.0, 3.0, 2.0, 5.0]
        model = fit(xs, ys)
        # Sx=6, Sy=11, Sxy=22, Sxx=14 -> m = (88 - 66) / (56 - 36) = 1.1
        self.assertAlmostEqual(model.slope, 1.1)
        self.assertAlmostEqual(model.intercept, (11 - 1.1 * 6) / 4)

    def test_mismatched_lengths_raise(self):
        with self.assertRaises(ValueError):
            fit([0, 1, 2], [1.0, 2.0])

    def test_empty_input_raises(self):
        with self.assertRaises(ValueError):
            fit([], [])

    def test_extrapolation_has_no_boundary_special_case(self):
        """predict() beyond the fitted range is just the line equation."""
        xs = list(range(6))
        ys = [10.0, 9.5, 9.7, 8.2, 8.0, 7.1]
        model = fit(xs, ys)
        last = xs[-1]
        for x in (last + 1, last + 30, -4, 2.5):
            self.assertAlmostEqual(model.predict(x), model.slope * x + model.intercept, delta=1e-12)

    def test_model_is_immutable(self):
        model = LinearModel(1.0, 2.0)
        with self.assertRaises(AttributeError):
            model.slope = 5.0
        self.assertEqual(model.predict(3), 5.0)


class TestRmse(unittest.TestCase):
    """Test cases for rmse()."""

    def test_known_value(self):
        self.assertAlmostEqual(rmse([0.0, 0.0], [3.0, 4.0]), math.sqrt(12.5))

    def test_identical_sequences_are_zero(self):
        values = [1.5, -2.0, 100.25]
        self.assertEqual(rmse(values, values), 0.0)

    def test_symmetric_and_non_negative(self):
        pairs = [
            ([1.0, 2.0, 3.0], [3.0, 2.0, 1.0]),
            ([-5.0], [5.0]),
            ([0.1, 0.2, 0.3, 0.4], [0.4, 0.1, 0.2, 0.3]),
        ]
        for a, b in pairs:
            self.assertEqual(rmse(a, b), rmse(b, a))
            self.assertGreaterEqual(rmse(a, b), 0.0)

    def test_empty_is_undefined(self):
        self.assertIsNone(rmse([], []))

    def test_mismatched_lengths_raise(self):
        with self.assertRaises(ValueError):
            rmse([1.0], [1.0, 2.0])


class TestArrayInputs(unittest.TestCase):
    """fit() and rmse() accept numpy arrays and pandas Series."""

    def test_fit_single_point_array(self):
        model = fit(np.array([0]), np.array([5.0]))
        self.assertEqual(model.slope, 0)
        self.assertEqual(model.intercept, 5.0)

    def test_fit_numpy_arrays(self):
        model = fit(np.arange(5), np.array([100.0, 102.0, 104.0, 106.0, 108.0]))
        self.assertAlmostEqual(model.slope, 2.0)
        self.assertAlmostEqual(model.intercept, 100.0)

    def test_fit_pandas_series(self):
        ys = pd.Series([7.0, 10.0, 13.0, 16.0], index=[10, 11, 12, 13])
        model = fit(pd.Series(range(4)), ys)
        self.assertAlmostEqual(model.slope, 3.0)
        self.assertAlmostEqual(model.intercept, 7.0)

    def test_fit_empty_array_raises(self):
        with self.assertRaises(ValueError):
            fit(np.array([]), np.array([]))

    def test_rmse_numpy_and_pandas(self):
        self.assertEqual(rmse(np.array([1.0, 2.0]), np.array([1.0, 2.0])), 0.0)
        self.assertAlmostEqual(rmse(pd.Series([0.0, 0.0]), pd.Series([3.0, 4.0])), math.sqrt(12.5))
        self.assertIsNone(rmse(np.array([]), np.array([])))


if __name__ == '__main__':
    unittest.main()
