"""Tests for the Stock Predictor plugin (non-QGIS execution)."""
import csv
import os
import sys
import tempfile
import unittest

# Add the repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import stock_predictor
from stock_predictor.forecast import ForecastResult
from stock_predictor.stock_predictor_plugin import StockPredictorPlugin


class TestStockPredictorPlugin(unittest.TestCase):
    """Test cases for StockPredictorPlugin."""

    def setUp(self):
        self.plugin = StockPredictorPlugin()
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def _write(self, name, text):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_defaults(self):
        self.assertEqual(self.plugin.forecast_days, 30)
        self.assertEqual(self.plugin.points, [])

    def test_class_factory(self):
        self.assertIsInstance(stock_predictor.classFactory(None), StockPredictorPlugin)

    def test_gui_hooks_without_qgis(self):
        self.plugin.initGui()
        self.plugin.unload()
        self.assertIsNone(self.plugin.action)

    def test_sample_forecast(self):
        self.plugin.load_sample(seed=11)
        result, rows = self.plugin.compute()

        self.assertEqual(len(result.predicted), 120)
        self.assertEqual(len(result.future), 30)
        self.assertEqual(len(rows), 150)
        self.assertTrue(all(r["actual"] is not None for r in rows[:120]))
        self.assertTrue(all(r["actual"] is None for r in rows[120:]))
        self.assertIsInstance(result.rmse, float)
        self.assertTrue(self.plugin.metric_text(result).startswith("RMSE on last 20%: "))

    def test_recompute_follows_horizon(self):
        self.plugin.load_sample(seed=2)
        self.assertEqual(self.plugin.set_forecast_days(500), 180)
        result, _ = self.plugin.compute()
        self.assertEqual(len(result.future), 180)
        self.assertEqual(self.plugin.set_forecast_days(0), 1)
        result, _ = self.plugin.compute()
        self.assertEqual(len(result.future), 1)

    def test_clear_gives_undefined_metric(self):
        self.plugin.load_sample(seed=2)
        self.plugin.clear()
        result, rows = self.plugin.compute()
        self.assertEqual(rows, [])
        self.assertIsNone(result.rmse)
        self.assertEqual(self.plugin.metric_text(result), "")

    def test_load_csv(self):
        path = self._write("prices.csv", "Date,Close\n2024-01-02,102\n2024-01-01,100\n2024-01-03,104\n")
        self.assertTrue(self.plugin.load_csv(path))
        self.plugin.set_forecast_days(2)
        result, rows = self.plugin.compute()
        self.assertAlmostEqual(result.model.slope, 2.0)
        self.assertEqual([r["date"] for r in rows], [
            "2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-05",
        ])
        self.assertEqual([r["predicted"] for r in rows[3:]], [106.0, 108.0])

    def test_load_csv_without_usable_rows(self):
        path = self._write("bad.csv", "day,value\n1,2\n")
        self.assertFalse(self.plugin.load_csv(path))
        self.assertEqual(self.plugin.points, [])

    def test_load_csv_missing_file(self):
        self.plugin.load_sample(seed=4)
        self.assertFalse(self.plugin.load_csv(os.path.join(self.tmpdir.name, "missing.csv")))
        self.assertEqual(len(self.plugin.points), 120)

    def test_export_results(self):
        path = self._write("prices.csv", "date,close\n2024-01-01,10\n2024-01-02,12\n")
        self.plugin.load_csv(path)
        self.plugin.set_forecast_days(1)
        out_path = os.path.join(self.tmpdir.name, "forecast.csv")

        self.assertTrue(self.plugin.export_results(out_path))
        with open(out_path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], ["date", "actual", "predicted"])
        self.assertEqual(rows[1], ["2024-01-01", "10.0", "10.0"])
        self.assertEqual(rows[3], ["2024-01-03", "", "14.0"])

    def test_export_without_path_outside_qgis(self):
        self.assertFalse(self.plugin.export_results())

    def test_create_forecast_plot(self):
        self.plugin.load_sample(seed=5)
        out_path = os.path.join(self.tmpdir.name, "charts", "forecast.png")
        self.assertTrue(self.plugin.create_forecast_plot(out_path))
        self.assertTrue(os.path.getsize(out_path) > 0)

    def test_plot_with_no_data(self):
        out_path = os.path.join(self.tmpdir.name, "empty.png")
        self.assertFalse(self.plugin.create_forecast_plot(out_path))
        self.assertFalse(os.path.exists(out_path))

    def test_run_without_qgis_uses_sample(self):
        result = self.plugin.run()
        self.assertIsInstance(result, ForecastResult)
        self.assertEqual(len(self.plugin.points), 120)


if __name__ == '__main__':
    unittest.main()
