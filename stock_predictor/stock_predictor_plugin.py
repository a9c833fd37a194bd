"""Stock Predictor Plugin for QGIS.

Fits a linear trend to historical closing prices (uploaded CSV or a
synthetic sample), reports the hold-out RMSE on the last 20% of the
series and projects prices for a chosen number of days.

The plugin avoids importing QGIS at top-level so it can be imported in a
normal Python environment (for testing).
"""
from __future__ import annotations
import csv
import logging
from typing import Any, Dict, List, Optional, Tuple

from .data_validation import (
    DEFAULT_FORECAST_DAYS,
    MAX_FORECAST_DAYS,
    MIN_FORECAST_DAYS,
    PricePoint,
    clamp_forecast_days,
    finite_points,
    load_price_file,
    show_validation_dialog,
    validate_price_series,
)
from .forecast import ForecastResult, build_chart_rows, evaluate
from .plotting import render_forecast_chart
from .sample_data import DEFAULT_SAMPLE_DAYS, generate_sample_series

LOGGER = logging.getLogger(__name__)

MENU_NAME = "&Stock Predictor"


class StockPredictorPlugin:
    def __init__(self, iface: Any = None):
        """Initialize plugin.

        iface: the QGIS interface object. When None, plugin still works for tests.
        """
        self.iface = iface
        self.action = None
        self.dialog = None

        self.points: List[PricePoint] = []
        self.forecast_days = DEFAULT_FORECAST_DAYS
        self.sample_days = DEFAULT_SAMPLE_DAYS
        self.plot_dpi = 150

        self.has_matplotlib = self._check_matplotlib()

    def _check_matplotlib(self) -> bool:
        """Check if matplotlib is available for chart output."""
        try:
            import matplotlib
            return True
        except ImportError:
            LOGGER.warning("matplotlib not detected - chart export disabled")
            LOGGER.warning("  Install with: pip install matplotlib")
            return False

    def initGui(self):
        """Create GUI elements (only when running inside QGIS)."""
        try:
            from qgis.PyQt.QtWidgets import QAction
            self.action = QAction("Stock Price Predictor", self.iface.mainWindow())
            self.action.triggered.connect(self.run)
            self.iface.addPluginToMenu(MENU_NAME, self.action)
            self.iface.addToolBarIcon(self.action)
        except (ImportError, AttributeError) as e:
            LOGGER.debug(f"QGIS not available; skipping GUI setup: {e}")

    def unload(self):
        """Cleanup GUI items. Guarded for non-QGIS execution."""
        if self.action and self.iface:
            self.iface.removePluginMenu(MENU_NAME, self.action)
            self.iface.removeToolBarIcon(self.action)
        self.action = None

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------

    def load_sample(self, seed: Optional[int] = None) -> List[PricePoint]:
        """Replace the current series with a synthetic one."""
        self.points = generate_sample_series(self.sample_days, seed=seed)
        return self.points

    def load_csv(self, file_path: str) -> bool:
        """Replace the current series with prices parsed from ``file_path``.

        Returns:
            bool: True if the file was read and the series is usable
        """
        try:
            points = load_price_file(file_path)
        except (OSError, UnicodeDecodeError) as e:
            LOGGER.error(f"Error reading price file {file_path}: {e}")
            self._show_message("critical", "Load Error", f"Failed to read price file:\n{e}")
            return False

        self.points = points
        validator = validate_price_series(points)
        if self.iface:
            return show_validation_dialog(validator, parent=self.iface.mainWindow())
        return validator.is_valid()

    def clear(self):
        self.points = []
        LOGGER.info("Cleared price series")

    def set_forecast_days(self, value) -> int:
        """Set the horizon, clamped to the supported range."""
        self.forecast_days = clamp_forecast_days(value)
        return self.forecast_days

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def compute(self) -> Tuple[ForecastResult, List[Dict]]:
        """Fit and forecast the current series from scratch.

        Returns:
            (ForecastResult, chart rows) - rows have actual=None for future dates
        """
        points = finite_points(self.points)
        result = evaluate([p.close for p in points], self.forecast_days)
        rows = build_chart_rows(points, result)
        if result.model is not None:
            LOGGER.info(
                f"Forecast: {len(result.predicted)} observed, {len(result.future)} future, "
                f"slope={result.model.slope:.4f}, intercept={result.model.intercept:.4f}, "
                f"{self.metric_text(result) or 'RMSE undefined'}"
            )
        return result, rows

    @staticmethod
    def metric_text(result: ForecastResult) -> str:
        """Display text for the hold-out metric, empty when it is undefined."""
        if result.rmse is None:
            return ""
        return f"RMSE on last 20%: {result.rmse:.3f}"

    def create_forecast_plot(self, output_path: Optional[str] = None) -> bool:
        """Render the current forecast chart to an image file."""
        if not self.has_matplotlib:
            self._show_message("critical", "Missing Dependency",
                               "matplotlib is required for plotting but not installed.\n\n"
                               "Install it with: pip install matplotlib")
            return False

        if output_path is None:
            output_path = self._ask_save_path("Save Forecast Chart", "stock_forecast.png",
                                              "PNG Images (*.png);;All Files (*)")
            if not output_path:
                return False

        result, rows = self.compute()
        created = render_forecast_chart(rows, output_path, rmse=result.rmse, dpi=self.plot_dpi)
        if created:
            self._show_message("information", "Chart Created", f"Forecast chart saved to:\n{output_path}")
        else:
            self._show_message("warning", "No Chart Created",
                               "No chart was created. Check the log for details.")
        return created

    def export_results(self, file_path: Optional[str] = None) -> bool:
        """Export date, actual and predicted columns to CSV.

        Future rows are written with an empty actual value.
        """
        if file_path is None:
            file_path = self._ask_save_path("Export Forecast to CSV", "stock_forecast.csv",
                                            "CSV Files (*.csv);;All Files (*)")
            if not file_path:
                return False

        _, rows = self.compute()
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as csvfile:
                writer = csv.writer(csvfile)
                writer.writerow(["date", "actual", "predicted"])
                for row in rows:
                    actual = "" if row["actual"] is None else row["actual"]
                    writer.writerow([row["date"], actual, row["predicted"]])
        except OSError as e:
            LOGGER.error(f"Error exporting forecast to CSV: {e}")
            self._show_message("critical", "Export Error", f"Failed to export forecast:\n{e}")
            return False

        LOGGER.info(f"Forecast exported to CSV: {file_path} ({len(rows)} rows)")
        self._show_message("information", "Export Successful", f"Forecast exported to:\n{file_path}")
        return True

    # ------------------------------------------------------------------
    # QGIS interaction
    # ------------------------------------------------------------------

    def _show_message(self, level: str, title: str, text: str):
        """Show a QMessageBox when running inside QGIS."""
        if not self.iface:
            return
        from qgis.PyQt.QtWidgets import QMessageBox
        getattr(QMessageBox, level)(self.iface.mainWindow(), title, text)

    def _ask_save_path(self, title: str, default_name: str, file_filter: str) -> Optional[str]:
        if not self.iface:
            LOGGER.error(f"{title}: no output path given and no QGIS interface to ask for one")
            return None
        from qgis.PyQt.QtWidgets import QFileDialog
        file_path, _ = QFileDialog.getSaveFileName(self.iface.mainWindow(), title,
                                                   default_name, file_filter)
        return file_path or None

    def run(self) -> Optional[ForecastResult]:
        """Run the Stock Predictor plugin."""
        if self.iface:
            self.show_main_dialog()
            return None

        # Non-QGIS execution - forecast the current (or a sample) series
        if not self.points:
            self.load_sample()
        result, _ = self.compute()
        LOGGER.info(f"Stock Predictor: {self.metric_text(result) or 'RMSE undefined'}")
        return result

    def show_main_dialog(self):
        """Data & controls dialog with a live results summary."""
        from qgis.PyQt.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QLabel,
                                         QPushButton, QSpinBox, QTextEdit, QFileDialog)

        dialog = QDialog(self.iface.mainWindow())
        dialog.setWindowTitle("Stock Price Predictor - Linear Regression")
        dialog.setMinimumSize(640, 480)
        self.dialog = dialog

        layout = QVBoxLayout()
        layout.addWidget(QLabel("Linear regression on historical closing prices with simple forecasting."))

        controls = QHBoxLayout()
        upload_button = QPushButton("Upload CSV (date, close)...")
        sample_button = QPushButton("Load sample")
        clear_button = QPushButton("Clear")
        controls.addWidget(upload_button)
        controls.addWidget(sample_button)
        controls.addWidget(clear_button)
        controls.addStretch()
        controls.addWidget(QLabel("Forecast days"))
        days_spin = QSpinBox()
        days_spin.setRange(MIN_FORECAST_DAYS, MAX_FORECAST_DAYS)
        days_spin.setValue(self.forecast_days)
        controls.addWidget(days_spin)
        layout.addLayout(controls)

        metric_label = QLabel("")
        layout.addWidget(metric_label)

        summary = QTextEdit()
        summary.setReadOnly(True)
        layout.addWidget(summary)

        def refresh():
            result, rows = self.compute()
            metric_label.setText(self.metric_text(result))
            summary.setPlainText(self._format_summary(result, rows))

        def on_upload():
            file_path, _ = QFileDialog.getOpenFileName(dialog, "Upload Price CSV", "",
                                                       "CSV Files (*.csv *.txt);;All Files (*)")
            if file_path:
                self.load_csv(file_path)
                refresh()

        def on_sample():
            self.load_sample()
            refresh()

        def on_clear():
            self.clear()
            refresh()

        def on_days(value):
            self.set_forecast_days(value)
            refresh()

        upload_button.clicked.connect(on_upload)
        sample_button.clicked.connect(on_sample)
        clear_button.clicked.connect(on_clear)
        days_spin.valueChanged.connect(on_days)

        buttons = QHBoxLayout()
        chart_button = QPushButton("Save Chart...")
        chart_button.clicked.connect(lambda: self.create_forecast_plot())
        chart_button.setEnabled(self.has_matplotlib)
        export_button = QPushButton("Export to CSV...")
        export_button.clicked.connect(lambda: self.export_results())
        close_button = QPushButton("Close")
        close_button.clicked.connect(dialog.accept)
        buttons.addWidget(chart_button)
        buttons.addWidget(export_button)
        buttons.addStretch()
        buttons.addWidget(close_button)
        layout.addLayout(buttons)

        dialog.setLayout(layout)

        if not self.points:
            self.load_sample()
        refresh()
        dialog.exec_()

    def _format_summary(self, result: ForecastResult, rows: List[Dict]) -> str:
        if result.model is None:
            return "No price data loaded."
        lines = [
            "STOCK PRICE FORECAST",
            "=" * 50,
            f"Observations: {len(result.predicted)}",
            f"Slope: {result.model.slope:.4f} per day",
            f"Intercept: {result.model.intercept:.4f}",
            self.metric_text(result) or "RMSE on last 20%: undefined (too few observations)",
            "",
            f"Forecast ({len(result.future)} days):",
        ]
        for row in rows[len(result.predicted):]:
            lines.append(f"  {row['date']}: {row['predicted']:.2f}")
        return "\n".join(lines)
