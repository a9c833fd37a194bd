"""Data Validation Module for the Stock Predictor plugin.

This module provides price-file parsing, safe numeric conversion and
series validation used by the plugin before data reaches the forecaster.
"""

import logging
import math
import re
from typing import List, NamedTuple, Sequence

import pandas as pd

LOGGER = logging.getLogger(__name__)

MIN_FORECAST_DAYS = 1
MAX_FORECAST_DAYS = 180
DEFAULT_FORECAST_DAYS = 30

# Comma, semicolon or tab
_DELIMITERS = re.compile(r",|;|\t")


class PricePoint(NamedTuple):
    """One observation: ISO-ish date label and closing price."""

    date: str
    close: float


def safe_int(value, default=None):
    """Safely convert value to integer."""
    if value is None:
        return default
    try:
        if isinstance(value, str) and value.strip() == "":
            return default
        return int(float(value))
    except (ValueError, TypeError, OverflowError):
        return default


def safe_float(value, default=0.0):
    """Safely convert value to float."""
    if value is None:
        return default
    try:
        if isinstance(value, str) and value.strip() == "":
            return default
        return float(value)
    except (ValueError, TypeError):
        return default


class DataValidator:
    """Collects validation messages for a price series."""

    def __init__(self):
        self.errors = []
        self.warnings = []
        self.info = []

    def add_error(self, message):
        self.errors.append(message)
        LOGGER.error(f"VALIDATION ERROR: {message}")

    def add_warning(self, message):
        self.warnings.append(message)
        LOGGER.warning(f"VALIDATION WARNING: {message}")

    def add_info(self, message):
        self.info.append(message)
        LOGGER.info(f"VALIDATION INFO: {message}")

    def is_valid(self):
        """Check if validation passed (no errors)."""
        return not self.errors

    def get_summary(self):
        summary = []
        if self.errors:
            summary.append(f"{len(self.errors)} Error(s)")
        if self.warnings:
            summary.append(f"{len(self.warnings)} Warning(s)")
        return ", ".join(summary) or "All checks passed"

    def get_detailed_report(self):
        """Numbered errors, warnings and info under one banner."""
        lines = ["=" * 80, "PRICE DATA VALIDATION REPORT", "=" * 80, ""]
        for heading, messages in (("ERRORS (Must be fixed):", self.errors),
                                  ("WARNINGS (Review recommended):", self.warnings),
                                  ("INFORMATION:", self.info)):
            if messages:
                lines.append(heading)
                lines.extend(f"  {i}. {message}" for i, message in enumerate(messages, 1))
                lines.append("")
        lines.extend(["=" * 80, f"RESULT: {self.get_summary()}", "=" * 80])
        return "\n".join(lines)


def _find_columns(header_line: str):
    """Return (date_idx, close_idx) from a header line; the last match wins."""
    date_idx = None
    close_idx = None
    headers = [h.strip() for h in _DELIMITERS.split(header_line.lower())]
    for i, header in enumerate(headers):
        if "date" in header:
            date_idx = i
        if "close" in header or "price" in header:
            close_idx = i
    return date_idx, close_idx


def parse_price_csv(text: str) -> List[PricePoint]:
    """Parse delimited price text into points sorted by date.

    The header row must name a date column and a close (or price) column,
    matched case-insensitively. Rows with an empty date or a close that is
    not a finite number are dropped.
    """
    lines = re.split(r"\r?\n", text.strip())
    if not lines or not lines[0].strip():
        LOGGER.warning("Price file is empty")
        return []

    date_idx, close_idx = _find_columns(lines[0])
    if date_idx is None or close_idx is None:
        LOGGER.warning(f"Price file header has no date/close columns: {lines[0]!r}")
        return []

    rows = []
    dropped = 0
    for line in lines[1:]:
        parts = _DELIMITERS.split(line)
        date = parts[date_idx].strip() if date_idx < len(parts) else ""
        # Strict float(): trailing text such as "12.5 USD" drops the row
        close = safe_float(parts[close_idx], default=None) if close_idx < len(parts) else None
        if not date or close is None or not math.isfinite(close):
            dropped += 1
            continue
        rows.append((date, close))

    if dropped:
        LOGGER.debug(f"Dropped {dropped} unparseable price rows")

    df = pd.DataFrame(rows, columns=["date", "close"])
    df = df.sort_values("date", kind="mergesort")
    return [PricePoint(date, float(close)) for date, close in df.itertuples(index=False)]


def load_price_file(file_path: str) -> List[PricePoint]:
    """Read a CSV/TSV price file from disk and parse it."""
    with open(file_path, "r", encoding="utf-8-sig") as f:
        text = f.read()
    points = parse_price_csv(text)
    LOGGER.info(f"Loaded {len(points)} price points from {file_path}")
    return points


def finite_points(points: Sequence[PricePoint]) -> List[PricePoint]:
    """Drop points whose close is NaN or infinite."""
    return [p for p in points if math.isfinite(p.close)]


def clamp_forecast_days(value) -> int:
    """Coerce a user-entered horizon into [MIN_FORECAST_DAYS, MAX_FORECAST_DAYS]."""
    days = safe_int(value, default=MIN_FORECAST_DAYS)
    return max(MIN_FORECAST_DAYS, min(MAX_FORECAST_DAYS, days))


def validate_price_series(points: Sequence[PricePoint]) -> DataValidator:
    """Validate a price series before forecasting.

    Args:
        points: Sequence of PricePoint, expected to be sorted by date

    Returns:
        DataValidator: Validator with validation results
    """
    validator = DataValidator()

    if not points:
        validator.add_error("No price data loaded")
        return validator

    validator.add_info(f"Observations: {len(points)}")

    non_finite = sum(1 for p in points if not math.isfinite(p.close))
    if non_finite:
        validator.add_warning(f"{non_finite} observation(s) have non-finite close values and will be excluded")

    if len(points) < 5:
        validator.add_warning(
            f"Only {len(points)} observation(s) - hold-out RMSE may be undefined"
        )

    dates = [p.date for p in points]
    if any(a > b for a, b in zip(dates, dates[1:])):
        validator.add_warning("Dates are not in ascending order - fit assumes sorted input")
    else:
        validator.add_info(f"Date range: {dates[0]} to {dates[-1]}")

    return validator


def show_validation_dialog(validator, title="Price Data Validation", parent=None):
    """Show validation results in a dialog.

    Args:
        validator: DataValidator with validation results
        title: Dialog title
        parent: Parent widget

    Returns:
        bool: True if user accepts (or no errors), False if cancelled
    """
    try:
        from qgis.PyQt.QtWidgets import (QDialog, QVBoxLayout, QTextEdit,
                                         QPushButton, QHBoxLayout, QLabel)
        from qgis.PyQt.QtGui import QFont

        dialog = QDialog(parent)
        dialog.setWindowTitle(title)
        dialog.setMinimumSize(600, 400)

        layout = QVBoxLayout()

        summary_label = QLabel(validator.get_summary())
        if not validator.is_valid():
            summary_label.setStyleSheet("color: red; font-weight: bold;")
        elif validator.warnings:
            summary_label.setStyleSheet("color: orange; font-weight: bold;")
        else:
            summary_label.setStyleSheet("color: green; font-weight: bold;")
        layout.addWidget(summary_label)

        report_text = QTextEdit()
        report_text.setReadOnly(True)
        report_text.setFont(QFont("Courier New", 10))
        report_text.setText(validator.get_detailed_report())
        layout.addWidget(report_text)

        button_layout = QHBoxLayout()
        button_layout.addStretch()
        if not validator.is_valid():
            close_button = QPushButton("Close")
            close_button.clicked.connect(dialog.reject)
            button_layout.addWidget(close_button)
        else:
            cancel_button = QPushButton("Cancel")
            proceed_button = QPushButton("Proceed")
            cancel_button.clicked.connect(dialog.reject)
            proceed_button.clicked.connect(dialog.accept)
            button_layout.addWidget(cancel_button)
            button_layout.addWidget(proceed_button)

        layout.addLayout(button_layout)
        dialog.setLayout(layout)

        LOGGER.info(validator.get_detailed_report())

        result = dialog.exec_()

        if not validator.is_valid():
            return False

        return result == QDialog.Accepted

    except ImportError as e:
        LOGGER.debug(f"QGIS not available; skipping validation dialog: {e}")
        return validator.is_valid()
