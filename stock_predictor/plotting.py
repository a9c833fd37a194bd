"""Chart rendering for forecast results.

matplotlib is imported lazily so the rest of the package works without it.
"""
from __future__ import annotations
import logging
import os
from typing import Dict, Optional, Sequence

LOGGER = logging.getLogger(__name__)


def render_forecast_chart(rows: Sequence[Dict], output_path: str, rmse: Optional[float] = None,
                          title: str = "Stock Price Forecast", dpi: int = 150) -> bool:
    """Draw actual vs predicted prices on a shared date axis and save to ``output_path``.

    Args:
        rows: chart rows from ``build_chart_rows`` (date, actual, predicted)
        output_path: image file to write; the extension picks the format
        rmse: hold-out error to annotate, skipped when None
        title: chart title
        dpi: output resolution

    Returns:
        bool: True if the image was written
    """
    if not rows:
        LOGGER.warning("No chart rows to plot")
        return False

    try:
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
    except ImportError as e:
        LOGGER.error(f"matplotlib not available: {e}")
        return False

    positions = list(range(len(rows)))
    labels = [row["date"] for row in rows]
    actual = [row["actual"] if row["actual"] is not None else float("nan") for row in rows]
    predicted = [row["predicted"] for row in rows]

    fig, ax = plt.subplots(figsize=(12, 6))
    try:
        ax.plot(positions, actual, color='black', linewidth=1.5, label='Actual')
        ax.plot(positions, predicted, color='tab:blue', linewidth=1.5,
                dashes=(4, 4), label='Predicted')

        # Thin out date ticks so labels stay legible
        step = max(1, len(labels) // 10)
        ax.set_xticks(positions[::step])
        ax.set_xticklabels(labels[::step], rotation=30, ha='right', fontsize=9)

        ax.set_xlabel('Date', fontsize=11)
        ax.set_ylabel('Close', fontsize=11)
        ax.set_title(title, fontsize=13, fontweight='bold')
        ax.grid(True, alpha=0.3, linestyle='--')
        ax.legend(loc='upper left', fontsize=10)

        if rmse is not None:
            ax.text(0.98, 0.97, f"RMSE on last 20%: {rmse:.3f}",
                    transform=ax.transAxes,
                    fontsize=9,
                    verticalalignment='top',
                    horizontalalignment='right',
                    bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.8))

        fig.tight_layout()

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        fig.savefig(output_path, dpi=dpi, bbox_inches='tight')
        LOGGER.info(f"Saved forecast chart: {output_path}")
        return True
    except (OSError, ValueError) as e:
        LOGGER.error(f"Error creating forecast chart: {e}")
        return False
    finally:
        plt.close(fig)
