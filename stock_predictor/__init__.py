"""stock_predictor QGIS plugin package

Fits a linear trend to historical closing prices and forecasts future
prices, reporting the RMSE on the last 20% of the series.

The package is designed so it can be imported outside QGIS for testing.
"""

def classFactory(iface):
    """QGIS calls this to instantiate the main plugin."""
    # Import here to avoid QGIS dependency at module import time
    from .stock_predictor_plugin import StockPredictorPlugin
    return StockPredictorPlugin(iface)
