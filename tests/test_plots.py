"""
Tests for the chart helpers.
"""

import importlib

import matplotlib
import matplotlib.pyplot as plt
import pandas as pd
import pytest

from retail_projection import plots
from retail_projection.models import forecast_naive
from retail_projection.plots import plot_daily_revenue, plot_forecast, write_report_pdf
from retail_projection.series import build_daily_revenue


@pytest.fixture
def series(synthetic_transactions):
    return build_daily_revenue(synthetic_transactions, "2011-10-01", "2011-12-09")


class TestPlots:
    """Test suite for the plotting helpers."""

    def test_plot_daily_revenue_draws_series_and_mean(self, series):
        ax = plot_daily_revenue(series)
        assert len(ax.get_lines()) == 2
        plt.close(ax.figure)

    def test_plot_forecast_uses_given_axes(self, series):
        fig, ax = plt.subplots()
        result = forecast_naive(series, horizon=22)
        returned = plot_forecast(series, result, ax=ax, history_days=30)
        assert returned is ax
        observed = ax.get_lines()[0]
        assert len(observed.get_xdata()) == 30
        assert "95% prediction interval" in [text.get_text() for text in ax.get_legend().get_texts()]
        plt.close(fig)

    def test_write_report_pdf(self, synthetic_transactions, series, tmp_path):
        """Report PDF is written with or without a forecast page."""
        result = forecast_naive(series, horizon=5)
        path = write_report_pdf(synthetic_transactions, series, result, tmp_path / "report" / "sales.pdf")
        assert path.exists()
        assert path.read_bytes().startswith(b"%PDF")

        no_forecast = write_report_pdf(synthetic_transactions, series, None, tmp_path / "eda.pdf")
        assert no_forecast.stat().st_size > 0

    def test_write_report_closes_figures(self, synthetic_transactions, series, tmp_path):
        before = len(plt.get_fignums())
        write_report_pdf(synthetic_transactions, series, None, tmp_path / "eda.pdf")
        assert len(plt.get_fignums()) == before

    def test_report_leaves_pyplot_backend_alone(self, synthetic_transactions, series, tmp_path):
        """Importing the module and writing a report keep the caller's backend."""
        before = matplotlib.get_backend()
        importlib.reload(plots)
        plots.write_report_pdf(synthetic_transactions, series, None, tmp_path / "eda.pdf")
        assert matplotlib.get_backend() == before
