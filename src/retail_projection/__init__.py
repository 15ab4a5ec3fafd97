"""Retail transaction cleaning, return reconciliation and daily revenue forecasting."""

from .backtest import BacktestConfig, BacktestResult, rolling_backtest
from .cleaning import clean_transactions, filter_outliers, matched_returns, reconcile_returns
from .data import load_transactions, save_cleaned
from .models import ArimaConfig, ForecastError, ForecastResult, forecast, forecast_with_fallback
from .pipeline import (
    ForecastConfig,
    PipelineResult,
    RevenueOutlook,
    build_forecast,
    clean_stage,
    forecast_stage,
    revenue_outlook,
    run_pipeline,
)
from .series import build_daily_revenue

__all__ = [
    "ArimaConfig",
    "BacktestConfig",
    "BacktestResult",
    "ForecastConfig",
    "ForecastError",
    "ForecastResult",
    "PipelineResult",
    "RevenueOutlook",
    "build_daily_revenue",
    "build_forecast",
    "clean_stage",
    "clean_transactions",
    "filter_outliers",
    "forecast",
    "forecast_stage",
    "forecast_with_fallback",
    "load_transactions",
    "matched_returns",
    "reconcile_returns",
    "revenue_outlook",
    "rolling_backtest",
    "run_pipeline",
    "save_cleaned",
]

__version__ = "0.1.0"
