from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

import pandas as pd

from .cleaning import PRICE_BOUNDS, QUANTITY_BOUNDS, clean_transactions
from .data import default_cleaned_path, load_transactions, save_cleaned
from .models import ArimaConfig, ForecastResult, forecast_with_fallback
from .series import (
    OBSERVATION_END,
    OBSERVATION_START,
    build_daily_revenue,
    days_left_in_month,
    revenue_in_month,
)

logger = logging.getLogger(__name__)


@dataclass
class ForecastConfig:
    # None forecasts the rest of the month containing end_date.
    horizon: Optional[int] = None
    confidence: float = 0.95
    model: str = "arima"
    start_date: str = OBSERVATION_START
    end_date: str = OBSERVATION_END
    arima: ArimaConfig = field(default_factory=ArimaConfig)

    def resolved_horizon(self) -> int:
        if self.horizon is not None:
            return self.horizon
        return days_left_in_month(self.end_date)


@dataclass
class RevenueOutlook:
    target_month: pd.Period
    observed: float
    low: float
    point: float
    high: float


@dataclass
class PipelineResult:
    series: pd.Series
    forecast: ForecastResult
    outlook: RevenueOutlook


def clean_stage(
    raw_path: Path,
    cleaned_path: Optional[Path] = None,
    quantity_bounds: Tuple[int, int] = QUANTITY_BOUNDS,
    price_bounds: Tuple[float, float] = PRICE_BOUNDS,
) -> pd.DataFrame:
    """Load, clean and persist the transaction log.

    The cleaned table is always written; without ``cleaned_path`` it lands
    next to the raw file as ``<stem>_cleaned.csv``.
    """
    raw = load_transactions(raw_path)
    cleaned = clean_transactions(raw, quantity_bounds=quantity_bounds, price_bounds=price_bounds)
    save_cleaned(cleaned, cleaned_path or default_cleaned_path(raw_path))
    return cleaned


def build_forecast(series: pd.Series, config: ForecastConfig) -> ForecastResult:
    horizon = config.resolved_horizon()
    if horizon < 1:
        raise ValueError(f"Nothing left to forecast after {config.end_date}; pass an explicit horizon")
    return forecast_with_fallback(config.model, series, horizon, config.confidence, config.arima)


def revenue_outlook(
    series: pd.Series,
    result: ForecastResult,
    target_month: Optional[Union[str, pd.Period]] = None,
) -> RevenueOutlook:
    """Expected revenue for a month: horizon totals plus revenue already observed."""
    if target_month is None:
        month = series.index[-1].to_period("M")
    else:
        month = pd.Period(target_month, freq="M")
    observed = revenue_in_month(series, month)

    return RevenueOutlook(
        target_month=month,
        observed=observed,
        low=float(result.lower.sum()) + observed,
        point=float(result.mean.sum()) + observed,
        high=float(result.upper.sum()) + observed,
    )


def forecast_stage(cleaned: pd.DataFrame, config: ForecastConfig) -> PipelineResult:
    series = build_daily_revenue(cleaned, config.start_date, config.end_date)
    result = build_forecast(series, config)
    outlook = revenue_outlook(series, result)
    logger.info(
        f"{outlook.target_month} revenue outlook ({result.model}): "
        f"{outlook.low:,.2f} / {outlook.point:,.2f} / {outlook.high:,.2f}"
    )
    return PipelineResult(series=series, forecast=result, outlook=outlook)


def run_pipeline(
    raw_path: Path,
    cleaned_path: Optional[Path] = None,
    config: Optional[ForecastConfig] = None,
) -> PipelineResult:
    config = config or ForecastConfig()
    cleaned = clean_stage(raw_path, cleaned_path)
    return forecast_stage(cleaned, config)
