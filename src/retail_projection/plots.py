from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure

from .analysis import monthly_revenue, revenue_by_weekday
from .models import ForecastResult

logger = logging.getLogger(__name__)


def _axes(ax: Optional[Axes], figsize=(10, 6)) -> Axes:
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    return ax


def plot_daily_revenue(series: pd.Series, ax: Optional[Axes] = None, window: int = 7) -> Axes:
    ax = _axes(ax)
    ax.plot(series.index, series.to_numpy(), color="skyblue", linewidth=0.8, label="Daily revenue")
    rolling = series.rolling(window, min_periods=1).mean()
    ax.plot(rolling.index, rolling.to_numpy(), color="navy", label=f"{window}-day mean")
    ax.set_title("Daily revenue")
    ax.set_xlabel("Date")
    ax.set_ylabel("Revenue")
    ax.legend()
    ax.grid(True)
    return ax


def plot_monthly_revenue(df: pd.DataFrame, ax: Optional[Axes] = None) -> Axes:
    ax = _axes(ax)
    monthly = monthly_revenue(df)
    ax.bar([str(month) for month in monthly.index], monthly.to_numpy(), color="skyblue")
    ax.set_title("Monthly revenue")
    ax.set_xlabel("Month")
    ax.set_ylabel("Revenue")
    ax.tick_params(axis="x", labelrotation=90)
    ax.grid(True, axis="y")
    return ax


def plot_weekday_revenue(df: pd.DataFrame, ax: Optional[Axes] = None) -> Axes:
    ax = _axes(ax)
    by_day = revenue_by_weekday(df)
    ax.bar(by_day.index, by_day.to_numpy(), color="skyblue")
    ax.set_title("Revenue by weekday")
    ax.set_ylabel("Revenue")
    ax.grid(True, axis="y")
    return ax


def plot_forecast(
    series: pd.Series,
    result: ForecastResult,
    ax: Optional[Axes] = None,
    history_days: int = 90,
) -> Axes:
    ax = _axes(ax)
    history = series.iloc[-history_days:]
    ax.plot(history.index, history.to_numpy(), marker="o", markersize=3, color="skyblue", label="Observed")
    ax.plot(result.frame.index, result.mean.to_numpy(), linestyle="--", color="red", label=f"{result.model} forecast")
    ax.fill_between(
        result.frame.index,
        result.lower.to_numpy(),
        result.upper.to_numpy(),
        color="red",
        alpha=0.2,
        label=f"{result.confidence:.0%} prediction interval",
    )
    ax.set_title("Daily revenue forecast")
    ax.set_xlabel("Date")
    ax.set_ylabel("Revenue")
    ax.legend()
    ax.grid(True)
    return ax


def write_report_pdf(
    df: pd.DataFrame,
    series: pd.Series,
    result: Optional[ForecastResult],
    path: Path,
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    pages = [
        lambda ax: plot_daily_revenue(series, ax),
        lambda ax: plot_monthly_revenue(df, ax),
        lambda ax: plot_weekday_revenue(df, ax),
    ]
    if result is not None:
        pages.append(lambda ax: plot_forecast(series, result, ax))

    # Standalone figures render without touching the active pyplot backend.
    with PdfPages(path) as pdf:
        for draw in pages:
            fig = Figure(figsize=(10, 6))
            draw(fig.subplots())
            fig.tight_layout()
            pdf.savefig(fig)

    logger.info(f"Wrote {len(pages)} charts to {path}")
    return path
