from __future__ import annotations

import logging
from typing import Union

import pandas as pd
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

OBSERVATION_START = "2009-12-01"
OBSERVATION_END = "2011-12-09"

DateLike = Union[str, pd.Timestamp]


def add_revenue(df: pd.DataFrame) -> pd.DataFrame:
    enriched = df.copy()
    enriched["Revenue"] = enriched["Quantity"] * enriched["Price"]
    return enriched


def build_daily_revenue(
    df: pd.DataFrame,
    start: DateLike = OBSERVATION_START,
    end: DateLike = OBSERVATION_END,
) -> pd.Series:
    """Sum positive line revenue per calendar day over ``[start, end]``.

    Days without sales are filled by linear interpolation between the nearest
    known days. Gaps at either end of the range take the nearest known value.
    """
    calendar = pd.date_range(pd.Timestamp(start).normalize(), pd.Timestamp(end).normalize(), freq="D")
    if calendar.empty:
        raise ValueError(f"Empty date range: {start} .. {end}")

    sales = add_revenue(df)
    sales = sales[sales["Revenue"] > 0]
    daily = sales.groupby(sales["InvoiceDate"].dt.normalize())["Revenue"].sum()

    series = daily.reindex(calendar)
    missing = int(series.isna().sum())
    if missing == len(series):
        raise ValueError(f"No positive revenue between {calendar[0].date()} and {calendar[-1].date()}")

    series = series.interpolate(method="linear", limit_area="inside").ffill().bfill()
    if missing:
        logger.info(f"Filled {missing} of {len(series)} days without sales by interpolation")

    series.index.name = "ds"
    series.name = "revenue"
    return series


def revenue_in_month(series: pd.Series, month: Union[str, pd.Period]) -> float:
    period = pd.Period(month, freq="M")
    in_month = series.index.to_period("M") == period
    return float(series[in_month].sum())


def days_left_in_month(date: DateLike) -> int:
    """Number of days after ``date`` up to and including its month end."""
    day = pd.Timestamp(date).normalize()
    next_month = day.replace(day=1) + relativedelta(months=1)
    return (next_month - day).days - 1
