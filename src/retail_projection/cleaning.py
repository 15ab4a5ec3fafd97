"""Outlier filtering and sales-return reconciliation."""

from __future__ import annotations

import logging
from typing import Iterator, Sequence, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Quantity bounds are exclusive; price is [low, high).
QUANTITY_BOUNDS: Tuple[int, int] = (-300, 300)
PRICE_BOUNDS: Tuple[float, float] = (0.0, 100.0)

MATCH_KEYS: Sequence[str] = ("StockCode", "Customer ID", "Price", "Country")

_MISSING_KEY = "<missing>"


def filter_outliers(
    df: pd.DataFrame,
    quantity_bounds: Tuple[int, int] = QUANTITY_BOUNDS,
    price_bounds: Tuple[float, float] = PRICE_BOUNDS,
) -> pd.DataFrame:
    q_low, q_high = quantity_bounds
    p_low, p_high = price_bounds
    if q_low >= q_high or p_low >= p_high:
        raise ValueError(f"Invalid bounds: quantity={quantity_bounds}, price={price_bounds}")

    mask = (
        df["Quantity"].gt(q_low)
        & df["Quantity"].lt(q_high)
        & df["Price"].ge(p_low)
        & df["Price"].lt(p_high)
    )
    filtered = df[mask].copy()
    logger.info(f"Outlier filter: removed {len(df) - len(filtered)} of {len(df)} rows")
    return filtered


def _key_tuples(frame: pd.DataFrame, quantity: pd.Series) -> Iterator[tuple]:
    # Missing customer ids must compare equal, which NaN does not.
    columns = [frame[key].astype(object).fillna(_MISSING_KEY) for key in MATCH_KEYS]
    return zip(*columns, quantity)


def matched_returns(df: pd.DataFrame) -> pd.Series:
    """Flag returns that have at least one exact-magnitude matching sale.

    A return matches a sale when stock code, customer, unit price and country
    are equal and the sale quantity is the negated return quantity. A return
    of 3 units against a sale of 5 does not match.
    """
    is_return = df["Quantity"].lt(0)
    sales = df[df["Quantity"].gt(0)]
    returns = df[is_return]

    sale_keys = set(_key_tuples(sales, sales["Quantity"]))
    probes = _key_tuples(returns, -returns["Quantity"])
    hits = np.zeros(len(df), dtype=bool)
    hits[is_return.to_numpy()] = [key in sale_keys for key in probes]
    return pd.Series(hits, index=df.index)


def reconcile_returns(df: pd.DataFrame) -> pd.DataFrame:
    """Drop returns whose originating sale is not in the table.

    An unmatched return is assumed to reference a sale made before the
    observation window.
    """
    working = df.dropna(subset=["Quantity"])
    if len(working) < len(df):
        logger.warning(f"Dropped {len(df) - len(working)} rows with missing quantity before reconciliation")

    is_return = working["Quantity"].lt(0)
    matched = matched_returns(working)
    reconciled = working[~is_return | matched].copy()

    kept = int(matched.sum())
    dropped = int(is_return.sum()) - kept
    logger.info(f"Return reconciliation: kept {kept} matched returns, dropped {dropped} unmatched returns")
    return reconciled


def clean_transactions(
    df: pd.DataFrame,
    quantity_bounds: Tuple[int, int] = QUANTITY_BOUNDS,
    price_bounds: Tuple[float, float] = PRICE_BOUNDS,
) -> pd.DataFrame:
    filtered = filter_outliers(df, quantity_bounds=quantity_bounds, price_bounds=price_bounds)
    return reconcile_returns(filtered)
