import numpy as np
import pandas as pd


def wmape(actual: pd.Series | np.ndarray, predicted: pd.Series | np.ndarray) -> float:
    """Absolute error summed over the fold, relative to total actual revenue."""
    actual_arr = np.asarray(actual, dtype=float)
    predicted_arr = np.asarray(predicted, dtype=float)
    denom = np.abs(actual_arr).sum()
    if denom == 0:
        return np.nan
    return float(np.abs(actual_arr - predicted_arr).sum() / denom)


def mase(
    actual: pd.Series | np.ndarray,
    predicted: pd.Series | np.ndarray,
    insample: pd.Series | np.ndarray,
    season_length: int,
) -> float:
    """Mean absolute error scaled by the in-sample seasonal naive error (weekly for daily revenue)."""
    insample_arr = np.asarray(insample, dtype=float)
    if season_length < 1:
        season_length = 1
    if insample_arr.size <= season_length:
        return np.nan
    denom = np.mean(np.abs(insample_arr[season_length:] - insample_arr[:-season_length]))
    if denom == 0:
        return np.nan
    actual_arr = np.asarray(actual, dtype=float)
    predicted_arr = np.asarray(predicted, dtype=float)
    mae = np.mean(np.abs(actual_arr - predicted_arr))
    return float(mae / denom)


def interval_coverage(
    actual: pd.Series | np.ndarray,
    lower: pd.Series | np.ndarray,
    upper: pd.Series | np.ndarray,
) -> float:
    """Share of actual values falling inside ``[lower, upper]``."""
    actual_arr = np.asarray(actual, dtype=float)
    if actual_arr.size == 0:
        return np.nan
    inside = (actual_arr >= np.asarray(lower, dtype=float)) & (actual_arr <= np.asarray(upper, dtype=float))
    return float(inside.mean())
