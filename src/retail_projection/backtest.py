from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .metrics import interval_coverage, mase, wmape
from .models import ArimaConfig, forecast

logger = logging.getLogger(__name__)


@dataclass
class BacktestConfig:
    horizon: int = 22
    min_train: int = 365
    step: int = 30
    season_length: int = 7
    confidence: float = 0.95
    models: Sequence[str] = ("arima", "ets", "linear", "naive")
    arima: ArimaConfig = field(default_factory=ArimaConfig)


@dataclass
class BacktestResult:
    metrics: pd.DataFrame
    best_model: Optional[str]


def rolling_backtest(series: pd.Series, config: BacktestConfig) -> BacktestResult:
    """Evaluate each model on rolling forecast origins of a daily series."""
    records: List[dict] = []
    ordered = series.sort_index()

    if config.step < 1:
        raise ValueError(f"Backtest step must be positive, got {config.step}")

    for cutoff in range(config.min_train, len(ordered) - config.horizon + 1, config.step):
        train = ordered.iloc[:cutoff]
        actual = ordered.iloc[cutoff : cutoff + config.horizon].to_numpy(dtype=float)
        insample = train.to_numpy(dtype=float)
        cutoff_date = train.index[-1]

        for name in config.models:
            try:
                result = forecast(name, train, config.horizon, config.confidence, config.arima)
            except Exception as exc:  # noqa: BLE001
                logger.debug(f"Backtest fold {cutoff_date.date()} failed for {name}: {exc}")
                records.append(
                    {
                        "model": name,
                        "cutoff": cutoff_date,
                        "wmape": np.nan,
                        "mase": np.nan,
                        "coverage": np.nan,
                        "error": str(exc),
                    }
                )
                continue

            records.append(
                {
                    "model": name,
                    "cutoff": cutoff_date,
                    "wmape": wmape(actual, result.mean),
                    "mase": mase(actual, result.mean, insample, config.season_length),
                    "coverage": interval_coverage(actual, result.lower, result.upper),
                    "error": "",
                }
            )

    metrics = pd.DataFrame.from_records(
        records, columns=["model", "cutoff", "wmape", "mase", "coverage", "error"]
    )
    if metrics.empty:
        logger.warning(
            f"Series of {len(ordered)} days is too short for min_train={config.min_train} "
            f"and horizon={config.horizon}"
        )
        return BacktestResult(metrics=metrics, best_model=None)

    valid = metrics[metrics["wmape"].notna()]
    if valid.empty:
        return BacktestResult(metrics=metrics, best_model=None)

    scores = valid.groupby("model")["wmape"].mean().sort_values()
    best_model = str(scores.index[0])
    logger.info(f"Backtest selected {best_model} (mean WMAPE {scores.iloc[0]:.4f})")
    return BacktestResult(metrics=metrics, best_model=best_model)
