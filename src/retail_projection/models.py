from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.stats import norm
from sklearn.linear_model import LinearRegression
from statsmodels.tsa.exponential_smoothing.ets import ETSModel
from statsmodels.tsa.statespace.sarimax import SARIMAX

logger = logging.getLogger(__name__)

FALLBACK_CHAIN: Sequence[str] = ("ses", "naive")


class ForecastError(RuntimeError):
    """Raised when no forecasting model could produce a result."""


@dataclass
class ArimaConfig:
    max_p: int = 2
    max_d: int = 1
    max_q: int = 2
    seasonal: bool = True
    max_P: int = 1
    max_D: int = 0
    max_Q: int = 1
    seasonal_period: int = 7


@dataclass
class ForecastResult:
    frame: pd.DataFrame
    model: str
    confidence: float
    fallback_from: Optional[str] = None

    @property
    def mean(self) -> pd.Series:
        return self.frame["mean"]

    @property
    def lower(self) -> pd.Series:
        return self.frame["lower"]

    @property
    def upper(self) -> pd.Series:
        return self.frame["upper"]


def _future_index(series: pd.Series, horizon: int) -> pd.DatetimeIndex:
    return pd.date_range(series.index[-1] + pd.Timedelta(days=1), periods=horizon, freq="D")


def _result(
    series: pd.Series,
    mean: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    model: str,
    confidence: float,
) -> ForecastResult:
    frame = pd.DataFrame(
        {
            "mean": np.asarray(mean, dtype=float),
            "lower": np.asarray(lower, dtype=float),
            "upper": np.asarray(upper, dtype=float),
        },
        index=_future_index(series, len(mean)),
    )
    if not np.isfinite(frame.to_numpy()).all():
        raise ForecastError(f"{model} produced non-finite forecasts")
    # Revenue cannot go negative.
    frame = frame.clip(lower=0.0)
    frame.index.name = "ds"
    return ForecastResult(frame=frame, model=model, confidence=confidence)


def _check_inputs(series: pd.Series, horizon: int, confidence: float) -> None:
    if horizon < 1:
        raise ValueError(f"Forecast horizon must be positive, got {horizon}")
    if not 0 < confidence < 1:
        raise ValueError(f"Confidence must be in (0, 1), got {confidence}")
    if series.empty:
        raise ForecastError("Cannot forecast an empty series")


def select_sarima_order(series: pd.Series, config: ArimaConfig) -> Tuple[Tuple[int, int, int], Tuple[int, int, int, int]]:
    best_aic = np.inf
    best_order = (1, 0, 0)
    best_seasonal = (0, 0, 0, 0)

    p_values = range(0, config.max_p + 1)
    d_values = range(0, config.max_d + 1)
    q_values = range(0, config.max_q + 1)

    seasonal_orders = [(0, 0, 0, 0)]
    if config.seasonal and config.seasonal_period > 1:
        seasonal_orders.extend(
            (P, D, Q, config.seasonal_period)
            for P in range(0, config.max_P + 1)
            for D in range(0, config.max_D + 1)
            for Q in range(0, config.max_Q + 1)
            if (P, D, Q) != (0, 0, 0)
        )

    for order in [(p, d, q) for p in p_values for d in d_values for q in q_values]:
        for seasonal_order in seasonal_orders:
            if order == (0, 0, 0) and seasonal_order == (0, 0, 0, 0):
                continue
            try:
                model = SARIMAX(
                    series,
                    order=order,
                    seasonal_order=seasonal_order,
                    enforce_stationarity=False,
                    enforce_invertibility=False,
                    initialization="approximate_diffuse",
                )
                fitted = model.fit(disp=False)
            except (ValueError, np.linalg.LinAlgError):
                continue
            if np.isfinite(fitted.aic) and fitted.aic < best_aic:
                best_aic = fitted.aic
                best_order = order
                best_seasonal = seasonal_order
    logger.debug(f"Selected SARIMA order {best_order} x {best_seasonal} (AIC={best_aic:.1f})")
    return best_order, best_seasonal


def forecast_arima(
    series: pd.Series,
    horizon: int,
    confidence: float = 0.95,
    config: Optional[ArimaConfig] = None,
) -> ForecastResult:
    _check_inputs(series, horizon, confidence)
    if config is None:
        config = ArimaConfig()
    values = series.astype(float)
    order, seasonal_order = select_sarima_order(values, config)
    model = SARIMAX(
        values,
        order=order,
        seasonal_order=seasonal_order,
        enforce_stationarity=False,
        enforce_invertibility=False,
        initialization="approximate_diffuse",
    )
    fitted = model.fit(disp=False)
    forecast = fitted.get_forecast(steps=horizon)
    interval = forecast.conf_int(alpha=1 - confidence)
    return _result(
        series,
        forecast.predicted_mean.to_numpy(),
        interval.iloc[:, 0].to_numpy(),
        interval.iloc[:, 1].to_numpy(),
        "arima",
        confidence,
    )


def _forecast_ets(
    series: pd.Series,
    horizon: int,
    confidence: float,
    name: str,
    **model_kwargs,
) -> ForecastResult:
    _check_inputs(series, horizon, confidence)
    values = series.astype(float)
    fitted = ETSModel(values, **model_kwargs).fit(disp=False)
    prediction = fitted.get_prediction(start=len(values), end=len(values) + horizon - 1)
    summary = prediction.summary_frame(alpha=1 - confidence)
    return _result(
        series,
        summary["mean"].to_numpy(),
        summary["pi_lower"].to_numpy(),
        summary["pi_upper"].to_numpy(),
        name,
        confidence,
    )


def forecast_ets(series: pd.Series, horizon: int, confidence: float = 0.95, season_length: int = 7) -> ForecastResult:
    if len(series) < 2 * season_length + 2:
        raise ValueError(f"ETS needs at least {2 * season_length + 2} observations, got {len(series)}")
    return _forecast_ets(
        series,
        horizon,
        confidence,
        "ets",
        error="add",
        trend="add",
        damped_trend=True,
        seasonal="add",
        seasonal_periods=season_length,
    )


def forecast_ses(series: pd.Series, horizon: int, confidence: float = 0.95) -> ForecastResult:
    return _forecast_ets(series, horizon, confidence, "ses", error="add", trend=None, seasonal=None)


def _linear_features(index: pd.DatetimeIndex, offset: int = 0) -> pd.DataFrame:
    features = pd.DataFrame({"time_index": np.arange(offset, offset + len(index), dtype=float)}, index=index)
    for day in range(1, 7):
        features[f"dow_{day}"] = (index.dayofweek == day).astype(float)
    return features


def forecast_linear(series: pd.Series, horizon: int, confidence: float = 0.95) -> ForecastResult:
    """Linear trend with day-of-week effects.

    The interval uses the residual standard error only, ignoring the
    uncertainty of the fitted coefficients.
    """
    _check_inputs(series, horizon, confidence)
    features = _linear_features(series.index)
    if len(series) <= features.shape[1] + 1:
        raise ValueError(f"Linear model needs more than {features.shape[1] + 1} observations")

    target = series.astype(float).to_numpy()
    model = LinearRegression()
    model.fit(features, target)
    residuals = target - model.predict(features)
    dof = len(target) - features.shape[1] - 1
    sigma = float(np.sqrt(np.sum(residuals**2) / dof))

    future = _linear_features(_future_index(series, horizon), offset=len(series))
    mean = model.predict(future)
    spread = norm.ppf(0.5 + confidence / 2) * sigma
    return _result(series, mean, mean - spread, mean + spread, "linear", confidence)


def forecast_naive(series: pd.Series, horizon: int, confidence: float = 0.95) -> ForecastResult:
    """Repeat the last value; the interval widens with the square root of the step."""
    _check_inputs(series, horizon, confidence)
    values = series.astype(float).to_numpy()
    changes = np.diff(values)
    sigma = float(np.std(changes, ddof=1)) if len(changes) > 1 else 0.0
    steps = np.arange(1, horizon + 1)
    mean = np.full(horizon, values[-1])
    spread = norm.ppf(0.5 + confidence / 2) * sigma * np.sqrt(steps)
    return _result(series, mean, mean - spread, mean + spread, "naive", confidence)


FORECASTERS: Dict[str, Callable[..., ForecastResult]] = {
    "arima": forecast_arima,
    "ets": forecast_ets,
    "linear": forecast_linear,
    "ses": forecast_ses,
    "naive": forecast_naive,
}


def forecast(
    name: str,
    series: pd.Series,
    horizon: int,
    confidence: float = 0.95,
    arima_config: Optional[ArimaConfig] = None,
) -> ForecastResult:
    if name not in FORECASTERS:
        raise ValueError(f"Unknown model {name!r}; expected one of {sorted(FORECASTERS)}")
    if name == "arima":
        return forecast_arima(series, horizon, confidence, config=arima_config)
    return FORECASTERS[name](series, horizon, confidence)


def forecast_with_fallback(
    name: str,
    series: pd.Series,
    horizon: int,
    confidence: float = 0.95,
    arima_config: Optional[ArimaConfig] = None,
) -> ForecastResult:
    """Forecast with ``name``, degrading to simpler models if it fails."""
    if name not in FORECASTERS:
        raise ValueError(f"Unknown model {name!r}; expected one of {sorted(FORECASTERS)}")
    _check_inputs(series, horizon, confidence)

    candidates = [name] + [fallback for fallback in FALLBACK_CHAIN if fallback != name]
    errors = []
    for candidate in candidates:
        try:
            result = forecast(candidate, series, horizon, confidence, arima_config)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Model {candidate} failed: {exc}")
            errors.append(f"{candidate}: {exc}")
            continue
        if candidate != name:
            result.fallback_from = name
            logger.warning(f"Using {candidate} forecast in place of {name}")
        return result

    raise ForecastError("All forecasting models failed: " + "; ".join(errors))
