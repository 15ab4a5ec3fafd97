from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .analysis import describe_transactions
from .backtest import BacktestConfig, rolling_backtest
from .data import load_transactions
from .logger import setup_logger
from .models import FORECASTERS, ArimaConfig
from .pipeline import ForecastConfig, clean_stage, forecast_stage
from .plots import write_report_pdf
from .series import OBSERVATION_END, OBSERVATION_START, build_daily_revenue


def summarize_transactions(df: pd.DataFrame) -> str:
    summary = describe_transactions(df)
    lines = ["Cleaned transactions:"]
    for key, value in summary.items():
        if isinstance(value, float):
            value = f"{value:,.2f}"
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)


def summarize_metrics(metrics: pd.DataFrame) -> str:
    if metrics.empty:
        return "No backtest folds were generated."

    lines: list[str] = []
    valid = metrics[metrics["wmape"].notna()]
    if valid.empty:
        return "Metrics contain only NaN values; inspect error column."

    aggregate = (
        valid.groupby("model")[["wmape", "mase", "coverage"]]
        .mean()
        .sort_values("wmape")
    )
    lines.append("Backtest accuracy (lower WMAPE/MASE is better):")
    lines.append(aggregate.to_string(float_format=lambda x: f"{x:.4f}"))

    failures = metrics[metrics["error"].str.len().gt(0)]
    if not failures.empty:
        lines.append("\nWarnings:")
        for _, row in failures.iterrows():
            lines.append(f"- {row['cutoff'].date()}: {row['model']} -> {row['error']}")

    return "\n".join(lines)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Clean a retail transaction log and project next-month revenue with a prediction interval.",
    )
    parser.add_argument(
        "--input-path",
        type=Path,
        required=True,
        help="Raw transaction file (CSV or XLSX), or the cleaned artifact with --from-cleaned.",
    )
    parser.add_argument(
        "--cleaned-path",
        type=Path,
        help="Where to write the cleaned transaction table (default: <input stem>_cleaned.csv next to the input).",
    )
    parser.add_argument(
        "--from-cleaned",
        action="store_true",
        help="Treat --input-path as an already cleaned artifact and skip reconciliation.",
    )
    parser.add_argument(
        "--model",
        choices=sorted(FORECASTERS),
        default="arima",
        help="Forecasting model (default: arima).",
    )
    parser.add_argument(
        "--horizon",
        type=int,
        help="Days to forecast (default: the rest of the month containing --end-date).",
    )
    parser.add_argument(
        "--confidence",
        type=float,
        default=0.95,
        help="Prediction interval confidence level (default: 0.95).",
    )
    parser.add_argument("--start-date", default=OBSERVATION_START, help=f"Series start (default: {OBSERVATION_START}).")
    parser.add_argument("--end-date", default=OBSERVATION_END, help=f"Series end (default: {OBSERVATION_END}).")
    parser.add_argument(
        "--no-seasonal",
        action="store_true",
        help="Skip the weekly seasonal terms in the ARIMA order search.",
    )
    parser.add_argument(
        "--backtest",
        action="store_true",
        help="Run a rolling backtest and forecast with the best model.",
    )
    parser.add_argument(
        "--min-train",
        type=int,
        default=365,
        help="Days of history before the first backtest fold (default: 365).",
    )
    parser.add_argument(
        "--metrics-output",
        type=Path,
        help="Optional path to write fold-level backtest metrics as CSV.",
    )
    parser.add_argument(
        "--forecast-output",
        type=Path,
        help="Optional path to write the daily forecast as CSV.",
    )
    parser.add_argument(
        "--report-pdf",
        type=Path,
        help="Optional path to write sales pattern and forecast charts as a PDF.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    setup_logger(level=args.log_level.upper())

    if args.from_cleaned:
        cleaned = load_transactions(args.input_path)
    else:
        cleaned = clean_stage(args.input_path, args.cleaned_path)

    print(summarize_transactions(cleaned))

    config = ForecastConfig(
        horizon=args.horizon,
        confidence=args.confidence,
        model=args.model,
        start_date=args.start_date,
        end_date=args.end_date,
        arima=ArimaConfig(seasonal=not args.no_seasonal),
    )

    if args.backtest:
        series = build_daily_revenue(cleaned, config.start_date, config.end_date)
        backtest_cfg = BacktestConfig(
            horizon=config.resolved_horizon(),
            min_train=args.min_train,
            confidence=config.confidence,
            arima=config.arima,
        )
        backtest_result = rolling_backtest(series, backtest_cfg)
        print()
        print(summarize_metrics(backtest_result.metrics))
        if backtest_result.best_model is not None:
            config.model = backtest_result.best_model
        if args.metrics_output:
            backtest_result.metrics.to_csv(args.metrics_output, index=False)
            print(f"\nSaved metrics to {args.metrics_output}")

    result = forecast_stage(cleaned, config)
    forecast = result.forecast

    model_note = forecast.model
    if forecast.fallback_from:
        model_note += f" (fallback from {forecast.fallback_from})"
    print(f"\nDaily forecast with {model_note}, {forecast.confidence:.0%} interval (first 10 rows):")
    print(forecast.frame.head(10).to_string(float_format=lambda x: f"{x:.2f}"))

    outlook = result.outlook
    print(f"\nExpected revenue for {outlook.target_month} (observed so far {outlook.observed:,.2f}):")
    print(f"  low:   {outlook.low:,.2f}")
    print(f"  point: {outlook.point:,.2f}")
    print(f"  high:  {outlook.high:,.2f}")

    if args.forecast_output:
        forecast.frame.to_csv(args.forecast_output)
        print(f"\nSaved forecast to {args.forecast_output}")

    if args.report_pdf:
        write_report_pdf(cleaned, result.series, forecast, args.report_pdf)
        print(f"Saved charts to {args.report_pdf}")


if __name__ == "__main__":
    main()
