"""
Tests for pipeline orchestration and the monthly revenue outlook.
"""

import pandas as pd
import pytest

from retail_projection.data import load_transactions
from retail_projection.models import ForecastResult
from retail_projection.pipeline import (
    ForecastConfig,
    build_forecast,
    clean_stage,
    forecast_stage,
    revenue_outlook,
    run_pipeline,
)


class TestForecastConfig:
    """Test suite for ForecastConfig."""

    def test_default_horizon_is_rest_of_december(self):
        """The default window ends on 2011-12-09, leaving 22 days."""
        assert ForecastConfig().resolved_horizon() == 22

    def test_explicit_horizon_wins(self):
        assert ForecastConfig(horizon=5).resolved_horizon() == 5

    def test_configs_do_not_share_arima_settings(self):
        first, second = ForecastConfig(), ForecastConfig()
        first.arima.max_p = 0
        assert second.arima.max_p == 2


class TestRevenueOutlook:
    """Test suite for revenue_outlook."""

    @pytest.fixture
    def december(self):
        index = pd.date_range("2011-11-28", "2011-12-09", freq="D")
        return pd.Series(10.0, index=index, name="revenue")

    @pytest.fixture
    def result(self):
        index = pd.date_range("2011-12-10", "2011-12-31", freq="D")
        frame = pd.DataFrame({"mean": 5.0, "lower": 2.0, "upper": 9.0}, index=index)
        return ForecastResult(frame=frame, model="naive", confidence=0.95)

    def test_outlook_adds_observed_month_to_date(self, december, result):
        """low/point/high = horizon sums + revenue observed so far in December."""
        outlook = revenue_outlook(december, result)
        assert outlook.target_month == pd.Period("2011-12", freq="M")
        assert outlook.observed == pytest.approx(90.0)
        assert outlook.low == pytest.approx(22 * 2.0 + 90.0)
        assert outlook.point == pytest.approx(22 * 5.0 + 90.0)
        assert outlook.high == pytest.approx(22 * 9.0 + 90.0)

    def test_outlook_for_explicit_month(self, december, result):
        outlook = revenue_outlook(december, result, target_month="2011-11")
        assert outlook.observed == pytest.approx(30.0)
        assert outlook.point == pytest.approx(22 * 5.0 + 30.0)


class TestStages:
    """Test suite for clean_stage, forecast_stage and run_pipeline."""

    @pytest.fixture
    def config(self):
        return ForecastConfig(model="linear", start_date="2011-10-01", end_date="2011-12-09")

    def test_clean_stage_persists_artifact(self, raw_csv, tmp_path):
        """Cleaned table is written and can be reloaded unchanged."""
        cleaned_path = tmp_path / "out" / "cleaned.csv"
        cleaned = clean_stage(raw_csv, cleaned_path)

        assert cleaned_path.exists()
        reloaded = load_transactions(cleaned_path)
        assert len(reloaded) == len(cleaned)
        assert reloaded["Quantity"].tolist() == cleaned["Quantity"].tolist()

    def test_clean_stage_always_persists(self, raw_csv):
        """Without an explicit path the cleaned table is written beside the raw file."""
        cleaned = clean_stage(raw_csv)
        default_path = raw_csv.with_name("online_retail_cleaned.csv")
        assert default_path.exists()
        assert len(load_transactions(default_path)) == len(cleaned)

    def test_run_pipeline_persists_without_explicit_path(self, raw_csv, config):
        run_pipeline(raw_csv, config=config)
        assert raw_csv.with_name("online_retail_cleaned.csv").exists()

    def test_clean_stage_drops_unmatched_return(self, raw_csv):
        """Only the matched return survives cleaning."""
        cleaned = clean_stage(raw_csv)
        returns = cleaned[cleaned["Quantity"] < 0]
        assert returns["Invoice"].tolist() == ["C600001"]

    def test_forecast_stage_covers_rest_of_month(self, synthetic_transactions, config):
        """The forecast runs from the day after end_date to the month end."""
        result = forecast_stage(synthetic_transactions, config)

        assert result.series.index[0] == pd.Timestamp("2011-10-01")
        assert result.series.index[-1] == pd.Timestamp("2011-12-09")
        assert result.forecast.frame.index[0] == pd.Timestamp("2011-12-10")
        assert result.forecast.frame.index[-1] == pd.Timestamp("2011-12-31")
        assert result.forecast.model == "linear"

        outlook = result.outlook
        assert outlook.low <= outlook.point <= outlook.high
        assert outlook.low >= outlook.observed

    def test_build_forecast_with_nothing_left_in_month_raises(self, synthetic_transactions):
        """A window ending on a month end needs an explicit horizon."""
        config = ForecastConfig(model="naive", start_date="2011-10-01", end_date="2011-11-30")
        series = pd.Series(1.0, index=pd.date_range("2011-10-01", "2011-11-30", freq="D"))
        with pytest.raises(ValueError, match="explicit horizon"):
            build_forecast(series, config)

    def test_run_pipeline_end_to_end(self, raw_csv, tmp_path, config):
        result = run_pipeline(raw_csv, tmp_path / "cleaned.csv", config)
        assert (tmp_path / "cleaned.csv").exists()
        assert len(result.forecast.frame) == 22
        assert not result.series.isna().any()
