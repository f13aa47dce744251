import math
from datetime import date, datetime, timedelta, timezone

import numpy as np
import pytest
from scipy import stats

from market_gauge.data.schemas import PricePoint, RegressionResult, ValuationBand
from market_gauge.errors import DegenerateFitError, InsufficientDataError, InvalidInputError
from market_gauge.features.power_law import (
    analyze_power_law,
    build_price_points,
    classify_band,
    days_since,
    filter_valid_points,
    fit_power_law,
    linear_regression,
    power_law_advice,
    value_points,
)


def _power_law_points(days, intercept, slope):
    return [PricePoint(timestamp_days=d, price=math.exp(intercept + slope * math.log(d))) for d in days]


class TestLinearRegression:
    def test_recovers_exact_power_law(self):
        points = _power_law_points(range(366, 1500, 7), intercept=-17.0, slope=5.8)
        reg = fit_power_law(points, min_points=100)
        assert reg.slope == pytest.approx(5.8, abs=1e-6)
        assert reg.intercept == pytest.approx(-17.0, abs=1e-6)
        assert reg.r_squared == pytest.approx(1.0, abs=1e-9)
        assert reg.exact_fit

    def test_matches_scipy_linregress(self):
        rng = np.random.RandomState(7)
        x = np.log(np.arange(400, 600, dtype=float))
        y = 1.5 + 2.2 * x + rng.normal(0, 0.1, x.size)
        ours = linear_regression(x, y)
        ref = stats.linregress(x, y)
        assert ours.slope == pytest.approx(ref.slope, rel=1e-9)
        assert ours.intercept == pytest.approx(ref.intercept, rel=1e-9)
        assert ours.r_squared == pytest.approx(ref.rvalue**2, rel=1e-9)
        assert ours.n_points == x.size

    def test_sigma_is_population_rms_of_residuals(self):
        x = [1.0, 2.0, 3.0, 4.0]
        y = [1.0, 3.0, 2.0, 5.0]
        reg = linear_regression(x, y)
        residuals = [yi - (reg.intercept + reg.slope * xi) for xi, yi in zip(x, y)]
        assert reg.sigma == pytest.approx(math.sqrt(sum(r * r for r in residuals) / len(x)))

    def test_zero_x_variance_is_degenerate(self):
        with pytest.raises(DegenerateFitError):
            linear_regression([2.0, 2.0, 2.0], [1.0, 2.0, 3.0])

    def test_zero_y_variance_is_degenerate(self):
        with pytest.raises(DegenerateFitError):
            linear_regression([1.0, 2.0, 3.0], [5.0, 5.0, 5.0])

    def test_requires_two_points(self):
        with pytest.raises(InsufficientDataError):
            linear_regression([1.0], [1.0])

    def test_rejects_mismatched_lengths(self):
        with pytest.raises(InvalidInputError):
            linear_regression([1.0, 2.0], [1.0])

    def test_rejects_non_finite(self):
        with pytest.raises(InvalidInputError):
            linear_regression([1.0, 2.0, float("nan")], [1.0, 2.0, 3.0])


class TestBands:
    @pytest.mark.parametrize(
        "z, band",
        [
            (1.0, ValuationBand.FAIR),
            (1.0000001, ValuationBand.OVERVALUED),
            (2.0, ValuationBand.OVERVALUED),
            (2.0000001, ValuationBand.BUBBLE),
            (-1.0, ValuationBand.FAIR),
            (-1.0000001, ValuationBand.UNDERVALUED),
            (0.0, ValuationBand.FAIR),
        ],
    )
    def test_boundaries(self, z, band):
        assert classify_band(z) == band

    @pytest.mark.parametrize(
        "z, advice",
        [
            (2.6, "Extreme greed (consider selling)"),
            (2.5, "Normal market (hold)"),
            (-1.0, "Normal market (hold)"),
            (-1.01, "Undervalued (buying opportunity)"),
        ],
    )
    def test_advice(self, z, advice):
        assert power_law_advice(z) == advice


class TestValuation:
    def test_residuals_are_consistent(self):
        rng = np.random.RandomState(11)
        days = list(range(400, 900, 3))
        points = [
            PricePoint(timestamp_days=d, price=math.exp(-10 + 3 * math.log(d) + rng.normal(0, 0.3)))
            for d in days
        ]
        analysis = analyze_power_law(points, min_points=100)
        sigma = analysis.regression.sigma
        assert not analysis.regression.exact_fit
        for p in analysis.points:
            assert p.z_score == pytest.approx(p.residual / sigma)
            assert abs(p.fair_value - math.exp(p.expected_log_price)) < 1e-9
            assert p.residual == pytest.approx(p.log_price - p.expected_log_price)
            assert p.band == classify_band(p.z_score)

    def test_end_to_end_quadratic_growth(self):
        days = range(366, 3 * 365 + 1)
        points = [PricePoint(timestamp_days=d, price=100 * (d / 365) ** 2) for d in days]
        analysis = analyze_power_law(points)
        assert analysis.regression.slope == pytest.approx(2.0, abs=1e-9)
        assert analysis.regression.r_squared == pytest.approx(1.0, abs=1e-9)
        assert all(p.band == ValuationBand.FAIR for p in analysis.points)
        assert all(p.z_score == 0.0 for p in analysis.points)
        assert analysis.dropped == 0

    def test_invalid_points_are_dropped_before_fit(self):
        points = _power_law_points(range(400, 520), intercept=1.0, slope=2.0)
        points += [
            PricePoint(timestamp_days=600, price=0.0),
            PricePoint(timestamp_days=601, price=-3.0),
            PricePoint(timestamp_days=602, price=float("nan")),
        ]
        analysis = analyze_power_law(points, min_points=100)
        assert analysis.dropped == 3
        assert len(analysis.points) == 120

    def test_day_zero_is_invalid(self):
        valid, dropped = filter_valid_points([PricePoint(0, 10.0), PricePoint(5, 10.0)])
        assert dropped == 1
        assert valid == [PricePoint(5, 10.0)]

    def test_too_few_points(self):
        points = _power_law_points(range(400, 499), intercept=1.0, slope=2.0)
        with pytest.raises(InsufficientDataError) as exc:
            fit_power_law(points, min_points=100)
        assert exc.value.required == 100
        assert exc.value.available == 99

    def test_decreasing_timestamps_rejected(self):
        points = _power_law_points([500, 400, 600], intercept=1.0, slope=2.0)
        with pytest.raises(InvalidInputError):
            analyze_power_law(points, min_points=2)

    def test_value_points_rejects_non_positive_price(self):
        reg = RegressionResult(slope=2.0, intercept=1.0, r_squared=0.9, sigma=0.5)
        with pytest.raises(InvalidInputError):
            value_points([PricePoint(timestamp_days=10, price=0.0)], reg)

    def test_to_dict_tail(self):
        points = _power_law_points(range(400, 520), intercept=1.0, slope=2.0)
        payload = analyze_power_law(points, min_points=100).to_dict(tail=3)
        assert len(payload["data"]) == 3
        assert payload["data"][-1]["timestamp_days"] == 519
        assert payload["current"]["band"] == "fair"
        assert payload["regression"]["equation"].startswith("log(Price) = 1.000 + 2.000")


class TestPricePoints:
    def test_days_since_genesis(self):
        assert days_since(datetime(2010, 1, 3, tzinfo=timezone.utc), date(2009, 1, 3)) == 365
        assert days_since(date(2009, 1, 4), date(2009, 1, 3)) == 1

    def test_build_skips_gaps_and_early_days(self):
        genesis = date(2009, 1, 3)
        timestamps = [
            datetime(2009, 6, 1, tzinfo=timezone.utc),
            datetime(2010, 1, 3, tzinfo=timezone.utc),
            datetime(2010, 1, 10, tzinfo=timezone.utc),
            datetime(2010, 1, 17, tzinfo=timezone.utc),
        ]
        closes = [0.01, 0.3, None, float("nan")]
        points = build_price_points(timestamps, closes, genesis, min_days=365)
        assert points == [PricePoint(timestamp_days=365, price=0.3, date="2010-01-03")]

    def test_date_label_matches_day_count_across_timezones(self):
        new_york = timezone(timedelta(hours=-5))
        # 20:00 in New York is already the next day in UTC
        stamp = datetime(2010, 1, 2, 20, 0, tzinfo=new_york)
        points = build_price_points([stamp], [0.3], date(2009, 1, 3), min_days=365)
        assert points == [PricePoint(timestamp_days=365, price=0.3, date="2010-01-03")]
