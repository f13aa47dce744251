import numpy as np
import pytest
from scipy import stats

from market_gauge.errors import InsufficientDataError, InvalidInputError
from market_gauge.features.correlation import (
    align_series,
    basket_correlations,
    correlate,
    pearson,
    percent_returns,
    return_pairs,
    rolling_correlation,
)


class TestPearson:
    def test_perfect_linear_relationship(self):
        x = [1.0, 2.0, 3.0, 4.0, 5.0]
        assert pearson(x, [2 * v + 1 for v in x]) == pytest.approx(1.0)
        assert pearson(x, [-3 * v + 7 for v in x]) == pytest.approx(-1.0)

    def test_symmetric_and_bounded(self):
        rng = np.random.RandomState(3)
        for _ in range(20):
            x = rng.normal(size=50)
            y = 0.4 * x + rng.normal(size=50)
            r = pearson(x, y)
            assert pearson(y, x) == r
            assert -1.0 <= r <= 1.0

    def test_matches_scipy(self):
        rng = np.random.RandomState(5)
        x = rng.normal(size=200)
        y = -0.7 * x + rng.normal(scale=0.5, size=200)
        assert pearson(x, y) == pytest.approx(stats.pearsonr(x, y)[0], abs=1e-9)

    def test_flat_series_reads_as_no_relationship(self):
        assert pearson([1.0, 2.0, 3.0], [5.0, 5.0, 5.0]) == 0.0
        assert pearson([4.0, 4.0], [4.0, 4.0]) == 0.0

    def test_input_contract(self):
        with pytest.raises(InvalidInputError):
            pearson([1.0, 2.0], [1.0, 2.0, 3.0])
        with pytest.raises(InsufficientDataError):
            pearson([1.0], [2.0])
        with pytest.raises(InvalidInputError):
            pearson([1.0, float("inf")], [1.0, 2.0])

    def test_correlate_reports_sample_size(self):
        result = correlate([1.0, 2.0, 3.0], [1.0, 2.0, 4.0])
        assert result.n == 3


class TestRollingCorrelation:
    def test_window_count_and_labels(self):
        rng = np.random.RandomState(9)
        x = list(rng.normal(size=40))
        y = list(rng.normal(size=40))
        dates = [f"d{i:02d}" for i in range(40)]
        rolling = rolling_correlation(dates, x, y, window=30)
        assert len(rolling) == 10
        assert rolling[0].date == "d30"
        assert rolling[-1].date == "d39"
        assert rolling[0].coefficient == pearson(x[0:30], y[0:30])

    def test_short_series_yields_nothing(self):
        assert rolling_correlation(["a", "b"], [1.0, 2.0], [2.0, 1.0], window=5) == []

    def test_rejects_bad_window(self):
        with pytest.raises(InvalidInputError):
            rolling_correlation(["a", "b", "c"], [1.0, 2.0, 3.0], [1.0, 2.0, 3.0], window=1)

    def test_rejects_unequal_lengths(self):
        with pytest.raises(InvalidInputError):
            rolling_correlation(["a", "b"], [1.0, 2.0, 3.0], [1.0, 2.0, 3.0], window=2)


class TestAlignmentAndReturns:
    def test_align_is_sorted_inner_join(self):
        left = {"2024-01-03": 3.0, "2024-01-01": 1.0, "2024-01-02": 2.0}
        right = {"2024-01-02": 5.0, "2024-01-03": 6.0, "2024-01-04": 7.0}
        assert align_series(left, right) == [("2024-01-02", 2.0, 5.0), ("2024-01-03", 3.0, 6.0)]

    def test_percent_returns(self):
        assert percent_returns([100.0, 110.0, 99.0]) == pytest.approx([10.0, -10.0])
        with pytest.raises(InvalidInputError):
            percent_returns([0.0, 1.0])

    def test_return_pairs_dated_by_later_day(self):
        aligned = [("d1", 100.0, 50.0), ("d2", 110.0, 45.0), ("d3", 121.0, 45.0)]
        pairs = return_pairs(aligned)
        assert [p.date for p in pairs] == ["d2", "d3"]
        assert pairs[0].x == pytest.approx(10.0)
        assert pairs[0].y == pytest.approx(-10.0)
        with pytest.raises(InsufficientDataError):
            return_pairs(aligned[:1])


def test_basket_ranked_by_absolute_correlation():
    days = [f"2024-01-{i:02d}" for i in range(1, 21)]
    base = {d: 100.0 + i + (i % 3) for i, d in enumerate(days)}
    rng = np.random.RandomState(1)
    basket = {
        "MIRROR": {d: 500.0 - v for d, v in base.items()},
        "NOISY": {d: 100.0 + rng.normal() for d in days},
        "LONELY": {"1999-01-01": 1.0},
    }
    ranked = basket_correlations(base, basket)
    assert [item["name"] for item in ranked] == ["MIRROR", "NOISY"]
    assert ranked[0]["value"] == pytest.approx(-1.0)
    assert ranked[0]["n"] == 20
