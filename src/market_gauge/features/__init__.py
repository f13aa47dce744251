# Valuation, sentiment and correlation math
from .correlation import align_series, basket_correlations, pearson, percent_returns, rolling_correlation
from .power_law import analyze_power_law, classify_band, fit_power_law, linear_regression, value_points
from .sentiment import RawIndicator, composite_score, label_for_score, normalize_reading, score_or_fallback

__all__ = [
    "align_series",
    "basket_correlations",
    "pearson",
    "percent_returns",
    "rolling_correlation",
    "analyze_power_law",
    "classify_band",
    "fit_power_law",
    "linear_regression",
    "value_points",
    "RawIndicator",
    "composite_score",
    "label_for_score",
    "normalize_reading",
    "score_or_fallback",
]
