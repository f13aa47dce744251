"""Error taxonomy for the valuation and sentiment engine.

Engine errors subclass ``ValueError`` so callers that already guard input
validation with ``except ValueError`` keep working. ``DataSourceError`` is kept
apart: it describes an upstream fetch failure, not bad input to the math.
"""


class MarketGaugeError(ValueError):
    """Base class for recoverable engine errors."""


class InsufficientDataError(MarketGaugeError):
    """Fewer valid points than the statistical minimum for a meaningful result."""

    def __init__(self, required: int, available: int, what: str = "points") -> None:
        self.required = required
        self.available = available
        super().__init__(f"need at least {required} valid {what}, got {available}")


class DegenerateFitError(MarketGaugeError):
    """Zero variance in the inputs leaves slope or r-squared undefined."""


class NoDataError(MarketGaugeError):
    """The composite scorer has no reading with a positive weight."""


class InvalidInputError(MarketGaugeError):
    """A caller contract violation, e.g. a non-positive value reaching a log transform."""


class DataSourceError(RuntimeError):
    """An upstream data source failed after all retries."""

    def __init__(self, source: str, detail: str) -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"{source}: {detail}")


__all__ = [
    "MarketGaugeError",
    "InsufficientDataError",
    "DegenerateFitError",
    "NoDataError",
    "InvalidInputError",
    "DataSourceError",
]
