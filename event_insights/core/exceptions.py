"""
Error taxonomy for the Insights Engine.

Only context-level problems are exceptions. A metric with too few data points
(insufficient data) and a zero-variance history (degenerate statistics) are
ordinary outcomes handled inside the detectors and never raised.

- InsightsEngineError: base class for everything raised by the engine
- MissingContextError: the current record cannot be located or analysed;
  the whole invocation is rejected
- DataQualityError: supporting records (history or peer pool) are missing
  identity fields; the engine reports it instead of returning insights
- RecordNotFoundError: the record source has no aggregate for an event id
  or partner id
"""

from typing import List


class InsightsEngineError(Exception):
    """Base class for Insights Engine errors."""


class MissingContextError(InsightsEngineError):
    """
    Raised when the current record lacks identity, partner affiliation,
    event date, or metric entries.

    This is a caller contract violation: without this context the engine
    cannot locate historical or benchmark data, so it refuses to produce
    partial results.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class DataQualityError(InsightsEngineError):
    """
    Raised when historical or benchmark records are missing mandatory
    identity fields.

    Attributes:
        problems: Human-readable description of each offending record.
    """

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__(
            f"{len(self.problems)} record(s) failed identity checks: "
            + "; ".join(self.problems)
        )


class RecordNotFoundError(InsightsEngineError):
    """Raised when no aggregate record exists for the requested event or partner."""

    def __init__(self, key: str, kind: str = "event"):
        self.key = key
        self.kind = kind
        super().__init__(f"{kind.capitalize()} {key} not found or analytics not yet aggregated")
