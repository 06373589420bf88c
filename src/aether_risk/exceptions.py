"""Exception hierarchy for the analytics engines.

Numeric degeneracy (empty series, zero variance, zero allocation) never
raises; these classes cover structurally invalid input and cancellation.
"""


class AnalyticsError(Exception):
    """Base class for all aether_risk errors."""


class ValidationError(AnalyticsError, ValueError):
    """Input is structurally invalid (not merely degenerate)."""


class MismatchedLengthError(ValidationError):
    """Two return series that must be aligned have different lengths."""

    def __init__(self, left_name: str, left_len: int, right_name: str, right_len: int):
        self.left_len = left_len
        self.right_len = right_len
        super().__init__(
            f"{left_name} length {left_len} doesn't match {right_name} length {right_len}"
        )


class SimulationCancelledError(AnalyticsError):
    """A Monte Carlo run was aborted through its cancel event."""

    def __init__(self, completed_trials: int, total_trials: int):
        self.completed_trials = completed_trials
        self.total_trials = total_trials
        super().__init__(
            f"Simulation cancelled after {completed_trials}/{total_trials} trials"
        )
