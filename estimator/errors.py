"""Custom exceptions for the estimation engine."""


class EstimatorError(Exception):
    """Base class for errors raised by the estimation engine."""
    pass


class InvalidContentError(EstimatorError, ValueError):
    """Content has neither usable text nor a valid video."""
    pass


class InvalidConfigError(EstimatorError, ValueError):
    """Raised when a compute function is handed an invalid EstimationConfig."""
    def __init__(self, detail: str, *, errors: list | None = None):
        super().__init__(detail)
        self.detail = detail
        self.errors = errors or []


class InvalidProfileError(EstimatorError, ValueError):
    """A learner profile mapping failed validation (e.g. completionRate out of range)."""
    def __init__(self, detail: str, *, errors: list | None = None):
        super().__init__(detail)
        self.detail = detail
        self.errors = errors or []
