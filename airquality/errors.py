"""
Error types for the Air Quality Map.

Classification errors are local to a single sample and never abort the
pipeline. Fetch errors are recoverable and turn into degraded mode.
"""


class AirQualityError(Exception):
    """Base class for all Air Quality Map errors."""


class InvalidSampleError(AirQualityError):
    """Raised when a sample value cannot be classified (NaN, Infinity, non-numeric)."""

    def __init__(self, value: object, reason: str = "value must be a finite number"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid sample value {value!r}: {reason}")


class DataFetchError(AirQualityError):
    """Raised when the remote sample collection cannot be fetched or parsed."""


class EmptyInputError(AirQualityError):
    """Raised by callers that require at least one sample to build an overlay."""
