"""
Custom exceptions for the voice activity detector library.
"""

from typing import Optional, Sequence


class VADError(Exception):
    """Base exception class for VAD-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class EngineAllocationError(VADError):
    """Raised when the decision engine cannot be allocated."""

    def __init__(self, engine_name: str, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Failed to allocate decision engine: {engine_name}"
        super().__init__(message, "ENGINE_ALLOCATION_ERROR")
        self.engine_name = engine_name


class ConfigurationError(VADError):
    """Raised when a sample rate or aggressiveness value is rejected."""

    def __init__(self, parameter: str, value: str, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Invalid configuration for parameter '{parameter}': {value}"
        super().__init__(message, "CONFIGURATION_ERROR")
        self.parameter = parameter
        self.value = value


class InvalidWindowSizeError(VADError):
    """Raised when a window does not match an accepted size for the current rate."""

    def __init__(
        self,
        value: int,
        valid_values: Sequence[int],
        unit: str = "samples",
        message: Optional[str] = None
    ) -> None:
        self.value = value
        self.valid_values = tuple(valid_values)
        self.unit = unit
        if message is None:
            expected = "|".join(str(v) for v in self.valid_values)
            message = f"Invalid window size {value} {unit}: should be {expected}"
        super().__init__(message, "INVALID_WINDOW_SIZE")


class SampleFormatError(VADError):
    """Raised when audio data is not mono signed 16-bit PCM as expected."""

    def __init__(self, message: str, format_info: Optional[str] = None) -> None:
        super().__init__(message, "SAMPLE_FORMAT_ERROR")
        self.format_info = format_info


class BufferAccessError(VADError):
    """Raised when a requested offset or window lies outside the available buffer."""

    def __init__(self, requested: int, available: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Requested position {requested} exceeds available length {available}"
        super().__init__(message, "BUFFER_ACCESS_ERROR")
        self.requested = requested
        self.available = available


class DetectorClosedError(VADError):
    """Raised when a detector is used after its engine has been released."""

    def __init__(self, message: str = "Voice activity detector is closed") -> None:
        super().__init__(message, "DETECTOR_CLOSED")
