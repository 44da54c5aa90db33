"""
Core modules for the voice activity detector library.
"""

from .config import (
    DetectorConfig,
    SampleRate,
    DetectionAggressiveness,
    WindowDuration,
    VoiceActivity,
)
from .engine import DecisionEngine, WebRTCDecisionEngine
from .media import MediaTime, AudioSampleBuffer
from .scanner import BatchWindowScanner, ActivityRecord
from .detector import VoiceActivityDetector, DetectorStatistics
from .exceptions import (
    VADError,
    EngineAllocationError,
    ConfigurationError,
    InvalidWindowSizeError,
    SampleFormatError,
    BufferAccessError,
    DetectorClosedError,
)

__all__ = [
    # Configuration
    "DetectorConfig",
    "SampleRate",
    "DetectionAggressiveness",
    "WindowDuration",
    "VoiceActivity",

    # Main classes
    "VoiceActivityDetector",
    "DetectorStatistics",
    "BatchWindowScanner",
    "ActivityRecord",
    "DecisionEngine",
    "WebRTCDecisionEngine",
    "MediaTime",
    "AudioSampleBuffer",

    # Exceptions
    "VADError",
    "EngineAllocationError",
    "ConfigurationError",
    "InvalidWindowSizeError",
    "SampleFormatError",
    "BufferAccessError",
    "DetectorClosedError",
]
