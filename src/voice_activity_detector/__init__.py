"""
Voice Activity Detector
=======================

Classifies 10, 20 or 30 ms windows of mono 16-bit PCM audio as active speech
or silence using the WebRTC VAD engine, one window at a time or over whole
buffers with presentation timestamps.

Basic Usage:
    >>> from voice_activity_detector import VoiceActivityDetector, AudioSampleBuffer
    >>> import numpy as np
    >>>
    >>> vad = VoiceActivityDetector(sample_rate=8000, aggressiveness="aggressive")
    >>>
    >>> # Real-time path: one 10 ms window (80 samples at 8 kHz)
    >>> vad.detect_window(np.zeros(80, dtype=np.int16))
    <VoiceActivity.INACTIVE: 0>
    >>>
    >>> # Batch path: a whole buffer, 30 ms windows
    >>> buffer = AudioSampleBuffer.from_samples(np.zeros(800, dtype=np.int16), 8000)
    >>> [r.offset_ms for r in vad.detect_batch(buffer, 30)]
    [0, 30, 60]
    >>> vad.close()
"""

from .core.config import (
    DetectorConfig,
    SampleRate,
    DetectionAggressiveness,
    WindowDuration,
    VoiceActivity,
)
from .core.detector import VoiceActivityDetector
from .core.scanner import BatchWindowScanner, ActivityRecord
from .core.media import MediaTime, AudioSampleBuffer
from .core.engine import DecisionEngine, WebRTCDecisionEngine
from .core.exceptions import (
    VADError,
    EngineAllocationError,
    ConfigurationError,
    InvalidWindowSizeError,
    SampleFormatError,
    BufferAccessError,
    DetectorClosedError,
)
from .utils.audio import AudioUtils, WAVTrackReader

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "VoiceActivityDetector",
    "BatchWindowScanner",
    "DetectorConfig",
    "ActivityRecord",
    "MediaTime",
    "AudioSampleBuffer",
    "DecisionEngine",
    "WebRTCDecisionEngine",

    # Enums
    "SampleRate",
    "DetectionAggressiveness",
    "WindowDuration",
    "VoiceActivity",

    # Exceptions
    "VADError",
    "EngineAllocationError",
    "ConfigurationError",
    "InvalidWindowSizeError",
    "SampleFormatError",
    "BufferAccessError",
    "DetectorClosedError",

    # Utilities
    "AudioUtils",
    "WAVTrackReader",

    # Version info
    "__version__",
]

# Package metadata
__package_name__ = "voice-activity-detector"
__description__ = "Voice activity detection over 16-bit PCM windows using the WebRTC VAD engine"
__license__ = "MIT"
