"""
Decision engine contract and the WebRTC implementation.

The engine is the stateful classifier that turns one window of PCM samples
into a speech/non-speech decision. Every ``process`` call advances its
adaptive state, so calls must be issued in stream order.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
import webrtcvad

from .config import SampleRate, DetectionAggressiveness


logger = logging.getLogger(__name__)


class DecisionEngine(ABC):
    """
    Opaque stateful classifier driven by a voice activity detector.

    Constructing an engine allocates it; ``close`` releases it. Invalid
    arguments raise ``ValueError`` and leave the engine unchanged.
    """

    @abstractmethod
    def set_mode(self, mode: int) -> None:
        """Set the aggressiveness mode (0-3)."""

    @abstractmethod
    def set_sample_rate(self, sample_rate: int) -> None:
        """Set the sample rate of the windows passed to ``process``."""

    @abstractmethod
    def reset(self) -> None:
        """Clear all adaptive state."""

    @abstractmethod
    def process(self, samples: np.ndarray) -> bool:
        """Classify one window of int16 samples; True means speech."""

    @abstractmethod
    def close(self) -> None:
        """Release the engine. Further calls are invalid."""


class WebRTCDecisionEngine(DecisionEngine):
    """Decision engine backed by the WebRTC VAD through ``webrtcvad``."""

    def __init__(self) -> None:
        self._mode = DetectionAggressiveness.QUALITY
        self._sample_rate = SampleRate.SAMPLERATE_8
        self._vad: Optional[webrtcvad.Vad] = webrtcvad.Vad(int(self._mode))

    @property
    def is_closed(self) -> bool:
        return self._vad is None

    def _require_vad(self) -> webrtcvad.Vad:
        if self._vad is None:
            raise ValueError("Decision engine has been released")
        return self._vad

    def set_mode(self, mode: int) -> None:
        vad = self._require_vad()
        try:
            mode = DetectionAggressiveness(mode)
        except ValueError:
            raise ValueError(f"{mode} is an invalid mode")
        vad.set_mode(int(mode))
        self._mode = mode

    def set_sample_rate(self, sample_rate: int) -> None:
        self._require_vad()
        try:
            self._sample_rate = SampleRate(sample_rate)
        except ValueError:
            raise ValueError(f"{sample_rate} is an invalid sample rate")

    def reset(self) -> None:
        self._require_vad()
        # webrtcvad exposes no reinitialisation, so start from a fresh instance
        self._vad = webrtcvad.Vad(int(self._mode))
        logger.debug("WebRTC engine state cleared")

    def process(self, samples: np.ndarray) -> bool:
        vad = self._require_vad()
        frame = np.ascontiguousarray(samples, dtype='<i2').tobytes()
        count = len(samples)
        if not webrtcvad.valid_rate_and_frame_length(int(self._sample_rate), count):
            raise ValueError(
                f"Invalid frame length {count} for sample rate {int(self._sample_rate)}"
            )
        try:
            return bool(vad.is_speech(frame, int(self._sample_rate), count))
        except Exception as e:
            raise ValueError(f"Error while processing frame: {e}") from e

    def close(self) -> None:
        self._vad = None

    def __repr__(self) -> str:
        return (
            f"WebRTCDecisionEngine("
            f"mode={int(self._mode)}, "
            f"sample_rate={int(self._sample_rate)}, "
            f"closed={self.is_closed}"
            f")"
        )
