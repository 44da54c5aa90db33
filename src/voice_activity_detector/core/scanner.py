"""
Batch window scanning over whole audio buffers.

A scan partitions a buffer into consecutive, non-overlapping windows of one
duration, classifies each through a detector and returns one timestamped
record per window.
"""

import logging
import numbers
from typing import Iterable, Iterator, List, NamedTuple, Optional, TYPE_CHECKING

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .config import VoiceActivity, WindowDuration, samples_per_window
from .exceptions import (
    BufferAccessError,
    DetectorClosedError,
    InvalidWindowSizeError,
    SampleFormatError,
    VADError,
)
from .media import AudioSampleBuffer, MediaTime

if TYPE_CHECKING:
    from .detector import VoiceActivityDetector


logger = logging.getLogger(__name__)

BYTES_PER_SAMPLE = 2


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


class ActivityRecord(BaseModel):
    """Decision for one window of a scanned buffer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    offset_ms: int = Field(ge=0, description="Window start in milliseconds from the buffer start")
    presentation_time: MediaTime = Field(description="Presentation time of the window start")
    activity: VoiceActivity = Field(description="Decision for the window")

    @property
    def is_active(self) -> bool:
        return self.activity is VoiceActivity.ACTIVE


class _ScanPlan(NamedTuple):
    samples: np.ndarray
    window_ms: int
    window_samples: int
    window_count: int
    offset_ms: int
    base_time: MediaTime


class BatchWindowScanner:
    """
    Classifies a buffer window by window with a ``VoiceActivityDetector``.

    Scans share the detector's engine state with direct ``detect_window``
    calls and advance it in window order. Reset the detector first when
    results must be reproducible.
    """

    def __init__(self, detector: 'VoiceActivityDetector') -> None:
        self._detector = detector

    @property
    def detector(self) -> 'VoiceActivityDetector':
        return self._detector

    def _check_format(self, buffer: AudioSampleBuffer) -> None:
        sample_rate = int(self._detector.sample_rate)
        if (buffer.bits_per_sample != 16 or buffer.is_float or buffer.is_big_endian
                or buffer.channels != 1 or buffer.sample_rate != sample_rate):
            raise SampleFormatError(
                f"Buffer must be mono signed 16-bit little-endian PCM at {sample_rate} Hz",
                buffer.describe_format()
            )

    def _plan(
        self,
        buffer: AudioSampleBuffer,
        window_duration_ms: Optional[int],
        offset_ms: int,
        duration_ms: Optional[int],
        base_presentation_time: Optional[MediaTime]
    ) -> _ScanPlan:
        try:
            return self._validate(buffer, window_duration_ms, offset_ms, duration_ms, base_presentation_time)
        except VADError as e:
            self._detector._record(e)
            raise

    def _validate(
        self,
        buffer: AudioSampleBuffer,
        window_duration_ms: Optional[int],
        offset_ms: int,
        duration_ms: Optional[int],
        base_presentation_time: Optional[MediaTime]
    ) -> _ScanPlan:
        if self._detector.is_closed:
            raise DetectorClosedError()
        if not isinstance(buffer, AudioSampleBuffer):
            raise SampleFormatError(f"Expected an AudioSampleBuffer, got {type(buffer).__name__}")
        self._check_format(buffer)

        if window_duration_ms is None:
            window_duration_ms = int(self._detector.window_duration)
        durations = [int(d) for d in WindowDuration]
        if not _is_integer(window_duration_ms) or window_duration_ms not in durations:
            raise InvalidWindowSizeError(window_duration_ms, durations, "ms")
        window_duration_ms = int(window_duration_ms)

        raw = buffer.byte_view()
        if not _is_integer(offset_ms):
            raise BufferAccessError(offset_ms, raw.nbytes, f"Offset must be whole milliseconds, got {offset_ms!r}")
        if duration_ms is not None and not _is_integer(duration_ms):
            raise BufferAccessError(
                duration_ms,
                buffer.duration_ms,
                f"Duration must be whole milliseconds, got {duration_ms!r}"
            )
        offset_ms = int(offset_ms)

        sample_rate = int(self._detector.sample_rate)
        offset_bytes = offset_ms * sample_rate * BYTES_PER_SAMPLE // 1000
        if offset_ms < 0 or offset_bytes > raw.nbytes:
            raise BufferAccessError(
                offset_bytes,
                raw.nbytes,
                f"Offset {offset_ms} ms ({offset_bytes} bytes) lies outside the buffer of {raw.nbytes} bytes"
            )
        if duration_ms is not None and duration_ms < 0:
            raise BufferAccessError(duration_ms, buffer.duration_ms, f"Negative duration: {duration_ms} ms")

        available_samples = (raw.nbytes - offset_bytes) // BYTES_PER_SAMPLE
        available_ms = available_samples * 1000 // sample_rate
        requested_ms = available_ms if duration_ms is None else min(duration_ms, available_ms)
        window_count = requested_ms // window_duration_ms

        if available_samples:
            samples = np.frombuffer(raw, dtype='<i2', count=available_samples, offset=offset_bytes)
        else:
            samples = np.empty(0, dtype='<i2')
        base_time = buffer.presentation_time if base_presentation_time is None else base_presentation_time

        return _ScanPlan(
            samples=samples,
            window_ms=window_duration_ms,
            window_samples=samples_per_window(sample_rate, window_duration_ms),
            window_count=window_count,
            offset_ms=offset_ms,
            base_time=base_time,
        )

    def _run(self, plan: _ScanPlan) -> Iterator[ActivityRecord]:
        n = plan.window_samples
        for i in range(plan.window_count):
            window = plan.samples[i * n:(i + 1) * n]
            activity = self._detector.detect_window(window, n)
            elapsed = i * plan.window_ms
            yield ActivityRecord(
                offset_ms=plan.offset_ms + elapsed,
                presentation_time=plan.base_time + MediaTime.from_milliseconds(elapsed),
                activity=activity,
            )

    def iter_scan(
        self,
        buffer: AudioSampleBuffer,
        window_duration_ms: Optional[int] = None,
        offset_ms: int = 0,
        duration_ms: Optional[int] = None,
        base_presentation_time: Optional[MediaTime] = None
    ) -> Iterator[ActivityRecord]:
        """
        Like ``scan`` but yields records as windows are classified.

        Arguments are validated before this returns, so errors surface at the
        call rather than on first iteration.
        """
        plan = self._plan(buffer, window_duration_ms, offset_ms, duration_ms, base_presentation_time)
        return self._run(plan)

    def scan(
        self,
        buffer: AudioSampleBuffer,
        window_duration_ms: Optional[int] = None,
        offset_ms: int = 0,
        duration_ms: Optional[int] = None,
        base_presentation_time: Optional[MediaTime] = None
    ) -> List[ActivityRecord]:
        """
        Classify consecutive windows of ``buffer``.

        Args:
            buffer: Mono signed 16-bit PCM at the detector's sample rate
            window_duration_ms: 10, 20 or 30; defaults to the detector's
                configured window duration
            offset_ms: Where to start, in milliseconds from the buffer start
            duration_ms: How much audio to scan; clamped to what the buffer
                holds after ``offset_ms``. Defaults to all of it.
            base_presentation_time: Presentation time of the first window;
                defaults to the buffer's presentation time

        Returns:
            One record per whole window, in increasing offset order. Trailing
            audio shorter than a window is not classified.

        Raises:
            SampleFormatError: If the buffer format does not match
            InvalidWindowSizeError: If the window duration is not accepted
            BufferAccessError: If the offset lies outside the buffer
        """
        plan = self._plan(buffer, window_duration_ms, offset_ms, duration_ms, base_presentation_time)
        records = list(self._run(plan))
        logger.debug(
            f"Scanned {len(records)} windows of {plan.window_ms} ms "
            f"starting at {plan.offset_ms} ms"
        )
        return records

    def scan_source(
        self,
        source: Iterable[AudioSampleBuffer],
        window_duration_ms: Optional[int] = None
    ) -> Iterator[ActivityRecord]:
        """
        Scan every buffer produced by a media source, in order.

        Offsets are relative to the start of each buffer; presentation times
        come from each buffer. Each buffer is scanned on its own, so audio
        at the end of a buffer shorter than one window is not classified.
        Use buffer durations that are a multiple of the window duration
        (``WAVTrackReader``'s default of 960 ms suits 10, 20 and 30 ms) to
        cover every sample.
        """
        for buffer in source:
            yield from self.iter_scan(buffer, window_duration_ms=window_duration_ms)
