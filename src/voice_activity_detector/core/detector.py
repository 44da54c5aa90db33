"""
Voice activity detector session: the public API around the decision engine.
"""

import logging
import numbers
from typing import Optional, Callable, Union, Any, Dict, List, Sequence

import numpy as np
from pydantic import BaseModel, Field, ConfigDict, ValidationError

from .config import (
    DetectorConfig,
    SampleRate,
    DetectionAggressiveness,
    WindowDuration,
    VoiceActivity,
    samples_per_window,
    valid_sample_counts,
)
from .engine import DecisionEngine, WebRTCDecisionEngine
from .exceptions import (
    VADError,
    EngineAllocationError,
    ConfigurationError,
    InvalidWindowSizeError,
    SampleFormatError,
    BufferAccessError,
    DetectorClosedError,
)
from .media import AudioSampleBuffer, MediaTime
from .scanner import ActivityRecord, BatchWindowScanner


logger = logging.getLogger(__name__)

EngineFactory = Callable[[], DecisionEngine]
SampleInput = Union[np.ndarray, bytes, bytearray, memoryview, Sequence[int]]


class DetectorStatistics(BaseModel):
    """
    Processing statistics for a detector.

    Counts the windows classified since the last reset and keeps the last
    error raised to the caller.
    """
    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid"
    )

    windows_processed: int = Field(
        default=0,
        ge=0,
        description="Windows classified since the last reset"
    )

    active_windows: int = Field(
        default=0,
        ge=0,
        description="Windows classified as active since the last reset"
    )

    resets: int = Field(
        default=0,
        ge=0,
        description="Number of engine resets"
    )

    last_error: Optional[str] = Field(
        default=None,
        description="String representation of the last error raised"
    )

    @property
    def active_ratio(self) -> float:
        if self.windows_processed == 0:
            return 0.0
        return self.active_windows / self.windows_processed

    def record_window(self, activity: VoiceActivity) -> None:
        self.windows_processed += 1
        if activity is VoiceActivity.ACTIVE:
            self.active_windows += 1

    def reset_counters(self) -> None:
        self.windows_processed = 0
        self.active_windows = 0

    def record_error(self, error: Exception) -> None:
        self.last_error = str(error)

    def clear_error(self) -> None:
        self.last_error = None


class VoiceActivityDetector:
    """
    Classifies windows of mono 16-bit PCM audio as active speech or silence.

    The detector exclusively owns a stateful decision engine. Each successful
    classification advances the engine's adaptive state, so decisions depend
    on every window classified before them since the last ``reset``.
    Changing the sample rate or aggressiveness reconfigures the engine but
    keeps that state; call ``reset`` for reproducible results.

    A detector is not thread safe: use it from one thread at a time.

    Example:
        >>> with VoiceActivityDetector(sample_rate=16000) as vad:
        ...     vad.detect_window(np.zeros(160, dtype=np.int16))
        <VoiceActivity.INACTIVE: 0>
    """

    def __init__(
        self,
        sample_rate: Union[int, SampleRate] = SampleRate.SAMPLERATE_8,
        aggressiveness: Union[int, str, DetectionAggressiveness] = DetectionAggressiveness.QUALITY,
        engine_factory: EngineFactory = WebRTCDecisionEngine,
        window_duration: Union[int, WindowDuration] = WindowDuration.MSEC_30,
    ) -> None:
        """
        Create a detector and allocate its decision engine.

        Args:
            sample_rate: One of 8000, 16000, 32000 or 48000 Hz
            aggressiveness: Engine mode, 0 (quality) to 3 (very aggressive)
            engine_factory: Callable allocating the decision engine
            window_duration: Default window duration for batch scans

        Raises:
            ConfigurationError: If an initial value is not accepted
            EngineAllocationError: If the engine cannot be allocated
        """
        self._engine: Optional[DecisionEngine] = None
        self._statistics = DetectorStatistics()

        self._sample_rate = self._parse_sample_rate(sample_rate)
        self._aggressiveness = self._parse_aggressiveness(aggressiveness)
        try:
            self._window_duration = WindowDuration(window_duration)
        except ValueError:
            raise ConfigurationError(
                "window_duration",
                str(window_duration),
                f"Invalid value: {window_duration}, should be {WindowDuration.describe()}"
            )

        try:
            engine = engine_factory()
        except Exception as e:
            name = getattr(engine_factory, '__name__', repr(engine_factory))
            raise EngineAllocationError(name, f"Failed to allocate decision engine {name}: {e}") from e

        try:
            engine.set_mode(int(self._aggressiveness))
            engine.set_sample_rate(int(self._sample_rate))
        except ValueError as e:
            engine.close()
            raise ConfigurationError("engine", type(engine).__name__, str(e)) from e

        self._engine = engine
        logger.info(
            f"Voice activity detector created "
            f"(sample_rate={int(self._sample_rate)}, aggressiveness={self._aggressiveness.label})"
        )

    @classmethod
    def from_config(
        cls,
        config: DetectorConfig,
        engine_factory: EngineFactory = WebRTCDecisionEngine
    ) -> 'VoiceActivityDetector':
        """Create a detector from a ``DetectorConfig``."""
        return cls(
            sample_rate=config.sample_rate,
            aggressiveness=config.aggressiveness,
            engine_factory=engine_factory,
            window_duration=config.window_duration,
        )

    # ========================= Validation =========================

    @staticmethod
    def _parse_sample_rate(value: Any) -> SampleRate:
        message = f"Invalid value: {value}, should be {SampleRate.describe()}"
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise ConfigurationError("sample_rate", str(value), message)
        try:
            return SampleRate(int(value))
        except ValueError:
            raise ConfigurationError("sample_rate", str(value), message)

    @staticmethod
    def _parse_aggressiveness(value: Any) -> DetectionAggressiveness:
        if isinstance(value, numbers.Integral) and not isinstance(value, bool):
            value = int(value)
        try:
            return DetectionAggressiveness.parse(value)
        except ValueError:
            accepted = "|".join(str(int(m)) for m in DetectionAggressiveness)
            raise ConfigurationError(
                "aggressiveness",
                str(value),
                f"Invalid value: {value}, should be {accepted}"
            )

    def _ensure_open(self) -> DecisionEngine:
        if self._engine is None:
            raise DetectorClosedError()
        return self._engine

    def _record(self, error: VADError) -> VADError:
        self._statistics.record_error(error)
        return error

    @staticmethod
    def _as_window_view(samples: SampleInput) -> np.ndarray:
        """
        View caller samples as a 1-D int16 array.

        Arrays and byte buffers are viewed in place; only plain sequences of
        ints are converted.
        """
        if isinstance(samples, np.ndarray):
            if samples.dtype.kind != 'i' or samples.dtype.itemsize != 2:
                raise SampleFormatError(
                    f"Samples must be int16, got {samples.dtype}",
                    f"shape={samples.shape}"
                )
            if samples.ndim != 1:
                raise SampleFormatError(
                    f"Samples must be one-dimensional (mono), got {samples.ndim} dimensions",
                    f"shape={samples.shape}"
                )
            return samples

        if isinstance(samples, (bytes, bytearray, memoryview)):
            raw = memoryview(samples).cast('B')
            if raw.nbytes % 2:
                raise SampleFormatError(
                    f"PCM byte length must be even, got {raw.nbytes}",
                    "16-bit samples"
                )
            return np.frombuffer(raw, dtype='<i2')

        if isinstance(samples, (list, tuple)):
            try:
                values = np.asarray(samples, dtype=np.int64)
            except (TypeError, ValueError) as e:
                raise SampleFormatError(f"Samples must be integers: {e}")
            if values.ndim != 1:
                raise SampleFormatError("Samples must be a flat sequence (mono)")
            if values.size and (values.min() < -32768 or values.max() > 32767):
                raise SampleFormatError("Samples must fit in signed 16 bits")
            return values.astype(np.int16)

        raise SampleFormatError(f"Unsupported sample container: {type(samples).__name__}")

    # ========================= Configuration Management =========================

    @property
    def sample_rate(self) -> SampleRate:
        return self._sample_rate

    @property
    def aggressiveness(self) -> DetectionAggressiveness:
        return self._aggressiveness

    @property
    def window_duration(self) -> WindowDuration:
        return self._window_duration

    @property
    def config(self) -> DetectorConfig:
        """Snapshot of the current configuration."""
        return DetectorConfig(
            sample_rate=self._sample_rate,
            aggressiveness=self._aggressiveness,
            window_duration=self._window_duration,
        )

    @property
    def is_closed(self) -> bool:
        return self._engine is None

    def set_sample_rate(self, sample_rate: Union[int, SampleRate]) -> None:
        """
        Set the sample rate of the audio fed to the detector.

        The engine's adaptive state is kept; call ``reset`` to clear it.

        Raises:
            ConfigurationError: If the rate is not 8000, 16000, 32000 or 48000.
                The configuration is left unchanged.
        """
        engine = self._ensure_open()
        try:
            new_rate = self._parse_sample_rate(sample_rate)
        except ConfigurationError as e:
            raise self._record(e)

        try:
            engine.set_sample_rate(int(new_rate))
        except ValueError as e:
            raise self._record(ConfigurationError("sample_rate", str(sample_rate), str(e)))

        logger.debug(f"Sample rate changed from {int(self._sample_rate)} to {int(new_rate)}")
        self._sample_rate = new_rate

    def set_aggressiveness(self, aggressiveness: Union[int, str, DetectionAggressiveness]) -> None:
        """
        Set the engine aggressiveness mode.

        Accepts ordinals 0-3, ``DetectionAggressiveness`` members, enum names
        and labels. The engine's adaptive state is kept.

        Raises:
            ConfigurationError: If the value names no mode. The configuration
                is left unchanged.
        """
        engine = self._ensure_open()
        try:
            new_mode = self._parse_aggressiveness(aggressiveness)
        except ConfigurationError as e:
            raise self._record(e)

        try:
            engine.set_mode(int(new_mode))
        except ValueError as e:
            raise self._record(ConfigurationError("aggressiveness", str(aggressiveness), str(e)))

        logger.debug(f"Aggressiveness changed from {self._aggressiveness.label} to {new_mode.label}")
        self._aggressiveness = new_mode

    def update_config(self, config: DetectorConfig) -> None:
        """Apply every field of ``config``; fields are validated before any is applied."""
        if not isinstance(config, DetectorConfig):
            raise ConfigurationError("config", type(config).__name__, "Config must be a DetectorConfig instance")
        try:
            config = DetectorConfig.model_validate(config.to_dict())
        except ValidationError as e:
            raise self._record(ConfigurationError("config", str(config), str(e)))

        self.set_sample_rate(config.sample_rate)
        self.set_aggressiveness(config.aggressiveness)
        self._window_duration = config.window_duration

    def valid_sample_counts(self) -> List[int]:
        """Sample counts accepted per window at the current rate."""
        return valid_sample_counts(self._sample_rate)

    # ========================= State Management =========================

    def reset(self) -> None:
        """
        Clear the engine's adaptive state.

        Sample rate and aggressiveness are kept and re-applied to the engine.
        Window counters are cleared.
        """
        engine = self._ensure_open()
        engine.reset()
        engine.set_mode(int(self._aggressiveness))
        engine.set_sample_rate(int(self._sample_rate))

        self._statistics.reset_counters()
        self._statistics.resets += 1
        self._statistics.clear_error()
        logger.info("Voice activity detector state reset")

    def close(self) -> None:
        """Release the decision engine. Safe to call more than once."""
        engine, self._engine = self._engine, None
        if engine is not None:
            engine.close()
            logger.info("Voice activity detector closed")

    # ========================= Detection =========================

    def detect_window(
        self,
        samples: SampleInput,
        sample_count: Optional[int] = None
    ) -> VoiceActivity:
        """
        Classify one window of samples.

        Args:
            samples: Signed 16-bit mono samples (int16 array, raw little-endian
                PCM bytes, or a sequence of ints)
            sample_count: Samples to classify from the start of ``samples``;
                defaults to all of them. Must correspond to 10, 20 or 30 ms at
                the current rate, e.g. 80, 160 or 240 at 8 kHz.

        Returns:
            The decision for the window

        Raises:
            InvalidWindowSizeError: If ``sample_count`` is not an accepted size
            BufferAccessError: If ``samples`` holds fewer than ``sample_count``
            SampleFormatError: If ``samples`` is not 16-bit integer mono data
        """
        engine = self._ensure_open()
        try:
            window = self._as_window_view(samples)
        except SampleFormatError as e:
            raise self._record(e)

        count = len(window) if sample_count is None else sample_count
        valid_counts = self.valid_sample_counts()
        if isinstance(count, bool) or not isinstance(count, numbers.Integral) or count not in valid_counts:
            raise self._record(InvalidWindowSizeError(count, valid_counts, "samples"))
        count = int(count)

        if count > len(window):
            raise self._record(BufferAccessError(
                count,
                len(window),
                f"Window of {count} samples requested but only {len(window)} provided"
            ))

        try:
            speech = engine.process(window[:count])
        except ValueError as e:
            raise self._record(InvalidWindowSizeError(count, valid_counts, "samples", str(e)))

        activity = VoiceActivity.ACTIVE if speech else VoiceActivity.INACTIVE
        self._statistics.record_window(activity)
        logger.debug(f"Window of {count} samples classified as {activity.name}")
        return activity

    def detect_window_ms(self, samples: SampleInput, duration_ms: int) -> VoiceActivity:
        """
        Classify the first ``duration_ms`` milliseconds of ``samples``.

        Raises:
            InvalidWindowSizeError: If ``duration_ms`` is not 10, 20 or 30
        """
        self._ensure_open()
        durations = [int(d) for d in WindowDuration]
        if isinstance(duration_ms, bool) or not isinstance(duration_ms, numbers.Integral) \
                or duration_ms not in durations:
            raise self._record(InvalidWindowSizeError(duration_ms, durations, "ms"))

        return self.detect_window(samples, samples_per_window(self._sample_rate, duration_ms))

    def detect_batch(
        self,
        buffer: AudioSampleBuffer,
        window_duration_ms: Optional[int] = None,
        offset_ms: int = 0,
        duration_ms: Optional[int] = None,
        base_presentation_time: Optional[MediaTime] = None
    ) -> List[ActivityRecord]:
        """
        Classify consecutive windows of a whole buffer.

        See ``BatchWindowScanner.scan``.
        """
        return BatchWindowScanner(self).scan(
            buffer,
            window_duration_ms=window_duration_ms,
            offset_ms=offset_ms,
            duration_ms=duration_ms,
            base_presentation_time=base_presentation_time,
        )

    # ========================= Information and Statistics =========================

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get processing statistics.

        Example:
            >>> stats = vad.get_statistics()
            >>> print(f"Windows processed: {stats['windows_processed']}")
        """
        stats = self._statistics.model_dump()
        stats['active_ratio'] = self._statistics.active_ratio
        stats['is_closed'] = self.is_closed
        stats['config'] = self.config.to_dict()
        return stats

    def get_last_error(self) -> Optional[str]:
        return self._statistics.last_error

    # ========================= Context Management =========================

    def __enter__(self) -> 'VoiceActivityDetector':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass

    # ========================= String Representation =========================

    def __repr__(self) -> str:
        return (
            f"VoiceActivityDetector("
            f"sample_rate={int(self._sample_rate)}, "
            f"aggressiveness={int(self._aggressiveness)}, "
            f"closed={self.is_closed}"
            f")"
        )

    def __str__(self) -> str:
        status = "Closed" if self.is_closed else "Open"
        return (
            f"Voice Activity Detector - {status}\n"
            f"Sample Rate: {int(self._sample_rate)} Hz\n"
            f"Aggressiveness: {self._aggressiveness.label}\n"
            f"Windows Processed: {self._statistics.windows_processed}"
        )
