"""
Media timing and sample buffer models.

``MediaTime`` is a rational timestamp (``value / timescale`` seconds), the
same representation media frameworks use for presentation times, so adding
window durations never accumulates floating point drift.
``AudioSampleBuffer`` describes one buffer handed over by a media source.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, Optional, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator, ConfigDict


class MediaTime(BaseModel):
    """Rational presentation timestamp."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: int = Field(default=0, description="Time in units of 1/timescale seconds")
    timescale: int = Field(default=1000, gt=0, description="Units per second")

    @classmethod
    def zero(cls, timescale: int = 1000) -> MediaTime:
        return cls(value=0, timescale=timescale)

    @classmethod
    def from_milliseconds(cls, milliseconds: int) -> MediaTime:
        return cls(value=int(milliseconds), timescale=1000)

    @classmethod
    def from_seconds(cls, seconds: Union[float, int, Fraction], timescale: int = 1000) -> MediaTime:
        """Build a timestamp, rounding ``seconds`` to the nearest unit of ``timescale``."""
        return cls(value=round(Fraction(seconds) * timescale), timescale=timescale)

    @property
    def seconds(self) -> float:
        return self.value / self.timescale

    def as_fraction(self) -> Fraction:
        return Fraction(self.value, self.timescale)

    def convert_scale(self, timescale: int) -> MediaTime:
        """Express this time in another timescale, rounding to the nearest unit."""
        return MediaTime(value=round(self.as_fraction() * timescale), timescale=timescale)

    def _common_scale(self, other: MediaTime) -> int:
        if self.timescale == other.timescale:
            return self.timescale
        return math.lcm(self.timescale, other.timescale)

    def __add__(self, other: Any) -> MediaTime:
        if not isinstance(other, MediaTime):
            return NotImplemented
        scale = self._common_scale(other)
        value = (self.value * (scale // self.timescale)
                 + other.value * (scale // other.timescale))
        return MediaTime(value=value, timescale=scale)

    def __sub__(self, other: Any) -> MediaTime:
        if not isinstance(other, MediaTime):
            return NotImplemented
        return self + MediaTime(value=-other.value, timescale=other.timescale)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, MediaTime):
            return NotImplemented
        return self.as_fraction() == other.as_fraction()

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, MediaTime):
            return NotImplemented
        return self.as_fraction() < other.as_fraction()

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, MediaTime):
            return NotImplemented
        return self.as_fraction() <= other.as_fraction()

    def __hash__(self) -> int:
        return hash(self.as_fraction())

    def __str__(self) -> str:
        return f"{self.value}/{self.timescale}s"


class AudioSampleBuffer(BaseModel):
    """
    One buffer of raw audio bytes plus its format and presentation time.

    ``data`` may be any C-contiguous object supporting the buffer protocol
    (``bytes``, ``bytearray``, ``memoryview``, numpy array). It is kept as
    given and never copied.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid"
    )

    data: Any = Field(description="Raw PCM bytes or any contiguous buffer")
    sample_rate: int = Field(gt=0, description="Sample rate in Hz")
    bits_per_sample: int = Field(default=16, gt=0)
    channels: int = Field(default=1, gt=0)
    is_float: bool = Field(default=False)
    is_big_endian: bool = Field(default=False)
    presentation_time: MediaTime = Field(default_factory=MediaTime.zero)

    @field_validator('data')
    @classmethod
    def validate_buffer(cls, v: Any) -> Any:
        """Validate that data exposes a contiguous buffer."""
        try:
            view = memoryview(v)
        except TypeError:
            raise ValueError(f"Audio data must support the buffer protocol, got {type(v).__name__}")
        if not view.c_contiguous:
            raise ValueError("Audio data must be C-contiguous")
        return v

    @classmethod
    def from_samples(
        cls,
        samples: np.ndarray,
        sample_rate: int,
        presentation_time: Optional[MediaTime] = None
    ) -> AudioSampleBuffer:
        """
        Wrap an int16 numpy array without copying it.

        A 1-D array is mono; a 2-D ``(frames, channels)`` array is labelled
        with its channel count so scans reject it.
        """
        samples = np.ascontiguousarray(samples)
        if samples.dtype != np.int16:
            raise ValueError(f"Samples must be int16, got {samples.dtype}")
        if samples.ndim not in (1, 2):
            raise ValueError(f"Samples must be 1-D or (frames, channels), got shape {samples.shape}")
        return cls(
            data=samples,
            sample_rate=sample_rate,
            channels=1 if samples.ndim == 1 else samples.shape[1],
            presentation_time=presentation_time if presentation_time is not None else MediaTime.zero()
        )

    def byte_view(self) -> memoryview:
        """Flat byte view over ``data``."""
        return memoryview(self.data).cast('B')

    @property
    def nbytes(self) -> int:
        return memoryview(self.data).nbytes

    @property
    def bytes_per_frame(self) -> int:
        return self.bits_per_sample // 8 * self.channels

    @property
    def frame_count(self) -> int:
        return self.nbytes // self.bytes_per_frame if self.bytes_per_frame else 0

    @property
    def duration_ms(self) -> int:
        """Whole milliseconds of audio in the buffer."""
        return self.frame_count * 1000 // self.sample_rate

    def describe_format(self) -> str:
        kind = "float" if self.is_float else "int"
        endian = "BE" if self.is_big_endian else "LE"
        return (
            f"{self.bits_per_sample}-bit {kind} {endian}, "
            f"{self.channels} channel(s), {self.sample_rate} Hz"
        )
