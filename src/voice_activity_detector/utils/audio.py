"""
Audio utilities: PCM conversions and a WAV file media source.
"""

import numpy as np
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union
from scipy.io import wavfile

from ..core.exceptions import SampleFormatError
from ..core.media import AudioSampleBuffer, MediaTime


class AudioUtils:
    """Utility class for 16-bit PCM conversions."""

    @staticmethod
    def pcm_to_int16(pcm_data: Union[bytes, bytearray, memoryview]) -> np.ndarray:
        """
        View little-endian 16-bit PCM bytes as an int16 array without copying.

        Raises:
            SampleFormatError: If the byte length is odd
        """
        raw = memoryview(pcm_data).cast('B')
        if raw.nbytes % 2:
            raise SampleFormatError(f"PCM byte length must be even, got {raw.nbytes}")
        return np.frombuffer(raw, dtype='<i2')

    @staticmethod
    def int16_to_pcm(samples: np.ndarray) -> bytes:
        """Convert int16 samples to little-endian PCM bytes."""
        return np.asarray(samples, dtype='<i2').tobytes()

    @staticmethod
    def float32_to_int16(audio_data: np.ndarray) -> np.ndarray:
        """
        Convert float audio in [-1.0, 1.0] to int16, clipping out-of-range values.
        """
        audio_data = np.asarray(audio_data, dtype=np.float32)
        return np.clip(audio_data * 32767, -32768, 32767).astype(np.int16)

    @staticmethod
    def int16_to_float32(samples: np.ndarray) -> np.ndarray:
        return np.asarray(samples, dtype=np.int16).astype(np.float32) / 32768.0

    @staticmethod
    def samples_for_duration(sample_rate: int, duration_ms: int) -> int:
        return int(sample_rate) * int(duration_ms) // 1000

    @staticmethod
    def silence(sample_rate: int, duration_ms: int) -> np.ndarray:
        """All-zero int16 samples lasting ``duration_ms``."""
        return np.zeros(AudioUtils.samples_for_duration(sample_rate, duration_ms), dtype=np.int16)

    @staticmethod
    def sine_wave(
        sample_rate: int,
        duration_ms: int,
        frequency: float = 440.0,
        amplitude: float = 0.5
    ) -> np.ndarray:
        """int16 sine tone, mostly useful for examples and tests."""
        count = AudioUtils.samples_for_duration(sample_rate, duration_ms)
        t = np.arange(count) / sample_rate
        return AudioUtils.float32_to_int16(amplitude * np.sin(2 * np.pi * frequency * t))

    @staticmethod
    def load_wav_file(file_path: Union[str, Path]) -> Tuple[np.ndarray, int]:
        """
        Load a mono 16-bit PCM WAV file.

        Returns:
            Tuple of (int16 samples, sample_rate)

        Raises:
            FileNotFoundError: If the file does not exist
            SampleFormatError: If the file is not mono 16-bit PCM
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Audio file not found: {file_path}")

        try:
            sample_rate, audio_data = wavfile.read(str(file_path))
        except ValueError as e:
            raise SampleFormatError(f"Failed to read WAV file {file_path}: {e}")

        if audio_data.dtype != np.int16:
            raise SampleFormatError(
                f"WAV file {file_path} must hold 16-bit PCM",
                f"dtype: {audio_data.dtype}"
            )
        if audio_data.ndim != 1:
            raise SampleFormatError(
                f"WAV file {file_path} must be mono",
                f"shape: {audio_data.shape}"
            )
        return audio_data, int(sample_rate)

    @staticmethod
    def save_wav_file(file_path: Union[str, Path], samples: np.ndarray, sample_rate: int) -> None:
        """Save int16 samples as a mono 16-bit PCM WAV file."""
        wavfile.write(str(file_path), int(sample_rate), np.asarray(samples, dtype=np.int16))


class WAVTrackReader:
    """
    Media source reading a mono 16-bit PCM WAV file in fixed-duration buffers.

    The default buffer duration of 960 ms holds a whole number of 10, 20 and
    30 ms windows, so scans of consecutive buffers skip no audio. Each
    buffer's presentation time is its first sample index in a timescale
    equal to the sample rate. The reader performs no resampling or channel
    mixing.

    Example:
        >>> reader = WAVTrackReader("speech.wav", buffer_duration_ms=480)
        >>> for record in BatchWindowScanner(vad).scan_source(reader, 30):
        ...     print(record.presentation_time.seconds, record.activity.name)
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        buffer_duration_ms: int = 960,
        start_ms: int = 0,
        end_ms: Optional[int] = None
    ) -> None:
        if buffer_duration_ms <= 0:
            raise ValueError(f"Buffer duration must be positive: {buffer_duration_ms}")
        if start_ms < 0 or (end_ms is not None and end_ms < start_ms):
            raise ValueError(f"Invalid time range: {start_ms}-{end_ms} ms")

        self._samples, self._sample_rate = AudioUtils.load_wav_file(file_path)
        self._buffer_samples = AudioUtils.samples_for_duration(self._sample_rate, buffer_duration_ms)
        if self._buffer_samples == 0:
            raise ValueError(f"Buffer duration {buffer_duration_ms} ms holds no samples")

        total = len(self._samples)
        self._position = min(AudioUtils.samples_for_duration(self._sample_rate, start_ms), total)
        self._end = total if end_ms is None else min(
            AudioUtils.samples_for_duration(self._sample_rate, end_ms), total
        )

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def is_active(self) -> bool:
        return self._position < self._end

    def next_buffer(self) -> Optional[AudioSampleBuffer]:
        """Next buffer, or None once the track is exhausted."""
        if not self.is_active:
            return None

        start = self._position
        stop = min(start + self._buffer_samples, self._end)
        self._position = stop
        return AudioSampleBuffer.from_samples(
            self._samples[start:stop],
            self._sample_rate,
            MediaTime(value=start, timescale=self._sample_rate)
        )

    def __iter__(self) -> Iterator[AudioSampleBuffer]:
        while True:
            buffer = self.next_buffer()
            if buffer is None:
                return
            yield buffer
