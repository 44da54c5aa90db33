"""
Unit tests for MediaTime and AudioSampleBuffer.
"""

import pytest
import numpy as np
from fractions import Fraction
from pydantic import ValidationError

from voice_activity_detector.core.media import MediaTime, AudioSampleBuffer


class TestMediaTime:
    """Test rational presentation timestamps."""

    def test_zero(self):
        assert MediaTime.zero() == MediaTime(value=0, timescale=1000)
        assert MediaTime.zero(48000).seconds == 0.0

    def test_from_milliseconds(self):
        t = MediaTime.from_milliseconds(20)
        assert t.value == 20
        assert t.timescale == 1000
        assert t.seconds == 0.02

    def test_from_seconds_rounds_to_timescale(self):
        assert MediaTime.from_seconds(1.5).value == 1500
        assert MediaTime.from_seconds(Fraction(1, 3), timescale=90000).value == 30000

    def test_timescale_must_be_positive(self):
        with pytest.raises(ValidationError):
            MediaTime(value=1, timescale=0)

    def test_frozen(self):
        t = MediaTime.from_milliseconds(5)
        with pytest.raises(ValidationError):
            t.value = 6

    def test_equality_across_timescales(self):
        assert MediaTime(value=8000, timescale=16000) == MediaTime.from_milliseconds(500)
        assert hash(MediaTime(value=1, timescale=2)) == hash(MediaTime(value=500, timescale=1000))
        assert MediaTime.from_milliseconds(1) != MediaTime.from_milliseconds(2)

    def test_ordering(self):
        assert MediaTime.from_milliseconds(10) < MediaTime(value=1, timescale=10)
        assert MediaTime(value=1, timescale=10) <= MediaTime.from_milliseconds(100)
        assert sorted([MediaTime.from_milliseconds(30), MediaTime.zero()])[0] == MediaTime.zero()

    def test_addition_keeps_millisecond_multiple_timescale(self):
        base = MediaTime(value=48000, timescale=48000)
        result = base + MediaTime.from_milliseconds(20)

        assert result.timescale == 48000
        assert result.value == 48960
        assert result == MediaTime.from_milliseconds(1020)

    def test_addition_uses_common_timescale(self):
        result = MediaTime(value=1, timescale=3) + MediaTime.from_milliseconds(10)
        assert result.timescale == 3000
        assert result.as_fraction() == Fraction(1, 3) + Fraction(1, 100)

    def test_subtraction(self):
        result = MediaTime.from_milliseconds(50) - MediaTime.from_milliseconds(20)
        assert result == MediaTime.from_milliseconds(30)

    def test_arithmetic_with_other_types(self):
        with pytest.raises(TypeError):
            MediaTime.zero() + 5

    def test_convert_scale(self):
        t = MediaTime.from_milliseconds(25).convert_scale(8000)
        assert t.value == 200
        assert t.timescale == 8000

    def test_str(self):
        assert str(MediaTime(value=3, timescale=8000)) == "3/8000s"


class TestAudioSampleBuffer:
    """Test the audio buffer model."""

    def test_from_samples_is_zero_copy(self):
        samples = np.arange(160, dtype=np.int16)
        buffer = AudioSampleBuffer.from_samples(samples, 16000)

        assert buffer.data is samples
        assert buffer.nbytes == 320
        assert buffer.frame_count == 160
        assert buffer.duration_ms == 10
        assert buffer.presentation_time == MediaTime.zero()

    def test_from_samples_presentation_time(self):
        start = MediaTime.from_milliseconds(500)
        buffer = AudioSampleBuffer.from_samples(np.zeros(80, dtype=np.int16), 8000, start)
        assert buffer.presentation_time == start

    def test_from_samples_rejects_float(self):
        with pytest.raises(ValueError):
            AudioSampleBuffer.from_samples(np.zeros(80, dtype=np.float32), 8000)

    def test_from_samples_labels_channels(self):
        buffer = AudioSampleBuffer.from_samples(np.zeros((240, 2), dtype=np.int16), 8000)

        assert buffer.channels == 2
        assert buffer.frame_count == 240
        assert buffer.duration_ms == 30

    def test_from_samples_rejects_higher_dimensions(self):
        with pytest.raises(ValueError):
            AudioSampleBuffer.from_samples(np.zeros((10, 2, 2), dtype=np.int16), 8000)

    @pytest.mark.parametrize("data", [b"\x00\x01" * 10, bytearray(20), memoryview(bytes(20))])
    def test_accepts_byte_buffers(self, data):
        buffer = AudioSampleBuffer(data=data, sample_rate=8000)
        assert buffer.nbytes == 20
        assert buffer.byte_view().nbytes == 20

    def test_rejects_non_buffer_data(self):
        with pytest.raises(ValidationError):
            AudioSampleBuffer(data=[0, 1, 2], sample_rate=8000)

    def test_rejects_non_contiguous_data(self):
        strided = np.zeros(160, dtype=np.int16)[::2]
        with pytest.raises(ValidationError):
            AudioSampleBuffer(data=strided, sample_rate=8000)

    def test_stereo_frame_count(self):
        buffer = AudioSampleBuffer(data=bytes(32), sample_rate=8000, channels=2)
        assert buffer.bytes_per_frame == 4
        assert buffer.frame_count == 8

    def test_describe_format(self):
        buffer = AudioSampleBuffer(data=bytes(4), sample_rate=44100, is_float=True,
                                   bits_per_sample=32, is_big_endian=True)
        assert buffer.describe_format() == "32-bit float BE, 1 channel(s), 44100 Hz"
