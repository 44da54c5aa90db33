"""
Unit tests for the WebRTC decision engine.
"""

import pytest
import numpy as np
from unittest.mock import Mock

from voice_activity_detector.core.engine import DecisionEngine, WebRTCDecisionEngine


@pytest.fixture
def engine():
    webrtc_engine = WebRTCDecisionEngine()
    yield webrtc_engine
    webrtc_engine.close()


class TestWebRTCDecisionEngine:
    """Test the webrtcvad-backed engine."""

    def test_is_decision_engine(self, engine):
        assert isinstance(engine, DecisionEngine)
        assert engine.is_closed is False

    def test_abstract_contract(self):
        with pytest.raises(TypeError):
            DecisionEngine()

    @pytest.mark.parametrize("mode", [0, 1, 2, 3])
    def test_set_valid_mode(self, engine, mode):
        engine.set_mode(mode)
        assert f"mode={mode}" in repr(engine)

    @pytest.mark.parametrize("mode", [-1, 4, 10])
    def test_set_invalid_mode(self, engine, mode):
        with pytest.raises(ValueError):
            engine.set_mode(mode)
        assert "mode=0" in repr(engine)

    @pytest.mark.parametrize("rate", [8000, 16000, 32000, 48000])
    def test_set_valid_sample_rate(self, engine, rate):
        engine.set_sample_rate(rate)
        assert f"sample_rate={rate}" in repr(engine)

    @pytest.mark.parametrize("rate", [8001, 44100, 0])
    def test_set_invalid_sample_rate(self, engine, rate):
        with pytest.raises(ValueError):
            engine.set_sample_rate(rate)
        assert "sample_rate=8000" in repr(engine)

    @pytest.mark.parametrize("rate", [8000, 16000, 32000, 48000])
    @pytest.mark.parametrize("duration_ms", [10, 20, 30])
    def test_silence_is_not_speech(self, engine, rate, duration_ms):
        engine.set_sample_rate(rate)
        samples = np.zeros(rate * duration_ms // 1000, dtype=np.int16)
        assert engine.process(samples) is False

    def test_invalid_frame_length(self, engine):
        with pytest.raises(ValueError):
            engine.process(np.zeros(81, dtype=np.int16))

    def test_reset_keeps_mode_and_rate(self, engine):
        engine.set_mode(3)
        engine.set_sample_rate(16000)
        engine.reset()
        assert "mode=3" in repr(engine)
        assert "sample_rate=16000" in repr(engine)
        assert engine.process(np.zeros(160, dtype=np.int16)) is False

    def test_reset_restores_deterministic_state(self, engine):
        rng = np.random.default_rng(7)
        frames = [(rng.standard_normal(240) * 3000).astype(np.int16) for _ in range(40)]

        engine.reset()
        first = [engine.process(frame) for frame in frames]
        engine.reset()
        second = [engine.process(frame) for frame in frames]

        assert first == second

    def test_closed_engine_rejects_calls(self, engine):
        engine.close()
        assert engine.is_closed is True

        with pytest.raises(ValueError):
            engine.process(np.zeros(80, dtype=np.int16))
        with pytest.raises(ValueError):
            engine.set_mode(1)
        with pytest.raises(ValueError):
            engine.reset()

    def test_close_is_idempotent(self, engine):
        engine.close()
        engine.close()
        assert engine.is_closed is True

    def test_engine_failure_keeps_cause(self, engine):
        engine._vad = Mock(is_speech=Mock(side_effect=RuntimeError("native failure")))

        with pytest.raises(ValueError, match="native failure") as exc_info:
            engine.process(np.zeros(80, dtype=np.int16))

        assert isinstance(exc_info.value.__cause__, RuntimeError)
