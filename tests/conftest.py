"""
Test configuration and fixtures.
"""

import pytest
import numpy as np
import tempfile
import os
from pathlib import Path

from voice_activity_detector.core.config import DetectorConfig, SampleRate, DetectionAggressiveness
from voice_activity_detector.core.detector import VoiceActivityDetector
from voice_activity_detector.core.engine import DecisionEngine


class ScriptedEngine(DecisionEngine):
    """
    Deterministic stand-in for the WebRTC engine.

    Mirrors the native engine contract: reset restores the default mode and
    sample rate, and decisions depend on previously processed windows (a
    window is active when its mean magnitude exceeds a running noise floor).
    """

    def __init__(self):
        self.calls = []
        self.mode = 0
        self.sample_rate = 8000
        self.closed = False
        self.close_count = 0
        self._noise_floor = 100.0

    def set_mode(self, mode):
        if mode not in (0, 1, 2, 3):
            raise ValueError(f"{mode} is an invalid mode")
        self.calls.append(('set_mode', mode))
        self.mode = mode

    def set_sample_rate(self, sample_rate):
        if sample_rate not in (8000, 16000, 32000, 48000):
            raise ValueError(f"{sample_rate} is an invalid sample rate")
        self.calls.append(('set_sample_rate', sample_rate))
        self.sample_rate = sample_rate

    def reset(self):
        self.calls.append(('reset',))
        self.mode = 0
        self.sample_rate = 8000
        self._noise_floor = 100.0

    def process(self, samples):
        if len(samples) not in (self.sample_rate // 100, self.sample_rate // 50, self.sample_rate * 3 // 100):
            raise ValueError(f"Invalid frame length {len(samples)}")
        self.calls.append(('process', len(samples)))
        level = float(np.abs(samples.astype(np.int32)).mean()) if len(samples) else 0.0
        active = level > self._noise_floor * (1 + self.mode)
        self._noise_floor = 0.9 * self._noise_floor + 0.1 * max(level, 1.0)
        return active

    def close(self):
        self.closed = True
        self.close_count += 1

    @property
    def processed(self):
        return [c for c in self.calls if c[0] == 'process']


@pytest.fixture
def scripted_engine():
    """Provide a single scripted engine shared with the detector under test."""
    return ScriptedEngine()


@pytest.fixture
def scripted_detector(scripted_engine):
    """Provide a detector driving the scripted engine."""
    detector = VoiceActivityDetector(engine_factory=lambda: scripted_engine)
    yield detector
    detector.close()


@pytest.fixture
def detector():
    """Provide a detector backed by the WebRTC engine at 8 kHz."""
    vad = VoiceActivityDetector(sample_rate=SampleRate.SAMPLERATE_8)
    yield vad
    vad.close()


@pytest.fixture
def default_config():
    """Provide a default detector configuration for testing."""
    return DetectorConfig()


@pytest.fixture
def custom_config():
    """Provide a custom detector configuration for testing."""
    return DetectorConfig(
        sample_rate=SampleRate.SAMPLERATE_16,
        aggressiveness=DetectionAggressiveness.AGGRESSIVE,
        window_duration=20
    )


@pytest.fixture
def noise_samples():
    """Provide one second of reproducible loud noise at 8 kHz."""
    rng = np.random.default_rng(1234)
    return (rng.standard_normal(8000) * 4000).astype(np.int16)


@pytest.fixture
def speech_like_samples():
    """Provide alternating silence and tone bursts at 8 kHz (30 ms each)."""
    t = np.arange(240) / 8000
    tone = (np.sin(2 * np.pi * 300 * t) * 12000).astype(np.int16)
    silence = np.zeros(240, dtype=np.int16)
    return np.concatenate([silence, tone, silence, tone, tone, silence])


@pytest.fixture
def temp_directory():
    """Provide a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)

    # Cleanup
    import shutil
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def temp_yaml_file(temp_directory):
    """Provide a temporary YAML file path for testing."""
    yield temp_directory / "test_config.yaml"


@pytest.fixture
def environment_variables():
    """Provide and manage environment variables for testing."""
    original_env = {}

    def set_env_vars(env_dict):
        for key, value in env_dict.items():
            original_env.setdefault(key, os.environ.get(key))
            os.environ[key] = str(value)

    yield set_env_vars

    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


# Test markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# Test collection hooks
def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if item.fspath.basename.startswith('test_') and not item.fspath.basename.startswith('test_integration_'):
            item.add_marker(pytest.mark.unit)

        if item.fspath.basename.startswith('test_integration_'):
            item.add_marker(pytest.mark.integration)

        if any(keyword in item.name.lower() for keyword in ['wav_file', 'track_reader']):
            item.add_marker(pytest.mark.slow)
