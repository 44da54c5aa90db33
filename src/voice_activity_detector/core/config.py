"""
Configuration classes and enums for the voice activity detector.
"""

from __future__ import annotations

import os
import yaml
from enum import IntEnum
from typing import Dict, Any, List, Union
from pathlib import Path
from pydantic import BaseModel, Field, field_validator, ConfigDict


class SampleRate(IntEnum):
    """Sample rates accepted by the decision engine."""
    SAMPLERATE_8 = 8000   # 8 kHz sample rate
    SAMPLERATE_16 = 16000 # 16 kHz sample rate
    SAMPLERATE_32 = 32000 # 32 kHz sample rate
    SAMPLERATE_48 = 48000 # 48 kHz sample rate

    @classmethod
    def describe(cls) -> str:
        """Accepted values joined the way error messages name them."""
        return "|".join(str(int(member)) for member in cls)


class DetectionAggressiveness(IntEnum):
    """
    Engine operating "aggressiveness" mode.

    A more aggressive (higher) mode is more restrictive in reporting speech:
    the probability that an ``ACTIVE`` decision really is speech increases
    with the mode, and so does the missed detection rate.
    """
    QUALITY = 0
    LOW_BITRATE = 1
    AGGRESSIVE = 2
    VERY_AGGRESSIVE = 3

    @property
    def label(self) -> str:
        return _AGGRESSIVENESS_LABELS[self]

    @classmethod
    def parse(cls, value: Union[str, int, DetectionAggressiveness]) -> DetectionAggressiveness:
        """
        Resolve an aggressiveness from an ordinal, enum name or label.

        Raises:
            ValueError: If the value names no aggressiveness mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid aggressiveness: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls(int(text))
            for member in cls:
                if text.upper() == member.name or text == member.label:
                    return member
        raise ValueError(f"Invalid aggressiveness: {value!r}")


_AGGRESSIVENESS_LABELS = {
    DetectionAggressiveness.QUALITY: "quality",
    DetectionAggressiveness.LOW_BITRATE: "lowBitRate",
    DetectionAggressiveness.AGGRESSIVE: "aggressive",
    DetectionAggressiveness.VERY_AGGRESSIVE: "veryAggressive",
}


class WindowDuration(IntEnum):
    """Window durations in milliseconds the engine can classify."""
    MSEC_10 = 10
    MSEC_20 = 20
    MSEC_30 = 30

    @classmethod
    def describe(cls) -> str:
        return "|".join(str(int(member)) for member in cls)


class VoiceActivity(IntEnum):
    """Decision produced for exactly one window."""
    INACTIVE = 0
    ACTIVE = 1

    @property
    def is_active(self) -> bool:
        return self is VoiceActivity.ACTIVE


def samples_per_window(sample_rate: int, duration_ms: int) -> int:
    """Number of samples in a window of ``duration_ms`` at ``sample_rate``."""
    return int(sample_rate) * int(duration_ms) // 1000


def valid_sample_counts(sample_rate: int) -> List[int]:
    """Sample counts accepted for one window at ``sample_rate``."""
    return [samples_per_window(sample_rate, d) for d in WindowDuration]


class DetectorConfig(BaseModel):
    """
    Configuration for a voice activity detector.

    Holds the engine sample rate, the aggressiveness mode and the window
    duration used by batch scans when none is given explicitly.
    """

    sample_rate: SampleRate = Field(
        default=SampleRate.SAMPLERATE_8,
        description="Sample rate of the PCM audio fed to the engine"
    )

    aggressiveness: DetectionAggressiveness = Field(
        default=DetectionAggressiveness.QUALITY,
        description="Engine aggressiveness mode (0-3)"
    )

    window_duration: WindowDuration = Field(
        default=WindowDuration.MSEC_30,
        description="Default window duration in milliseconds for batch scans"
    )

    model_config = ConfigDict(
        use_enum_values=False,
        validate_assignment=True,
        extra="forbid"
    )

    @field_validator('aggressiveness', mode='before')
    @classmethod
    def parse_aggressiveness(cls, v: Any) -> Any:
        """Accept enum names and labels as well as ordinals."""
        if isinstance(v, str):
            return DetectionAggressiveness.parse(v)
        return v

    @field_validator('sample_rate', 'window_duration', mode='before')
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError(f"Boolean is not a valid value: {v}")
        return v

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> DetectorConfig:
        """Create configuration from dictionary."""
        config_dict = dict(config_dict)
        for key in ('sample_rate', 'window_duration'):
            value = config_dict.get(key)
            if isinstance(value, str) and value.strip().isdigit():
                config_dict[key] = int(value)

        return cls(**config_dict)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> DetectorConfig:
        """Load configuration from YAML file."""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f) or {}

        return cls.from_dict(config_dict)

    @classmethod
    def from_env(cls, prefix: str = "VAD_") -> DetectorConfig:
        """Load configuration from environment variables."""
        env_mappings = {
            f"{prefix}SAMPLE_RATE": "sample_rate",
            f"{prefix}AGGRESSIVENESS": "aggressiveness",
            f"{prefix}WINDOW_DURATION": "window_duration",
        }

        config_dict = {}
        for env_key, config_key in env_mappings.items():
            env_value = os.getenv(env_key)
            if env_value is not None:
                config_dict[config_key] = env_value

        return cls.from_dict(config_dict) if config_dict else cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary of plain values."""
        return {
            'sample_rate': int(self.sample_rate),
            'aggressiveness': int(self.aggressiveness),
            'window_duration': int(self.window_duration),
        }

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def valid_sample_counts(self) -> List[int]:
        """Sample counts accepted per window at the configured rate."""
        return valid_sample_counts(self.sample_rate)

    def get_window_sample_count(self) -> int:
        """Samples in one default-duration window at the configured rate."""
        return samples_per_window(self.sample_rate, self.window_duration)

    def __str__(self) -> str:
        return (
            f"DetectorConfig("
            f"sample_rate={int(self.sample_rate)}Hz, "
            f"aggressiveness={self.aggressiveness.label}, "
            f"window={int(self.window_duration)}ms"
            f")"
        )

    def __repr__(self) -> str:
        return self.__str__()
