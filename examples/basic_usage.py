"""
Basic usage example for the voice activity detector library.
"""

import numpy as np

from voice_activity_detector import (
    VoiceActivityDetector,
    DetectorConfig,
    SampleRate,
    DetectionAggressiveness,
    AudioSampleBuffer,
    MediaTime,
    AudioUtils,
    VADError,
)


def build_test_signal(sample_rate: int) -> np.ndarray:
    """Half a second of silence, a second of tone, then silence again."""
    return np.concatenate([
        AudioUtils.silence(sample_rate, 500),
        AudioUtils.sine_wave(sample_rate, 1000, frequency=220, amplitude=0.6),
        AudioUtils.silence(sample_rate, 500),
    ])


def main():
    """Basic detector usage example."""
    print("Voice Activity Detector - Basic Example")
    print("=" * 40)

    config = DetectorConfig(
        sample_rate=SampleRate.SAMPLERATE_16,
        aggressiveness=DetectionAggressiveness.AGGRESSIVE,
        window_duration=30
    )
    print(f"Using {config}")

    signal = build_test_signal(int(config.sample_rate))

    with VoiceActivityDetector.from_config(config) as vad:
        # Window by window
        window = config.get_window_sample_count()
        decisions = [
            vad.detect_window(signal[start:start + window])
            for start in range(0, len(signal) - window + 1, window)
        ]
        print("Window decisions: " + "".join("#" if d.is_active else "." for d in decisions))

        # Whole buffer, timestamped from a presentation time of 10 s
        vad.reset()
        buffer = AudioSampleBuffer.from_samples(
            signal,
            int(config.sample_rate),
            MediaTime.from_seconds(10)
        )
        for record in vad.detect_batch(buffer):
            if record.is_active:
                print(f"  active at {record.presentation_time.seconds:.2f}s (offset {record.offset_ms} ms)")

        # Rejected input leaves the detector usable
        try:
            vad.detect_window(signal[:100])
        except VADError as e:
            print(f"Rejected window: {e}")

        stats = vad.get_statistics()
        print("\nProcessing Statistics:")
        print(f"- Windows processed: {stats['windows_processed']}")
        print(f"- Active ratio: {stats['active_ratio']:.2f}")
        print(f"- Last error: {stats['last_error']}")


if __name__ == "__main__":
    main()
