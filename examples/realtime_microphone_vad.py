#!/usr/bin/env python3
"""
Real-Time Microphone Voice Activity Detection

Captures 16-bit mono audio from the microphone in windows of 10, 20 or 30 ms,
classifies each window and prints when voice starts and stops.

Requires the ``examples`` extra (PyAudio).
"""

import argparse
import signal
import sys
from datetime import datetime
from typing import Optional

import pyaudio

from voice_activity_detector import (
    VoiceActivityDetector,
    DetectorConfig,
    AudioUtils,
    VADError,
)


class RealTimeMicrophoneVAD:
    """Microphone capture loop feeding a voice activity detector."""

    def __init__(self, config: DetectorConfig, device_index: Optional[int] = None):
        self.config = config
        self.device_index = device_index
        self.window_samples = config.get_window_sample_count()

        self.vad = VoiceActivityDetector.from_config(config)
        self.audio = pyaudio.PyAudio()
        self.stream: Optional[pyaudio.Stream] = None

        self.is_recording = False
        self.voice_active = False
        self.segment_counter = 0

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def list_audio_devices(self) -> None:
        print("\nAvailable input devices:")
        for index in range(self.audio.get_device_count()):
            info = self.audio.get_device_info_by_index(index)
            if info.get('maxInputChannels', 0) > 0:
                print(f"  [{index}] {info['name']} ({int(info['defaultSampleRate'])} Hz)")

    def run(self) -> None:
        """Record until interrupted."""
        print(f"Listening with {self.config}")
        print("Press Ctrl+C to stop recording...")
        print("-" * 50)

        self.stream = self.audio.open(
            format=pyaudio.paInt16,
            channels=1,
            rate=int(self.config.sample_rate),
            input=True,
            input_device_index=self.device_index,
            frames_per_buffer=self.window_samples
        )
        self.is_recording = True

        while self.is_recording:
            pcm = self.stream.read(self.window_samples, exception_on_overflow=False)
            activity = self.vad.detect_window(AudioUtils.pcm_to_int16(pcm))

            if activity.is_active and not self.voice_active:
                self.segment_counter += 1
                print(f"VOICE STARTED - Segment #{self.segment_counter} at {datetime.now():%H:%M:%S}")
            elif not activity.is_active and self.voice_active:
                print(f"VOICE ENDED   - Segment #{self.segment_counter} at {datetime.now():%H:%M:%S}")
            self.voice_active = activity.is_active

    def stop_recording(self) -> None:
        """Stop recording and release the stream and detector."""
        self.is_recording = False

        if self.stream:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        self.audio.terminate()

        stats = self.vad.get_statistics()
        self.vad.close()

        print("\nFinal Statistics:")
        print("=" * 40)
        print(f"Windows processed: {stats['windows_processed']}")
        print(f"Active ratio: {stats['active_ratio']:.2f}")
        print(f"Voice segments: {self.segment_counter}")

    def _signal_handler(self, signum, frame) -> None:
        self.is_recording = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop_recording()


def main():
    """Main function with command-line interface."""
    parser = argparse.ArgumentParser(
        description="Real-Time Microphone Voice Activity Detection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python realtime_microphone_vad.py --aggressiveness aggressive
  python realtime_microphone_vad.py --sample-rate 48000 --window 10
  python realtime_microphone_vad.py --list-devices
        """
    )
    parser.add_argument(
        "--aggressiveness", "-a",
        default="aggressive",
        help="quality, lowBitRate, aggressive or veryAggressive (default: aggressive)"
    )
    parser.add_argument(
        "--sample-rate", "-sr",
        type=int,
        choices=[8000, 16000, 32000, 48000],
        default=16000,
        help="Audio sample rate in Hz (default: 16000)"
    )
    parser.add_argument(
        "--window", "-w",
        type=int,
        choices=[10, 20, 30],
        default=30,
        help="Window duration in milliseconds (default: 30)"
    )
    parser.add_argument("--device", "-d", type=int, help="Audio input device index")
    parser.add_argument("--list-devices", action="store_true", help="List input devices and exit")
    args = parser.parse_args()

    try:
        config = DetectorConfig(
            sample_rate=args.sample_rate,
            aggressiveness=args.aggressiveness,
            window_duration=args.window
        )
        with RealTimeMicrophoneVAD(config, device_index=args.device) as processor:
            if args.list_devices:
                processor.list_audio_devices()
                return
            processor.run()

    except (VADError, ValueError, OSError) as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
