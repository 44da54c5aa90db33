#!/usr/bin/env python3
"""
Scan a mono 16-bit WAV file and print its speech segments.

Consecutive active windows are merged into segments; each segment is printed
with its start and end presentation time.
"""

import argparse
import logging
import sys

from voice_activity_detector import (
    VoiceActivityDetector,
    DetectorConfig,
    BatchWindowScanner,
    WAVTrackReader,
    MediaTime,
    VADError,
)


def find_segments(records, window_ms):
    """Merge runs of active records into (start, end) presentation times."""
    segments = []
    start = None
    last = None
    for record in records:
        if record.is_active and start is None:
            start = record.presentation_time
        elif not record.is_active and start is not None:
            segments.append((start, record.presentation_time))
            start = None
        last = record
    if start is not None and last is not None:
        segments.append((start, last.presentation_time + MediaTime.from_milliseconds(window_ms)))
    return segments


def main():
    """Main function with command-line interface."""
    parser = argparse.ArgumentParser(
        description="Detect speech segments in a WAV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scan_wav_file.py speech.wav
  python scan_wav_file.py speech.wav --aggressiveness veryAggressive --window 10
  python scan_wav_file.py speech.wav --config detector.yaml
        """
    )
    parser.add_argument("wav_file", help="Mono 16-bit PCM WAV file")
    parser.add_argument(
        "--aggressiveness", "-a",
        default="quality",
        help="quality, lowBitRate, aggressive or veryAggressive (default: quality)"
    )
    parser.add_argument(
        "--window", "-w",
        type=int,
        choices=[10, 20, 30],
        default=30,
        help="Window duration in milliseconds (default: 30)"
    )
    parser.add_argument(
        "--config", "-c",
        help="YAML detector configuration; the sample rate is taken from the file"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        reader = WAVTrackReader(args.wav_file, buffer_duration_ms=960)
        if args.config:
            config = DetectorConfig.from_yaml(args.config)
        else:
            config = DetectorConfig(aggressiveness=args.aggressiveness, window_duration=args.window)
        config.sample_rate = reader.sample_rate

        with VoiceActivityDetector.from_config(config) as vad:
            window_ms = int(config.window_duration)
            records = list(BatchWindowScanner(vad).scan_source(reader, window_ms))
            segments = find_segments(records, window_ms)

            print(f"{args.wav_file}: {len(records)} windows of {window_ms} ms, {len(segments)} segments")
            for start, end in segments:
                print(f"  {start.seconds:8.3f}s - {end.seconds:8.3f}s")

    except (VADError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
