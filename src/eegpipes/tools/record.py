"""Headless capture: replay raw samples (or synthetic data) through a module and save the CSV.

Examples::

    eegpipes-record --module Ssvep --condition "Slow Frequency"
    eegpipes-record --module Predict --input session.csv --seconds 20 --out captures/
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, Sequence

from ..config.app_config import AppPaths
from ..config.modules import get_profile, load_profiles
from ..core.capture import CaptureResult
from ..core.models import EEGReading
from ..core.scheduler import ManualScheduler
from ..core.source import ReadingSource, SyntheticHeadset, readings_from_array
from ..core.subscription import PipelineRegistry
from ..dataio.export import DirectoryExporter
from ..dataio.log_loader import load_raw_samples

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Record a spectrum capture without the GUI")
    parser.add_argument("--module", default="Ssvep", help="Module profile to use (default: Ssvep)")
    parser.add_argument(
        "--condition",
        default=None,
        help="Condition label for the file name (default: the module's first condition)",
    )
    parser.add_argument(
        "--seconds",
        type=float,
        default=None,
        help="Capture length in seconds (default: the module's capture_seconds)",
    )
    parser.add_argument(
        "--warmup",
        type=float,
        default=None,
        help="Seconds of data to stream before recording starts (default: one epoch)",
    )
    parser.add_argument("--input", type=Path, default=None, help="Raw sample CSV: timestamp_ms, ch0, ch1, ...")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with module profiles")
    parser.add_argument("--out", type=Path, default=None, help="Directory for the capture file")
    parser.add_argument("--tone", type=float, default=10.0, help="Synthetic tone in Hz (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the synthetic noise")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every epoch")
    return parser


def _input_readings(args: argparse.Namespace, settings, total_seconds: float) -> Iterable[EEGReading]:
    if args.input is not None:
        timestamps, data = load_raw_samples(args.input, settings.channel_count)
        # Shift to stream time so the replay clock starts at zero.
        return readings_from_array(data, settings.sample_rate, timestamps=timestamps - timestamps[0])
    headset = SyntheticHeadset(
        settings.channel_count,
        settings.sample_rate,
        tones={ch: args.tone for ch in range(settings.channel_count)},
        seed=args.seed,
    )
    return headset.readings(total_seconds)


def run(args: argparse.Namespace) -> CaptureResult | None:
    profiles = load_profiles(args.config)
    profile = get_profile(args.module, profiles)
    settings = profile.settings
    if args.seconds is not None:
        settings = settings.with_changes(capture_seconds=args.seconds)
    problems = settings.violations()
    if problems:
        raise SystemExit(f"Invalid settings for {profile.name}: " + "; ".join(problems))

    condition = args.condition or (profile.conditions[0] if profile.conditions else "Baseline")
    warmup = args.warmup if args.warmup is not None else settings.epoch_duration / settings.sample_rate
    total = warmup + settings.capture_seconds + 2 * settings.epoch_period_s

    out_dir = args.out or AppPaths().recordings
    scheduler = ManualScheduler()
    wall_start = time.time()
    source = ReadingSource(name="replay" if args.input else "synthetic")
    registry = PipelineRegistry(
        source,
        profiles,
        exporter=DirectoryExporter(out_dir),
        scheduler=scheduler,
        clock=lambda: wall_start + scheduler.time(),
    )
    manager = registry.get(profile.name)
    manager.settings = settings
    manager.start()

    recording = False
    for reading in _input_readings(args, settings, total):
        stream_time = reading.timestamp / 1000.0
        scheduler.advance_to(stream_time)
        if not recording and stream_time >= warmup:
            manager.start_capture(condition)
            recording = True
        source.push(reading)
    if not recording:
        logger.warning("Input shorter than the %.1f s warm-up; capture will be header-only", warmup)
        manager.start_capture(condition)
    # Input may run out before the deadline: close out at the deadline anyway.
    scheduler.advance(settings.capture_seconds)
    registry.stop_all()

    recorder = manager.recorder
    return recorder.result if recorder is not None else None


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_arg_parser().parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    result = run(args)
    if result is None:
        raise SystemExit("No capture was produced")
    print(f"{result.location} ({result.row_count} rows, {result.reason})")


if __name__ == "__main__":
    main()
