"""Qt application entry point for the eegpipes desktop GUI.

Parses the command line, loads module profiles, builds the
:class:`~eegpipes.gui.main_window.MainWindow` around a synthetic headset and
starts the Qt event loop. ``python main.py`` and ``eegpipes-gui`` both end
up in :func:`main`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Tuple

from PySide6.QtCore import QLoggingCategory
from PySide6.QtWidgets import QApplication

from ..config.app_config import AppPaths
from ..config.modules import get_profile, load_profiles
from ..core.source import ReadingSource, SyntheticHeadset
from ..core.subscription import PipelineRegistry
from ..dataio.export import DirectoryExporter
from .main_window import MainWindow
from .qt_scheduler import QtScheduler


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="eegpipes live spectrum GUI")
    parser.add_argument(
        "--module",
        action="append",
        default=None,
        help="Module to start (repeatable; default: all configured modules)",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML file with module profiles")
    parser.add_argument("--out", type=Path, default=None, help="Directory for capture files")
    parser.add_argument(
        "--tone",
        type=float,
        action="append",
        default=None,
        help="Synthetic tone per channel in Hz (repeatable; default: 10 Hz everywhere)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the synthetic noise")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _parse_cli_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def create_app(
    argv: list[str] | None = None,
    *,
    args: argparse.Namespace | None = None,
) -> Tuple[QApplication, MainWindow]:
    """
    Create the QApplication and main window.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The main window with one tab per module.
    """
    qt_args = argv if argv is not None else sys.argv
    args = args or _build_arg_parser().parse_args([])
    app = QApplication.instance() or QApplication(qt_args)

    # Suppress noisy QObject::connect warnings from QStyleHints and similar internals
    QLoggingCategory.setFilterRules("qt.core.qobject.connect=false")

    paths = AppPaths()
    profiles = load_profiles(args.config if args.config is not None else paths.config_file)
    widest = max(p.settings.channel_count for p in profiles.values())
    rate = next(iter(profiles.values())).settings.sample_rate
    tones = None
    if args.tone:
        tones = {ch: args.tone[ch % len(args.tone)] for ch in range(widest)}
    headset = SyntheticHeadset(widest, rate, tones=tones, seed=args.seed)

    registry = PipelineRegistry(
        ReadingSource(name="synthetic"),
        profiles,
        exporter=DirectoryExporter(args.out or paths.recordings),
        scheduler=QtScheduler(app),
    )
    window = MainWindow(registry, headset)
    return app, window


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app, win = create_app(qt_argv, args=args)

    modules = None
    if args.module:
        modules = [get_profile(name, win.registry.profiles).name for name in args.module]
    win.show()
    win.start(modules)
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
