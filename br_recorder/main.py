"""Main entry point for the Buckshot Roulette projectile recorder.
Runs the bullet overlay, or with --headless just logs detector signals.
"""
import argparse
import logging
import sys
import time
from pathlib import Path

from br_recorder.config import CONFIG_PATH, load_detector_config
from br_recorder.detector import BulletDetector
from br_recorder.gamestate.signals import LoggingSink
from br_recorder.utils.app_logging import LOG_DIR, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Track the shells shown in Buckshot Roulette.")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH,
                        help="detector config JSON (defaults are used if missing)")
    parser.add_argument("--log-dir", default=LOG_DIR, help="directory for the rotating log file")
    parser.add_argument("--headless", action="store_true",
                        help="run without the overlay, logging bullet counts")
    return parser.parse_args(argv)


def run_headless(config) -> int:
    detector = BulletDetector(config, LoggingSink())
    detector.set_enabled(True)
    logger.info("Watching for %r, press Ctrl+C to quit", config.window_title)
    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Exiting...")
    finally:
        detector.shutdown(timeout=3.0)
    return 0


def run_overlay(config) -> int:
    from PyQt5.QtWidgets import QApplication
    from br_recorder.overlay.bullet_overlay import BulletOverlay, QtSignalSink

    app = QApplication.instance() or QApplication(sys.argv)
    sink = QtSignalSink()
    detector = BulletDetector(config, sink)
    window = BulletOverlay(detector, sink)
    window.show()
    return app.exec_()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_dir)
    try:
        config = load_detector_config(args.config)
    except (OSError, TypeError, ValueError) as e:
        logger.error("Invalid configuration %s: %s", args.config, e)
        return 1

    if args.headless:
        return run_headless(config)
    return run_overlay(config)


if __name__ == "__main__":
    sys.exit(main())
