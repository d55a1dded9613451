"""Main entry point for the pose review application"""
import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from posereview.core.config import DEFAULT_PAUSE_POINTS, ReviewConfig
from posereview.gui.main_window import MainWindow


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="posereview", description="Review activity video with a pose overlay")
    parser.add_argument("video", nargs="?", help="video file to open")
    parser.add_argument("--pause-at", type=float, nargs="+", metavar="SECONDS",
                        default=list(DEFAULT_PAUSE_POINTS),
                        help="timestamps where playback pauses for inspection")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the pose review application"""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ReviewConfig(pause_points=tuple(args.pause_at))
        config.pause_schedule()
    except ValueError as e:
        sys.exit(f"posereview: {e}")

    app = QApplication(sys.argv[:1])
    app.setApplicationName("posereview")

    window = MainWindow(config)
    window.show()
    if args.video:
        window.load_video(args.video)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
