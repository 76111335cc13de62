"""
Hand State Demo - Main Application
===================================

Entry point for the live webcam hand-state demo. Loads the hand model in the
background, toggles the webcam with SPACE and shows the detected skeleton
with an open / fist / partial label.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

from .capture.media_source import MediaSource
from .config import AppConfig, create_app_config, load_config
from .detection.lifecycle import DetectorLifecycle
from .recognition.hand_state import HandStateClassifier
from .scheduler import FrameScheduler
from .session import SessionController
from .ui.host import KEY_ESC, KEY_SPACE, DisplayHost
from .ui.status import StatusPanel
from .ui.surface import RenderSurface
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "config/config.yaml"


class HandStateApp:
    """
    Wires the demo together.

    Components:
    - DetectorLifecycle: hand landmarker with GPU -> CPU fallback
    - SessionController: webcam start/stop
    - FrameScheduler: per-refresh detect and render
    - DisplayHost / RenderSurface / StatusPanel: OpenCV window
    """

    def __init__(self, config: AppConfig):
        self.config = config

        self.status = StatusPanel()
        self.surface = RenderSurface(config.visualization)
        self.host = DisplayHost(config.display.window_name, config.display.refresh_hz)
        self.lifecycle = DetectorLifecycle(config.mediapipe)
        self.classifier = HandStateClassifier(config.classifier)
        self.scheduler = FrameScheduler(
            self.lifecycle, self.classifier, self.surface, self.status, self.host
        )
        self.media_source = MediaSource(config.camera)
        self.session = SessionController(
            self.media_source,
            self.scheduler,
            self.surface,
            self.status,
            context=config.context,
        )

        self.host.bind_key([KEY_SPACE], self.session.toggle)
        self.host.bind_key([ord("q"), ord("Q"), KEY_ESC], self.request_quit)

        self._init_task: Optional[asyncio.Task] = None

    async def load_model(self) -> None:
        """Create the hand landmarker and report the outcome."""
        self.status.set_status("Loading hand model...")
        handle = await self.lifecycle.initialize()
        if handle is not None:
            self.status.set_status("Hand model ready. Press SPACE to enable webcam.")
        else:
            self.status.set_status(
                "Hand model failed to load. Webcam can still open, but landmarks will not draw."
            )

    def request_quit(self) -> None:
        logger.info("Quit requested")
        self.host.stop()

    async def run(self) -> None:
        """Run until the window is closed or a quit key is pressed."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_quit)
            except NotImplementedError:
                # Signal handlers are unavailable on Windows event loops
                pass

        self._init_task = asyncio.ensure_future(self.load_model())
        try:
            await self.host.run(lambda: self.surface.render(self.status))
        finally:
            self.session.stop()
            # A pending webcam request releases its stream when it returns
            await self.host.wait_pending()
            # Landmarker creation cannot be interrupted; close it once built
            await self._init_task
            self.shutdown()

    def shutdown(self) -> None:
        """Release the webcam and the landmarker."""
        logger.info("Shutting down...")
        self.session.stop()
        self.scheduler.stop()
        self.lifecycle.close()


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Live webcam hand landmarks with open/fist/partial classification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keyboard Controls:
  SPACE     - Enable / disable webcam
  q/ESC     - Quit

Examples:
  handstate-demo
  handstate-demo --camera 1 --debug
  handstate-demo --config custom_config.yaml
        """
    )

    parser.add_argument(
        "--config", "-c",
        default=DEFAULT_CONFIG,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device index (overrides config)"
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Path to hand_landmarker.task (overrides config)"
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write a rotating log file"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    config_dict = load_config(args.config)
    app_config = create_app_config(config_dict)

    if args.camera is not None:
        app_config.camera.device_id = args.camera
    if args.model:
        app_config.mediapipe.model_path = args.model

    log_config = app_config.logging
    setup_logging(
        level="DEBUG" if args.debug else log_config.level,
        log_file=args.log_file or log_config.file,
        max_size_mb=log_config.max_size_mb,
        backup_count=log_config.backup_count,
    )

    app = HandStateApp(app_config)
    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
