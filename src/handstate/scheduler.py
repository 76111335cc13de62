"""
Frame Scheduler
===============

Drives one capture -> detect -> render cycle per display refresh.

Each tick reads the newest decoded frame. Inference runs only when the
frame's media time has advanced since the last processed frame; otherwise
the previous result is drawn again. The next tick is requested from the
host only while the scheduler is still running, and stop() takes effect
before any pending tick can do work.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from .core.types import DetectionResult, RunningMode
from .detection.lifecycle import DetectorHandle, DetectorLifecycle
from .recognition.hand_state import HandStateClassifier

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FrameScheduler:
    """
    Per-refresh inference loop.

    Example:
        >>> scheduler = FrameScheduler(lifecycle, classifier, surface, status, host)
        >>> scheduler.start(stream)   # first tick on next refresh
        >>> ...
        >>> scheduler.stop()          # no further ticks until start()
    """

    def __init__(
        self,
        lifecycle: DetectorLifecycle,
        classifier: HandStateClassifier,
        surface,
        status,
        host,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.lifecycle = lifecycle
        self.classifier = classifier
        self.surface = surface
        self.status = status
        self.host = host
        self._clock = clock or _monotonic_ms

        self.state = SchedulerState.STOPPED
        self.source = None
        self.results: Optional[DetectionResult] = None
        self.last_video_time = -1.0
        self._last_timestamp_ms = -1
        self._pending: Optional[int] = None

        self.frames_processed = 0
        self.frames_skipped = 0

    @property
    def running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    def start(self, source) -> None:
        """Begin ticking against source. No-op when already running."""
        if self.running:
            return
        self.source = source
        self.state = SchedulerState.RUNNING
        self.results = None
        self.last_video_time = -1.0
        self.frames_processed = 0
        self.frames_skipped = 0
        self._pending = self.host.request_animation_frame(self.tick)
        logger.info("Frame scheduler started")

    def stop(self) -> None:
        """Halt the loop. A tick already running finishes, queued ones do nothing."""
        if not self.running:
            return
        self.state = SchedulerState.STOPPED
        self.host.cancel_animation_frame(self._pending)
        self._pending = None
        self.source = None
        self.results = None
        logger.info("Frame scheduler stopped")
        logger.debug(
            f"Frames processed: {self.frames_processed}, skipped: {self.frames_skipped}"
        )

    def tick(self) -> None:
        """One display refresh."""
        self._pending = None
        if not self.running:
            return

        frame = self.source.read()
        if frame is not None:
            self._process(frame)

        if self.running:
            self._pending = self.host.request_animation_frame(self.tick)

    def _process(self, frame) -> None:
        height, width = frame.image.shape[:2]
        self.surface.resize(width, height)

        handle = self._video_handle()
        if handle is not None and frame.timestamp != self.last_video_time:
            self.last_video_time = frame.timestamp
            self.results = self._detect(handle, frame)
            self.frames_processed += 1
        elif handle is None:
            self.results = None
        else:
            self.frames_skipped += 1

        self.surface.clear(frame.image)
        if self.results is not None and self.results.hands:
            self.surface.draw_hands(self.results.hands)
        self.status.set_hand_state(self.classifier.classify_result(self.results))

    def _video_handle(self) -> Optional[DetectorHandle]:
        """Detector handle in VIDEO mode, or None while unavailable."""
        handle = self.lifecycle.handle
        if handle is None:
            return None
        if handle.running_mode is not RunningMode.VIDEO:
            try:
                self.lifecycle.set_running_mode(handle, RunningMode.VIDEO)
            except Exception as e:
                logger.warning(f"Could not switch detector to VIDEO mode: {e}")
                return None
        return handle

    def _next_timestamp(self) -> int:
        # MediaPipe rejects video timestamps that do not increase
        timestamp_ms = max(int(self._clock()), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms
        return timestamp_ms

    def _detect(self, handle: DetectorHandle, frame) -> DetectionResult:
        timestamp_ms = self._next_timestamp()
        try:
            return self.lifecycle.detect(handle, frame.rgb, timestamp_ms)
        except Exception as e:
            logger.warning(f"Detection failed on frame {frame.frame_number}: {e}")
            return DetectionResult.empty(timestamp_ms)
