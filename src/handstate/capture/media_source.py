"""
Webcam Media Source
===================

Opens the webcam as a media stream: a stoppable video track, a background
decoder thread that keeps only the latest frame, a playback clock and a
one-shot "loaded data" notification fired on the first decoded frame.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import cv2
import numpy as np

from ..errors import MediaPermissionError

logger = logging.getLogger(__name__)


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30
    buffer_size: int = 1  # Minimal buffering for low latency
    flip_horizontal: bool = True
    warmup_frames: int = 0

    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            device_id=config.get("device_id", 0),
            width=config.get("width", 640),
            height=config.get("height", 480),
            fps=config.get("fps", 30),
            buffer_size=config.get("buffer_size", 1),
            flip_horizontal=config.get("flip_horizontal", True),
            warmup_frames=config.get("warmup_frames", 0),
        )


@dataclass
class Frame:
    """Decoded frame with its media time."""
    image: np.ndarray
    timestamp: float  # Seconds since the stream started
    frame_number: int

    @property
    def rgb(self) -> np.ndarray:
        """Convert BGR to RGB."""
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)


class VideoTrack:
    """A single video track. Stopping it releases the camera device."""

    kind = "video"

    def __init__(self, cap: cv2.VideoCapture, label: str = ""):
        self._cap = cap
        self._lock = threading.Lock()
        self.label = label
        self.ready_state = "live"

    @property
    def ended(self) -> bool:
        return self.ready_state == "ended"

    def read(self):
        """Grab the next frame from the device."""
        with self._lock:
            if self.ended or self._cap is None:
                return False, None
            return self._cap.read()

    def stop(self) -> None:
        """Stop the track and release the hardware. Safe to call twice."""
        with self._lock:
            if self.ended:
                return
            self.ready_state = "ended"
            if self._cap is not None:
                self._cap.release()
                self._cap = None
        logger.info(f"Video track stopped ({self.label})")


class MediaStream:
    """
    Live webcam stream.

    A daemon thread decodes frames continuously and keeps the latest one,
    like a <video> element playing a camera stream. Readers see the most
    recent frame and its media time.
    """

    def __init__(
        self,
        track: VideoTrack,
        config: CameraConfig,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.config = config
        self._tracks: List[VideoTrack] = [track]
        self._loop = loop
        self._lock = threading.Lock()
        self._latest_frame: Optional[Frame] = None
        self._frame_number = 0
        self._started_at = time.monotonic()
        self._loaded = False
        self._loaded_callbacks: List[Callable[[], None]] = []

        self._thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._thread.start()

    def get_tracks(self) -> List[VideoTrack]:
        return list(self._tracks)

    @property
    def active(self) -> bool:
        return any(not track.ended for track in self._tracks)

    @property
    def current_time(self) -> float:
        """Media time (seconds) of the latest decoded frame, -1 before any."""
        with self._lock:
            return self._latest_frame.timestamp if self._latest_frame else -1.0

    @property
    def video_width(self) -> int:
        frame = self.read()
        return frame.image.shape[1] if frame is not None else 0

    @property
    def video_height(self) -> int:
        frame = self.read()
        return frame.image.shape[0] if frame is not None else 0

    def read(self) -> Optional[Frame]:
        """Latest decoded frame, or None before the first one."""
        with self._lock:
            return self._latest_frame

    def on_loaded_data(self, callback: Callable[[], None]) -> None:
        """
        Register a callback for the first decoded frame.

        Callbacks run on the event loop that requested the stream. If the
        first frame has already arrived the callback is scheduled right away.
        """
        with self._lock:
            if not self._loaded:
                self._loaded_callbacks.append(callback)
                return
        self._dispatch(callback)

    def _dispatch(self, callback: Callable[[], None]) -> None:
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(callback)
        else:
            callback()

    def _capture_loop(self) -> None:
        """Background thread for continuous frame capture."""
        track = self._tracks[0]
        while not track.ended:
            ok, image = track.read()
            if not ok or image is None:
                if not track.ended:
                    logger.debug("Failed to capture frame")
                    time.sleep(0.005)
                continue

            # Mirror for a natural selfie view
            if self.config.flip_horizontal:
                image = cv2.flip(image, 1)

            self._frame_number += 1
            frame = Frame(
                image=image,
                timestamp=time.monotonic() - self._started_at,
                frame_number=self._frame_number,
            )

            with self._lock:
                self._latest_frame = frame
                first = not self._loaded
                self._loaded = True
                callbacks, self._loaded_callbacks = self._loaded_callbacks, []

            if first:
                for callback in callbacks:
                    self._dispatch(callback)


class MediaSource:
    """
    Webcam acquisition.

    Example:
        >>> source = MediaSource(CameraConfig())
        >>> stream = await source.request_stream()
        >>> stream.on_loaded_data(lambda: print("first frame"))
        >>> for track in stream.get_tracks():
        ...     track.stop()
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()

    async def request_stream(self, constraints: Optional[CameraConfig] = None) -> MediaStream:
        """
        Open the camera described by constraints (defaults to the source config).

        Raises:
            MediaPermissionError: If the device cannot be opened or read
        """
        config = constraints or self.config
        loop = asyncio.get_running_loop()
        cap = await loop.run_in_executor(None, self._open, config)
        track = VideoTrack(cap, label=f"camera:{config.device_id}")
        return MediaStream(track, config, loop=loop)

    def _open(self, config: CameraConfig) -> cv2.VideoCapture:
        logger.info("Opening camera (device={}, {}x{}@{}fps)".format(
            config.device_id, config.width, config.height, config.fps))

        reason = "NotFoundError"
        cap = None
        # Try V4L2 backend first, then whatever OpenCV picks
        for backend in [cv2.CAP_V4L2, cv2.CAP_ANY]:
            if backend == cv2.CAP_V4L2:
                logger.debug("Trying V4L2 backend...")
                cap = cv2.VideoCapture(config.device_id, backend)
            else:
                logger.debug("Trying default backend...")
                cap = cv2.VideoCapture(config.device_id)

            if not cap.isOpened():
                logger.debug("Backend failed, trying next...")
                cap = None
                continue

            cap.set(cv2.CAP_PROP_FRAME_WIDTH, config.width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, config.height)
            cap.set(cv2.CAP_PROP_FPS, config.fps)
            cap.set(cv2.CAP_PROP_BUFFERSIZE, config.buffer_size)

            # Verify we can actually read frames
            ok, test_frame = cap.read()
            if ok and test_frame is not None:
                break

            logger.debug("Can't read frames, trying next backend...")
            reason = "NotReadableError"
            cap.release()
            cap = None

        if cap is None:
            raise MediaPermissionError(
                reason, f"Could not open camera device {config.device_id}"
            )

        actual_width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = cap.get(cv2.CAP_PROP_FPS)
        logger.info("Camera opened: {}x{}@{}fps".format(actual_width, actual_height, actual_fps))

        for _ in range(config.warmup_frames):
            cap.read()

        return cap
