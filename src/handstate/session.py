"""
Session Controller
==================

Owns the webcam session: validates the execution context, requests the
stream, starts the frame scheduler on the first decoded frame and tears
everything down again on the next toggle.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .capture.media_source import CameraConfig
from .core.types import HandState, SessionState
from .errors import (
    EmbeddedContextError,
    InsecureContextError,
    MediaPermissionError,
    SessionEnvironmentError,
)
from .ui.status import DISABLE_LABEL, ENABLE_LABEL

logger = logging.getLogger(__name__)

LOCAL_HOSTS = ("localhost", "127.0.0.1")


@dataclass
class ExecutionContext:
    """Where the demo runs; camera access needs a secure, top-level context."""
    protocol: str = "https:"
    hostname: str = "localhost"
    embedded: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "ExecutionContext":
        """Create context from dictionary."""
        return cls(
            protocol=config.get("protocol", "https:"),
            hostname=config.get("hostname", "localhost"),
            embedded=config.get("embedded", False),
        )

    @property
    def is_localhost(self) -> bool:
        return self.hostname in LOCAL_HOSTS

    @property
    def is_secure(self) -> bool:
        return self.protocol == "https:" or self.is_localhost


def check_execution_context(context: ExecutionContext) -> None:
    """
    Raises:
        InsecureContextError: Neither https nor a loopback host
        EmbeddedContextError: Running inside an embedded frame
    """
    if not context.is_secure:
        raise InsecureContextError("Camera permission requires https:// or localhost.")
    if context.embedded:
        raise EmbeddedContextError(
            "Open this page in a regular browser tab. Embedded previews may block webcam."
        )


class SessionController:
    """
    Start/stop mediator for the webcam session.

    Example:
        >>> controller = SessionController(source, scheduler, surface, status)
        >>> await controller.toggle()   # Idle -> Active
        >>> await controller.toggle()   # Active -> Stopped
    """

    def __init__(
        self,
        media_source,
        scheduler,
        surface,
        status,
        context: Optional[ExecutionContext] = None,
        constraints: Optional[CameraConfig] = None,
    ):
        self.media_source = media_source
        self.scheduler = scheduler
        self.surface = surface
        self.status = status
        self.context = context or ExecutionContext()
        self.constraints = constraints

        self.state = SessionState.IDLE
        self.stream = None
        self._stop_requested = False

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    async def toggle(self) -> None:
        """Start the webcam when idle/stopped, stop it when active."""
        if self.state is SessionState.ACTIVE:
            self.stop()
        elif self.state is SessionState.REQUESTING:
            logger.info("Webcam request already in progress")
        else:
            await self.start()

    async def start(self) -> None:
        if self.state in (SessionState.ACTIVE, SessionState.REQUESTING):
            return

        try:
            check_execution_context(self.context)
        except SessionEnvironmentError as e:
            logger.warning(f"Webcam not started: {type(e).__name__}")
            self.status.set_status(str(e))
            return

        self.state = SessionState.REQUESTING
        self._stop_requested = False
        self.status.set_button_label(DISABLE_LABEL)
        self.status.set_status("Requesting webcam permission...")

        try:
            stream = await self.media_source.request_stream(self.constraints)
        except MediaPermissionError as e:
            logger.error(f"Unable to access webcam: {e}")
            self.state = SessionState.IDLE
            self._stop_requested = False
            self.status.set_button_label(ENABLE_LABEL)
            self.status.set_status(
                f"Unable to access webcam: {e.reason}. Check camera permissions."
            )
            return

        if self._stop_requested:
            logger.info("Webcam stopped before the request completed")
            self._stop_requested = False
            self.state = SessionState.STOPPED
            self._release(stream)
            self.status.set_button_label(ENABLE_LABEL)
            self.status.set_status("Webcam stopped.")
            return

        self.stream = stream
        self.state = SessionState.ACTIVE
        self.surface.attach(stream)
        stream.on_loaded_data(lambda: self._on_loaded_data(stream))

    def _on_loaded_data(self, stream) -> None:
        # The session may have been stopped before the first frame arrived
        if self.state is not SessionState.ACTIVE or self.stream is not stream:
            return
        self.status.set_status("Webcam active.")
        self.scheduler.start(stream)

    def stop(self) -> None:
        """
        Release the webcam.

        While a request is pending, the stream is released as soon as the
        request returns. No-op when idle or already stopped.
        """
        if self.state is SessionState.REQUESTING:
            self._stop_requested = True
            return
        if self.state is not SessionState.ACTIVE:
            return

        self.state = SessionState.STOPPED
        stream, self.stream = self.stream, None
        if stream is not None:
            self._release(stream)

        self.surface.detach()
        self.scheduler.stop()
        self.status.set_button_label(ENABLE_LABEL)
        self.status.set_status("Webcam stopped.")
        self.status.set_hand_state(HandState.NO_HAND_DETECTED)

    @staticmethod
    def _release(stream) -> None:
        for track in stream.get_tracks():
            track.stop()
