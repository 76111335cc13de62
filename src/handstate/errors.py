"""
Error Types
===========

Exception hierarchy for the hand-state demo. Every error is recovered at the
component that raises it and surfaced as status text.
"""

from typing import Dict, Optional


class HandStateError(Exception):
    """Base class for all demo errors."""


class InitializationError(HandStateError):
    """Hand landmarker could not be created on any accelerator."""

    def __init__(self, message: str, causes: Optional[Dict[str, BaseException]] = None):
        super().__init__(message)
        self.causes = causes or {}


class MediaPermissionError(HandStateError):
    """Webcam stream request was rejected (permission or hardware)."""

    def __init__(self, reason: str, message: str = ""):
        super().__init__(message or reason)
        self.reason = reason


class SessionEnvironmentError(HandStateError):
    """Execution context does not allow camera access."""


class InsecureContextError(SessionEnvironmentError):
    pass


class EmbeddedContextError(SessionEnvironmentError):
    pass


class InvalidLandmarksError(HandStateError, ValueError):
    """Landmark set is malformed (e.g. fewer than 21 points)."""
