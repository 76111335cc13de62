"""Webcam capture module."""
from .media_source import CameraConfig, Frame, MediaSource, MediaStream, VideoTrack

__all__ = ["CameraConfig", "Frame", "MediaSource", "MediaStream", "VideoTrack"]
