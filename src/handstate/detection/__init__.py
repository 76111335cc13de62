"""Hand detection module using MediaPipe."""
from .hand_detector import HandDetectorConfig, LandmarkerOptions, MediaPipeHandLandmarker
from .lifecycle import DetectorHandle, DetectorLifecycle

__all__ = [
    "DetectorHandle",
    "DetectorLifecycle",
    "HandDetectorConfig",
    "LandmarkerOptions",
    "MediaPipeHandLandmarker",
]
