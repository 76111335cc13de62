"""Shared domain types."""
from .types import (
    AcceleratorTier,
    DetectionResult,
    HandLandmarks,
    HandState,
    Landmark,
    LandmarkIndex,
    RunningMode,
    SessionState,
)

__all__ = [
    "AcceleratorTier",
    "DetectionResult",
    "HandLandmarks",
    "HandState",
    "Landmark",
    "LandmarkIndex",
    "RunningMode",
    "SessionState",
]
