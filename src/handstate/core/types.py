"""
Shared domain types for the hand-state demo.

Centralizes enums and data classes used across modules to eliminate
circular imports and keep the landmark model in one place.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, NamedTuple, Optional, Tuple

import numpy as np


# =============================================================================
# Landmarks
# =============================================================================

NUM_LANDMARKS = 21


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


FINGERTIPS = (
    LandmarkIndex.THUMB_TIP,
    LandmarkIndex.INDEX_TIP,
    LandmarkIndex.MIDDLE_TIP,
    LandmarkIndex.RING_TIP,
    LandmarkIndex.PINKY_TIP,
)

# Proximal joint paired with each fingertip above
FINGER_BASES = (
    LandmarkIndex.THUMB_MCP,
    LandmarkIndex.INDEX_MCP,
    LandmarkIndex.MIDDLE_MCP,
    LandmarkIndex.RING_MCP,
    LandmarkIndex.PINKY_MCP,
)

# Skeleton edges drawn between landmarks
HAND_CONNECTIONS: List[Tuple[int, int]] = [
    (0, 1), (1, 2), (2, 3), (3, 4),          # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # Index
    (5, 9), (9, 10), (10, 11), (11, 12),     # Middle
    (9, 13), (13, 14), (14, 15), (15, 16),   # Ring
    (13, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (0, 17),                                 # Palm base
]


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float = 0.0  # Depth relative to wrist

    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))


@dataclass
class HandLandmarks:
    """One detected hand: 21 landmarks plus the model's handedness guess."""
    landmarks: List[Landmark]
    handedness: str = "Right"
    confidence: float = 0.0

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]

    def to_numpy(self) -> np.ndarray:
        """Convert landmarks to numpy array of shape (21, 3)."""
        return np.array([[lm.x, lm.y, lm.z] for lm in self.landmarks])

    def __len__(self) -> int:
        return len(self.landmarks)


@dataclass
class DetectionResult:
    """All hands found in one frame. Superseded entirely by the next one."""
    hands: List[HandLandmarks] = field(default_factory=list)
    timestamp_ms: int = 0

    @property
    def primary(self) -> Optional[HandLandmarks]:
        """First hand of the result, the only one that gets classified."""
        return self.hands[0] if self.hands else None

    @property
    def hand_count(self) -> int:
        return len(self.hands)

    @staticmethod
    def empty(timestamp_ms: int = 0) -> "DetectionResult":
        return DetectionResult(hands=[], timestamp_ms=timestamp_ms)


# =============================================================================
# Hand State
# =============================================================================

class HandState(Enum):
    """Coarse hand-state label shown to the user."""
    OPEN_HAND = "Open hand"
    FIST = "Fist"
    PARTIAL_HAND = "Partial hand"
    NO_HAND_DETECTED = "No hand detected"

    @property
    def label(self) -> str:
        return self.value


# =============================================================================
# Detector / Session State
# =============================================================================

class RunningMode(Enum):
    """Input mode of the landmark model. Upgraded IMAGE -> VIDEO once."""
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


class AcceleratorTier(Enum):
    """Inference delegate, fixed when the landmarker is created."""
    GPU = "GPU"
    CPU = "CPU"


class SessionState(Enum):
    """Webcam session lifecycle."""
    IDLE = "idle"
    REQUESTING = "requesting"
    ACTIVE = "active"
    STOPPED = "stopped"
