"""
Hand State Classifier
=====================

Rule-based open / fist / partial classification from landmark geometry.

A finger counts as extended when its tip lies noticeably farther from the
wrist than its proximal joint does. Distances are 3D (missing depth is 0),
so the result does not depend on where the hand sits in the frame.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..core.types import (
    FINGER_BASES,
    FINGERTIPS,
    NUM_LANDMARKS,
    DetectionResult,
    HandLandmarks,
    HandState,
    LandmarkIndex,
)
from ..errors import InvalidLandmarksError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandStateClassifierConfig:
    """Classifier thresholds (empirical, not anatomically derived)."""
    # Tip must be this many times farther from the wrist than the base joint
    extension_ratio: float = 1.15
    # At least this many extended fingers -> open hand
    open_min_extended: int = 4
    # At most this many extended fingers -> fist
    fist_max_extended: int = 1

    @classmethod
    def from_dict(cls, config: dict) -> "HandStateClassifierConfig":
        """Create config from dictionary."""
        return cls(
            extension_ratio=float(config.get("extension_ratio", 1.15)),
            open_min_extended=int(config.get("open_min_extended", 4)),
            fist_max_extended=int(config.get("fist_max_extended", 1)),
        )


def _distance(a, b) -> float:
    return math.sqrt(
        (a.x - b.x) ** 2
        + (a.y - b.y) ** 2
        + ((getattr(a, "z", 0.0) or 0.0) - (getattr(b, "z", 0.0) or 0.0)) ** 2
    )


class HandStateClassifier:
    """
    Classifies a single hand into a HandState.

    Example:
        >>> classifier = HandStateClassifier()
        >>> state = classifier.classify(hand)
        >>> print(state.label)
    """

    def __init__(self, config: Optional[HandStateClassifierConfig] = None):
        self.config = config or HandStateClassifierConfig()

    def count_extended_fingers(self, hand: Union[HandLandmarks, Sequence]) -> int:
        """
        Count extended fingers of a hand.

        Args:
            hand: HandLandmarks or a bare sequence of 21 landmarks

        Returns:
            Number of extended fingers (0-5)

        Raises:
            InvalidLandmarksError: If fewer than 21 landmarks are supplied
        """
        landmarks = hand.landmarks if isinstance(hand, HandLandmarks) else hand
        if landmarks is None or len(landmarks) < NUM_LANDMARKS:
            count = 0 if landmarks is None else len(landmarks)
            raise InvalidLandmarksError(
                f"Expected {NUM_LANDMARKS} landmarks, got {count}"
            )

        wrist = landmarks[LandmarkIndex.WRIST]
        extended = 0
        for tip_idx, base_idx in zip(FINGERTIPS, FINGER_BASES):
            tip_distance = _distance(landmarks[tip_idx], wrist)
            base_distance = _distance(landmarks[base_idx], wrist)
            if tip_distance > base_distance * self.config.extension_ratio:
                extended += 1
        logger.debug(f"Extended fingers: {extended}")
        return extended

    def classify(self, hand: Union[HandLandmarks, Sequence]) -> HandState:
        """Classify one hand as open, fist or partial."""
        extended = self.count_extended_fingers(hand)

        if extended >= self.config.open_min_extended:
            return HandState.OPEN_HAND
        if extended <= self.config.fist_max_extended:
            return HandState.FIST
        return HandState.PARTIAL_HAND

    def classify_result(self, result: Optional[DetectionResult]) -> HandState:
        """Classify the primary hand of a detection result."""
        if result is None or result.primary is None:
            return HandState.NO_HAND_DETECTED
        return self.classify(result.primary)
