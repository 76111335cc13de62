"""
Hand Landmarker Adapter - MediaPipe Tasks API
==============================================

Wraps MediaPipe's HandLandmarker as the inference capability used by the
detector lifecycle: created for one accelerator, switched from IMAGE to VIDEO
mode on the first frame, and queried once per new video frame.
"""

import logging
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from ..core.types import (
    AcceleratorTier,
    DetectionResult,
    HandLandmarks,
    Landmark,
    RunningMode,
)

logger = logging.getLogger(__name__)

# Model download URL
HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path("models") / "hand_landmarker.task"

_DELEGATES = {
    AcceleratorTier.GPU: python.BaseOptions.Delegate.GPU,
    AcceleratorTier.CPU: python.BaseOptions.Delegate.CPU,
}

_RUNNING_MODES = {
    RunningMode.IMAGE: vision.RunningMode.IMAGE,
    RunningMode.VIDEO: vision.RunningMode.VIDEO,
}


@dataclass
class HandDetectorConfig:
    """Configuration for the hand landmarker."""
    model_path: str = ""
    model_url: str = HAND_LANDMARKER_MODEL_URL
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            model_url=d.get("model_url", HAND_LANDMARKER_MODEL_URL),
            max_num_hands=d.get("max_num_hands", 2),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
        )

    @property
    def resolved_model_path(self) -> Path:
        return Path(self.model_path) if self.model_path else DEFAULT_MODEL_PATH


@dataclass
class LandmarkerOptions:
    """Options handed to the capability factory for one creation attempt."""
    accelerator: AcceleratorTier
    running_mode: RunningMode
    detector: HandDetectorConfig

    @property
    def max_num_hands(self) -> int:
        return self.detector.max_num_hands


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        logger.debug(f"Model already exists at {save_path}")
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading hand landmarker model to {save_path}...")
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete!")
        return True
    except Exception as e:
        logger.error(f"Failed to download model: {e}")
        return False


def to_detection_result(result, timestamp_ms: int = 0) -> DetectionResult:
    """Convert a MediaPipe HandLandmarkerResult into a DetectionResult."""
    hands = []
    for i, hand_landmarks in enumerate(result.hand_landmarks or []):
        handedness = "Right"
        confidence = 0.0
        if result.handedness and len(result.handedness) > i and result.handedness[i]:
            handedness = result.handedness[i][0].category_name
            confidence = result.handedness[i][0].score

        hands.append(HandLandmarks(
            landmarks=[Landmark(x=lm.x, y=lm.y, z=lm.z or 0.0) for lm in hand_landmarks],
            handedness=handedness,
            confidence=confidence,
        ))
    return DetectionResult(hands=hands, timestamp_ms=timestamp_ms)


class MediaPipeHandLandmarker:
    """
    Inference capability backed by MediaPipe's HandLandmarker.

    The Python Tasks API fixes the running mode at creation, so changing
    mode rebuilds the landmarker with the same delegate.

    Example:
        >>> options = LandmarkerOptions(AcceleratorTier.GPU, RunningMode.IMAGE, HandDetectorConfig())
        >>> landmarker = MediaPipeHandLandmarker(options)
        >>> landmarker.set_running_mode(RunningMode.VIDEO)
        >>> result = landmarker.detect_for_video(rgb_image, timestamp_ms)
        >>> landmarker.close()
    """

    def __init__(self, options: LandmarkerOptions):
        self.options = options
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._running_mode = options.running_mode

        model_path = options.detector.resolved_model_path
        if not model_path.exists():
            if not download_model(options.detector.model_url, model_path):
                raise RuntimeError(f"Hand landmarker model unavailable at {model_path}")
        self._model_path = str(model_path)

        self._landmarker = self._create(self._running_mode)
        logger.info(
            f"HandLandmarker initialized with model: {self._model_path} "
            f"(delegate={options.accelerator.value}, max hands={options.max_num_hands})"
        )

    def _create(self, running_mode: RunningMode) -> vision.HandLandmarker:
        detector = self.options.detector
        base_options = python.BaseOptions(
            model_asset_path=self._model_path,
            delegate=_DELEGATES[self.options.accelerator],
        )
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=_RUNNING_MODES[running_mode],
            num_hands=detector.max_num_hands,
            min_hand_detection_confidence=detector.min_detection_confidence,
            min_hand_presence_confidence=detector.min_presence_confidence,
            min_tracking_confidence=detector.min_tracking_confidence,
        )
        return vision.HandLandmarker.create_from_options(options)

    @property
    def running_mode(self) -> RunningMode:
        return self._running_mode

    def set_running_mode(self, mode: RunningMode) -> None:
        """Rebuild the landmarker for a different input mode."""
        if mode is self._running_mode:
            return
        replacement = self._create(mode)
        if self._landmarker:
            self._landmarker.close()
        self._landmarker = replacement
        self._running_mode = mode
        logger.info(f"HandLandmarker running mode: {mode.value}")

    def detect_for_video(self, image: np.ndarray, timestamp_ms: int) -> DetectionResult:
        """
        Detect hands in one video frame.

        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Strictly increasing timestamp in milliseconds

        Returns:
            DetectionResult with up to max_num_hands hands
        """
        if self._landmarker is None:
            raise RuntimeError("HandLandmarker is closed")

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)
        result = self._landmarker.detect_for_video(mp_image, timestamp_ms)
        return to_detection_result(result, timestamp_ms)

    def close(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker closed")


def create_hand_landmarker(options: LandmarkerOptions) -> MediaPipeHandLandmarker:
    """Default capability factory used by the detector lifecycle."""
    return MediaPipeHandLandmarker(options)
