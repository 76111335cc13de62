"""
Detector Lifecycle
==================

Creates the hand landmarker (GPU first, CPU as fallback), upgrades it from
IMAGE to VIDEO mode on the first frame and serializes detection calls.

When neither accelerator works the lifecycle stays degraded: no handle
exists, detection is unavailable for the rest of the process and the
capture/render loop carries on without landmarks.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import numpy as np

from ..core.types import AcceleratorTier, DetectionResult, RunningMode
from ..errors import InitializationError
from .hand_detector import HandDetectorConfig, LandmarkerOptions, create_hand_landmarker

logger = logging.getLogger(__name__)

# Tried in order; CPU is attempted exactly once after a GPU failure
ACCELERATOR_ORDER = (AcceleratorTier.GPU, AcceleratorTier.CPU)


@dataclass
class DetectorHandle:
    """Owns the inference capability for the lifetime of the process."""
    capability: Any
    accelerator: AcceleratorTier
    running_mode: RunningMode = RunningMode.IMAGE


class DetectorLifecycle:
    """
    Manages creation, mode switching and fallback of the hand landmarker.

    Example:
        >>> lifecycle = DetectorLifecycle(HandDetectorConfig())
        >>> handle = await lifecycle.initialize()
        >>> if handle:
        ...     lifecycle.set_running_mode(handle, RunningMode.VIDEO)
        ...     result = lifecycle.detect(handle, rgb_image, timestamp_ms)
    """

    def __init__(
        self,
        config: Optional[HandDetectorConfig] = None,
        factory: Optional[Callable[[LandmarkerOptions], Any]] = None,
    ):
        self.config = config or HandDetectorConfig()
        self._factory = factory or create_hand_landmarker
        self.handle: Optional[DetectorHandle] = None
        self.error: Optional[InitializationError] = None
        self._initializing = False
        self._detecting = False
        self._closed = False

    @property
    def available(self) -> bool:
        """True once a landmarker has been created."""
        return self.handle is not None

    @property
    def degraded(self) -> bool:
        """True when every accelerator failed."""
        return self.error is not None

    async def initialize(self) -> Optional[DetectorHandle]:
        """
        Create the landmarker, falling back from GPU to CPU.

        Returns:
            The DetectorHandle, or None when both accelerators failed
        """
        if self.handle is not None:
            return self.handle
        if self.error is not None or self._closed:
            return None
        if self._initializing:
            raise RuntimeError("DetectorLifecycle.initialize() is already running")

        self._initializing = True
        loop = asyncio.get_running_loop()
        causes: Dict[str, BaseException] = {}
        try:
            for tier in ACCELERATOR_ORDER:
                options = LandmarkerOptions(
                    accelerator=tier,
                    running_mode=RunningMode.IMAGE,
                    detector=self.config,
                )
                try:
                    capability = await loop.run_in_executor(None, self._factory, options)
                except Exception as e:
                    causes[tier.value] = e
                    logger.warning(f"HandLandmarker creation failed on {tier.value}: {e}")
                    continue

                if self._closed:
                    capability.close()
                    logger.info("Lifecycle closed during initialization; landmarker released")
                    return None

                self.handle = DetectorHandle(
                    capability=capability,
                    accelerator=tier,
                    running_mode=RunningMode.IMAGE,
                )
                logger.info(f"HandLandmarker ready on {tier.value}")
                return self.handle
        finally:
            self._initializing = False

        self.error = InitializationError(
            "Hand landmarker could not be created on any accelerator", causes
        )
        logger.error(f"{self.error} ({', '.join(causes)})")
        return None

    def set_running_mode(self, handle: DetectorHandle, mode: RunningMode) -> None:
        """Upgrade IMAGE -> VIDEO once. Any other transition is a no-op."""
        if handle.running_mode is mode:
            return
        if handle.running_mode is RunningMode.VIDEO:
            logger.debug(f"Ignoring running mode change to {mode.value}; VIDEO is final")
            return

        handle.capability.set_running_mode(mode)
        handle.running_mode = mode
        logger.info(f"Running mode switched to {mode.value}")

    def detect(self, handle: DetectorHandle, frame: np.ndarray, timestamp_ms: int) -> DetectionResult:
        """
        Run detection on one video frame.

        Args:
            handle: Handle returned by initialize()
            frame: RGB image as numpy array (H, W, 3)
            timestamp_ms: Strictly increasing timestamp in milliseconds

        Returns:
            DetectionResult for this frame
        """
        if handle.running_mode is not RunningMode.VIDEO:
            raise RuntimeError("detect() requires VIDEO running mode")
        if self._detecting:
            raise RuntimeError("detect() called while a previous call is outstanding")

        self._detecting = True
        try:
            return handle.capability.detect_for_video(frame, timestamp_ms)
        finally:
            self._detecting = False

    def close(self) -> None:
        """Release the landmarker. The lifecycle cannot be initialized again."""
        self._closed = True
        if self.handle is not None:
            self.handle.capability.close()
            self.handle = None
