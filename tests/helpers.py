"""
Shared fixtures-as-functions for the test suite.
"""

import math
from typing import Sequence

import numpy as np

from handstate.capture.media_source import Frame
from handstate.core.types import (
    FINGER_BASES,
    FINGERTIPS,
    DetectionResult,
    HandLandmarks,
    Landmark,
)

# Unit length used when building synthetic hands
UNIT = 0.01


def create_mock_hand(
    tip_distances: Sequence[float],
    base_distances: Sequence[float],
    origin=(0.5, 0.7, 0.0),
    handedness: str = "Right",
) -> HandLandmarks:
    """
    Create a synthetic hand.

    Each finger is laid out along its own ray from the wrist, fanning
    upwards, with its base joint and tip at the given distances (in UNITs).

    Args:
        tip_distances: Wrist->tip distance per finger (thumb first)
        base_distances: Wrist->base joint distance per finger

    Returns:
        HandLandmarks with 21 points
    """
    ox, oy, oz = origin
    points = [Landmark(ox, oy, oz) for _ in range(21)]

    for finger, (tip_idx, base_idx) in enumerate(zip(FINGERTIPS, FINGER_BASES)):
        angle = math.radians(-150 + finger * 30)
        dx, dy = math.cos(angle), math.sin(angle)
        base_d = base_distances[finger] * UNIT
        tip_d = tip_distances[finger] * UNIT
        base = Landmark(ox + dx * base_d, oy + dy * base_d, oz)
        tip = Landmark(ox + dx * tip_d, oy + dy * tip_d, oz)

        # Intermediate joints sit between base and tip
        for idx in range(base_idx, tip_idx):
            points[idx] = base
        points[tip_idx] = tip

    return HandLandmarks(landmarks=points, handedness=handedness, confidence=0.9)


def open_hand(**kwargs) -> HandLandmarks:
    return create_mock_hand([10] * 5, [5] * 5, **kwargs)


def fist(**kwargs) -> HandLandmarks:
    return create_mock_hand([5] * 5, [10] * 5, **kwargs)


def hand_with_extended(extended: Sequence[bool], **kwargs) -> HandLandmarks:
    tips = [10 if e else 5 for e in extended]
    bases = [5 if e else 10 for e in extended]
    return create_mock_hand(tips, bases, **kwargs)


def translate(hand: HandLandmarks, dx: float, dy: float, dz: float) -> HandLandmarks:
    return HandLandmarks(
        landmarks=[Landmark(lm.x + dx, lm.y + dy, lm.z + dz) for lm in hand.landmarks],
        handedness=hand.handedness,
        confidence=hand.confidence,
    )


class FakeCapability:
    """Stand-in for the hand landmarker."""

    def __init__(self, options=None, result=None):
        self.options = options
        self.result = result if result is not None else DetectionResult.empty()
        self.modes = []
        self.calls = []
        self.closed = False
        self.error = None

    def set_running_mode(self, mode):
        self.modes.append(mode)

    def detect_for_video(self, image, timestamp_ms):
        self.calls.append(timestamp_ms)
        if self.error is not None:
            raise self.error
        return self.result

    def close(self):
        self.closed = True


class RecordingFactory:
    """Capability factory that records attempts and fails on request."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.attempts = []
        self.created = []

    def __call__(self, options):
        self.attempts.append(options.accelerator)
        if options.accelerator in self.fail_on:
            raise RuntimeError(f"{options.accelerator.value} delegate unavailable")
        capability = FakeCapability(options)
        self.created.append(capability)
        return capability


class FakeSource:
    """Video source whose frames are pushed by the test."""

    def __init__(self, width: int = 64, height: int = 48):
        self.width = width
        self.height = height
        self.frame = None
        self._frame_number = 0

    def push(self, timestamp: float) -> Frame:
        self._frame_number += 1
        self.frame = Frame(
            image=np.zeros((self.height, self.width, 3), dtype=np.uint8),
            timestamp=timestamp,
            frame_number=self._frame_number,
        )
        return self.frame

    def read(self):
        return self.frame


class FakeTrack:
    def __init__(self):
        self.stop_count = 0

    def stop(self):
        self.stop_count += 1


class FakeStream:
    def __init__(self, track_count=2):
        self.tracks = [FakeTrack() for _ in range(track_count)]
        self.loaded_callbacks = []

    def get_tracks(self):
        return list(self.tracks)

    def on_loaded_data(self, callback):
        self.loaded_callbacks.append(callback)

    def fire_loaded(self):
        for callback in self.loaded_callbacks:
            callback()


class FakeMediaSource:
    """Media source that can fail, or hold the request until a gate opens."""

    def __init__(self, error=None, gate=None):
        self.error = error
        self.gate = gate
        self.requests = []
        self.streams = []

    async def request_stream(self, constraints=None):
        self.requests.append(constraints)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        stream = FakeStream()
        self.streams.append(stream)
        return stream
