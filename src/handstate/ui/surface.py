"""
Render Surface
==============

Drawing canvas for the hand skeleton: resized to the video, cleared to the
current frame each tick, then overlaid with connectors and landmark points.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..core.types import HAND_CONNECTIONS, HandLandmarks

Color = Tuple[int, int, int]


@dataclass
class VisualizerConfig:
    """Visualization settings (colors are BGR)."""
    connection_color: Color = (0, 255, 0)  # Green
    connection_width: int = 5
    landmark_color: Color = (0, 0, 255)    # Red
    landmark_width: int = 2
    landmark_radius: int = 4
    text_color: Color = (0, 255, 255)      # Yellow
    show_status: bool = True

    # Font settings
    font_scale: float = 0.7
    font_thickness: int = 2

    # Canvas shown before any video is attached
    placeholder_width: int = 640
    placeholder_height: int = 480

    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        colors = config.get("colors", {})
        return cls(
            connection_color=tuple(colors.get("connections", [0, 255, 0])),
            connection_width=config.get("connection_width", 5),
            landmark_color=tuple(colors.get("landmarks", [0, 0, 255])),
            landmark_width=config.get("landmark_width", 2),
            landmark_radius=config.get("landmark_radius", 4),
            text_color=tuple(colors.get("text", [0, 255, 255])),
            show_status=config.get("show_status", True),
            font_scale=config.get("font_scale", 0.7),
            font_thickness=config.get("font_thickness", 2),
            placeholder_width=config.get("placeholder_width", 640),
            placeholder_height=config.get("placeholder_height", 480),
        )


class RenderSurface:
    """
    Resizable 2D drawing surface associated with one video source.

    Example:
        >>> surface = RenderSurface(VisualizerConfig())
        >>> surface.attach(stream)
        >>> surface.resize(640, 480)
        >>> surface.clear(frame.image)
        >>> surface.draw_hands(result.hands)
        >>> cv2.imshow("demo", surface.render(status))
    """

    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self.source = None
        self.width = 0
        self.height = 0
        self.canvas: Optional[np.ndarray] = None
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    @property
    def attached(self) -> bool:
        return self.source is not None

    def attach(self, source) -> None:
        self.source = source

    def detach(self) -> None:
        """Drop the source association and the drawn contents."""
        self.source = None
        self.canvas = None
        self.width = 0
        self.height = 0

    def resize(self, width: int, height: int) -> None:
        """Match the canvas to the source dimensions."""
        if self.canvas is not None and (width, height) == (self.width, self.height):
            return
        self.width = width
        self.height = height
        self.canvas = np.zeros((height, width, 3), dtype=np.uint8)

    def clear(self, backdrop: Optional[np.ndarray] = None) -> None:
        """Clear to the given frame (or black)."""
        if self.canvas is None:
            return
        if backdrop is not None and backdrop.shape == self.canvas.shape:
            np.copyto(self.canvas, backdrop)
        else:
            self.canvas.fill(0)

    def draw_connectors(
        self,
        hand: HandLandmarks,
        connections: Iterable[Tuple[int, int]],
        color: Color,
        line_width: int,
    ) -> None:
        """Draw line segments between landmark pairs."""
        if self.canvas is None:
            return
        for start_idx, end_idx in connections:
            start = hand.landmarks[start_idx].to_pixel(self.width, self.height)
            end = hand.landmarks[end_idx].to_pixel(self.width, self.height)
            cv2.line(self.canvas, start, end, color, line_width)

    def draw_landmarks(self, hand: HandLandmarks, color: Color, line_width: int) -> None:
        """Draw a point marker per landmark."""
        if self.canvas is None:
            return
        radius = self.config.landmark_radius
        for lm in hand.landmarks:
            pos = lm.to_pixel(self.width, self.height)
            cv2.circle(self.canvas, pos, radius, color, -1)
            cv2.circle(self.canvas, pos, radius + line_width, color, line_width)

    def draw_hands(self, hands: Sequence[HandLandmarks]) -> None:
        """Draw every detected hand with the configured style."""
        for hand in hands:
            self.draw_connectors(
                hand, HAND_CONNECTIONS,
                self.config.connection_color, self.config.connection_width,
            )
            self.draw_landmarks(hand, self.config.landmark_color, self.config.landmark_width)

    def render(self, status=None) -> np.ndarray:
        """
        Compose the image to display.

        Args:
            status: Optional StatusPanel whose lines are drawn on top

        Returns:
            BGR image (placeholder when no video is attached)
        """
        if self.canvas is not None:
            image = self.canvas.copy()
        else:
            image = np.zeros(
                (self.config.placeholder_height, self.config.placeholder_width, 3),
                dtype=np.uint8,
            )

        if status is not None and self.config.show_status:
            self._draw_lines(image, status.lines())
        return image

    def _draw_lines(self, image: np.ndarray, lines: List[str]) -> None:
        x, y = 20, 30
        line_height = 28
        for line in lines:
            # Shadow first, then text
            cv2.putText(image, line, (x + 1, y + 1), self._font,
                        self.config.font_scale, (0, 0, 0), self.config.font_thickness + 1)
            cv2.putText(image, line, (x, y), self._font,
                        self.config.font_scale, self.config.text_color, self.config.font_thickness)
            y += line_height
