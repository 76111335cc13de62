"""
Hand State Demo
===============

Live webcam hand-landmark detection with a coarse open / fist / partial
hand-state label.

Modules:
    - capture: Webcam stream acquisition
    - detection: MediaPipe hand landmarker and its lifecycle
    - recognition: Hand-state classification from landmark geometry
    - scheduler: Per-refresh detect and render loop
    - session: Webcam session control
    - ui: OpenCV display host, render surface, status text
"""

__version__ = "1.0.0"
