"""Hand state recognition."""
from .hand_state import HandStateClassifier, HandStateClassifierConfig

__all__ = ["HandStateClassifier", "HandStateClassifierConfig"]
