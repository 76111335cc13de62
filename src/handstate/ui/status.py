"""
Status Panel
============

Text sinks for the demo: general status, current hand state and the
webcam toggle label. Status messages are mirrored to the log.
"""

import logging
from typing import List

from ..core.types import HandState

logger = logging.getLogger(__name__)

ENABLE_LABEL = "ENABLE WEBCAM"
DISABLE_LABEL = "DISABLE WEBCAM"


class StatusPanel:
    """Holds the user-visible status text."""

    def __init__(self):
        self.status = ""
        self.hand_state = HandState.NO_HAND_DETECTED
        self.button_label = ENABLE_LABEL

    def set_status(self, message: str) -> None:
        self.status = message
        logger.info(message)

    def set_hand_state(self, state: HandState) -> None:
        if state is not self.hand_state:
            logger.debug(f"Hand state: {state.label}")
        self.hand_state = state

    def set_button_label(self, label: str) -> None:
        self.button_label = label

    @property
    def hand_state_text(self) -> str:
        return f"Hand state: {self.hand_state.label}"

    def lines(self) -> List[str]:
        """Overlay lines, top to bottom."""
        lines = [self.hand_state_text]
        if self.status:
            lines.append(self.status)
        lines.append(f"[SPACE] {self.button_label}   [Q] QUIT")
        return lines
