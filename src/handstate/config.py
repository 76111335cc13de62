"""
Application configuration: YAML file mapped onto per-component dataclasses.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import yaml

from .capture.media_source import CameraConfig
from .detection.hand_detector import HandDetectorConfig
from .recognition.hand_state import HandStateClassifierConfig
from .session import ExecutionContext
from .ui.surface import VisualizerConfig
from .utils.logger import LoggingConfig

logger = logging.getLogger(__name__)


@dataclass
class DisplayConfig:
    window_name: str = "Hand State Demo"
    refresh_hz: float = 60.0

    @classmethod
    def from_dict(cls, config: dict) -> "DisplayConfig":
        return cls(
            window_name=config.get("window_name", "Hand State Demo"),
            refresh_hz=float(config.get("refresh_hz", 60.0)),
        )


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    mediapipe: HandDetectorConfig = field(default_factory=HandDetectorConfig)
    classifier: HandStateClassifierConfig = field(default_factory=HandStateClassifierConfig)
    visualization: VisualizerConfig = field(default_factory=VisualizerConfig)
    context: ExecutionContext = field(default_factory=ExecutionContext)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Union[str, Path]) -> dict:
    """Load configuration from YAML file. Missing file -> empty dict."""
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return {}
    logger.info(f"Loaded configuration from {config_path}")
    return data


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from configuration dictionary."""
    return AppConfig(
        camera=CameraConfig.from_dict(config_dict.get("camera", {})),
        mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
        classifier=HandStateClassifierConfig.from_dict(config_dict.get("classifier", {})),
        visualization=VisualizerConfig.from_dict(config_dict.get("visualization", {})),
        context=ExecutionContext.from_dict(config_dict.get("context", {})),
        display=DisplayConfig.from_dict(config_dict.get("display", {})),
        logging=LoggingConfig.from_dict(config_dict.get("logging", {})),
    )
