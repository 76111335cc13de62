"""Display host, render surface and status sinks."""
from .host import DisplayHost
from .status import StatusPanel
from .surface import RenderSurface, VisualizerConfig

__all__ = ["DisplayHost", "RenderSurface", "StatusPanel", "VisualizerConfig"]
