"""Core value types and constants shared across the overlay."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

APP_NAME = "FPS Overlay"
CONFIG_FILE = "config.ini"
DEFAULT_FONT_SIZE = 16
DEFAULT_UPDATE_INTERVAL = 500  # milliseconds
MAX_MEMORY_USAGE = 25 * 1024 * 1024  # bytes

FPS_SAMPLE_COUNT = 60
MIN_FRAME_TIME = 0.001  # seconds


class OverlayPosition(IntEnum):
    """Screen corner the overlay is anchored to."""

    TOP_LEFT = 0
    TOP_RIGHT = 1
    BOTTOM_LEFT = 2
    BOTTOM_RIGHT = 3


class GraphicsAPI(IntEnum):
    """Graphics interfaces the overlay knows about."""

    UNKNOWN = 0
    D3D9 = 1
    D3D11 = 2
    D3D12 = 3
    OPENGL = 4
    VULKAN = 5


@dataclass(frozen=True)
class Color:
    """An RGBA colour with components in the 0.0-1.0 range."""

    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    a: float = 1.0


@dataclass
class OverlayConfig:
    """User-facing overlay settings."""

    enabled: bool = True
    position: OverlayPosition = OverlayPosition.TOP_LEFT
    font_size: int = DEFAULT_FONT_SIZE
    text_color: Color = Color(0.0, 1.0, 0.0, 1.0)
    background_color: Color = Color(0.0, 0.0, 0.0, 0.5)
    update_interval: int = DEFAULT_UPDATE_INTERVAL
    offset_x: int = 10
    offset_y: int = 10
    show_background: bool = True
    font_name: str = "Consolas"