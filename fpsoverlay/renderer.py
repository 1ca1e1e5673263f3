"""Drawing of the FPS text in a small always-on-top overlay window."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from . import utils
from .models import Color, GraphicsAPI, OverlayConfig, OverlayPosition

_WINDOW_WIDTH = 200
_WINDOW_HEIGHT = 50
_PADDING_X = 20
_PADDING_Y = 10
_FALLBACK_SIZE = (100, 30)
_WINDOW_TITLE = "FPS Overlay"


def format_fps(fps: float) -> str:
    """Text shown by the overlay, one decimal place."""
    return f"FPS: {fps:.1f}"


def _channel(value: float) -> int:
    return int(value * 255) & 0xFF


def color_to_d3d_color(color: Color) -> int:
    """Pack a colour as a 32-bit ARGB integer."""
    return (
        (_channel(color.a) << 24)
        | (_channel(color.r) << 16)
        | (_channel(color.g) << 8)
        | _channel(color.b)
    )


def _rgb_hex(color: Color) -> str:
    return f"#{_channel(color.r):02x}{_channel(color.g):02x}{_channel(color.b):02x}"


class OverlaySurface(Protocol):
    """A window the renderer can measure text for and draw into."""

    def open(self) -> bool: ...

    def close(self) -> None: ...

    def screen_size(self) -> tuple[int, int]: ...

    def measure(self, text: str, font_name: str, font_size: int) -> tuple[int, int] | None: ...

    def draw(
        self,
        text: str,
        x: int,
        y: int,
        width: int,
        height: int,
        *,
        font_name: str,
        font_size: int,
        color: str,
        alpha: float,
    ) -> None: ...


class TkOverlaySurface:
    """Borderless, topmost window drawn with tkinter."""

    def __init__(self) -> None:
        self._root: Any = None
        self._label: Any = None

    def open(self) -> bool:
        try:
            import tkinter
        except ImportError:
            utils.log_error("Failed to create overlay window: tkinter is not available")
            return False
        try:
            root = tkinter.Tk()
        except tkinter.TclError as exc:
            utils.log_error(f"Failed to create overlay window: {exc}")
            return False
        root.title(_WINDOW_TITLE)
        root.overrideredirect(True)
        root.geometry(f"{_WINDOW_WIDTH}x{_WINDOW_HEIGHT}+0+0")
        try:
            root.attributes("-topmost", True)
            root.attributes("-transparentcolor", "black")
        except tkinter.TclError:
            pass
        label = tkinter.Label(root, bg="black", anchor="nw", justify="left")
        label.pack(fill="both", expand=True)
        self._root = root
        self._label = label
        return True

    def close(self) -> None:
        if self._root is None:
            return
        try:
            self._root.destroy()
        except Exception:  # the window may already be gone
            pass
        self._root = None
        self._label = None

    def screen_size(self) -> tuple[int, int]:
        if self._root is None:
            return (0, 0)
        return self._root.winfo_screenwidth(), self._root.winfo_screenheight()

    def measure(self, text: str, font_name: str, font_size: int) -> tuple[int, int] | None:
        if self._root is None:
            return None
        import tkinter
        import tkinter.font

        try:
            font = tkinter.font.Font(root=self._root, family=font_name, size=-abs(font_size))
            return font.measure(text), font.metrics("linespace")
        except tkinter.TclError:
            return None

    def draw(
        self,
        text: str,
        x: int,
        y: int,
        width: int,
        height: int,
        *,
        font_name: str,
        font_size: int,
        color: str,
        alpha: float,
    ) -> None:
        if self._root is None:
            return
        import tkinter

        try:
            self._label.configure(text=text, fg=color, font=(font_name, -abs(font_size)))
            self._root.geometry(f"{width}x{height}+{x}+{y}")
            self._root.attributes("-alpha", max(0.0, min(1.0, alpha)))
            self._root.update_idletasks()
            self._root.update()
        except tkinter.TclError as exc:
            utils.log_warning(f"Failed to draw overlay: {exc}")


class Renderer:
    """Places and draws the FPS text on an overlay surface."""

    def __init__(self, surface_factory: Callable[[], OverlaySurface] = TkOverlaySurface) -> None:
        self._surface_factory = surface_factory
        self._surface: OverlaySurface | None = None
        self._initialized = False
        self._current_api = GraphicsAPI.UNKNOWN
        self._device: object | None = None
        self._screen_width = 0
        self._screen_height = 0

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def current_api(self) -> GraphicsAPI:
        return self._current_api

    @property
    def screen_width(self) -> int:
        return self._screen_width

    @property
    def screen_height(self) -> int:
        return self._screen_height

    def initialize(self, api: GraphicsAPI, device: object | None = None) -> bool:
        """Open the overlay window; False if it cannot be created."""
        if self._initialized:
            self.cleanup()

        self._current_api = api
        self._device = device
        utils.log_info("Initializing renderer")

        surface = self._surface_factory()
        if not surface.open():
            utils.log_error("Failed to create overlay window")
            return False

        self._surface = surface
        self.update_screen_dimensions(*surface.screen_size())
        self._initialized = True
        utils.log_info("Renderer initialized successfully")
        return True

    def cleanup(self) -> None:
        """Close the overlay window and drop device references."""
        if not self._initialized:
            return
        utils.log_info("Cleaning up renderer")
        self._device = None
        if self._surface is not None:
            self._surface.close()
            self._surface = None
        self._initialized = False
        utils.log_info("Renderer cleanup completed")

    def render_overlay(self, fps: float, config: OverlayConfig) -> None:
        """Draw the FPS value with the given settings."""
        if not self._initialized or self._surface is None:
            return
        text = format_fps(fps)
        x, y, width, height = self.text_position(config, text)
        self._surface.draw(
            text,
            x,
            y,
            width,
            height,
            font_name=config.font_name,
            font_size=config.font_size,
            color=_rgb_hex(config.text_color),
            alpha=config.text_color.a,
        )

    def update_screen_dimensions(self, width: int, height: int) -> None:
        self._screen_width = width
        self._screen_height = height

    def text_position(self, config: OverlayConfig, text: str) -> tuple[int, int, int, int]:
        """Window x, y, width and height for ``text``, kept on screen."""
        measured = (
            self._surface.measure(text, config.font_name, config.font_size)
            if self._surface is not None
            else None
        )
        if measured is None:
            width, height = _FALLBACK_SIZE
        else:
            width, height = measured[0] + _PADDING_X, measured[1] + _PADDING_Y

        right = self._screen_width - width - config.offset_x
        bottom = self._screen_height - height - config.offset_y
        x, y = {
            OverlayPosition.TOP_LEFT: (config.offset_x, config.offset_y),
            OverlayPosition.TOP_RIGHT: (right, config.offset_y),
            OverlayPosition.BOTTOM_LEFT: (config.offset_x, bottom),
            OverlayPosition.BOTTOM_RIGHT: (right, bottom),
        }.get(config.position, (config.offset_x, config.offset_y))

        x = max(0, min(x, self._screen_width - width))
        y = max(0, min(y, self._screen_height - height))
        return x, y, width, height

    def __enter__(self) -> Renderer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()