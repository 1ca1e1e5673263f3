"""Loading, saving and scaling of the overlay configuration."""

from __future__ import annotations

import configparser
import dataclasses
import os
import re
import threading

from . import utils
from .models import (
    CONFIG_FILE,
    DEFAULT_UPDATE_INTERVAL,
    Color,
    OverlayConfig,
    OverlayPosition,
)

config_lock = threading.Lock()

_BASE_FONT_SIZE = 16
_BASE_WIDTH = 1920
_MIN_FONT_SIZE = 12
_MAX_FONT_SIZE = 32
_MAX_VALUE_LENGTH = 1023
_PREFERRED_FONTS = ("Consolas", "Courier New", "Arial")
_DEFAULT_TEXT_COLOR = "0.0,1.0,0.0,1.0"
_DEFAULT_BACKGROUND_COLOR = "0.0,0.0,0.0,0.5"
_UNKNOWN_SCREEN = (0, 0)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_COMMENTS = (
    "\n; FPS Overlay Configuration File\n"
    "; Position: 0=Top-Left, 1=Top-Right, 2=Bottom-Left, 3=Bottom-Right\n"
    "; FontSize: 0=Auto-scale based on resolution, or specify custom size\n"
    "; Colors: R,G,B,A values (0.0-1.0 range)\n"
    "; UpdateInterval: Milliseconds between FPS updates (recommended: 500-1000)\n"
)

_INI_ERRORS = (OSError, configparser.Error, UnicodeDecodeError)


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def _leading_float(token: str) -> float:
    match = _LEADING_FLOAT.match(token)
    if match is None:
        raise ValueError(f"not a number: {token!r}")
    return float(match.group(1))


def parse_color(text: str, default: Color) -> Color:
    """Parse ``"r,g,b[,a]"`` into a colour, clamping each component to 0-1."""
    if not text:
        return default
    tokens = text.split(",")
    if tokens and tokens[-1] == "":
        tokens.pop()
    try:
        components = [_leading_float(utils.trim(token)) for token in tokens[:4]]
    except ValueError:
        utils.log_warning(f"Failed to parse color string: {text}")
        return default
    if len(components) < 3:
        return default
    r, g, b = (_clamp_unit(c) for c in components[:3])
    a = _clamp_unit(components[3]) if len(components) >= 4 else 1.0
    return Color(r, g, b, a)


def color_to_string(color: Color) -> str:
    """Format a colour as four comma-separated values with three decimals."""
    return f"{color.r:.3f},{color.g:.3f},{color.b:.3f},{color.a:.3f}"


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        comment_prefixes=(";", "#"),
        default_section="__defaults__",
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def _read_parser(path: str) -> configparser.ConfigParser:
    parser = _new_parser()
    with open(path, encoding="utf-8") as handle:
        parser.read_file(handle)
    return parser


def _find_section(parser: configparser.ConfigParser, section: str) -> str | None:
    wanted = section.casefold()
    return next((name for name in parser.sections() if name.casefold() == wanted), None)


def _lookup(parser: configparser.ConfigParser, section: str, key: str) -> str | None:
    name = _find_section(parser, section)
    if name is None:
        return None
    wanted = key.casefold()
    return next(
        (value for option, value in parser.items(name) if option.casefold() == wanted),
        None,
    )


def _read_str(parser: configparser.ConfigParser, section: str, key: str, default: str) -> str:
    value = _lookup(parser, section, key)
    return default if value is None else value[:_MAX_VALUE_LENGTH]


def _read_int(parser: configparser.ConfigParser, section: str, key: str, default: int) -> int:
    value = _lookup(parser, section, key)
    if value is None:
        return default
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def _read_bool(parser: configparser.ConfigParser, section: str, key: str, default: bool) -> bool:
    return _read_int(parser, section, key, 1 if default else 0) != 0


def _write(parser: configparser.ConfigParser, section: str, key: str, value: str) -> None:
    name = _find_section(parser, section)
    if name is None:
        parser.add_section(section)
        name = section
    wanted = key.casefold()
    for option in [o for o in parser.options(name) if o.casefold() == wanted]:
        parser.remove_option(name, option)
    parser.set(name, key, value)


def _position_from_int(value: int) -> OverlayPosition:
    try:
        return OverlayPosition(value)
    except ValueError:
        return OverlayPosition.TOP_LEFT


def _probe_screen_size() -> tuple[int, int]:
    try:
        import tkinter
    except ImportError:
        return _UNKNOWN_SCREEN
    try:
        root = tkinter.Tk()
    except tkinter.TclError:
        return _UNKNOWN_SCREEN
    try:
        root.withdraw()
        return root.winfo_screenwidth(), root.winfo_screenheight()
    finally:
        root.destroy()


class ConfigManager:
    """Holds the overlay configuration and persists it as an INI file."""

    def __init__(
        self,
        base_dir: str | os.PathLike[str] | None = None,
        *,
        screen_size: tuple[int, int] | None = None,
        validate_fonts: bool = True,
    ) -> None:
        self._base_dir = os.fspath(base_dir) if base_dir is not None else utils.executable_directory()
        self._screen_size = screen_size
        self._validate_fonts = validate_fonts
        self._config = OverlayConfig()

    @property
    def config(self) -> OverlayConfig:
        return self._config

    def full_path(self, config_path: str | os.PathLike[str] = CONFIG_FILE) -> str:
        """Path of a configuration file relative to the base directory."""
        return os.path.join(self._base_dir, os.fspath(config_path))

    def load_config(self, config_path: str | os.PathLike[str] = CONFIG_FILE) -> bool:
        """Load settings; writes a default file when none exists. False on failure."""
        path = self.full_path(config_path)
        if not utils.file_exists(path):
            utils.log_info(f"Config file not found, creating default: {path}")
            return self.save_config(config_path)

        try:
            parser = _read_parser(path)
        except _INI_ERRORS:
            utils.log_error(f"Failed to load configuration from: {path}")
            return False

        config = OverlayConfig(
            enabled=_read_bool(parser, "General", "Enabled", True),
            update_interval=_read_int(parser, "General", "UpdateInterval", DEFAULT_UPDATE_INTERVAL),
            position=_position_from_int(
                _read_int(parser, "Appearance", "Position", int(OverlayPosition.TOP_LEFT))
            ),
            font_size=_read_int(parser, "Appearance", "FontSize", 0),
            font_name=_read_str(parser, "Appearance", "FontName", "Consolas"),
            offset_x=_read_int(parser, "Appearance", "OffsetX", 10),
            offset_y=_read_int(parser, "Appearance", "OffsetY", 10),
            show_background=_read_bool(parser, "Appearance", "ShowBackground", True),
            text_color=parse_color(
                _read_str(parser, "Colors", "TextColor", _DEFAULT_TEXT_COLOR),
                Color(0.0, 1.0, 0.0, 1.0),
            ),
            background_color=parse_color(
                _read_str(parser, "Colors", "BackgroundColor", _DEFAULT_BACKGROUND_COLOR),
                Color(0.0, 0.0, 0.0, 0.5),
            ),
        )

        if config.font_size <= 0:
            config.font_size = self.scaled_font_size()

        if self._validate_fonts and not utils.is_font_installed(config.font_name):
            config.font_name = utils.best_available_font(_PREFERRED_FONTS)
            utils.log_warning(f"Font not found, using fallback: {config.font_name}")

        self._config = config
        utils.log_info(f"Configuration loaded successfully from: {path}")
        return True

    def _serialized(self) -> dict[str, dict[str, str]]:
        config = self._config
        return {
            "General": {
                "Enabled": "1" if config.enabled else "0",
                "UpdateInterval": str(config.update_interval),
            },
            "Appearance": {
                "Position": str(int(config.position)),
                "FontSize": str(config.font_size),
                "FontName": config.font_name,
                "OffsetX": str(config.offset_x),
                "OffsetY": str(config.offset_y),
                "ShowBackground": "1" if config.show_background else "0",
            },
            "Colors": {
                "TextColor": color_to_string(config.text_color),
                "BackgroundColor": color_to_string(config.background_color),
            },
        }

    def save_config(self, config_path: str | os.PathLike[str] = CONFIG_FILE) -> bool:
        """Write settings, keeping unrelated sections of an existing file. False on failure."""
        path = self.full_path(config_path)
        directory = os.path.dirname(path)
        if directory:
            utils.create_directory_recursive(directory)

        try:
            parser = _read_parser(path) if os.path.isfile(path) else _new_parser()
            for section, values in self._serialized().items():
                for key, value in values.items():
                    _write(parser, section, key, value)
            with open(path, "w", encoding="utf-8") as handle:
                parser.write(handle, space_around_delimiters=False)
                handle.write(_COMMENTS)
        except _INI_ERRORS:
            utils.log_error(f"Failed to save configuration to: {path}")
            return False

        utils.log_info(f"Configuration saved successfully to: {path}")
        return True

    def update_config(self, config: OverlayConfig) -> None:
        """Replace the current settings with a copy of ``config``."""
        with config_lock:
            self._config = dataclasses.replace(config)

    def scaled_font_size(self) -> int:
        """Font size scaled from 16 px at 1920 wide, kept within 12-32."""
        width, _ = self.screen_resolution()
        scaled = (_BASE_FONT_SIZE * width) // _BASE_WIDTH
        return max(_MIN_FONT_SIZE, min(scaled, _MAX_FONT_SIZE))

    def screen_resolution(self) -> tuple[int, int]:
        """Width and height of the primary screen, (0, 0) if unknown."""
        if self._screen_size is not None:
            return self._screen_size
        return _probe_screen_size()

    def __enter__(self) -> ConfigManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.save_config()