"""Interactive console control panel for the overlay settings."""

from __future__ import annotations

import dataclasses
import getpass
import platform
import re
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TextIO

from . import utils
from .config import ConfigManager, color_to_string, parse_color
from .models import Color, OverlayConfig, OverlayPosition

VERSION = "1.3.0"
OPTIONS_PER_PAGE = 20
EXIT_OPTION_ID = 99

_CONSOLE_TITLE = "FPS Monitor - Control Panel"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_CLEAR_SEQUENCE = "\033[2J\033[H"

_POSITION_LABELS = {
    OverlayPosition.TOP_LEFT: "Top-Left",
    OverlayPosition.TOP_RIGHT: "Top-Right",
    OverlayPosition.BOTTOM_LEFT: "Bottom-Left",
    OverlayPosition.BOTTOM_RIGHT: "Bottom-Right",
}


def center_text(text: str, width: int = 80) -> str:
    """Left-pad ``text`` so that it sits centred in ``width`` columns."""
    padding = max(0, (width - len(text)) // 2)
    return " " * padding + text


def create_separator(character: str = "=", width: int = 80) -> str:
    """A line of ``width`` copies of ``character``."""
    return character * width


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


@dataclass
class MenuOption:
    """A numbered entry of the menu."""

    id: int = 0
    name: str = ""
    description: str = ""
    category: str = ""
    action: Callable[[], None] = lambda: None
    enabled: bool = True


@dataclass
class MenuCategory:
    """A titled group of menu options."""

    name: str
    description: str = ""
    options: list[MenuOption] = field(default_factory=list)


class MenuManager:
    """Shows the control panel and runs the selected actions."""

    def __init__(
        self,
        config_manager: ConfigManager | None = None,
        *,
        input_stream: TextIO | None = None,
        output_stream: TextIO | None = None,
    ) -> None:
        self._config_manager = config_manager if config_manager is not None else ConfigManager()
        self._input = input_stream if input_stream is not None else sys.stdin
        self._output = output_stream if output_stream is not None else sys.stdout
        self._categories: list[MenuCategory] = []
        self._options: dict[int, MenuOption] = {}
        self._running = False
        self._initialized = False
        self.show_advanced_options = False
        self.current_page = 0

    # State

    @property
    def running(self) -> bool:
        return self._running

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def categories(self) -> list[MenuCategory]:
        return list(self._categories)

    @property
    def options(self) -> dict[int, MenuOption]:
        return dict(self._options)

    @property
    def config(self) -> OverlayConfig:
        return self._config_manager.config

    # Setup

    def initialize(self) -> bool:
        """Prepare the console and build the option list."""
        if self._initialized:
            return True
        isatty = getattr(self._output, "isatty", None)
        if isatty is not None and isatty():
            self._output.write(f"\033]0;{_CONSOLE_TITLE}\007")
        self._initialize_menu_options()
        self._initialized = True
        return True

    def _initialize_menu_options(self) -> None:
        self._categories.clear()
        self._options.clear()
        entries = [
            (1, "Change Overlay Position",
             "Set overlay position (Top-Left, Top-Right, Bottom-Left, Bottom-Right)",
             self.change_overlay_position),
            (2, "Change Font Size", "Adjust the font size of the overlay text", self.change_font_size),
            (3, "Change Text Color", "Modify the color of the overlay text", self.change_text_color),
            (4, "Change Background Color", "Modify the background color of the overlay",
             self.change_background_color),
            (5, "Toggle Overlay", "Enable or disable the FPS overlay", self.toggle_overlay),
            (6, "Toggle Background", "Show or hide the overlay background", self.toggle_background),
            (7, "Change Update Interval", "Set the update frequency of the overlay",
             self.change_update_interval),
            (8, "Reset to Defaults", "Restore all settings to default values", self.reset_to_defaults),
            (9, "Save Configuration", "Save current settings to config file", self.save_configuration),
            (10, "Load Configuration", "Load settings from config file", self.load_configuration),
            (EXIT_OPTION_ID, "Exit Application", "Exit the FPS Monitor application",
             self.exit_application),
        ]
        category = MenuCategory(
            "CONFIGURATION",
            "Overlay settings and preferences",
            [MenuOption(oid, name, desc, "CONFIGURATION", action) for oid, name, desc, action in entries],
        )
        self.add_category(category)

    def add_option(self, option: MenuOption) -> None:
        """Register an option, filing it under its category (created if missing)."""
        category = next((c for c in self._categories if c.name == option.category), None)
        if category is None:
            category = MenuCategory(option.category)
            self._categories.append(category)
        category.options.append(option)
        self._options.setdefault(option.id, option)

    def add_category(self, category: MenuCategory) -> None:
        """Append a category and register all of its options."""
        self._categories.append(category)
        for option in category.options:
            self._options.setdefault(option.id, option)

    # Display

    def _print(self, text: str = "") -> None:
        self._output.write(text + "\n")

    def _read_line(self) -> str | None:
        line = self._input.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def _prompt(self, text: str) -> str | None:
        self._output.write(text)
        self._output.flush()
        return self._read_line()

    def clear_screen(self) -> None:
        self._output.write(_CLEAR_SEQUENCE)

    def pause_for_user(self) -> None:
        self._print("Press any key to continue...")
        self._output.flush()
        self._read_line()

    def show_main_menu(self) -> None:
        self.clear_screen()
        self._display_header()
        self._display_categories()
        self._display_footer()
        self._output.write("Type option: ")
        self._output.flush()

    def _display_header(self) -> None:
        self._print(create_separator())
        self._print(center_text("FPS MONITOR - CONTROL PANEL"))
        self._print(create_separator())
        self._print(self.user_info())
        self._print(self.computer_info())
        self._print(self.system_info())
        self._print(self.time_zone_info())
        self._print(create_separator())
        self._print()

    def _display_categories(self) -> None:
        for category in self._categories:
            self._print(category.name)
            self._print("-" * len(category.name))
            for option in category.options:
                if not option.enabled:
                    continue
                line = f"[{option.id}] {option.name}"
                if option.description:
                    line += f" | {option.description}"
                self._print(line)
            self._print()

    def _display_footer(self) -> None:
        self._print(create_separator())
        self._print("NOTE: Type option number to select. Press 'h' for help, 'q' to quit.")
        self._print("Use options 1-10 to configure overlay settings. Option 99 to exit.")
        self._print(create_separator())

    # Input handling

    def run_menu_loop(self) -> None:
        """Show the menu and handle choices until exit or end of input."""
        self._running = True
        while self._running:
            self.show_main_menu()
            line = self._read_line()
            if line is None:
                self.exit_application()
                break
            self.process_user_input(self.parse_choice(line))

    def parse_choice(self, text: str) -> int | None:
        """Handle the letter commands; otherwise the leading number, or None."""
        if text in ("h", "H"):
            self.show_help()
            return None
        if text in ("q", "Q"):
            self.exit_application()
            return None
        if text in ("clear", "CLEAR"):
            self.clear_screen()
            return None
        return _leading_int(text)

    def process_user_input(self, choice: int | None) -> None:
        """Run the action of the chosen option, or report an invalid choice."""
        if choice is None:
            return
        option = self._options.get(choice)
        if option is None or not option.enabled:
            self._show_invalid_option()
            return
        try:
            option.action()
        except Exception as exc:
            self._print(f"Error executing option: {exc}")
            self.pause_for_user()

    def _show_invalid_option(self) -> None:
        self._print("Invalid option. Please try again.")
        self.pause_for_user()

    # System information

    def system_info(self) -> str:
        return f" CURRENT OS: {utils.windows_version()}"

    def user_info(self) -> str:
        try:
            user = getpass.getuser()
        except Exception:
            user = "Unknown"
        return f" USER: {user}"

    def computer_info(self) -> str:
        return f" COMPUTERNAME: {platform.node() or 'Unknown'}"

    def time_zone_info(self) -> str:
        zone = time.tzname[0] if time.tzname and time.tzname[0] else ""
        return f" Time Zone: {zone or 'Unknown'}"

    # Menu actions

    def show_help(self) -> None:
        self.clear_screen()
        for line in (
            "=== HELP ===",
            "FPS Monitor Control Panel Help",
            "=============================",
            "Navigation:",
            "- Type the number of the option you want to select",
            "- Press 'h' for help",
            "- Press 'q' to quit",
            "- Type 'clear' to clear the console",
            "",
            "Categories:",
            "- Configuration: Overlay settings and preferences",
        ):
            self._print(line)
        self.pause_for_user()

    def show_about(self) -> None:
        self.clear_screen()
        for line in (
            "=== ABOUT ===",
            "FPS Monitor for Windows",
            f"Version: {VERSION}",
            "",
            "A lightweight FPS overlay for Windows applications.",
            "Supports DirectX 9, DirectX 11, and OpenGL applications.",
        ):
            self._print(line)
        self.pause_for_user()

    def exit_application(self) -> None:
        self._print("Exiting FPS Monitor...")
        self._running = False

    # Configuration actions

    def _apply(self, **changes: object) -> None:
        self._config_manager.update_config(dataclasses.replace(self.config, **changes))

    def _ask_positive_int(self, prompt: str) -> int | None:
        answer = self._prompt(prompt)
        if answer is None or not answer.strip():
            return None
        value = _leading_int(answer)
        if value is None or value <= 0:
            self._print("Invalid value, setting unchanged.")
            return None
        return value

    def change_overlay_position(self) -> None:
        self.clear_screen()
        self._print("=== CHANGE OVERLAY POSITION ===")
        current = self.config.position
        self._print(f"Current position: {current.name}")
        self._print("Available positions:")
        for position, label in _POSITION_LABELS.items():
            self._print(f"{int(position) + 1}. {label}")
        answer = self._prompt("Select position (1-4): ")
        if answer is not None and answer.strip():
            value = _leading_int(answer)
            if value is not None and 1 <= value <= len(_POSITION_LABELS):
                position = OverlayPosition(value - 1)
                self._apply(position=position)
                self._print(f"Position set to {_POSITION_LABELS[position]}.")
            else:
                self._print("Invalid position, setting unchanged.")
        self.pause_for_user()

    def change_font_size(self) -> None:
        self.clear_screen()
        self._print("=== CHANGE FONT SIZE ===")
        self._print(f"Current font size: {self.config.font_size}")
        value = self._ask_positive_int("Enter new font size: ")
        if value is not None:
            self._apply(font_size=value)
            self._print(f"Font size set to {value}.")
        self.pause_for_user()

    def _change_color(self, title: str, attribute: str) -> None:
        self.clear_screen()
        self._print(title)
        current: Color = getattr(self.config, attribute)
        self._print(f"Current color: ({color_to_string(current)})")
        answer = self._prompt("Enter color as R,G,B[,A] (0.0-1.0): ")
        if answer is not None and answer.strip():
            color = parse_color(answer.strip(), current)
            self._apply(**{attribute: color})
            self._print(f"Color set to ({color_to_string(color)}).")
        self.pause_for_user()

    def change_text_color(self) -> None:
        self._change_color("=== CHANGE TEXT COLOR ===", "text_color")

    def change_background_color(self) -> None:
        self._change_color("=== CHANGE BACKGROUND COLOR ===", "background_color")

    def toggle_overlay(self) -> None:
        self.clear_screen()
        self._print("=== TOGGLE OVERLAY ===")
        enabled = not self.config.enabled
        self._apply(enabled=enabled)
        self._print(f"Overlay {'enabled' if enabled else 'disabled'}.")
        self.pause_for_user()

    def toggle_background(self) -> None:
        self.clear_screen()
        self._print("=== TOGGLE BACKGROUND ===")
        shown = not self.config.show_background
        self._apply(show_background=shown)
        self._print(f"Background {'shown' if shown else 'hidden'}.")
        self.pause_for_user()

    def change_update_interval(self) -> None:
        self.clear_screen()
        self._print("=== CHANGE UPDATE INTERVAL ===")
        self._print(f"Current interval: {self.config.update_interval}ms")
        value = self._ask_positive_int("Enter new interval in milliseconds: ")
        if value is not None:
            self._apply(update_interval=value)
            self._print(f"Update interval set to {value}ms.")
        self.pause_for_user()

    def reset_to_defaults(self) -> None:
        self.clear_screen()
        self._print("=== RESET TO DEFAULTS ===")
        self._config_manager.update_config(OverlayConfig())
        self._print("All settings restored to defaults.")
        self.pause_for_user()

    def save_configuration(self) -> None:
        self.clear_screen()
        self._print("=== SAVE CONFIGURATION ===")
        if self._config_manager.save_config():
            self._print("Configuration saved successfully.")
        else:
            self._print("Failed to save configuration.")
        self.pause_for_user()

    def load_configuration(self) -> None:
        self.clear_screen()
        self._print("=== LOAD CONFIGURATION ===")
        if self._config_manager.load_config():
            self._print("Configuration loaded successfully.")
        else:
            self._print("Failed to load configuration.")
        self.pause_for_user()