"""Command-line entry point for the FPS overlay and its control panel."""

from __future__ import annotations

import sys
import time
from collections.abc import Sequence

from . import utils
from .menu import VERSION, MenuManager
from .overlay import FPSOverlay

_SEPARATOR = "=" * 40
_MAIN_LOOP_INTERVAL = 0.1  # seconds

_HELP = (
    f"FPS Monitor for Windows v{VERSION}\n"
    "Usage: FPSOverlay.exe [options]\n"
    "Options:\n"
    "  --menu, -m     Launch interactive control panel\n"
    "  --help, -h     Show this help message\n"
    "  --version, -v  Show version information\n"
    "  (no args)      Launch FPS overlay directly"
)


def _print_banner() -> None:
    print(f"FPS Monitor for Windows v{VERSION}")
    print(_SEPARATOR)
    print("Note: This software may trigger antivirus false positives due to frame detection.")
    print(_SEPARATOR)


def _run_menu() -> int:
    manager = MenuManager()
    if not manager.initialize():
        print("Failed to initialize menu system.")
        return 1
    try:
        manager.run_menu_loop()
    except KeyboardInterrupt:
        manager.exit_application()
    return 0


def _run_overlay(args: list[str]) -> int:
    if utils.is_application_already_running():
        print("FPS Overlay is already running.")
        return 1
    if not utils.acquire_instance_lock():
        print("Failed to create application mutex.")
        return 1

    overlay: FPSOverlay | None = None
    try:
        if not utils.is_windows7_or_later():
            print("This application requires Windows 7 or later.")
            return 1

        utils.log_info(f"Starting FPS Overlay v{VERSION}")
        utils.log_info(f"System: {utils.windows_version()}")

        overlay = FPSOverlay()
        if not overlay.process_command_line(args):
            return 0

        if not overlay.initialize():
            print("Failed to initialize FPS overlay.")
            utils.log_error("Failed to initialize FPS overlay")
            return 1

        if not overlay.start():
            print("Failed to start FPS overlay.")
            utils.log_error("Failed to start FPS overlay")
            return 1

        utils.log_info("FPS Overlay started successfully")
        print("FPS Overlay is running. Press Ctrl+C to exit.")

        try:
            while overlay.running:
                time.sleep(_MAIN_LOOP_INTERVAL)
                overlay.update()
        except KeyboardInterrupt:
            pass

        utils.log_info("Shutting down FPS Overlay")
        return 0
    except Exception as exc:
        print(f"Exception: {exc}")
        utils.log_error(f"Exception: {exc}")
        return 1
    finally:
        if overlay is not None:
            overlay.stop()
        utils.release_instance_lock()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the overlay, or the control panel with --menu; returns the exit code."""
    args = list(sys.argv[1:] if argv is None else argv)

    _print_banner()

    menu_mode = any(arg in ("--menu", "-m") for arg in args)
    show_help = any(arg in ("--help", "-h") for arg in args)
    show_version = any(arg in ("--version", "-v") for arg in args)

    if show_help:
        print(_HELP)
        return 0

    if show_version:
        print(f"FPS Monitor for Windows v{VERSION}")
        print(f"Version: {VERSION}")
        return 0

    if menu_mode:
        return _run_menu()

    return _run_overlay(args)


if __name__ == "__main__":
    sys.exit(main())