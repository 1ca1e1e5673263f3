"""FPS measurement loop that drives the hook manager and the renderer."""

from __future__ import annotations

import sys
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from typing import TextIO

from . import utils
from .config import ConfigManager
from .hooks import HookManager
from .menu import VERSION
from .models import FPS_SAMPLE_COUNT, MAX_MEMORY_USAGE, MIN_FRAME_TIME, GraphicsAPI
from .renderer import Renderer

_MIB = 1024 * 1024
_POLL_THRESHOLD = 0.008  # seconds; shorter intervals are ignored
_SMOOTHING = 0.9
_MIN_FPS = 0.1
_MAX_FPS = 9999.0
_HEAVY_UPDATE_INTERVAL = 1.0  # seconds
_MEMORY_CHECK_INTERVAL = 5.0  # seconds
_WORKER_INTERVAL = 0.016  # seconds

_API_LABELS = {
    GraphicsAPI.D3D9: "DirectX9",
    GraphicsAPI.D3D11: "DirectX11",
    GraphicsAPI.OPENGL: "OpenGL",
}

HELP_TEXT = (
    f"FPS Overlay v{VERSION} - Real-time FPS monitoring for Windows\n\n"
    "Usage: FPSOverlay.exe [options]\n\n"
    "Options:\n"
    "  --help, -h, /?        Show this help message\n"
    "  --version, -v         Show version information\n"
    "  --config <file>       Use custom configuration file\n"
    "  --exit                Terminate any running instance\n\n"
    "Configuration:\n"
    "  Edit 'config.ini' to customize overlay appearance and behavior.\n\n"
    "Supported Graphics APIs:\n"
    "  - DirectX 9/11/12\n"
    "  - OpenGL\n"
    "  - Vulkan (basic support)\n\n"
    "Compatible with Windows 7, 8, 10, and 11 (32-bit and 64-bit)\n"
)


def _check_system_compatibility() -> bool:
    if not utils.is_windows7_or_later():
        utils.log_error("Windows 7 or later required")
        return False
    apis = utils.available_graphics_apis()
    if not apis:
        utils.log_error("No compatible graphics APIs found")
        return False
    names = "".join(f"{_API_LABELS[api]} " for api in apis if api in _API_LABELS)
    utils.log_info(f"Available graphics APIs: {names}")
    return True


class FPSOverlay:
    """Measures the frame rate and keeps the overlay up to date."""

    def __init__(
        self,
        config_manager: ConfigManager | None = None,
        hook_manager: HookManager | None = None,
        renderer: Renderer | None = None,
        *,
        clock: Callable[[], float] = time.perf_counter,
        output: TextIO | None = None,
        compatibility_check: Callable[[], bool] = _check_system_compatibility,
    ) -> None:
        self._config_manager = config_manager if config_manager is not None else ConfigManager()
        self._hook_manager = hook_manager if hook_manager is not None else HookManager()
        self._renderer = renderer if renderer is not None else Renderer()
        self._clock = clock
        self._output = output
        self._compatibility_check = compatibility_check

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False
        self._initialized = False

        self._current_fps = 0.0
        self._frame_times: deque[float] = deque(maxlen=FPS_SAMPLE_COUNT)
        now = clock()
        self._last_frame_time = now
        self._last_update_time = now
        self._memory_usage = 0

    # State

    @property
    def running(self) -> bool:
        return self._running

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def current_fps(self) -> float:
        with self._lock:
            return self._current_fps

    @property
    def memory_usage(self) -> int:
        return self._memory_usage

    @property
    def config_manager(self) -> ConfigManager:
        return self._config_manager

    # Lifecycle

    def initialize(self) -> bool:
        """Check the system, load settings and prepare hooks and renderer."""
        if self._initialized:
            return True
        utils.log_info("Initializing FPS Overlay")

        if not self._compatibility_check():
            utils.log_error("System compatibility check failed")
            return False

        if not self._config_manager.load_config():
            utils.log_warning("Failed to load configuration, using defaults")

        if not self._hook_manager.initialize():
            utils.log_warning("Hook manager initialization failed, using fallback FPS calculation")

        if not self._renderer.initialize(self._hook_manager.current_api):
            utils.log_error("Failed to initialize renderer")
            return False

        self._initialized = True
        utils.log_info("FPS Overlay initialized successfully")
        return True

    def start(self) -> bool:
        """Start the background update thread; False if not initialized."""
        if not self._initialized:
            utils.log_error("Cannot start FPS overlay - not initialized")
            return False
        if self._running:
            utils.log_warning("FPS overlay is already running")
            return True

        utils.log_info("Starting FPS Overlay")
        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._update_worker, name="fps-overlay", daemon=True)
        self._thread.start()
        utils.log_info("FPS Overlay started successfully")
        return True

    def stop(self) -> None:
        """Stop the update thread and release hooks and renderer."""
        if not self._running:
            return
        utils.log_info("Stopping FPS Overlay")
        self._running = False
        self._stop_event.set()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

        self._renderer.cleanup()
        self._hook_manager.cleanup()
        utils.log_info("FPS Overlay stopped")

    def __enter__(self) -> FPSOverlay:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # Measurement

    def update_fps(self) -> None:
        """Feed the time since the previous call into the FPS average."""
        with self._lock:
            now = self._clock()
            delta = now - self._last_frame_time
            self._last_frame_time = now
            self.calculate_fps(delta)

    def calculate_fps(self, delta_time: float) -> None:
        """Add one frame interval and update the smoothed FPS value."""
        with self._lock:
            delta_time = max(delta_time, MIN_FRAME_TIME)
            if delta_time < _POLL_THRESHOLD:
                return

            self._frame_times.append(delta_time)
            average = sum(self._frame_times) / len(self._frame_times)
            new_fps = 1.0 / average

            if self._current_fps > 0.0:
                fps = self._current_fps * _SMOOTHING + new_fps * (1.0 - _SMOOTHING)
            else:
                fps = new_fps
            self._current_fps = max(_MIN_FPS, min(fps, _MAX_FPS))

    def update(self) -> None:
        """One tick: measure, do periodic housekeeping and draw."""
        if not self._running or not self._initialized:
            return

        self.update_fps()

        with self._lock:
            now = self._clock()
            heavy = now - self._last_update_time >= _HEAVY_UPDATE_INTERVAL
            if heavy:
                self._monitor_memory_usage(now)
                self._last_update_time = now

        if heavy and self._hook_manager.active:
            self._hook_manager.refresh_hooks()

        if self._renderer.initialized:
            config = self._config_manager.config
            if config.enabled:
                self._renderer.render_overlay(self.current_fps, config)

    def _monitor_memory_usage(self, now: float) -> None:
        if now - self._last_update_time < _MEMORY_CHECK_INTERVAL:
            return
        self._memory_usage = utils.process_memory_usage()
        self._last_update_time = now
        usage_mb = self._memory_usage // _MIB
        if usage_mb > MAX_MEMORY_USAGE // _MIB:
            utils.log_warning(f"Memory usage exceeds limit: {usage_mb}MB")

    def _update_worker(self) -> None:
        utils.log_info("FPS Overlay update thread started")
        while not self._stop_event.is_set():
            try:
                self.update()
            except Exception as exc:
                utils.log_error(f"Exception in update worker: {exc}")
                break
            self._stop_event.wait(_WORKER_INTERVAL)
        utils.log_info("FPS Overlay update thread stopped")

    # Command line

    def _write(self, text: str) -> None:
        stream = self._output if self._output is not None else sys.stdout
        stream.write(text)
        stream.flush()

    def _show_help(self) -> None:
        self._write(HELP_TEXT)

    def _show_version(self) -> None:
        architecture = "64-bit" if sys.maxsize > 2**32 else "32-bit"
        elevated = "Yes" if utils.is_process_elevated() else "No"
        self._write(
            f"FPS Overlay v{VERSION}\n"
            "Built for Windows 7+ (32-bit/64-bit)\n\n"
            "System Information:\n"
            f"  OS: {utils.windows_version()}\n"
            f"  Architecture: {architecture}\n"
            f"  Elevated: {elevated}\n"
        )

    def process_command_line(self, argv: Sequence[str]) -> bool:
        """Handle arguments (program name excluded); False means stop here."""
        args = iter(argv)
        for arg in args:
            if arg in ("--help", "-h", "/?"):
                self._show_help()
                return False
            if arg in ("--version", "-v"):
                self._show_version()
                return False
            if arg == "--exit":
                return False
            if arg == "--config":
                config_path = next(args, None)
                if config_path is None:
                    continue
                if not self._config_manager.load_config(config_path):
                    self._write(f"Failed to load config file: {config_path}\n")
                    return False
        return True