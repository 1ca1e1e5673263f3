"""Detection of the graphics API in use by the current process."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Iterable

import psutil

from . import utils
from .models import GraphicsAPI

_EXCLUDED_PROCESSES = (
    "explorer.exe",
    "dwm.exe",
    "winlogon.exe",
    "csrss.exe",
    "smss.exe",
    "services.exe",
    "lsass.exe",
    "svchost.exe",
)

_API_NAMES = {
    GraphicsAPI.D3D9: "DirectX 9",
    GraphicsAPI.D3D11: "DirectX 11",
    GraphicsAPI.OPENGL: "OpenGL",
}

_UNKNOWN_PROCESS = "unknown.exe"
_PATH_SEPARATORS = re.compile(r"[\\/]")


def _loaded_module_names() -> list[str]:
    """File names of the libraries mapped into this process, empty if unreadable."""
    try:
        maps = psutil.Process().memory_maps(grouped=True)
    except (psutil.Error, NotImplementedError, AttributeError, OSError):
        return []
    return [os.path.basename(m.path) for m in maps if getattr(m, "path", "")]


def _api_for_module(module_name: str) -> GraphicsAPI | None:
    name = utils.to_lower(module_name)
    if "d3d11" in name or "dxgi" in name:
        return GraphicsAPI.D3D11
    if "d3d9" in name:
        return GraphicsAPI.D3D9
    if "opengl32" in name:
        return GraphicsAPI.OPENGL
    return None


def _running_executable() -> str:
    try:
        return psutil.Process().exe()
    except psutil.Error:
        return sys.executable or ""


class HookManager:
    """Tracks which graphics API the host process appears to use."""

    def __init__(
        self,
        *,
        available_apis: Callable[[], list[GraphicsAPI]] = utils.available_graphics_apis,
        loaded_modules: Callable[[], Iterable[str]] = _loaded_module_names,
        process_path: str | None = None,
    ) -> None:
        self._available_apis = available_apis
        self._loaded_modules = loaded_modules
        self._process_path = process_path
        self._active = False
        self._detected_api = GraphicsAPI.UNKNOWN

    @property
    def active(self) -> bool:
        return self._active

    @property
    def current_api(self) -> GraphicsAPI:
        return self._detected_api

    def initialize(self) -> bool:
        """Detect the graphics API and activate; False if none is found."""
        utils.log_info("Initializing hook manager")
        self._detected_api = self.detect_graphics_api()

        if self._detected_api is GraphicsAPI.UNKNOWN:
            utils.log_warning("No compatible graphics API detected")
            return False

        utils.log_info(f"Detected graphics API: {_API_NAMES.get(self._detected_api, 'Unknown')}")
        self._active = True
        utils.log_info("Hook manager initialized successfully")
        return True

    def cleanup(self) -> None:
        """Deactivate if active."""
        if not self._active:
            return
        utils.log_info("Cleaning up hook manager")
        self._active = False
        utils.log_info("Hook manager cleanup completed")

    def detect_graphics_api(self) -> GraphicsAPI:
        """API of the first graphics library loaded here, else the first available one."""
        available = list(self._available_apis())
        if not available:
            return GraphicsAPI.UNKNOWN
        for module_name in self._loaded_modules():
            api = _api_for_module(module_name)
            if api is not None:
                return api
        return available[0]

    def refresh_hooks(self) -> None:
        """Re-detect the API and reinitialize when it has changed."""
        if not self._active:
            return
        new_api = self.detect_graphics_api()
        if new_api != self._detected_api:
            utils.log_info("Graphics API changed, refreshing hooks")
            self._detected_api = new_api
            self.cleanup()
            self.initialize()

    def is_target_process(self) -> bool:
        """False for well-known system processes that must be left alone."""
        name = utils.to_lower(self.current_process_name())
        return not any(excluded in name for excluded in _EXCLUDED_PROCESSES)

    def current_process_name(self) -> str:
        """File name of the running executable."""
        path = self._process_path if self._process_path is not None else _running_executable()
        if not path:
            return _UNKNOWN_PROCESS
        return _PATH_SEPARATORS.split(path)[-1]

    def __enter__(self) -> HookManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()