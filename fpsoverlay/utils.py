"""Host inspection, filesystem, timing, logging, locking and font helpers."""

from __future__ import annotations

import itertools
import logging
import os
import re
import subprocess
import sys
import tempfile
import time
from collections.abc import Iterable

import psutil
from filelock import FileLock, Timeout

from .models import GraphicsAPI

logger = logging.getLogger("fpsoverlay")

INSTANCE_LOCK_NAME = "Global\\FPSOverlayMutex"

_MIB = 1024 * 1024
_FALLBACK_FONTS = ("Consolas", "Courier New", "Arial", "Tahoma", "MS Sans Serif")
_LAST_RESORT_FONT = "System"
_FONT_REGISTRY_KEY = r"SOFTWARE\Microsoft\Windows NT\CurrentVersion\Fonts"
_REGISTRY_SUFFIX = re.compile(r"\s*\([^)]*\)\s*$")

_UNIX_LIBRARY_DIRS = (
    "/usr/lib",
    "/usr/lib64",
    "/usr/lib/x86_64-linux-gnu",
    "/usr/lib/aarch64-linux-gnu",
    "/usr/local/lib",
)
_MACOS_OPENGL_FRAMEWORK = "/System/Library/Frameworks/OpenGL.framework"

_instance_lock: FileLock | None = None


# String helpers

def to_lower(text: str) -> str:
    """Return ``text`` in lower case."""
    return text.lower()


def trim(text: str) -> str:
    """Strip leading and trailing spaces (only the space character)."""
    return text.strip(" ")


# Files and paths

def executable_path() -> str:
    """Absolute path of the running program."""
    script = sys.argv[0] if sys.argv and sys.argv[0] else ""
    return os.path.abspath(script) if script else sys.executable


def executable_directory() -> str:
    """Directory that holds the running program."""
    return os.path.dirname(executable_path())


def file_exists(path: str | os.PathLike[str]) -> bool:
    """True if ``path`` names an existing regular file."""
    return os.path.isfile(path)


def create_directory_recursive(path: str | os.PathLike[str]) -> bool:
    """Create ``path`` and its parents; True if the directory exists afterwards."""
    if not os.fspath(path):
        return False
    if os.path.isdir(path):
        return True
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        return False
    return True


# System information

def _os_version() -> tuple[int, int, int] | None:
    getter = getattr(sys, "getwindowsversion", None)
    if getter is None:
        return None
    info = getter()
    version = getattr(info, "platform_version", None) or (info.major, info.minor, info.build)
    major, minor, build = version[:3]
    return int(major), int(minor), int(build)


def windows_version() -> str:
    """Human-readable Windows version, or a placeholder off Windows."""
    version = _os_version()
    if version is None:
        return "Unknown Windows Version"
    major, minor, build = version
    return f"Windows {major}.{minor} Build {build}"


def is_windows7_or_later() -> bool:
    """True on Windows 7 (6.1) or any later release."""
    version = _os_version()
    if version is None:
        return False
    return version[:2] >= (6, 1)


def is_windows10_or_later() -> bool:
    """True on Windows 10 or any later release."""
    version = _os_version()
    return version is not None and version[0] >= 10


def is_process_elevated() -> bool:
    """True if the process runs with administrative rights."""
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None:
        return geteuid() == 0
    try:
        result = subprocess.run(["net", "session"], capture_output=True, check=False)
    except OSError:
        return False
    return result.returncode == 0


def process_memory_usage() -> int:
    """Resident memory of this process in bytes, 0 if it cannot be read."""
    try:
        return psutil.Process().memory_info().rss
    except psutil.Error:
        return 0


# Graphics API detection

def _library_dirs() -> list[str]:
    if sys.platform == "win32":
        root = os.environ.get("SystemRoot") or os.environ.get("SYSTEMROOT") or r"C:\Windows"
        dirs = [os.path.join(root, "System32")]
    else:
        dirs = list(_UNIX_LIBRARY_DIRS)
        dirs = [d for d in os.environ.get("LD_LIBRARY_PATH", "").split(os.pathsep) if d] + dirs
    dirs.extend(d for d in os.environ.get("PATH", "").split(os.pathsep) if d)
    return dirs


def _library_available(names: Iterable[str]) -> bool:
    names = tuple(names)
    return any(
        os.path.isfile(os.path.join(directory, name))
        for directory in _library_dirs()
        for name in names
    )


def is_directx9_available() -> bool:
    """True if the Direct3D 9 runtime is present."""
    return sys.platform == "win32" and _library_available(["d3d9.dll"])


def is_directx11_available() -> bool:
    """True if the Direct3D 11 runtime is present."""
    return sys.platform == "win32" and _library_available(["d3d11.dll"])


def is_opengl_available() -> bool:
    """True if an OpenGL runtime is present."""
    if sys.platform == "win32":
        return _library_available(["opengl32.dll"])
    if sys.platform == "darwin":
        return os.path.isdir(_MACOS_OPENGL_FRAMEWORK)
    return _library_available(["libGL.so.1", "libGL.so"])


def available_graphics_apis() -> list[GraphicsAPI]:
    """Graphics APIs present on this machine, in preference order."""
    checks = (
        (GraphicsAPI.D3D9, is_directx9_available),
        (GraphicsAPI.D3D11, is_directx11_available),
        (GraphicsAPI.OPENGL, is_opengl_available),
    )
    return [api for api, check in checks if check()]


# Timing and memory

class PerformanceTimer:
    """Wall-clock stopwatch with microsecond resolution."""

    def __init__(self) -> None:
        now = time.perf_counter()
        self._start = now
        self._end = now
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._start = time.perf_counter()
        self._running = True

    def stop(self) -> None:
        self._end = time.perf_counter()
        self._running = False

    def elapsed_seconds(self) -> float:
        """Seconds since start, up to now while running or to stop otherwise."""
        end = time.perf_counter() if self._running else self._end
        micros = int((end - self._start) * 1_000_000)
        return micros / 1_000_000

    def elapsed_milliseconds(self) -> float:
        return self.elapsed_seconds() * 1000.0

    def __enter__(self) -> PerformanceTimer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


class MemoryMonitor:
    """Checks process memory against a limit in mebibytes."""

    def __init__(self, max_memory_mb: int = 25) -> None:
        self._max_memory_mb = max_memory_mb

    def check_memory_usage(self) -> bool:
        """True while usage stays within the limit."""
        return self.current_usage_mb() <= self._max_memory_mb

    def current_usage_mb(self) -> int:
        return process_memory_usage() // _MIB

    def max_usage_mb(self) -> int:
        return self._max_memory_mb


# Logging

def log_error(message: str) -> None:
    logger.error(message)


def log_info(message: str) -> None:
    logger.info(message)


def log_warning(message: str) -> None:
    logger.warning(message)


# Single-instance locking

def _lock_path(name: str) -> str:
    safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in name) or "instance"
    return os.path.join(tempfile.gettempdir(), f"{safe}.lock")


def is_application_already_running(name: str = INSTANCE_LOCK_NAME) -> bool:
    """True if some holder, this process included, owns the named lock."""
    probe = FileLock(_lock_path(name))
    try:
        probe.acquire(timeout=0)
    except Timeout:
        return True
    probe.release()
    return False


def acquire_instance_lock(name: str = INSTANCE_LOCK_NAME) -> bool:
    """Take the named instance lock; False if it is already held."""
    global _instance_lock
    lock = FileLock(_lock_path(name))
    try:
        lock.acquire(timeout=0)
    except Timeout:
        return False
    if _instance_lock is not None:
        _instance_lock.release()
    _instance_lock = lock
    return True


def release_instance_lock() -> None:
    """Give up the instance lock if this process holds one."""
    global _instance_lock
    if _instance_lock is not None:
        _instance_lock.release()
        _instance_lock = None


# Fonts

def _split_registry_name(value_name: str) -> list[str]:
    base = _REGISTRY_SUFFIX.sub("", value_name)
    return [part.strip() for part in base.split(" & ") if part.strip()]


def _registry_font_families() -> list[str]:
    try:
        import winreg
    except ImportError:
        return []
    families: list[str] = []
    for hive in (winreg.HKEY_LOCAL_MACHINE, winreg.HKEY_CURRENT_USER):
        try:
            with winreg.OpenKey(hive, _FONT_REGISTRY_KEY) as key:
                for index in itertools.count():
                    try:
                        value_name, _, _ = winreg.EnumValue(key, index)
                    except OSError:
                        break
                    families.extend(_split_registry_name(value_name))
        except OSError:
            continue
    return families


def _fontconfig_families() -> list[str]:
    try:
        result = subprocess.run(
            ["fc-list", ":", "family"], capture_output=True, text=True, check=False
        )
    except OSError:
        return []
    if result.returncode != 0:
        return []
    return [
        part.strip().replace("\\-", "-")
        for line in result.stdout.splitlines()
        for part in line.split(",")
        if part.strip()
    ]


def available_system_fonts() -> list[str]:
    """Installed font family names, without duplicates, in discovery order."""
    families = _registry_font_families() if sys.platform == "win32" else _fontconfig_families()
    return list(dict.fromkeys(families))


def is_font_installed(name: str) -> bool:
    """True if a font family of that name (any case) is installed."""
    if not name:
        return False
    wanted = name.casefold()
    return any(family.casefold() == wanted for family in available_system_fonts())


def best_available_font(preferred: Iterable[str]) -> str:
    """First installed font from ``preferred``, then from common fallbacks."""
    installed = {family.casefold() for family in available_system_fonts()}
    for candidate in itertools.chain(preferred, _FALLBACK_FONTS):
        if candidate.casefold() in installed:
            return candidate
    return _LAST_RESORT_FONT