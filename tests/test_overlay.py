import io
import time

import pytest

from fpsoverlay.config import ConfigManager
from fpsoverlay.models import GraphicsAPI
from fpsoverlay.overlay import FPSOverlay


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeHookManager:
    def __init__(self, api=GraphicsAPI.OPENGL, init_ok=True):
        self.current_api = api
        self.init_ok = init_ok
        self.active = False
        self.refresh_count = 0
        self.cleanup_count = 0

    def initialize(self):
        self.active = self.init_ok
        return self.init_ok

    def cleanup(self):
        self.cleanup_count += 1
        self.active = False

    def refresh_hooks(self):
        self.refresh_count += 1


class FakeRenderer:
    def __init__(self, init_ok=True):
        self.init_ok = init_ok
        self.initialized = False
        self.init_apis = []
        self.calls = []
        self.cleanup_count = 0

    def initialize(self, api, device=None):
        self.init_apis.append(api)
        self.initialized = self.init_ok
        return self.init_ok

    def cleanup(self):
        self.cleanup_count += 1
        self.initialized = False

    def render_overlay(self, fps, config):
        self.calls.append((fps, config))


def _wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def config_manager(tmp_path):
    return ConfigManager(tmp_path, screen_size=(1920, 1080), validate_fonts=False)


def make_overlay(config_manager, hook=None, renderer=None, clock=None, output=None, compatible=True):
    return FPSOverlay(
        config_manager,
        hook if hook is not None else FakeHookManager(),
        renderer if renderer is not None else FakeRenderer(),
        clock=clock if clock is not None else FakeClock(),
        output=output if output is not None else io.StringIO(),
        compatibility_check=lambda: compatible,
    )


def test_first_sample_sets_fps_directly(config_manager):
    overlay = make_overlay(config_manager)
    overlay.calculate_fps(0.02)
    assert overlay.current_fps == pytest.approx(50.0)


def test_short_interval_is_ignored(config_manager):
    overlay = make_overlay(config_manager)
    overlay.calculate_fps(0.005)
    overlay.calculate_fps(0.0)
    assert overlay.current_fps == 0.0


def test_smoothing_moves_toward_new_average(config_manager):
    overlay = make_overlay(config_manager)
    overlay.calculate_fps(0.02)
    first = overlay.current_fps
    overlay.calculate_fps(0.01)
    assert first < overlay.current_fps < 1.0 / 0.015


def test_constant_frames_converge(config_manager):
    overlay = make_overlay(config_manager)
    for _ in range(300):
        overlay.calculate_fps(0.02)
    assert overlay.current_fps == pytest.approx(50.0, rel=1e-6)


def test_fps_is_clamped_from_below(config_manager):
    overlay = make_overlay(config_manager)
    overlay.calculate_fps(20.0)
    assert overlay.current_fps == pytest.approx(0.1)


def test_update_fps_uses_clock(config_manager):
    clock = FakeClock(10.0)
    overlay = make_overlay(config_manager, clock=clock)
    clock.now = 10.025
    overlay.update_fps()
    assert overlay.current_fps == pytest.approx(1.0 / 0.025)


def test_initialize_passes_detected_api(config_manager):
    hook = FakeHookManager(api=GraphicsAPI.D3D11)
    renderer = FakeRenderer()
    overlay = make_overlay(config_manager, hook=hook, renderer=renderer)
    assert overlay.initialize() is True
    assert overlay.initialize() is True
    assert renderer.init_apis == [GraphicsAPI.D3D11]
    assert overlay.initialized is True


def test_initialize_tolerates_hook_failure(config_manager):
    overlay = make_overlay(config_manager, hook=FakeHookManager(init_ok=False))
    assert overlay.initialize() is True


def test_initialize_fails_when_incompatible(config_manager):
    renderer = FakeRenderer()
    overlay = make_overlay(config_manager, renderer=renderer, compatible=False)
    assert overlay.initialize() is False
    assert renderer.init_apis == []


def test_initialize_fails_when_renderer_fails(config_manager):
    overlay = make_overlay(config_manager, renderer=FakeRenderer(init_ok=False))
    assert overlay.initialize() is False
    assert overlay.initialized is False


def test_start_requires_initialize(config_manager):
    overlay = make_overlay(config_manager)
    assert overlay.start() is False
    assert overlay.running is False


def test_start_renders_and_stop_cleans_up(config_manager):
    hook = FakeHookManager()
    renderer = FakeRenderer()
    overlay = make_overlay(config_manager, hook=hook, renderer=renderer)
    assert overlay.initialize()
    assert overlay.start() is True
    try:
        assert _wait_for(lambda: len(renderer.calls) > 0)
    finally:
        overlay.stop()
    assert overlay.running is False
    assert renderer.cleanup_count == 1
    assert hook.cleanup_count == 1
    assert renderer.calls[0][1] is config_manager.config


def test_disabled_overlay_is_not_drawn(config_manager):
    config_manager.config.enabled = False
    renderer = FakeRenderer()
    overlay = make_overlay(config_manager, renderer=renderer)
    assert overlay.initialize()
    overlay.start()
    time.sleep(0.1)
    overlay.stop()
    assert renderer.calls == []


def test_hooks_refreshed_after_a_second(config_manager):
    clock = FakeClock(0.0)
    hook = FakeHookManager()
    overlay = make_overlay(config_manager, hook=hook, clock=clock)
    assert overlay.initialize()
    clock.now = 2.0
    overlay.start()
    try:
        assert _wait_for(lambda: hook.refresh_count >= 1)
    finally:
        overlay.stop()
    assert hook.refresh_count == 1


def test_update_does_nothing_when_stopped(config_manager):
    renderer = FakeRenderer()
    overlay = make_overlay(config_manager, renderer=renderer)
    overlay.initialize()
    overlay.update()
    assert renderer.calls == []


def test_command_line_help(config_manager):
    out = io.StringIO()
    overlay = make_overlay(config_manager, output=out)
    assert overlay.process_command_line(["--help"]) is False
    assert "Usage: FPSOverlay.exe [options]" in out.getvalue()


def test_command_line_version(config_manager):
    out = io.StringIO()
    overlay = make_overlay(config_manager, output=out)
    assert overlay.process_command_line(["-v"]) is False
    assert "FPS Overlay v1.3.0" in out.getvalue()


def test_command_line_exit(config_manager):
    overlay = make_overlay(config_manager)
    assert overlay.process_command_line(["--exit"]) is False


def test_command_line_without_flags(config_manager):
    overlay = make_overlay(config_manager)
    assert overlay.process_command_line([]) is True
    assert overlay.process_command_line(["--unknown"]) is True


def test_command_line_loads_custom_config(tmp_path, config_manager):
    (tmp_path / "custom.ini").write_text("[Appearance]\nFontSize=20\n", encoding="utf-8")
    overlay = make_overlay(config_manager)
    assert overlay.process_command_line(["--config", "custom.ini"]) is True
    assert config_manager.config.font_size == 20


def test_command_line_reports_config_failure(tmp_path, config_manager):
    (tmp_path / "blocker").write_text("x", encoding="utf-8")
    out = io.StringIO()
    overlay = make_overlay(config_manager, output=out)
    assert overlay.process_command_line(["--config", "blocker/settings.ini"]) is False
    assert "Failed to load config file: blocker/settings.ini" in out.getvalue()