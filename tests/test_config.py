import pytest

from fpsoverlay.config import ConfigManager, color_to_string, parse_color
from fpsoverlay.models import Color, OverlayConfig, OverlayPosition

DEFAULT = Color(0.0, 0.0, 0.0, 0.5)


@pytest.fixture
def manager(tmp_path):
    return ConfigManager(tmp_path, screen_size=(1920, 1080), validate_fonts=False)


def test_parse_color_three_components_gets_full_alpha():
    assert parse_color("1.0,0.5,0.25", DEFAULT) == Color(1.0, 0.5, 0.25, 1.0)


def test_parse_color_four_components_with_spaces():
    assert parse_color(" 0.25 , 0.5 ,0.75, 0.5", DEFAULT) == Color(0.25, 0.5, 0.75, 0.5)


def test_parse_color_clamps_components():
    assert parse_color("2,-1,0.5,3", DEFAULT) == Color(1.0, 0.0, 0.5, 1.0)


@pytest.mark.parametrize("text", ["", "abc", "0.5,0.5", "0.5,x,0.5"])
def test_parse_color_falls_back_to_default(text):
    assert parse_color(text, DEFAULT) is DEFAULT


def test_parse_color_ignores_components_beyond_four():
    assert parse_color("0.5,0.5,0.5,0.5,junk", DEFAULT) == Color(0.5, 0.5, 0.5, 0.5)


def test_color_to_string_format():
    assert color_to_string(Color(0.0, 1.0, 0.0, 1.0)) == "0.000,1.000,0.000,1.000"


@pytest.mark.parametrize("color", [Color(0.25, 0.5, 0.75, 1.0), Color(0.0, 0.0, 0.0, 0.5)])
def test_color_string_round_trip(color):
    assert parse_color(color_to_string(color), DEFAULT) == color


def test_load_missing_file_creates_default(manager, tmp_path):
    assert manager.load_config() is True
    path = tmp_path / "config.ini"
    assert path.is_file()
    assert manager.config == OverlayConfig()
    assert "; FPS Overlay Configuration File" in path.read_text(encoding="utf-8")


def test_save_and_load_round_trip(tmp_path):
    writer = ConfigManager(tmp_path, screen_size=(1920, 1080), validate_fonts=False)
    wanted = OverlayConfig(
        enabled=False,
        position=OverlayPosition.BOTTOM_RIGHT,
        font_size=20,
        text_color=Color(0.25, 0.5, 0.75, 1.0),
        background_color=Color(0.5, 0.5, 0.5, 0.25),
        update_interval=750,
        offset_x=3,
        offset_y=7,
        show_background=False,
        font_name="Courier New",
    )
    writer.update_config(wanted)
    assert writer.save_config("custom.ini") is True

    reader = ConfigManager(tmp_path, screen_size=(1920, 1080), validate_fonts=False)
    assert reader.load_config("custom.ini") is True
    assert reader.config == wanted


def test_saved_file_uses_ini_keys(manager, tmp_path):
    assert manager.save_config() is True
    text = (tmp_path / "config.ini").read_text(encoding="utf-8")
    assert "[General]" in text
    assert "Enabled=1" in text
    assert "TextColor=0.000,1.000,0.000,1.000" in text


def test_repeated_save_keeps_single_comment_block(manager, tmp_path):
    assert manager.save_config() is True
    assert manager.save_config() is True
    text = (tmp_path / "config.ini").read_text(encoding="utf-8")
    assert text.count("; FPS Overlay Configuration File") == 1


def test_save_preserves_other_sections(manager, tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[Extra]\nKeep=yes\n", encoding="utf-8")
    assert manager.save_config() is True
    text = path.read_text(encoding="utf-8")
    assert "[Extra]" in text
    assert "Keep=yes" in text


def test_save_creates_nested_directory(manager, tmp_path):
    assert manager.save_config("nested/dir/config.ini") is True
    assert (tmp_path / "nested" / "dir" / "config.ini").is_file()


def test_load_reads_keys_case_insensitively(manager, tmp_path):
    (tmp_path / "config.ini").write_text(
        "[general]\nenabled=0\nupdateinterval=250\n[APPEARANCE]\nFONTSIZE=18\n",
        encoding="utf-8",
    )
    assert manager.load_config() is True
    assert manager.config.enabled is False
    assert manager.config.update_interval == 250
    assert manager.config.font_size == 18


def test_non_numeric_int_reads_as_zero(manager, tmp_path):
    (tmp_path / "config.ini").write_text(
        "[General]\nUpdateInterval=abc\n[Appearance]\nFontSize=20\n", encoding="utf-8"
    )
    manager.load_config()
    assert manager.config.update_interval == 0


def test_zero_font_size_is_auto_scaled(tmp_path):
    (tmp_path / "config.ini").write_text("[Appearance]\nFontSize=0\n", encoding="utf-8")
    manager = ConfigManager(tmp_path, screen_size=(1920, 1080), validate_fonts=False)
    manager.load_config()
    assert manager.config.font_size == 16


def test_missing_keys_use_defaults(manager, tmp_path):
    (tmp_path / "config.ini").write_text("[Appearance]\nFontSize=14\n", encoding="utf-8")
    manager.load_config()
    config = manager.config
    assert config.offset_x == 10
    assert config.font_name == "Consolas"
    assert config.background_color == Color(0.0, 0.0, 0.0, 0.5)


def test_invalid_position_falls_back_to_top_left(manager, tmp_path):
    (tmp_path / "config.ini").write_text(
        "[Appearance]\nPosition=9\nFontSize=14\n", encoding="utf-8"
    )
    manager.load_config()
    assert manager.config.position is OverlayPosition.TOP_LEFT


def test_malformed_file_fails_to_load(manager, tmp_path):
    (tmp_path / "config.ini").write_text("no section header\n", encoding="utf-8")
    assert manager.load_config() is False


@pytest.mark.parametrize(
    "width, expected",
    [(1920, 16), (3840, 32), (1280, 12), (7680, 32)],
)
def test_scaled_font_size_is_clamped(tmp_path, width, expected):
    manager = ConfigManager(tmp_path, screen_size=(width, 1080))
    assert manager.scaled_font_size() == expected


def test_screen_resolution_override(tmp_path):
    manager = ConfigManager(tmp_path, screen_size=(1920, 1080))
    assert manager.screen_resolution() == (1920, 1080)


def test_update_config_stores_a_copy(manager):
    config = OverlayConfig(font_size=22)
    manager.update_config(config)
    config.font_size = 40
    assert manager.config.font_size == 22


def test_context_manager_saves_on_exit(tmp_path):
    with ConfigManager(tmp_path, screen_size=(1920, 1080), validate_fonts=False) as manager:
        manager.update_config(OverlayConfig(offset_x=42))
    text = (tmp_path / "config.ini").read_text(encoding="utf-8")
    assert "OffsetX=42" in text