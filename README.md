# fpsoverlay

A lightweight frame-rate overlay. It measures frame intervals, keeps a
rolling, smoothed FPS figure and draws it as `FPS: 60.0` in a small,
borderless, always-on-top window in the screen corner you choose. Its
settings are kept in an INI file. An interactive console control panel
for changing them is included.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

The overlay window is drawn with `tkinter`, which must be available in
the Python installation.

## Usage

Start the overlay:

```
fpsoverlay
```

Press Ctrl+C to stop it. Only one instance runs at a time: a lock file
in the temporary directory prevents a second one from starting. The
overlay itself only starts on Windows 7 or later; elsewhere it prints
"This application requires Windows 7 or later." and exits with status 1.

Other options:

```
fpsoverlay --menu            # interactive control panel
fpsoverlay --help            # usage
fpsoverlay --version         # version information
fpsoverlay --config my.ini   # load another configuration file
```

`--config` names a file relative to the directory the program runs from.

### Control panel

`fpsoverlay --menu` shows a numbered list of actions:

- 1 to 4: overlay position, font size, text colour, background colour
- 5, 6: toggle the overlay, toggle its background
- 7: update interval
- 8: reset to defaults
- 9, 10: save and load the configuration file
- 99: exit

Type `h` for help, `q` to quit and `clear` to clear the screen. The
control panel runs on any platform.

## Configuration

The overlay reads `config.ini` in the directory the program runs from.
If the file is missing, one with the default settings is written:

```ini
[General]
Enabled=1
UpdateInterval=500

[Appearance]
Position=0
FontSize=16
FontName=Consolas
OffsetX=10
OffsetY=10
ShowBackground=1

[Colors]
TextColor=0.000,1.000,0.000,1.000
BackgroundColor=0.000,0.000,0.000,0.500
```

- `Position`: 0 top-left, 1 top-right, 2 bottom-left, 3 bottom-right.
  Other values fall back to top-left.
- `FontSize`: 0 or less picks a size from the screen width (16 at 1920
  pixels wide), kept between 12 and 32.
- `FontName`: if the font is not installed, the first installed one of
  Consolas, Courier New, Arial, Tahoma and MS Sans Serif is used, or
  `System`.
- Colours are `R,G,B[,A]` values from 0.0 to 1.0; values outside that
  range are clamped and a missing alpha is 1.0.
- `UpdateInterval`: milliseconds between FPS updates.

Saving keeps any other sections already in the file.

## Using it as a library

```python
from fpsoverlay.config import ConfigManager, parse_color, color_to_string
from fpsoverlay.models import Color, OverlayConfig, OverlayPosition
from fpsoverlay.overlay import FPSOverlay
from fpsoverlay.renderer import format_fps

color = parse_color("1, 0.5, 0", Color())   # Color(1.0, 0.5, 0.0, 1.0)
print(color_to_string(color))               # 1.000,0.500,0.000,1.000

manager = ConfigManager("settings", screen_size=(2560, 1440))
manager.load_config()                       # writes settings/config.ini if missing
print(manager.scaled_font_size())           # 21

overlay = FPSOverlay(manager)
overlay.calculate_fps(0.016)                # feed one frame interval, in seconds
print(format_fps(overlay.current_fps))      # FPS: 62.5
```

Intervals shorter than 8 ms are ignored. The figure is the average of the
last 60 intervals, smoothed so each new value counts for a tenth, and
kept between 0.1 and 9999.

Messages are written to the standard `logging` logger named `fpsoverlay`.

## What it does not do

- It does not hook into other applications' rendering. The figure shown
  is the rate of the overlay's own update loop, not the frame rate of a
  game.
- Graphics API detection only looks for the Direct3D 9, Direct3D 11 and
  OpenGL libraries on disk and among the libraries loaded into its own
  process; nothing is drawn through those APIs.
- The background colour and the show-background setting are stored and
  editable, but the overlay window does not draw a background.