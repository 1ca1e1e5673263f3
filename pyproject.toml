[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fpsoverlay"
version = "1.3.0"
description = "Frame-rate overlay for Windows with an INI configuration file and an interactive console control panel"
requires-python = ">=3.10"
keywords = ["fps", "overlay", "frame rate", "monitoring", "performance"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Win32 (MS Windows)",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "psutil",
    "filelock",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fpsoverlay = "fpsoverlay.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fpsoverlay"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
