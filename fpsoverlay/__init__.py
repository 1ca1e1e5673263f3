"""Frame-rate overlay with an INI configuration and a console control panel."""

__version__ = "1.3.0"
__all__ = ["__version__"]