"""WPtoMedium - translate German WordPress posts into Medium-ready English HTML and Markdown."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("wptomedium")
except PackageNotFoundError:
    __version__ = "0.0.0"  # Fallback for development
