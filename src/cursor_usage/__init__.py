"""cursor-usage: Cursor request usage in the terminal."""

__version__ = "0.1.0"
