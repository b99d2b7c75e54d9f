"""staticimp: turn structured submissions into commits on a git hosting backend."""

__version__ = "0.1.0"
