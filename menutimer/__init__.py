"""MenuTimer: countdown timers, stage sequences, and repeating cycles in the macOS menu bar."""

__version__ = "0.1.0"
