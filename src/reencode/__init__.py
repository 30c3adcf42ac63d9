"""reencode - plan and run ffmpeg transcodes from a compact encode profile."""

__version__ = "0.4.0"
