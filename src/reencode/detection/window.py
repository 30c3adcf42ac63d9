"""Crop detection sampling window."""

from __future__ import annotations

DEFAULT_WINDOW_SECONDS = 600.0
END_MARGIN_SECONDS = 2.0
MIN_WINDOW_SECONDS = 1.0


def crop_detect_window(
    override: float = 0.0, duration: float = 0.0, end: float = 0.0
) -> float:
    """Pick how many seconds of the source cropdetect samples.

    The window is the smallest of the explicit override, the requested
    output duration and the 600 second cap. An explicit end
    time that is shorter still replaces it, less a two second margin.

    Args:
        override: Explicit window from the profile (0 = not set).
        duration: Requested output duration (0 = not set).
        end: Requested end time in seconds (0 = not set).

    Returns:
        Window length in seconds, never below one second.
    """
    window = DEFAULT_WINDOW_SECONDS
    for limit in (override, duration):
        if limit > 0:
            window = min(window, limit)
    if 0 < end < window:
        window = end - END_MARGIN_SECONDS
    return max(window, MIN_WINDOW_SECONDS)


def crop_detect_filter(window: float) -> str:
    """Filter sampling ten frames spread across the window."""
    return f"fps=fps=10/{window:.6f},cropdetect=0.1:16:0"
