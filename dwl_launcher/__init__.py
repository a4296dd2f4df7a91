"""
Session launcher for the dwl Wayland compositor.

Builds a startup script from a per-user service list and starts the
compositor with a per-user environment.
"""

__all__ = ["main", "session"]
