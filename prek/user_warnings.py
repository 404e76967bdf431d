"""User-facing warnings printed to standard error when enabled."""

from __future__ import annotations

import sys
import threading

_BOLD = "\x1b[1m"
_YELLOW = "\x1b[33m"
_RESET = "\x1b[0m"

_state_lock = threading.Lock()
_enabled = False
_seen: set[str] = set()


def enable() -> None:
    """Enable user-facing warnings."""
    global _enabled
    with _state_lock:
        _enabled = True


def disable() -> None:
    """Disable user-facing warnings."""
    global _enabled
    with _state_lock:
        _enabled = False


def is_enabled() -> bool:
    """Return whether user-facing warnings are enabled."""
    with _state_lock:
        return _enabled


def _emit(message: str) -> None:
    stream = sys.stderr
    isatty = getattr(stream, "isatty", None)
    if isatty is not None and isatty():
        line = (
            f"{_BOLD}{_YELLOW}warning{_RESET}{_BOLD}:{_RESET} "
            f"{_BOLD}{message}{_RESET}"
        )
    else:
        line = f"warning: {message}"
    print(line, file=stream)


def warn_user(message: str) -> None:
    """Print a warning to stderr if warnings are enabled."""
    if is_enabled():
        _emit(message)


def warn_user_once(message: str) -> bool:
    """Print a warning once per distinct message; return whether it was printed."""
    with _state_lock:
        if not _enabled or message in _seen:
            return False
        _seen.add(message)
    _emit(message)
    return True