from __future__ import annotations


_PREFIX = {
    "info": "ℹ️",
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "debug": "🔍",
}

_debug = False


def set_debug(enabled: bool) -> None:
    global _debug
    _debug = bool(enabled)


def debug_enabled() -> bool:
    return _debug


def log(message: str, level: str = "info") -> None:
    """Log message with optional debug output."""
    if level == "debug" and not _debug:
        return
    prefix = _PREFIX.get(level, _PREFIX["info"])
    print(f"{prefix} {message}", flush=True)


def banner(title: str, width: int = 70) -> None:
    print("\n" + "=" * width)
    print(title)
    print("=" * width, flush=True)
