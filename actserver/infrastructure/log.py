"""Timestamped console logging."""

from datetime import datetime


def log(*args) -> None:
    """Print ``args`` prefixed with the current ISO timestamp."""
    print(f"[{datetime.now().isoformat()}]", *args, flush=True)
