"""Plain TCP transport."""

from actserver.adapters.tcp.listener import Listener
from actserver.adapters.tcp.session import Session

__all__ = ["Listener", "Session"]
