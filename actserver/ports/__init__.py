"""Port interfaces (Hexagonal Architecture)."""

from actserver.ports.outbound import ConnectionPort, ListenerPort

__all__ = [
    "ConnectionPort",
    "ListenerPort",
]
