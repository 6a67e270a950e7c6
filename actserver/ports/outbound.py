"""Outbound ports — what the executor needs from a connection."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class ListenerPort(Protocol):
    """Interface for the component owning the listening socket."""

    @property
    def is_listening(self) -> bool: ...

    async def shutdown(self) -> None: ...


@runtime_checkable
class ConnectionPort(Protocol):
    """Interface for one accepted connection."""

    listener: Optional[ListenerPort]

    async def write(self, data: bytes) -> None: ...
    async def close(self) -> None: ...
    def abort(self) -> None: ...
