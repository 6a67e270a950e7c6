"""Infrastructure helpers."""

from actserver.infrastructure.log import log

__all__ = ["log"]
