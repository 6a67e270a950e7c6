"""Domain layer — pure Python, no I/O."""

from actserver.domain.models import (
    Action,
    ActionKind,
    Directive,
    ExecutionResult,
    ExecutionState,
)
from actserver.domain.action_parser import parse_directive, parse_request
from actserver.domain.errors import (
    ActionIOError,
    ActServerError,
    InvalidParameter,
    InvalidPort,
    MalformedDirective,
    UnknownAction,
)

__all__ = [
    "Action",
    "ActionKind",
    "Directive",
    "ExecutionResult",
    "ExecutionState",
    "parse_directive",
    "parse_request",
    "ActionIOError",
    "ActServerError",
    "InvalidParameter",
    "InvalidPort",
    "MalformedDirective",
    "UnknownAction",
]
