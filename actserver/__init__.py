"""Scriptable TCP server for testing client failure handling."""

from actserver.config import CONFIG, DEFAULT_PORT, USAGE, ServerConfig, __version__
from actserver.domain.models import Action, ActionKind, Directive, ExecutionResult, ExecutionState
from actserver.domain.action_parser import parse_directive, parse_request
from actserver.domain.errors import (
    ActionIOError,
    ActServerError,
    InvalidParameter,
    InvalidPort,
    MalformedDirective,
    UnknownAction,
)
from actserver.executor import ActionExecutor
from actserver.adapters.tcp import Listener, Session

__all__ = [
    "CONFIG",
    "DEFAULT_PORT",
    "USAGE",
    "ServerConfig",
    "__version__",
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
    "ActionExecutor",
    "Listener",
    "Session",
]
