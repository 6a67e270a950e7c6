"""Configuration and usage text."""

__version__ = "0.1.0"

import argparse
import os
import re
import sys
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from actserver.domain.action_parser import (
    ACT_PARAM_SEP,
    ACT_SEP,
    ACT_SIGN_CLOSE,
    ACT_SIGN_OPEN,
    ACTION_DESCR,
    parse_directive,
)
from actserver.domain.errors import InvalidPort
from actserver.domain.models import Directive

load_dotenv()

DEFAULT_PORT = 11111
DEFAULT_HOST = "0.0.0.0"

# Any of these as the only argument prints usage instead of starting
USAGE_ARGS = ("?", "-?", "/?", "-h", "--help")

_PORT_RE = re.compile(r"[0-9]+")
MAX_PORT = 65535

CONFIG = {
    "host": os.getenv("ACTSERVER_HOST", DEFAULT_HOST),
    "port": os.getenv("ACTSERVER_PORT", str(DEFAULT_PORT)),
    # Global action set applied to every client, overrides request parsing
    "actions": os.getenv("ACTSERVER_ACTIONS", ""),
}

USAGE = os.linesep.join(
    [
        "TCP server for testing purposes. Behavior is controlled by global parameter or request text.",
        "Usage:",
        "actserver [port] [actionset] [--host HOST]",
        f"  port - port number to listen (default is {DEFAULT_PORT})",
        "  actionset - global set or actions for all clients (see below)",
        "Request must contain action set:",
        f' "{ACT_SIGN_OPEN}"<set>"{ACT_SIGN_CLOSE}"',
        f"   <set> ::= \"\" | <action>[{ACT_PARAM_SEP}<param>][{ACT_SEP}<action>[{ACT_PARAM_SEP}<param>]]...",
        "   After executing all actions connection is left active.",
        "   If <set> is empty, server just does nothing with the connection",
        "   <action>:",
    ]
    + [f"    - {kind.value}{descr}" for kind, descr in ACTION_DESCR.items()]
)


def _is_port(text: str) -> bool:
    return _PORT_RE.fullmatch(text) is not None


def parse_port(value) -> int:
    """Parse a listen port, raising InvalidPort outside 0..65535."""
    text = str(value).strip()
    if not _is_port(text) or int(text) > MAX_PORT:
        raise InvalidPort(value)
    return int(text)


def _env_directive() -> Optional[Directive]:
    actions = CONFIG["actions"]
    return parse_directive(actions) if actions else None


@dataclass
class ServerConfig:
    """Typed server configuration."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    global_directive: Optional[Directive] = None
    show_usage: bool = False

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create ServerConfig from environment variables (and .env)."""
        return cls(
            host=CONFIG["host"],
            port=parse_port(CONFIG["port"]),
            global_directive=_env_directive(),
        )

    @classmethod
    def from_args(cls, argv: Optional[List[str]] = None) -> "ServerConfig":
        """Build config from the command line, falling back to the environment.

        Positional arguments are scanned in order: a number sets the port,
        anything else is parsed as the global action set. The environment is
        only consulted for values the command line leaves out. Raises
        MalformedDirective or InvalidPort on bad input.
        """
        argv = list(sys.argv[1:] if argv is None else argv)
        if len(argv) == 1 and argv[0] in USAGE_ARGS:
            return cls(show_usage=True)

        parser = argparse.ArgumentParser(prog="actserver", add_help=False)
        parser.add_argument("--host", default=None)
        parser.add_argument("args", nargs="*")
        opts, extra = parser.parse_known_args(argv)

        port: Optional[int] = None
        directive: Optional[Directive] = None
        for arg in opts.args + extra:
            if _is_port(arg):
                port = parse_port(arg)
            else:
                directive = parse_directive(arg)

        return cls(
            host=opts.host or CONFIG["host"],
            port=port if port is not None else parse_port(CONFIG["port"]),
            global_directive=directive if directive is not None else _env_directive(),
        )
