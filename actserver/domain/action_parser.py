"""Directive parsing — extracts ``ACT[...]`` blocks from raw payloads.

Pure Python, no I/O.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Union
from urllib.parse import unquote_to_bytes

from actserver.domain.errors import InvalidParameter, MalformedDirective
from actserver.domain.models import Action, ActionKind, Directive

# Directive block: ACT[<action>[=<param>][,<action>[=<param>]]...]
ACT_SIGN_OPEN = "ACT["
ACT_SIGN_CLOSE = "]"
ACT_SEP = ","
ACT_PARAM_SEP = "="

# Map action codes -> usage description
ACTION_DESCR: Dict[ActionKind, str] = {
    ActionKind.CLOSE: " - close connection",
    ActionKind.DATA: "=length - write <length> of random data",
    ActionKind.SEND: "=resp - write <resp> string (URL-encoding is supported)",
    ActionKind.WAIT: "=time - wait for <time> msecs",
    ActionKind.SHUT: " - stop the server from listening (won't close active connections)",
}

_COUNT_RE = re.compile(r"[0-9]+")


def _to_text(payload: Union[bytes, bytearray, str, None]) -> str:
    if payload is None:
        return ""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("utf-8", errors="replace")
    return payload


def parse_action(token: str) -> Action:
    """Split one ``name[=param]`` token on its first ``=``."""
    name, sep, param = token.partition(ACT_PARAM_SEP)
    return Action(name=name, param=param if sep else None)


def parse_request(payload: Union[bytes, bytearray, str, None]) -> Optional[Directive]:
    """Extract the directive embedded in a payload.

    Returns None when the payload has no ``ACT[`` followed somewhere by
    ``]``. The first ``]`` after the opening marker ends the block, so a
    parameter cannot contain ``]`` or ``,``.
    """
    text = _to_text(payload)
    start = text.find(ACT_SIGN_OPEN)
    if start < 0:
        return None
    start += len(ACT_SIGN_OPEN)
    end = text.find(ACT_SIGN_CLOSE, start)
    if end < 0:
        return None

    body = text[start:end]
    if body == "":
        return Directive()
    return Directive(tuple(parse_action(token) for token in body.split(ACT_SEP)))


def parse_directive(text: Union[bytes, str, None]) -> Directive:
    """Like parse_request, but raise MalformedDirective instead of returning None."""
    directive = parse_request(text)
    if directive is None:
        raise MalformedDirective(_to_text(text))
    return directive


def parse_count(action: Action) -> int:
    """Parse the DATA length / WAIT duration of an action.

    Only plain decimal digits are accepted; anything else (missing, signed,
    fractional, padded) raises InvalidParameter.
    """
    param = action.param
    if param is None or not _COUNT_RE.fullmatch(param):
        raise InvalidParameter(action.name, param)
    return int(param)


def decode_send_payload(param: Optional[str]) -> bytes:
    """Percent-decode a SEND parameter into the bytes to write."""
    if not param:
        return b""
    return unquote_to_bytes(param)
