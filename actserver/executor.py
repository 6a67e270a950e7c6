"""Directive executor: applies actions to a live connection."""

import asyncio
import secrets
from typing import Awaitable, Callable, Dict

from actserver.domain.action_parser import decode_send_payload, parse_count
from actserver.domain.errors import ActionIOError, InvalidParameter, UnknownAction
from actserver.domain.models import (
    Action,
    ActionKind,
    Directive,
    ExecutionResult,
    ExecutionState,
)
from actserver.infrastructure.log import log
from actserver.ports.outbound import ConnectionPort

Handler = Callable[["ActionExecutor", ConnectionPort, Action], Awaitable[None]]


class ActionExecutor:
    """Runs a directive's actions one at a time against a session.

    Each action is awaited to completion before the next one starts. The
    connection is never closed implicitly once all actions are done.
    """

    def __init__(self, random_bytes=secrets.token_bytes, sleep=asyncio.sleep):
        self._random_bytes = random_bytes
        self._sleep = sleep

    async def execute(self, session: ConnectionPort, directive: Directive) -> ExecutionResult:
        result = ExecutionResult(state=ExecutionState.RUNNING)

        if len(directive) == 0:
            log("No actions defined - do nothing")
            result.state = ExecutionState.DONE
            return result

        for action in directive:
            try:
                await self.run_action(session, action)
            except (UnknownAction, InvalidParameter) as e:
                log("ERROR -", e)
                session.abort()
                return self._abort(result, e)
            except ActionIOError as e:
                log("ERROR -", e)
                return self._abort(result, e)
            result.completed.append(action)

        result.state = ExecutionState.DONE
        return result

    async def run_action(self, session: ConnectionPort, action: Action) -> None:
        """Dispatch one action to its handler."""
        kind = action.kind
        if kind is None:
            raise UnknownAction(action.name)
        handler = HANDLERS[kind]
        log(f"Executing action {action.describe()}")
        await handler(self, session, action)

    @staticmethod
    def _abort(result: ExecutionResult, error: Exception) -> ExecutionResult:
        result.state = ExecutionState.ABORTED
        result.error = str(error)
        return result

    # ── Handlers ─────────────────────────────────────────────

    async def act_close(self, session: ConnectionPort, action: Action) -> None:
        try:
            await session.close()
        except OSError as e:
            raise ActionIOError(action.name, e) from e

    async def act_data(self, session: ConnectionPort, action: Action) -> None:
        length = parse_count(action)
        await self._write(session, action, self._random_bytes(length))

    async def act_send(self, session: ConnectionPort, action: Action) -> None:
        await self._write(session, action, decode_send_payload(action.param))

    async def act_wait(self, session: ConnectionPort, action: Action) -> None:
        msecs = parse_count(action)
        await self._sleep(msecs / 1000)

    async def act_shut(self, session: ConnectionPort, action: Action) -> None:
        listener = session.listener
        if listener is None:
            log("No listener attached to session - nothing to shut")
            return
        try:
            await listener.shutdown()
        except OSError as e:
            raise ActionIOError(action.name, e) from e

    async def _write(self, session: ConnectionPort, action: Action, data: bytes) -> None:
        try:
            await session.write(data)
        except OSError as e:
            raise ActionIOError(action.name, e) from e


HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.CLOSE: ActionExecutor.act_close,
    ActionKind.DATA: ActionExecutor.act_data,
    ActionKind.SEND: ActionExecutor.act_send,
    ActionKind.WAIT: ActionExecutor.act_wait,
    ActionKind.SHUT: ActionExecutor.act_shut,
}

_missing = set(ActionKind) - set(HANDLERS)
if _missing:
    raise RuntimeError(f"No handler for actions: {sorted(k.value for k in _missing)}")
