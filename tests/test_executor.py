"""Tests for ActionExecutor against an in-memory connection."""

import asyncio
from typing import List, Optional

import pytest

from actserver.domain.action_parser import parse_request
from actserver.domain.models import Action, ActionKind, Directive, ExecutionState
from actserver.executor import HANDLERS, ActionExecutor
from actserver.ports.outbound import ConnectionPort, ListenerPort


def run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


class FakeListener:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.shutdowns = 0
        self._listening = True

    @property
    def is_listening(self) -> bool:
        return self._listening

    async def shutdown(self) -> None:
        if self.fail:
            raise OSError("listener gone")
        self.shutdowns += 1
        self._listening = False


class FakeConnection:
    """Records every operation in order."""

    def __init__(self, listener: Optional[FakeListener] = None, fail_on: Optional[str] = None):
        self.listener = listener
        self.fail_on = fail_on
        self.events: List[tuple] = []
        self.closed = False
        self.aborted = False

    async def write(self, data: bytes) -> None:
        if self.fail_on == "write" or self.closed:
            raise ConnectionResetError("peer reset")
        self.events.append(("write", data))

    async def close(self) -> None:
        if self.fail_on == "close":
            raise BrokenPipeError("close failed")
        self.closed = True
        self.events.append(("close",))

    def abort(self) -> None:
        self.aborted = True
        self.events.append(("abort",))


class FakeSleep:
    def __init__(self, conn: Optional[FakeConnection] = None):
        self.conn = conn
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.conn is not None:
            self.conn.events.append(("wait", seconds))


def _executor(conn=None, random_bytes=None):
    sleep = FakeSleep(conn)
    executor = ActionExecutor(
        random_bytes=random_bytes or (lambda n: b"\xaa" * n),
        sleep=sleep,
    )
    return executor, sleep


class TestHandlerTable:
    def test_every_kind_has_a_handler(self):
        assert set(HANDLERS) == set(ActionKind)

    def test_fakes_match_ports(self):
        assert isinstance(FakeConnection(), ConnectionPort)
        assert isinstance(FakeListener(), ListenerPort)


class TestEmptyDirective:
    def test_does_nothing(self, capsys):
        conn = FakeConnection()
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, Directive()))

        assert result.state is ExecutionState.DONE
        assert conn.events == []
        assert conn.closed is False
        assert "No actions defined" in capsys.readouterr().out


class TestSequence:
    def test_send_data_wait_close_in_order(self):
        conn = FakeConnection()
        executor, sleep = _executor(conn)
        directive = parse_request("ACT[SEND=Hello!%0D%0A,DATA=1000,WAIT=1000,CLOSE]")

        result = run(executor.execute(conn, directive))

        assert result.success
        assert conn.events == [
            ("write", b"Hello!\r\n"),
            ("write", b"\xaa" * 1000),
            ("wait", 1.0),
            ("close",),
        ]
        assert len(result.completed) == 4

    def test_data_uses_requested_length(self):
        conn = FakeConnection()
        lengths = []

        def random_bytes(n):
            lengths.append(n)
            return bytes(n)

        executor, _ = _executor(conn, random_bytes=random_bytes)
        run(executor.execute(conn, parse_request("ACT[DATA=0,DATA=17]")))

        assert lengths == [0, 17]
        assert conn.events == [("write", b""), ("write", bytes(17))]

    def test_default_random_source_is_random(self):
        conn = FakeConnection()
        executor = ActionExecutor(sleep=FakeSleep())
        run(executor.execute(conn, parse_request("ACT[DATA=64,DATA=64]")))

        first, second = conn.events[0][1], conn.events[1][1]
        assert len(first) == len(second) == 64
        assert first != second

    def test_send_without_param_writes_nothing(self):
        conn = FakeConnection()
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[SEND,SEND=ok]")))

        assert result.success
        assert conn.events == [("write", b""), ("write", b"ok")]

    def test_no_implicit_close(self):
        conn = FakeConnection()
        executor, _ = _executor(conn)

        run(executor.execute(conn, parse_request("ACT[SEND=hi]")))

        assert conn.closed is False
        assert conn.aborted is False

    def test_logs_each_action_with_param(self, capsys):
        conn = FakeConnection()
        executor, _ = _executor(conn)

        run(executor.execute(conn, parse_request("ACT[WAIT=5,CLOSE]")))

        out = capsys.readouterr().out
        assert "Executing action WAIT: 5" in out
        assert "Executing action CLOSE" in out
        assert out.index("WAIT: 5") < out.index("action CLOSE")


class TestUnknownAction:
    def test_stops_and_aborts(self, capsys):
        conn = FakeConnection()
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[SEND=a,BOGUS=1,SEND=b]")))

        assert result.state is ExecutionState.ABORTED
        assert conn.events == [("write", b"a"), ("abort",)]
        assert result.completed == [Action("SEND", "a")]
        assert "Unknown action 'BOGUS'" in capsys.readouterr().out

    def test_unknown_first(self):
        conn = FakeConnection()
        executor, sleep = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[close,WAIT=10]")))

        assert result.state is ExecutionState.ABORTED
        assert conn.events == [("abort",)]
        assert sleep.calls == []


class TestInvalidParameter:
    @pytest.mark.parametrize("payload", ["ACT[WAIT=abc]", "ACT[WAIT=-1]", "ACT[DATA=1.5]", "ACT[DATA]"])
    def test_fails_directive_like_unknown_action(self, payload):
        conn = FakeConnection()
        executor, sleep = _executor(conn)

        result = run(executor.execute(conn, parse_request(payload)))

        assert result.state is ExecutionState.ABORTED
        assert "Invalid parameter" in result.error
        assert conn.events == [("abort",)]
        assert sleep.calls == []

    def test_actions_before_bad_param_run(self):
        conn = FakeConnection()
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[SEND=x,WAIT=soon,SEND=y]")))

        assert conn.events == [("write", b"x"), ("abort",)]
        assert len(result.completed) == 1


class TestIOFailure:
    def test_write_failure_stops_without_abort(self):
        conn = FakeConnection(fail_on="write")
        executor, sleep = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[SEND=x,WAIT=10,CLOSE]")))

        assert result.state is ExecutionState.ABORTED
        assert "SEND failed" in result.error
        assert conn.events == []
        assert conn.aborted is False
        assert sleep.calls == []

    def test_write_after_close_fails(self):
        conn = FakeConnection()
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[CLOSE,SEND=late,WAIT=1]")))

        assert result.state is ExecutionState.ABORTED
        assert conn.events == [("close",)]
        assert result.completed == [Action("CLOSE")]

    def test_close_failure(self):
        conn = FakeConnection(fail_on="close")
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[CLOSE,SEND=x]")))

        assert result.state is ExecutionState.ABORTED
        assert "CLOSE failed" in result.error
        assert conn.events == []

    def test_shut_failure(self):
        conn = FakeConnection(listener=FakeListener(fail=True))
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[SHUT,SEND=x]")))

        assert result.state is ExecutionState.ABORTED
        assert conn.events == []


class TestShut:
    def test_later_actions_still_run(self):
        listener = FakeListener()
        conn = FakeConnection(listener=listener)
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[SHUT,SEND=after,CLOSE]")))

        assert result.success
        assert listener.shutdowns == 1
        assert listener.is_listening is False
        assert conn.events == [("write", b"after"), ("close",)]

    def test_without_listener_is_noop(self):
        conn = FakeConnection(listener=None)
        executor, _ = _executor(conn)

        result = run(executor.execute(conn, parse_request("ACT[SHUT]")))

        assert result.success


class TestWait:
    def test_real_sleep_is_not_shorter(self):
        conn = FakeConnection()
        executor = ActionExecutor()

        async def timed():
            loop = asyncio.get_running_loop()
            start = loop.time()
            await executor.execute(conn, parse_request("ACT[WAIT=50]"))
            return loop.time() - start

        # asyncio may fire a timer up to one clock tick early
        assert run(timed()) >= 0.049

    def test_zero_wait(self):
        conn = FakeConnection()
        executor, sleep = _executor(conn)
        run(executor.execute(conn, parse_request("ACT[WAIT=0]")))
        assert sleep.calls == [0.0]
