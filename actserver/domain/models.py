"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class ActionKind(str, Enum):
    """Closed set of actions a directive may request."""

    CLOSE = "CLOSE"
    DATA = "DATA"
    SEND = "SEND"
    WAIT = "WAIT"
    SHUT = "SHUT"


@dataclass(frozen=True)
class Action:
    """One parsed ``name[=param]`` entry of a directive."""

    name: str  # as written in the payload, e.g. "SEND"
    param: Optional[str] = None

    @property
    def kind(self) -> Optional[ActionKind]:
        try:
            return ActionKind(self.name)
        except ValueError:
            return None

    def describe(self) -> str:
        if self.param:
            return f"{self.name}: {self.param.strip()}"
        return self.name


@dataclass(frozen=True)
class Directive:
    """Ordered list of actions taken from one payload."""

    actions: Tuple[Action, ...] = ()

    def __iter__(self) -> Iterator[Action]:
        return iter(self.actions)

    def __len__(self) -> int:
        return len(self.actions)

    def __bool__(self) -> bool:
        # An empty directive is still a directive.
        return True


class ExecutionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class ExecutionResult:
    """Outcome of running one directive against a session."""

    state: ExecutionState = ExecutionState.IDLE
    completed: List[Action] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state is ExecutionState.DONE
