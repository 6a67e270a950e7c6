"""Error taxonomy for directive parsing and execution."""


class ActServerError(Exception):
    """Base class for all actserver errors."""


class MalformedDirective(ActServerError, ValueError):
    """Text carries no recognizable ``ACT[...]`` block."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Action list is incorrect: {text!r}")


class UnknownAction(ActServerError):
    """Action name outside the fixed vocabulary."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown action {name!r}")


class InvalidParameter(ActServerError, ValueError):
    """Numeric action parameter is missing or not a non-negative integer."""

    def __init__(self, name: str, param):
        self.name = name
        self.param = param
        super().__init__(f"Invalid parameter for {name}: {param!r}")


class ActionIOError(ActServerError):
    """Write, close or listener shutdown failed while running an action."""

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"{name} failed: {cause}")


class InvalidPort(ActServerError, ValueError):
    """Listen port is not an integer in 0..65535."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid port {value!r}: expected a number from 0 to 65535")
