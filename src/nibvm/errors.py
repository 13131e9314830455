"""Exceptions raised by the nib machine and its command-line front end."""


class NibException(Exception):
    """Base exception for all nibvm errors."""
    pass


# =============================================================================
# Front-end errors
# =============================================================================

class InvalidArguments(NibException):
    """Raised when the command line cannot be parsed."""
    pass


class UnreadableInputFile(NibException):
    """Raised when the program file cannot be opened or read."""
    pass


class InvalidMemoryStepSize(NibException):
    """Raised when the memory step size is not a positive 32-bit integer."""
    pass


# =============================================================================
# Execution errors
# =============================================================================

class ExecutionError(NibException):
    """Base class for errors that abort a run at a given instruction index."""

    def __init__(self, message: str, ip: int):
        super().__init__(message)
        self.ip = ip


class DataIndexOutOfBounds(ExecutionError):
    """Raised in strict mode when a cell is accessed past the end of the tape."""

    def __init__(self, ip: int, cursor: int, length: int):
        super().__init__(f"Data index out of bounds at input index '{ip}'", ip)
        self.cursor = cursor
        self.length = length


class UnexpectedLoopEnd(ExecutionError):
    """Raised in strict mode when LOOP_END has no open loop to return to."""

    def __init__(self, ip: int):
        super().__init__(f"Unexpected end of loop at input index '{ip}'", ip)


class UnterminatedLoop(ExecutionError):
    """Raised when skipping a loop runs off the end of the program."""

    def __init__(self, ip: int):
        super().__init__(f"Expected end of loop started at input index '{ip}'", ip)


class StepLimitExceeded(ExecutionError):
    """Raised when a run exceeds its instruction budget."""

    def __init__(self, ip: int, max_steps: int):
        super().__init__(f"Step limit of {max_steps} exceeded at input index '{ip}'", ip)
        self.max_steps = max_steps
