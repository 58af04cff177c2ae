"""
Exception types raised by gamscheck.

Only UnsupportedSource and InvalidTransition ever reach a caller of
CheckEngine.check; everything else is contained inside the check cycle.
"""


class GamsCheckError(Exception):
    """Base class for all gamscheck errors."""


class ProcessSpawnError(GamsCheckError):
    """The compiler process could not be started."""

    def __init__(self, command, reason: str):
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Could not start '{self.command[0]}': {reason}")


class MappingOutOfRange(GamsCheckError):
    """A line number points outside the source buffer."""

    def __init__(self, line_number: int, line_count: int):
        self.line_number = line_number
        self.line_count = line_count
        super().__init__(f"Line {line_number} is outside the buffer (1..{line_count})")


class ParseMalformed(GamsCheckError):
    """An error block of the listing cannot produce diagnostics."""


class UnsupportedSource(GamsCheckError):
    """The source kind is not enabled for checking."""


class InvalidTransition(GamsCheckError):
    """A check session was moved to a state it cannot reach."""
