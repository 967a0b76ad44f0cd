"""
Exception hierarchy for nativize.

Only the outer layers raise: unparsable input, bad configuration and unknown
rule names. The safety analysis answers every doubtful case with a negative
verdict instead of an exception.
"""


class NativizeError(Exception):
    """Base class for errors raised by nativize."""

    pass


class JavaScriptSyntaxError(NativizeError):
    """Raised when the input is not valid JavaScript."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
