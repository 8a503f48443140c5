from typing import Final

from treelox.tokens import Token


class LoxRuntimeError(Exception):
    token: Final[Token | None]

    def __init__(self, token: Token | None, message: str) -> None:
        super().__init__(message)
        self.token = token
        self.message = message


class NativeError(LoxRuntimeError):
    """Failure inside a native binding.

    Natives don't know where they were called from, the interpreter attaches
    the call site with ``at()`` before the error is reported.
    """

    def __init__(self, function: str, message: str, token: Token | None = None) -> None:
        super().__init__(token, message)
        self.function = function

    def at(self, token: Token) -> 'NativeError':
        return NativeError(self.function, self.message, token)

    def __str__(self) -> str:
        return f"Error in native function '{self.function}': {self.message}"
