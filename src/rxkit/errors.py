"""Errors raised by the engine itself.

Producer errors passed to on_error are never wrapped in these. They are
carried to observers verbatim.
"""

__all__ = (
    "DisposedError",
    "EmptyInputError",
    "InvalidArgumentError",
    "RxError",
)


class RxError(Exception): ...


class InvalidArgumentError(RxError, ValueError): ...


class EmptyInputError(RxError, ValueError):
    def __init__(self, message: str = "Sequence contains no elements.") -> None:
        super().__init__(message)


class DisposedError(RxError):
    def __init__(self, obj: object) -> None:
        super().__init__(f"`{type(obj).__name__}` has been disposed.")
        self.obj = obj
