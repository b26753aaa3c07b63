"""A sum type representing either a successful value or an error.

Functions that prefer returning their failures to raising them return a :class:`Result`, which is
either an :class:`Ok` holding the value or an :class:`Err` holding the error. The facade
generator recognises `Result[Self, E]` as the return type of a fallible constructor.
"""

import typing as tp


__all__ = ["Result", "Ok", "Err"]


T = tp.TypeVar("T")
E = tp.TypeVar("E")
U = tp.TypeVar("U")


class Result(tp.Generic[T, E]):
    """Either :class:`Ok` or :class:`Err`. Do not instantiate directly."""

    __slots__ = ()

    def is_ok(self) -> bool:
        """Returns True when the result is successful."""
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Returns True when the result represents a failure."""
        return isinstance(self, Err)

    def ok(self) -> tp.Optional[T]:
        """Returns the contained value, or None if this is an error."""
        return self.value if isinstance(self, Ok) else None

    def err(self) -> tp.Optional[E]:
        """Returns the contained error, or None if this is a success."""
        return self.error if isinstance(self, Err) else None

    def map(self, func: tp.Callable[[T], U]) -> "Result[U, E]":
        """Applies a function to the contained value, leaving an error untouched."""
        return Ok(func(self.value)) if isinstance(self, Ok) else self

    def unwrap(self) -> T:
        """Returns the value, or raises if this is an error.

        The error itself is raised if it is an exception. Otherwise a ValueError is raised.
        """
        if isinstance(self, Ok):
            return self.value
        if isinstance(self.error, BaseException):
            raise self.error
        raise ValueError("Called unwrap() on {!r}.".format(self))

    def unwrap_err(self) -> E:
        """Returns the error, or raises ValueError if this is a success."""
        if isinstance(self, Err):
            return self.error
        raise ValueError("Called unwrap_err() on {!r}.".format(self))

    def expect(self, msg: str) -> T:
        """Returns the value, or raises a RuntimeError with a custom message."""
        if isinstance(self, Ok):
            return self.value
        raise RuntimeError("{}: {}".format(msg, self.error))


class Ok(Result[T, E]):
    """A successful result."""

    __slots__ = ("value",)

    def __init__(self, value: T):
        self.value = value

    def __repr__(self):
        return "Ok({!r})".format(self.value)

    def __eq__(self, other):
        return isinstance(other, Ok) and self.value == other.value

    def __hash__(self):
        return hash((Ok, self.value))


class Err(Result[T, E]):
    """A failed result."""

    __slots__ = ("error",)

    def __init__(self, error: E):
        self.error = error

    def __repr__(self):
        return "Err({!r})".format(self.error)

    def __eq__(self, other):
        return isinstance(other, Err) and self.error == other.error

    def __hash__(self):
        return hash((Err, self.error))
