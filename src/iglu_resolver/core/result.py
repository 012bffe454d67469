"""Typed Result container for explicit success/failure returns.

Motivation
----------
Schema lookups fail for ordinary reasons (a registry is down, a schema does
not exist, a payload does not validate) and the resolver must keep sweeping
backends when one of them fails. Raising and catching exceptions in that inner
loop hides which outcome belongs to which backend, so every lookup, resolution
and validation step returns a `Result[T, E]` instead:

- `Ok(value)` / `Err(error)` variants,
- combinators: `map`, `map_err`, `flat_map`,
- helpers: `unwrap`, `expect`, `unwrap_err`.

Example
-------
>>> from iglu_resolver.core.result import ok, err, Result
>>> def parse_model(x: str) -> Result[int, str]:
...     return ok(int(x)) if x.isdigit() else err("not a model number")
>>> ok("2").flat_map(parse_model).unwrap()
2
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, cast, overload

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class Result(Generic[T, E]):
    """Outcome of a lookup or validation step: `Ok[T]` or `Err[E]`."""

    # ----- Introspection -----------------------------------------------------
    def is_ok(self) -> bool:
        """Return ``True`` if this is an :class:`Ok` value."""
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` if this is an :class:`Err` value."""
        return isinstance(self, Err)

    # ----- Unwraps -----------------------------------------------------------
    @overload
    def unwrap(self) -> T: ...
    @overload
    def unwrap(self, default: T) -> T: ...

    def unwrap(self, default: T | None = None) -> T:
        """Return the inner value if ``Ok``, else raise or return ``default``.

        Parameters
        ----------
        default:
            Optional fallback value to return when this is ``Err``. If omitted,
            a :class:`RuntimeError` is raised on ``Err``.
        """
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        if default is not None:
            return default
        raise RuntimeError(f"Attempted to unwrap Err: {self!r}")

    def expect(self, msg: str) -> T:
        """Return the inner value if ``Ok``, else raise ``RuntimeError(msg)``."""
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        raise RuntimeError(f"{msg}: {cast(Err[T, E], self).error!r}")

    def unwrap_err(self) -> E:
        """Return the error value if ``Err``, else raise."""
        if isinstance(self, Err):
            return cast(Err[T, E], self).error
        raise RuntimeError(f"Attempted to unwrap_err on Ok: {self!r}")

    # ----- Combinators -------------------------------------------------------
    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        """Apply ``fn`` to the success value; propagate error unchanged."""
        if isinstance(self, Ok):
            return Ok(fn(cast(Ok[T, E], self).value))
        return cast(Result[U, E], self)

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        """Apply ``fn`` to the error value; propagate success unchanged."""
        if isinstance(self, Err):
            return Err(fn(cast(Err[T, E], self).error))
        return cast(Result[T, F], self)

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain computations that already return a :class:`Result`."""
        if isinstance(self, Ok):
            return fn(cast(Ok[T, E], self).value)
        return cast(Result[U, E], self)

    # ----- Dunder helpers ----------------------------------------------------
    def __repr__(self) -> str:  # pragma: no cover - trivial representation
        if isinstance(self, Ok):
            return f"Ok({cast(Ok[T, E], self).value!r})"
        if isinstance(self, Err):
            return f"Err({cast(Err[T, E], self).error!r})"
        return "Result(?)"


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Successful result wrapping a value of type ``T``."""

    value: T


@dataclass(frozen=True)
class Err(Result[T, E]):
    """Failed result wrapping an error payload of type ``E``."""

    error: E


# ----- Convenience constructors ----------------------------------------------
def ok(value: T) -> Result[T, E]:
    """Wrap a successful value."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Wrap a failure."""
    return Err(error)


__all__ = ["Result", "Ok", "Err", "ok", "err"]
