"""
Success/Failure values for pricing outcomes.

Structural pricing failures (no shipping zone for a destination, two
rest-of-world zones, an edit naming an unknown order item) are returned,
not raised. Steps are chained with ``map`` and ``and_then``; the first
Failure short-circuits the rest.

Example:
    >>> def zone_for(code: str) -> Result[str, str]:
    ...     return Success(f"zone-{code}") if code else Failure("zone_not_found")
    ...
    >>> zone_for("FR").map(str.upper).unwrap()
    'ZONE-FR'
    >>> zone_for("").map(str.upper).error
    'zone_not_found'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Never

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True, slots=True)
class Success[T]:
    """
    Outcome carrying a computed value.

    Attributes:
        value: The computed value.
    """

    value: T

    def is_success(self) -> bool:
        """Return True; the computation succeeded."""
        return True

    def is_failure(self) -> bool:
        """Return False; the computation succeeded."""
        return False

    def unwrap(self) -> T:
        """
        Return the computed value.

        Returns:
            The value carried by this Success.
        """
        return self.value

    def map[U](self, func: Callable[[T], U]) -> Success[U]:
        """
        Transform the value, keeping the outcome a Success.

        Args:
            func: Infallible transformation of the value.

        Returns:
            New Success holding the transformed value.
        """
        return Success(func(self.value))

    def and_then[U, E](self, func: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """
        Run the next fallible step on the value.

        Args:
            func: Step returning its own Result.

        Returns:
            The Result of ``func``.
        """
        return func(self.value)


@dataclass(frozen=True, slots=True)
class Failure[E]:
    """
    Outcome carrying the error that stopped the computation.

    Attributes:
        error: The error value, usually a PricingError.
    """

    error: E

    def is_success(self) -> bool:
        """Return False; the computation failed."""
        return False

    def is_failure(self) -> bool:
        """Return True; the computation failed."""
        return True

    def unwrap(self) -> Never:
        """
        Refuse to produce a value.

        Raises:
            ValueError: Always; callers check ``is_failure`` first.
        """
        raise ValueError(f"Cannot unwrap Failure: {self.error}")

    def map[T, U](self, _func: Callable[[T], U]) -> Failure[E]:
        """
        Skip the transformation.

        Args:
            _func: Transformation of a value (not called).

        Returns:
            Self unchanged.
        """
        return self

    def and_then[T, U](self, _func: Callable[[T], Result[U, E]]) -> Failure[E]:
        """
        Skip the next step.

        Args:
            _func: Fallible step (not called).

        Returns:
            Self unchanged, so the first error reaches the caller.
        """
        return self


type Result[T, E] = Success[T] | Failure[E]


def success[T](value: T) -> Success[T]:
    """
    Create a Success result.

    Args:
        value: The computed value.

    Returns:
        A Success carrying the value.
    """
    return Success(value)


def failure[E](error: E) -> Failure[E]:
    """
    Create a Failure result.

    Args:
        error: The error that stopped the computation.

    Returns:
        A Failure carrying the error.
    """
    return Failure(error)
