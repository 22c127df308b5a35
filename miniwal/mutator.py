"""Mutations that transform a managed state."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, TypeVar

S = TypeVar("S")


class Mutator(ABC):
    """A change that can be applied to a state.

    Implementations must be pure and deterministic. Replaying the same
    mutations from the same starting state must always give the same result,
    because the state is rebuilt from the journal after a restart.

    :meth:`apply` may change ``state`` in place and return ``None``, or
    return a new state object. The second form suits immutable states.
    """

    @abstractmethod
    def apply(self, state: Any) -> Any:
        """Apply this mutation to ``state``.

        Return the new state, or ``None`` if ``state`` was changed in place.
        """


def _apply_one(state: S, mutation: Any) -> S:
    result = mutation.apply(state)
    return state if result is None else result


def apply_all(state: S, mutations: Iterable[Any]) -> S:
    """Apply ``mutations`` to ``state`` in order and return the final state."""
    for mutation in mutations:
        state = _apply_one(state, mutation)
    return state