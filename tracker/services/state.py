"""Explicit state container with copy-on-write snapshots and subscribers."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

S = TypeVar("S")

Listener = Callable[[S, S], None]


class StateContainer(Generic[S]):
    """Holds one immutable snapshot and notifies listeners on each replace.

    Writers never mutate the current snapshot; they install a new one. A reader
    therefore sees either the previous state or the next one, never a mix.
    """

    def __init__(self, initial: S) -> None:
        self._state = initial
        self._listeners: list[Listener[S]] = []

    def get(self) -> S:
        return self._state

    def set(self, next_state: S) -> None:
        previous = self._state
        self._state = next_state
        for listener in tuple(self._listeners):
            listener(next_state, previous)

    def update(self, fn: Callable[[S], S]) -> S:
        """Derive the next snapshot from the current one and install it."""
        next_state = fn(self._state)
        self.set(next_state)
        return next_state

    def subscribe(self, listener: Listener[S]) -> Callable[[], None]:
        """Register `listener(new, old)`; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe
