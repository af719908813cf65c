"""
Explicit state-transition tables for models with a ``status`` field.

Each stateful model declares a mapping of ``status -> allowed next
statuses``.  Services call :func:`check_transition` before mutating a row
so illegal moves (approving a rejected payout, re-completing a payment)
are rejected in one place instead of ad hoc ``if status != ...`` checks.
"""
from __future__ import annotations

from typing import Iterable, Mapping


class InvalidTransition(Exception):
    """Raised when a status change is not allowed by the transition table."""

    def __init__(self, current: str, target: str, label: str = "object"):
        self.current = current
        self.target = target
        self.label = label
        super().__init__(f"Cannot move {label} from '{current}' to '{target}'.")


def allowed_targets(table: Mapping[str, Iterable[str]], current: str) -> tuple[str, ...]:
    return tuple(table.get(current, ()))


def can_transition(table: Mapping[str, Iterable[str]], current: str, target: str) -> bool:
    return target in allowed_targets(table, current)


def check_transition(
    table: Mapping[str, Iterable[str]],
    current: str,
    target: str,
    label: str = "object",
    error: type = InvalidTransition,
) -> None:
    """Raise ``error(current, target, label)`` if the move is not allowed."""
    if not can_transition(table, current, target):
        raise error(current, target, label)
