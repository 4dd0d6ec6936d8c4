"""
Natural-key upsert primitive shared by every entity reconciler.

Reconcilers look up an existing row by natural key, then hand the result to
upsert(), which either creates a new row or applies a field-level diff and
persists only when a field actually changed. Store uniqueness constraints are
the backstop if two writers race on the same key.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Protocol, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

ModelT = TypeVar("ModelT")


class UpsertOutcome(str, Enum):
    """What an upsert did to the store."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class UpsertResult(Generic[ModelT]):
    """Result of a single upsert: the live instance and what happened to it."""

    instance: ModelT
    outcome: UpsertOutcome
    changed_fields: tuple[str, ...] = ()

    @property
    def created(self) -> bool:
        return self.outcome is UpsertOutcome.CREATED

    @property
    def updated(self) -> bool:
        return self.outcome is UpsertOutcome.UPDATED


class EntityReconciler(Protocol):
    """Protocol for per-entity reconcilers."""

    @property
    def entity_type(self) -> str:
        """Entity type this reconciler handles (e.g. 'unit', 'tenant')."""
        ...


def find_one(session: Session, model: type[ModelT], *criteria: Any, order_by: tuple = ()) -> ModelT | None:
    """First row of `model` matching all criteria, or None."""
    stmt = select(model).where(*criteria)
    if order_by:
        stmt = stmt.order_by(*order_by)
    return session.scalars(stmt.limit(1)).first()


def apply_changes(instance: Any, changes: Mapping[str, Any]) -> tuple[str, ...]:
    """Set each attribute whose current value differs. Returns the changed names."""
    changed: list[str] = []
    for name, value in changes.items():
        if getattr(instance, name) != value:
            setattr(instance, name, value)
            changed.append(name)
    return tuple(changed)


def upsert(
    session: Session,
    existing: ModelT | None,
    create: Callable[[], ModelT],
    changes: Callable[[ModelT], Mapping[str, Any]],
) -> UpsertResult[ModelT]:
    """
    Create `create()` when nothing was found, else diff `changes(existing)`.

    Flushes on create and on update so ids are assigned and constraint
    violations surface at the row that caused them. An unchanged row is not
    written.
    """
    if existing is None:
        instance = create()
        session.add(instance)
        session.flush()
        return UpsertResult(instance=instance, outcome=UpsertOutcome.CREATED)

    changed = apply_changes(existing, changes(existing))
    if not changed:
        return UpsertResult(instance=existing, outcome=UpsertOutcome.UNCHANGED)
    session.flush()
    return UpsertResult(instance=existing, outcome=UpsertOutcome.UPDATED, changed_fields=changed)
