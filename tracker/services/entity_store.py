"""Ordered entity store shared by the task and project collections.

The store owns the canonical collection in storage order together with a
"selected entity" pointer. Every mutation builds a new `StoreState` and
installs it in one step, so readers never see a half-applied change. Display
order is carried by each entity's `priority`; sorting is left to the view
layer.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import ValidationError
from sqlmodel import SQLModel

from tracker.core.errors import StorageError
from tracker.core.logging import get_logger
from tracker.core.time import utcnow
from tracker.services.persistence import PersistedSlot
from tracker.services.state import StateContainer

logger = get_logger(__name__)

E = TypeVar("E", bound=SQLModel)
C = TypeVar("C", bound=SQLModel)

_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def as_entity_id(value: UUID | str | None) -> UUID | None:
    """Coerce an identifier to UUID; malformed values resolve to None."""
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


@dataclass(frozen=True)
class StoreState(Generic[E]):
    """Immutable snapshot of a store: ordered entities plus the selection."""

    entities: tuple[E, ...] = ()
    selected_id: UUID | None = None
    index: Mapping[UUID, E] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[UUID, E] = {}
        for entity in self.entities:
            # First occurrence wins when callers insert duplicate ids.
            index.setdefault(entity.id, entity)  # type: ignore[attr-defined]
        object.__setattr__(self, "index", index)

    def replace(self, **changes: Any) -> StoreState[E]:
        values = {"entities": self.entities, "selected_id": self.selected_id}
        values.update(changes)
        return StoreState(**values)


class EntityStore(Generic[E, C]):
    """Ordered collection of `model` entities with reorder and selection support."""

    model: type[E]
    create_schema: type[C]
    entity_name: str = "entity"
    collection_key: str = "items"

    def __init__(self, *, slot: PersistedSlot | None = None) -> None:
        self._slot = slot
        self._container: StateContainer[StoreState[E]] = StateContainer(
            StoreState(entities=self._hydrate())
        )
        if slot is not None:
            self._container.subscribe(self._persist_on_change)

    # -------------------- persistence --------------------
    def _hydrate(self) -> tuple[E, ...]:
        if self._slot is None:
            return ()
        state = self._slot.load()
        if state is None:
            return ()
        entities: list[E] = []
        records = state.get(self.collection_key) or []
        if not isinstance(records, list):
            logger.warning(
                f"store.{self.entity_name}.hydrate_malformed",
                extra={"key": self._slot.key},
            )
            return ()
        for record in records:
            if not isinstance(record, dict):
                logger.warning(
                    f"store.{self.entity_name}.hydrate_skipped",
                    extra={"record_id": None, "error": "record is not an object"},
                )
                continue
            try:
                entities.append(self.model.model_validate(record))
            except ValidationError as exc:
                logger.warning(
                    f"store.{self.entity_name}.hydrate_skipped",
                    extra={"record_id": str(record.get("id")), "error": str(exc)},
                )
        logger.debug(
            f"store.{self.entity_name}.hydrated",
            extra={"count": len(entities), "key": self._slot.key},
        )
        return tuple(entities)

    def _persist_on_change(self, new: StoreState[E], old: StoreState[E]) -> None:
        if self._slot is None or new.entities is old.entities:
            return
        payload = {
            self.collection_key: [entity.model_dump(mode="json") for entity in new.entities]
        }
        try:
            self._slot.save(payload)
        except StorageError:
            logger.error(
                f"store.{self.entity_name}.persist_failed",
                extra={"key": self._slot.key, "count": len(new.entities)},
            )
            raise

    # -------------------- queries --------------------
    @property
    def state(self) -> StoreState[E]:
        return self._container.get()

    def list(self) -> tuple[E, ...]:
        """Entities in storage order (not necessarily priority order)."""
        return self._container.get().entities

    def __len__(self) -> int:
        return len(self._container.get().entities)

    def get_by_id(self, entity_id: UUID | str | None) -> E | None:
        key = as_entity_id(entity_id)
        if key is None:
            return None
        return self._container.get().index.get(key)

    def get_selected(self) -> E | None:
        state = self._container.get()
        if state.selected_id is None:
            return None
        return state.index.get(state.selected_id)

    def subscribe(
        self,
        listener: Callable[[StoreState[E], StoreState[E]], None],
    ) -> Callable[[], None]:
        return self._container.subscribe(listener)

    # -------------------- mutations --------------------
    def add(self, entity: E) -> E:
        """Append `entity`; the caller supplies a fresh id and its priority."""
        self._container.update(lambda s: s.replace(entities=(*s.entities, entity)))
        logger.info(
            f"store.{self.entity_name}.added",
            extra={"entity_id": str(entity.id), "priority": entity.priority},  # type: ignore[attr-defined]
        )
        return entity

    def create(self, payload: C | Mapping[str, Any]) -> E:
        """Build an entity from a create payload and append it at the end.

        Mappings are validated against `create_schema` first, so blank
        required fields raise before anything reaches the store.
        """
        if not isinstance(payload, self.create_schema):
            payload = self.create_schema.model_validate(payload)
        entity = payload.build(priority=len(self))  # type: ignore[attr-defined]
        return self.add(entity)

    def update(
        self,
        entity_id: UUID | str,
        updates: Mapping[str, Any] | SQLModel,
    ) -> E | None:
        """Merge `updates` into the entity and refresh `updated_at`.

        Returns the updated entity, or None when `entity_id` is unknown.
        """
        if isinstance(updates, SQLModel):
            changes = updates.model_dump(exclude_unset=True)
        else:
            changes = dict(updates)
        ignored = sorted(_IMMUTABLE_FIELDS.intersection(changes))
        for key in ignored:
            changes.pop(key)
        if ignored:
            logger.debug(
                f"store.{self.entity_name}.update_ignored_fields",
                extra={"fields": ",".join(ignored)},
            )

        key = as_entity_id(entity_id)
        current = self.get_by_id(key)
        if key is None or current is None:
            logger.info(
                f"store.{self.entity_name}.update_not_found",
                extra={"entity_id": str(entity_id)},
            )
            return None

        merged = self.model.model_validate(
            {**current.model_dump(), **changes, "updated_at": utcnow()}
        )
        self._container.update(
            lambda s: s.replace(
                entities=tuple(merged if e.id == key else e for e in s.entities)  # type: ignore[attr-defined]
            )
        )
        logger.info(
            f"store.{self.entity_name}.updated",
            extra={"entity_id": str(key), "fields": ",".join(sorted(changes))},
        )
        return merged

    def delete(self, entity_id: UUID | str) -> bool:
        """Remove the entity; clears the selection when it pointed at it.

        Relation lists on other entities are left untouched.
        """
        key = as_entity_id(entity_id)
        if key is None or key not in self._container.get().index:
            logger.info(
                f"store.{self.entity_name}.delete_not_found",
                extra={"entity_id": str(entity_id)},
            )
            return False

        def _without(s: StoreState[E]) -> StoreState[E]:
            return s.replace(
                entities=tuple(e for e in s.entities if e.id != key),  # type: ignore[attr-defined]
                selected_id=None if s.selected_id == key else s.selected_id,
            )

        self._container.update(_without)
        logger.info(f"store.{self.entity_name}.deleted", extra={"entity_id": str(key)})
        return True

    def reorder(
        self,
        ordered_ids: Iterable[UUID | str],
        *,
        drop_unlisted: bool = False,
    ) -> tuple[E, ...]:
        """Reassign dense priorities following `ordered_ids`.

        Listed entities take priorities 0..k-1 in the given order; unknown and
        repeated ids are skipped. Entities not listed follow in their previous
        priority order with priorities k..n-1, unless `drop_unlisted` is set,
        in which case they are removed from the collection.
        """
        state = self._container.get()
        listed: list[E] = []
        seen: set[UUID] = set()
        for raw_id in ordered_ids:
            key = as_entity_id(raw_id)
            if key is None or key in seen or key not in state.index:
                continue
            seen.add(key)
            listed.append(state.index[key])

        if drop_unlisted:
            rest: list[E] = []
        else:
            rest = sorted(
                (e for e in state.entities if e.id not in seen),  # type: ignore[attr-defined]
                key=lambda e: e.priority,  # type: ignore[attr-defined]
            )

        reordered = tuple(
            entity.model_copy(update={"priority": index})
            for index, entity in enumerate([*listed, *rest])
        )
        selected_id = state.selected_id
        if drop_unlisted and selected_id is not None and selected_id not in seen:
            selected_id = None
        self._container.set(state.replace(entities=reordered, selected_id=selected_id))
        logger.info(
            f"store.{self.entity_name}.reordered",
            extra={
                "listed": len(listed),
                "unlisted": len(state.entities) - len(listed),
                "dropped": drop_unlisted,
            },
        )
        return reordered

    def set_selected(self, entity_id: UUID | str | None) -> None:
        key = as_entity_id(entity_id)
        self._container.update(lambda s: s.replace(selected_id=key))
