"""Settings registry for category/product vocabularies and display language."""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal

from pydantic import ValidationError

from tracker.core.errors import FloorViolationError
from tracker.core.logging import get_logger
from tracker.models.settings import DEFAULT_CATEGORIES, DEFAULT_PRODUCTS, Language, SettingsState
from tracker.services.persistence import PersistedSlot, StateStorage
from tracker.services.state import StateContainer

logger = get_logger(__name__)

SETTINGS_STORAGE_KEY = "settings-storage"
SETTINGS_SCHEMA_VERSION = 0

Vocabulary = Literal["categories", "products"]
_VOCABULARY_LABELS: dict[str, str] = {"categories": "category", "products": "product"}
_DEFAULTS: dict[str, tuple[str, ...]] = {
    "categories": DEFAULT_CATEGORIES,
    "products": DEFAULT_PRODUCTS,
}


class SettingsRegistry:
    """Mutable vocabularies with a minimum-cardinality floor of one item each.

    The floor is enforced here rather than left to callers: removing the last
    remaining item raises `FloorViolationError` and leaves the list unchanged.
    """

    def __init__(self, *, slot: PersistedSlot | None = None) -> None:
        self._slot = slot
        self._container = StateContainer(self._hydrate())
        if slot is not None:
            self._container.subscribe(self._persist_on_change)

    def _hydrate(self) -> SettingsState:
        if self._slot is None:
            return SettingsState()
        stored = self._slot.load()
        if stored is None:
            return SettingsState()
        try:
            state = SettingsState.model_validate(stored)
        except ValidationError as exc:
            logger.warning("settings.hydrate_failed", extra={"error": str(exc)})
            return SettingsState()
        if not state.categories or not state.products:
            # Stored lists emptied outside the registry fall back to defaults.
            return SettingsState(
                categories=state.categories or list(DEFAULT_CATEGORIES),
                products=state.products or list(DEFAULT_PRODUCTS),
                language=state.language,
            )
        return state

    def _persist_on_change(self, new: SettingsState, old: SettingsState) -> None:
        del old
        if self._slot is not None:
            self._slot.save(new.model_dump(mode="json"))

    # -------------------- queries --------------------
    @property
    def state(self) -> SettingsState:
        return self._container.get()

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._container.get().categories)

    @property
    def products(self) -> tuple[str, ...]:
        return tuple(self._container.get().products)

    @property
    def language(self) -> Language:
        return self._container.get().language

    def subscribe(
        self,
        listener: Callable[[SettingsState, SettingsState], None],
    ) -> Callable[[], None]:
        return self._container.subscribe(listener)

    # -------------------- vocabulary helpers --------------------
    def _add(self, vocabulary: Vocabulary, name: str) -> bool:
        value = name.strip()
        label = _VOCABULARY_LABELS[vocabulary]
        if not value:
            raise ValueError(f"{label} name is required")
        current: list[str] = getattr(self._container.get(), vocabulary)
        if value in current:
            return False
        self._container.update(
            lambda s: s.model_copy(update={vocabulary: [*current, value]})
        )
        logger.info(f"settings.{label}.added", extra={"item": value})
        return True

    def _remove(self, vocabulary: Vocabulary, name: str) -> bool:
        label = _VOCABULARY_LABELS[vocabulary]
        current: list[str] = getattr(self._container.get(), vocabulary)
        if name not in current:
            return False
        if len(current) <= 1:
            logger.warning(f"settings.{label}.floor_violation", extra={"item": name})
            raise FloorViolationError(label)
        remaining = [item for item in current if item != name]
        self._container.update(lambda s: s.model_copy(update={vocabulary: remaining}))
        logger.info(f"settings.{label}.removed", extra={"item": name})
        return True

    def _reset(self, vocabulary: Vocabulary) -> None:
        defaults = list(_DEFAULTS[vocabulary])
        self._container.update(lambda s: s.model_copy(update={vocabulary: defaults}))
        logger.info(f"settings.{_VOCABULARY_LABELS[vocabulary]}.reset")

    # -------------------- public operations --------------------
    def add_category(self, name: str) -> bool:
        return self._add("categories", name)

    def remove_category(self, name: str) -> bool:
        return self._remove("categories", name)

    def reset_categories(self) -> None:
        self._reset("categories")

    def add_product(self, name: str) -> bool:
        return self._add("products", name)

    def remove_product(self, name: str) -> bool:
        return self._remove("products", name)

    def reset_products(self) -> None:
        self._reset("products")

    def set_language(self, language: Language | str) -> None:
        resolved = Language(language)
        self._container.update(lambda s: s.model_copy(update={"language": resolved}))


def build_settings_registry(storage: StateStorage | None = None) -> SettingsRegistry:
    """Create a settings registry, persisted when `storage` is given."""
    slot = None
    if storage is not None:
        slot = PersistedSlot(storage, SETTINGS_STORAGE_KEY, version=SETTINGS_SCHEMA_VERSION)
    return SettingsRegistry(slot=slot)
