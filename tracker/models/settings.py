"""User-editable vocabularies and display preferences."""

from __future__ import annotations

from enum import Enum

from sqlmodel import Field, SQLModel

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "公共",
    "製薬",
    "GCIT",
    "Downstream",
    "Activity",
    "その他",
)
DEFAULT_PRODUCTS: tuple[str, ...] = (
    "Copilot Studio",
    "Power Apps",
    "Power Automate",
    "PAD",
    "Power Pages",
    "Power Platform",
)


class Language(str, Enum):
    """Display languages; JA is the primary language."""

    JA = "ja"
    EN = "en"


class SettingsState(SQLModel):
    """Snapshot of the settings registry."""

    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    products: list[str] = Field(default_factory=lambda: list(DEFAULT_PRODUCTS))
    language: Language = Language.JA
