"""Locale resource table: block names, status texts and menu labels.

The bundle ships as package data and is validated once at import time. Lookups are
pure; nothing here talks to a backend.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, model_validator

from micra_bridge.models import StatusCode

BUNDLE_PATH = Path(__file__).parent / "data" / "locale_bundle.json"

BLOCK_CATEGORIES = ("blocks", "reds", "decos", "wools", "sglasss", "carpets")


class BlockEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    data: int
    name: str
    category: str


class LocaleBundle(BaseModel):
    """Immutable resource bundle indexed by ``(locale, key)``."""

    model_config = ConfigDict(frozen=True)

    default_locale: str
    locales: list[str]
    blocks: dict[str, list[BlockEntry]]
    status: dict[str, dict[StatusCode, str]]
    helper_messages: dict[str, StatusCode]
    directions: dict[str, dict[str, str]]
    pitches: dict[str, dict[str, str]]
    fonts: list[str]

    @model_validator(mode="after")
    def _check_locales(self) -> "LocaleBundle":
        for table_name in ("blocks", "status", "directions", "pitches"):
            missing = set(self.locales) - set(getattr(self, table_name))
            if missing:
                raise ValueError(f"{table_name} table lacks locales: {sorted(missing)}")
        for locale, texts in self.status.items():
            if set(texts) != set(StatusCode):
                raise ValueError(f"status table for {locale!r} must cover every status code")
        return self

    def normalize_locale(self, locale: str | None) -> str:
        return locale if locale in self.locales else self.default_locale

    def resolve(self, name: str | None, locale: str | None = None) -> tuple[int | None, int | None]:
        """Return ``(block_id, block_data)`` for a display name, or ``(None, None)``.

        The given locale is searched first, then every other locale in bundle order,
        so a name picked in one language still resolves after the editor switches.
        """
        if name is None:
            return None, None

        first = self.normalize_locale(locale)
        search_order = [first, *(loc for loc in self.locales if loc != first)]
        for loc in search_order:
            for entry in self.blocks[loc]:
                if entry.name == name:
                    return entry.id, entry.data
        return None, None

    def status_text(self, status: StatusCode | None, locale: str | None = None) -> str:
        if status is None:
            return ""
        return self.status[self.normalize_locale(locale)][status]

    def translate_helper_message(self, message: str | None) -> StatusCode | None:
        if message is None:
            return None
        return self.helper_messages.get(message.strip())

    def menu(self, category: str, locale: str | None = None) -> list[str]:
        if category not in BLOCK_CATEGORIES:
            return []
        return [entry.name for entry in self.blocks[self.normalize_locale(locale)] if entry.category == category]

    def direction_labels(self, locale: str | None = None) -> dict[str, str]:
        return dict(self.directions[self.normalize_locale(locale)])

    def pitch_labels(self, locale: str | None = None) -> dict[str, str]:
        return dict(self.pitches[self.normalize_locale(locale)])


@lru_cache(maxsize=1)
def load_bundle(path: str | Path = BUNDLE_PATH) -> LocaleBundle:
    return LocaleBundle.model_validate_json(Path(path).read_text(encoding="utf-8"))
