"""Named theme collections and their JSON persistence."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from ghostty_styles.core.theme_record import ThemeRecord
from ghostty_styles.errors import ErrorCode, GhosttyStylesError, classify_exception

_MAX_COLLECTION_BYTES = 8 * 1024 * 1024
_MAX_NAME_LEN = 64


class CycleOrder(Enum):
    SEQUENTIAL = "sequential"
    SHUFFLE = "shuffle"


@dataclass(frozen=True, slots=True)
class CollectionTheme:
    """Snapshot of a theme stored inside a collection."""

    slug: str
    title: str
    is_dark: bool
    raw_config: str

    @classmethod
    def from_record(cls, record: ThemeRecord) -> CollectionTheme:
        return cls(
            slug=record.slug,
            title=record.title,
            is_dark=record.is_dark,
            raw_config=record.raw_config,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.title,
            "is_dark": self.is_dark,
            "raw_config": self.raw_config,
        }


@dataclass
class ThemeCollection:
    """An ordered, user-curated set of themes with a traversal policy."""

    name: str
    themes: list[CollectionTheme] = field(default_factory=list)
    current_index: int = 0
    order: CycleOrder = CycleOrder.SEQUENTIAL
    interval: str | None = None

    def clamped_index(self) -> int:
        """``current_index`` forced into range; 0 for an empty collection."""
        if not self.themes:
            return 0
        return min(max(self.current_index, 0), len(self.themes) - 1)

    def current_theme(self) -> CollectionTheme | None:
        if not self.themes:
            return None
        return self.themes[self.clamped_index()]

    def add_theme(self, theme: CollectionTheme) -> None:
        self.themes.append(theme)

    def remove_theme(self, index: int) -> CollectionTheme:
        if not 0 <= index < len(self.themes):
            raise GhosttyStylesError(
                ErrorCode.INVALID_INPUT,
                message=f"No theme at position {index + 1} in '{self.name}'",
            )
        removed = self.themes.pop(index)
        if index < self.current_index:
            self.current_index -= 1
        self.current_index = self.clamped_index()
        return removed

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "themes": [theme.to_dict() for theme in self.themes],
            "current_index": self.current_index,
            "order": self.order.value,
            "interval": self.interval,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ThemeCollection:
        if not isinstance(data, Mapping):
            raise ValueError("collection must be a JSON object")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("collection field 'name' must be a non-empty string")
        raw_themes = data.get("themes", [])
        if not isinstance(raw_themes, list):
            raise ValueError("collection field 'themes' must be a list")
        themes = []
        for entry in raw_themes:
            if not isinstance(entry, Mapping):
                raise ValueError("collection themes must be JSON objects")
            themes.append(
                CollectionTheme(
                    slug=str(entry.get("slug", "")),
                    title=str(entry.get("title", "")),
                    is_dark=bool(entry.get("is_dark", True)),
                    raw_config=str(entry.get("raw_config", "")),
                )
            )
        index = data.get("current_index", 0)
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ValueError("collection field 'current_index' must be a non-negative integer")
        try:
            order = CycleOrder(data.get("order", CycleOrder.SEQUENTIAL.value))
        except ValueError as exc:
            raise ValueError(f"unknown cycle order {data.get('order')!r}") from exc
        interval = data.get("interval")
        if interval is not None and not isinstance(interval, str):
            raise ValueError("collection field 'interval' must be a string or null")
        return cls(name=name, themes=themes, current_index=index, order=order, interval=interval)


def validate_collection_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise GhosttyStylesError(ErrorCode.INVALID_INPUT, message="Collection name cannot be empty")
    if len(cleaned) > _MAX_NAME_LEN:
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message=f"Collection name exceeds max length {_MAX_NAME_LEN}",
        )
    if any(ch in cleaned for ch in ("/", "\\", "\0")) or cleaned in {".", ".."} or cleaned.startswith("."):
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message=f"Collection name {cleaned!r} may not contain path separators or start with '.'",
        )
    return cleaned


class CollectionStore:
    """Loads and saves one ``<name>.json`` file per collection."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, name: str) -> Path:
        return self._root / f"{validate_collection_name(name)}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def list_names(self) -> list[str]:
        if not self._root.exists():
            return []
        try:
            return sorted(path.stem for path in self._root.glob("*.json") if path.is_file())
        except OSError as exc:
            raise classify_exception(exc, self._root) from exc

    def create(self, name: str) -> ThemeCollection:
        if self.exists(name):
            raise GhosttyStylesError(
                ErrorCode.COLLECTION_EXISTS,
                message=f"Collection '{name}' already exists",
            )
        collection = ThemeCollection(name=validate_collection_name(name))
        self.save(collection)
        return collection

    def load(self, name: str) -> ThemeCollection:
        path = self.path_for(name)
        if not path.is_file():
            raise GhosttyStylesError(
                ErrorCode.COLLECTION_NOT_FOUND,
                message=f"Collection '{name}' does not exist",
                path=path,
            )
        try:
            if path.stat().st_size > _MAX_COLLECTION_BYTES:
                raise GhosttyStylesError(
                    ErrorCode.SERIALIZATION_ERROR,
                    message=f"Collection '{name}' exceeds max size ({_MAX_COLLECTION_BYTES} bytes)",
                    path=path,
                )
            data = json.loads(path.read_text(encoding="utf-8"))
        except GhosttyStylesError:
            raise
        except (OSError, ValueError) as exc:
            raise classify_exception(exc, path) from exc
        try:
            return ThemeCollection.from_dict(data)
        except ValueError as exc:
            raise GhosttyStylesError(
                ErrorCode.SERIALIZATION_ERROR,
                message=f"Failed to parse collection '{name}': {exc}",
                path=path,
            ) from exc

    def save(self, collection: ThemeCollection) -> Path:
        """Write via a temp file and ``os.replace``."""
        path = self.path_for(collection.name)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(collection.to_dict(), indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise classify_exception(exc, path) from exc
        return path

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise GhosttyStylesError(
                ErrorCode.COLLECTION_NOT_FOUND,
                message=f"Collection '{name}' does not exist",
                path=path,
            ) from exc
        except OSError as exc:
            raise classify_exception(exc, path) from exc
