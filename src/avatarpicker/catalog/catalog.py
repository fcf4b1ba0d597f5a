"""Immutable in-memory index of bodies, items, skins and default settings.

Built once at startup from the catalog document.  Every name is unique
across bodies, items and skins combined, and every body→item and
body→skin reference resolves; otherwise loading fails with ConfigError
before any asset is fetched.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from avatarpicker.constants import (
    BODY_CATEGORY, ITEM_CATEGORY, SKIN_CATEGORY, SKIN_SLOTS,
    DEFAULT_REQUIRED_LOCATIONS, body_name_for,
)
from avatarpicker.core.config_loader import load_catalog_document
from avatarpicker.core.errors import ConfigError

logger = logging.getLogger(__name__)

_REQUIRED_SECTIONS = ("bodies", "items", "skins", "settings")


@dataclass(frozen=True)
class BodyRecord:
    name: str
    filename: str
    items: tuple[str, ...] = ()
    skins: tuple[str, ...] = ()
    inv_data: Any = None
    preload: bool = False
    category: str = BODY_CATEGORY


@dataclass(frozen=True)
class ItemRecord:
    name: str
    filename: str
    location: str
    inv_data: Any = None
    preload: bool = False
    category: str = ITEM_CATEGORY


@dataclass(frozen=True)
class SkinRecord:
    """A skin: one texture source per slot.  An empty source leaves the slot unset."""
    name: str
    lower: str = ""
    upper: str = ""
    head: str = ""
    inv_data: Any = None
    preload: bool = False
    category: str = SKIN_CATEGORY

    def texture_sources(self) -> dict[str, str]:
        return {slot: getattr(self, slot) for slot in SKIN_SLOTS}


@dataclass(frozen=True)
class Settings:
    default_sex: str
    default_body_number: str = "1"
    default_head_number: str = "1"
    default_items: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    default_skin: Mapping[str, str] = field(default_factory=dict)
    required_locations: tuple[str, ...] = DEFAULT_REQUIRED_LOCATIONS

    @property
    def default_body_name(self) -> str:
        return body_name_for(
            self.default_sex, self.default_body_number, self.default_head_number,
        )

    def items_for(self, sex: str) -> tuple[str, ...]:
        return tuple(self.default_items.get(sex, ()))

    def skin_for(self, sex: str) -> Optional[str]:
        return self.default_skin.get(sex)


class Catalog:
    """Name-indexed catalog.  Lookups return None for a missing name."""

    def __init__(
        self,
        bodies: list[BodyRecord],
        items: list[ItemRecord],
        skins: list[SkinRecord],
        settings: Settings,
        base_dir: Optional[Path] = None,
    ):
        self._record_names = [r.name for r in (*bodies, *items, *skins)]
        self._bodies = {b.name: b for b in bodies}
        self._items = {i.name: i for i in items}
        self._skins = {s.name: s for s in skins}
        self.settings = settings
        self.base_dir = base_dir

    # ── Construction ──

    @classmethod
    def load(cls, source: Union[str, Path, Mapping]) -> "Catalog":
        """Build a catalog from a file path or an already-parsed document."""
        base_dir = None
        if isinstance(source, Mapping):
            document = source
        else:
            path = Path(source)
            document = load_catalog_document(path)
            base_dir = path if path.is_dir() else path.parent
        return cls.from_dict(document, base_dir=base_dir)

    @classmethod
    def from_dict(cls, document: Mapping, base_dir: Optional[Path] = None) -> "Catalog":
        for section in _REQUIRED_SECTIONS:
            if section not in document:
                raise ConfigError(f"catalog is missing required section '{section}'")
        for section in ("bodies", "items", "skins"):
            if not isinstance(document[section], list):
                raise ConfigError(f"catalog section '{section}' must be an array")
        if not isinstance(document["settings"], Mapping):
            raise ConfigError("catalog section 'settings' must be an object")

        bodies = [_parse_body(raw) for raw in document["bodies"]]
        items = [_parse_item(raw) for raw in document["items"]]
        skins = [_parse_skin(raw) for raw in document["skins"]]
        settings = _parse_settings(document["settings"])

        catalog = cls(bodies, items, skins, settings, base_dir=base_dir)
        catalog._validate()
        logger.info(
            "Catalog loaded: %d bodies, %d items, %d skins",
            len(bodies), len(items), len(skins),
        )
        return catalog

    def _validate(self) -> None:
        seen: set[str] = set()
        for name in self._record_names:
            if name in seen:
                raise ConfigError(f"duplicate catalog name: {name}")
            seen.add(name)

        for body in self._bodies.values():
            for item_name in body.items:
                if item_name not in self._items:
                    raise ConfigError(
                        f"body {body.name} references unknown item {item_name}"
                    )
            for skin_name in body.skins:
                if skin_name not in self._skins:
                    raise ConfigError(
                        f"body {body.name} references unknown skin {skin_name}"
                    )

        s = self.settings
        if s.default_items and s.default_sex not in s.default_items:
            raise ConfigError(f"no default items for default sex {s.default_sex}")
        if s.default_skin and s.default_sex not in s.default_skin:
            raise ConfigError(f"no default skin for default sex {s.default_sex}")
        for sex, names in s.default_items.items():
            for name in names:
                if name not in self._items:
                    raise ConfigError(f"default item {name} for {sex} is not in the catalog")
        for sex, name in s.default_skin.items():
            if name not in self._skins:
                raise ConfigError(f"default skin {name} for {sex} is not in the catalog")

        locations = self.locations()
        for location in s.required_locations:
            if location not in locations:
                logger.warning("Required location %s has no items in the catalog", location)

    # ── Lookups ──

    def find_body(self, name: str) -> Optional[BodyRecord]:
        return self._bodies.get(name)

    def find_item(self, name: str) -> Optional[ItemRecord]:
        return self._items.get(name)

    def find_skin(self, name: str) -> Optional[SkinRecord]:
        return self._skins.get(name)

    @property
    def bodies(self) -> list[BodyRecord]:
        return list(self._bodies.values())

    @property
    def items(self) -> list[ItemRecord]:
        return list(self._items.values())

    @property
    def skins(self) -> list[SkinRecord]:
        return list(self._skins.values())

    def body_names(self) -> list[str]:
        return list(self._bodies)

    def locations(self) -> set[str]:
        return {item.location for item in self._items.values()}

    def preload_body_names(self) -> list[str]:
        return [b.name for b in self._bodies.values() if b.preload]

    def resolve_path(self, filename: str) -> str:
        """Resolve a record's relative file reference against the catalog directory."""
        if self.base_dir is None or not filename:
            return filename
        path = Path(filename)
        if path.is_absolute() or "://" in filename:
            return filename
        return str(self.base_dir / path)


# ── Document parsing ─────────────────────────────────────────────────

def _require(raw: Mapping, key: str, kind: str) -> Any:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{kind} record must be an object, got {type(raw).__name__}")
    if key not in raw or raw[key] in (None, ""):
        label = raw.get("name", "<unnamed>")
        raise ConfigError(f"{kind} record {label} is missing '{key}'")
    return raw[key]


def _inv_data(raw: Mapping) -> Any:
    if "inv_data" in raw:
        return raw["inv_data"]
    return raw.get("invData")


def _name_list(raw: Mapping, key: str, kind: str) -> tuple[str, ...]:
    value = raw.get(key, [])
    if not isinstance(value, list):
        raise ConfigError(f"{kind} record {raw.get('name')} field '{key}' must be an array")
    return tuple(str(v) for v in value)


def _parse_body(raw: Mapping) -> BodyRecord:
    name = str(_require(raw, "name", "body"))
    category = raw.get("category", BODY_CATEGORY)
    if category != BODY_CATEGORY:
        raise ConfigError(f"body {name} has category {category!r}")
    return BodyRecord(
        name=name,
        filename=str(_require(raw, "filename", "body")),
        items=_name_list(raw, "items", "body"),
        skins=_name_list(raw, "skins", "body"),
        inv_data=_inv_data(raw),
        preload=bool(raw.get("preload", False)),
    )


def _parse_item(raw: Mapping) -> ItemRecord:
    name = str(_require(raw, "name", "item"))
    category = raw.get("category", ITEM_CATEGORY)
    if category != ITEM_CATEGORY:
        raise ConfigError(f"item {name} has category {category!r}")
    return ItemRecord(
        name=name,
        filename=str(_require(raw, "filename", "item")),
        location=str(_require(raw, "location", "item")),
        inv_data=_inv_data(raw),
        preload=bool(raw.get("preload", False)),
    )


def _parse_skin(raw: Mapping) -> SkinRecord:
    name = str(_require(raw, "name", "skin"))
    return SkinRecord(
        name=name,
        inv_data=_inv_data(raw),
        preload=bool(raw.get("preload", False)),
        **{slot: str(raw.get(slot) or "") for slot in SKIN_SLOTS},
    )


def _parse_settings(raw: Mapping) -> Settings:
    default_items = raw.get("default_items", {})
    default_skin = raw.get("default_skin", {})
    if not isinstance(default_items, Mapping) or not isinstance(default_skin, Mapping):
        raise ConfigError("settings default_items and default_skin must be objects")

    for sex, names in default_items.items():
        if not isinstance(names, list):
            raise ConfigError(f"settings default_items for {sex} must be an array")

    required = raw.get("required_locations", list(DEFAULT_REQUIRED_LOCATIONS))
    if not isinstance(required, list):
        raise ConfigError("settings required_locations must be an array")

    return Settings(
        default_sex=str(_require(raw, "default_sex", "settings")),
        default_body_number=str(raw.get("default_body_number", "1")),
        default_head_number=str(raw.get("default_head_number", "1")),
        default_items={
            str(sex): tuple(str(n) for n in names)
            for sex, names in default_items.items()
        },
        default_skin={str(sex): str(name) for sex, name in default_skin.items()},
        required_locations=tuple(str(loc) for loc in required),
    )
