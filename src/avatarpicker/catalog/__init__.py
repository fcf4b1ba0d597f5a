"""Catalog of bodies, items, skins and default settings."""

from avatarpicker.catalog.catalog import (
    BodyRecord, Catalog, ItemRecord, Settings, SkinRecord,
)

__all__ = ["BodyRecord", "Catalog", "ItemRecord", "Settings", "SkinRecord"]
