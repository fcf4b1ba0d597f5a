"""Resolves a body's dependencies and loads them concurrently.

One body bundle = the body model + one model per item + the textures of
every skin not already cached.  All fetches of a bundle are started
before any is awaited, and the bundle fails as soon as any of them does.

Skin textures are shared between bodies.  A skin is claimed in
_skin_tasks before its fetch starts, so two bodies loading at the same
time never fetch the same skin twice.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from avatarpicker.constants import BODY_CATEGORY, ITEM_CATEGORY, SKIN_SLOTS
from avatarpicker.catalog.catalog import BodyRecord, Catalog, ItemRecord, SkinRecord
from avatarpicker.core.errors import AssetLoadError, AvatarError, UnknownBody
from avatarpicker.loaders.loading_manager import LoadingManager
from avatarpicker.loaders.payload import LoadedAsset, SkinTextureBundle
from avatarpicker.loaders.sources import AssetSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BodyDependencies:
    body: BodyRecord
    items: tuple[ItemRecord, ...]
    skins: tuple[SkinRecord, ...]


class AssetLoader:
    """Loads body bundles and owns the skin texture cache."""

    def __init__(
        self,
        catalog: Catalog,
        model_source: AssetSource,
        texture_source: AssetSource,
        loading: Optional[LoadingManager] = None,
    ):
        self.catalog = catalog
        self.model_source = model_source
        self.texture_source = texture_source
        self.loading = loading or LoadingManager()

        self._skin_cache: dict[str, SkinTextureBundle] = {}
        self._skin_tasks: dict[str, asyncio.Future] = {}

    # ── Dependency resolution ──

    def resolve_dependencies(self, body_name: str) -> BodyDependencies:
        body = self.catalog.find_body(body_name)
        if body is None:
            raise UnknownBody(body_name)
        # References were validated when the catalog was built
        items = tuple(self.catalog.find_item(name) for name in body.items)
        skins = tuple(self.catalog.find_skin(name) for name in body.skins)
        return BodyDependencies(body=body, items=items, skins=skins)

    # ── Loading ──

    async def load_body_bundle(self, body_name: str) -> list[LoadedAsset]:
        """Load a body and its items; make sure its skins are cached.

        Returns the body asset first, then the items in catalog order.
        Raises UnknownBody or AssetLoadError; there is no partial result.
        """
        deps = self.resolve_dependencies(body_name)
        logger.debug(
            "Loading bundle %s: %d items, %d skins",
            body_name, len(deps.items), len(deps.skins),
        )

        model_loads = [
            self._load_model(deps.body.name, BODY_CATEGORY, deps.body.filename,
                             "", deps.body.inv_data)
        ]
        for item in deps.items:
            model_loads.append(
                self._load_model(item.name, ITEM_CATEGORY, item.filename,
                                 item.location, item.inv_data)
            )
        skin_loads = [
            task for task in (self._claim_skin(skin) for skin in deps.skins)
            if task is not None
        ]

        results = await asyncio.gather(*model_loads, *skin_loads)
        return list(results[:len(model_loads)])

    async def _load_model(self, name: str, category: str, filename: str,
                          location: str, inv_data: Any) -> LoadedAsset:
        payload = await self._fetch(self.model_source, self.catalog.resolve_path(filename))
        return LoadedAsset(
            name=name, category=category, payload=payload,
            location=location, inv_data=inv_data,
        )

    async def _fetch(self, source: AssetSource, url: str) -> Any:
        try:
            return await self.loading.track(url, source.load(url))
        except AvatarError:
            raise
        except Exception as e:
            raise AssetLoadError(url, str(e)) from e

    # ── Skin cache ──

    def _claim_skin(self, skin: SkinRecord) -> Optional[asyncio.Future]:
        """Return the fetch for *skin*, starting it only if nobody has."""
        if skin.name in self._skin_cache:
            return None
        task = self._skin_tasks.get(skin.name)
        if task is None:
            task = asyncio.ensure_future(self._fetch_skin(skin))
            self._skin_tasks[skin.name] = task
        return task

    async def _fetch_skin(self, skin: SkinRecord) -> SkinTextureBundle:
        sources = skin.texture_sources()
        slots = [slot for slot in SKIN_SLOTS if sources[slot]]
        for slot in SKIN_SLOTS:
            if not sources[slot]:
                logger.warning("Skin %s has no %s texture", skin.name, slot)

        try:
            textures = await asyncio.gather(*(
                self._fetch(self.texture_source, self.catalog.resolve_path(sources[slot]))
                for slot in slots
            ))
        finally:
            # A failed skin may be claimed again by the next body
            self._skin_tasks.pop(skin.name, None)
        bundle = SkinTextureBundle(name=skin.name, inv_data=skin.inv_data)
        for slot, texture in zip(slots, textures):
            setattr(bundle, slot, texture)
        self._skin_cache[skin.name] = bundle
        return bundle

    def skin_bundle(self, name: str) -> Optional[SkinTextureBundle]:
        return self._skin_cache.get(name)

    def skin_in_flight(self, name: str) -> bool:
        task = self._skin_tasks.get(name)
        return task is not None and not task.done()

    @property
    def cached_skin_names(self) -> list[str]:
        return list(self._skin_cache)
