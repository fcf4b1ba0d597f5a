"""Two-tier body loading with a single fully-loaded signal."""

import asyncio
import logging

from avatarpicker.catalog.catalog import Catalog
from avatarpicker.core.errors import AvatarError
from avatarpicker.core.events import EventBus, EventType
from avatarpicker.coordination.scene_composer import SceneComposer
from avatarpicker.loaders.asset_loader import AssetLoader

logger = logging.getLogger(__name__)


class LoadingPipeline:
    """Orchestrates loading and composing every body in the catalog.

    Loading order:
    Tier 1 (critical): the default body plus any body flagged preload,
        awaited before the viewport is handed the scene.
    Tier 2 (background): every other body, one task per body in a task
        group; bodies finish in any order.

    outstanding holds every body not yet settled.  fully_loaded is set
    exactly when it empties; a body whose bundle fails still settles
    (into failed) and never appears in the scene.
    """

    def __init__(
        self,
        catalog: Catalog,
        loader: AssetLoader,
        composer: SceneComposer,
        event_bus: EventBus,
    ):
        self.catalog = catalog
        self.loader = loader
        self.composer = composer
        self.event_bus = event_bus

        self.outstanding: set[str] = set(catalog.body_names())
        self.loaded: list[str] = []
        self.failed: list[str] = []
        self.fully_loaded = asyncio.Event()

    @property
    def is_fully_loaded(self) -> bool:
        return self.fully_loaded.is_set()

    def critical_body_names(self) -> list[str]:
        default = self.catalog.settings.default_body_name
        names = []
        if self.catalog.find_body(default) is not None:
            names.append(default)
        else:
            logger.warning("Default body %s is not in the catalog", default)
        for name in self.catalog.preload_body_names():
            if name not in names:
                names.append(name)
        return names

    async def load_critical(self) -> list[str]:
        """Load and compose the critical tier; returns the bodies composed."""
        names = [n for n in self.critical_body_names() if n in self.outstanding]
        logger.info("Loading initial bodies: %s", ", ".join(names) or "<none>")
        results = await asyncio.gather(*(self._load_and_compose(n) for n in names))
        return [name for name, ok in zip(names, results) if ok]

    async def load_background(self) -> None:
        """Load every remaining body; returns once all of them have settled."""
        remaining = [n for n in self.catalog.body_names() if n in self.outstanding]
        if not remaining:
            self._mark_fully_loaded()
            return
        logger.info("Background loading the remaining %d bodies", len(remaining))
        async with asyncio.TaskGroup() as group:
            for name in remaining:
                group.create_task(self._load_and_compose(name))

    async def _load_and_compose(self, body_name: str) -> bool:
        try:
            bundle = await self.loader.load_body_bundle(body_name)
            self.composer.compose_bundle(bundle)
        except AvatarError as e:
            logger.error("Body %s will not be available: %s", body_name, e)
            return self._fail(body_name)
        except Exception:
            # A malformed payload from a collaborator; only this body is lost
            logger.exception("Failed to compose body %s", body_name)
            return self._fail(body_name)

        logger.debug("Loaded all data for %s", body_name)
        self.loaded.append(body_name)
        self.event_bus.publish(EventType.BODY_COMPOSED, name=body_name)
        self._settle(body_name)
        return True

    def _fail(self, body_name: str) -> bool:
        self.failed.append(body_name)
        self._settle(body_name)
        return False

    def _settle(self, body_name: str) -> None:
        self.outstanding.discard(body_name)
        if not self.outstanding:
            self._mark_fully_loaded()

    def _mark_fully_loaded(self) -> None:
        if self.fully_loaded.is_set():
            return
        self.fully_loaded.set()
        logger.info("Rest of data is loaded (%d bodies, %d failed)",
                    len(self.loaded), len(self.failed))
        self.event_bus.publish(EventType.LOADING_COMPLETE, failed=list(self.failed))
