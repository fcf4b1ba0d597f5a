"""AvatarSession: one viewer's catalog, scene, selection and loading state.

Wires together the catalog, asset loading, composition, selection,
completeness and publishing.  A UI layer binds its controls to the
public methods here and observes the event bus.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from avatarpicker.catalog.catalog import Catalog
from avatarpicker.core.events import EventBus, EventType
from avatarpicker.core.scene_graph import Scene
from avatarpicker.coordination.completeness import CompletenessPolicy
from avatarpicker.coordination.loading_pipeline import LoadingPipeline
from avatarpicker.coordination.publisher import InventoryPublisher
from avatarpicker.coordination.scene_composer import SceneComposer
from avatarpicker.coordination.selection import SelectionController
from avatarpicker.coordination.visibility import SceneIndex
from avatarpicker.loaders.asset_loader import AssetLoader
from avatarpicker.loaders.loading_manager import LoadingManager
from avatarpicker.loaders.sources import AssetSource, GLTFFileSource, TextureFileSource

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """The viewport side: receives the scene once the initial bodies exist."""

    def initialize(self, scene: Scene) -> None:
        ...


class AvatarSession:
    """Everything one avatar picker instance needs, with no module globals."""

    def __init__(
        self,
        catalog: Catalog,
        model_source: AssetSource,
        texture_source: AssetSource,
        renderer: Optional[Renderer] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.catalog = catalog
        self.renderer = renderer
        self.event_bus = event_bus or EventBus()

        self.scene = Scene()
        self.index = SceneIndex()
        self.loading = LoadingManager(self.event_bus)
        self.loader = AssetLoader(catalog, model_source, texture_source, self.loading)
        self.composer = SceneComposer(self.scene, self.index)
        self.selection = SelectionController(catalog, self.index, self.loader, self.event_bus)
        self.completeness = CompletenessPolicy(catalog.settings.required_locations)
        self.publisher = InventoryPublisher(self.scene)
        self.pipeline = LoadingPipeline(catalog, self.loader, self.composer, self.event_bus)

        self._complete = False
        self._ready = False
        self.event_bus.subscribe(EventType.SELECTION_CHANGED, self._on_selection_changed)
        self.event_bus.subscribe(EventType.LOADING_COMPLETE, self._on_loading_complete)

        self.event_bus.publish(
            EventType.CATALOG_LOADED,
            bodies=len(catalog.bodies), items=len(catalog.items), skins=len(catalog.skins),
        )

    @classmethod
    def from_config(
        cls,
        path: Union[str, Path],
        renderer: Optional[Renderer] = None,
        event_bus: Optional[EventBus] = None,
    ) -> "AvatarSession":
        """Build a session over a catalog file and file-backed asset sources.

        The catalog already resolves record paths against its directory, so
        the sources get no root of their own.
        """
        catalog = Catalog.load(path)
        return cls(
            catalog,
            GLTFFileSource(),
            TextureFileSource(),
            renderer=renderer,
            event_bus=event_bus,
        )

    # ── Startup ──

    async def start(self) -> None:
        """Load the initial bodies, hand the scene to the viewport, apply defaults."""
        await self.pipeline.load_critical()
        if self.renderer is not None:
            self.renderer.initialize(self.scene)
        self.selection.apply_default_state()
        logger.info("Default state set for %s", self.selection.state.selected_body_name)

    async def load_remaining(self) -> None:
        await self.pipeline.load_background()

    async def run(self) -> None:
        """Start, then load everything else in the background tier."""
        await self.start()
        await self.load_remaining()

    async def wait_fully_loaded(self) -> None:
        await self.pipeline.fully_loaded.wait()

    # ── Selection commands ──

    def set_sex(self, sex: str) -> bool:
        return self.selection.set_sex(sex)

    def set_body_by_body_number(self, body_number) -> bool:
        return self.selection.set_body_by_number(body_number)

    def set_body_by_head_number(self, head_number) -> bool:
        return self.selection.set_head_number(head_number)

    def set_body_by_name(self, body_name: str) -> bool:
        return self.selection.set_body_by_name(body_name)

    def set_item_by_name(self, item_name: str) -> bool:
        return self.selection.set_item_by_name(item_name)

    def remove_item_by_name(self, item_name: str) -> bool:
        return self.selection.remove_item_by_name(item_name)

    def remove_item_by_location(self, location: str) -> bool:
        return self.selection.remove_item_by_location(location)

    def set_skin_by_name(self, skin_name: str) -> bool:
        return self.selection.set_skin_by_name(skin_name)

    # ── Observables ──

    @property
    def state(self):
        return self.selection.state

    @property
    def fully_loaded(self) -> bool:
        return self.pipeline.is_fully_loaded

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def is_ready(self) -> bool:
        """Complete and fully loaded: the proceed affordance may be shown."""
        return self._ready

    def _refresh_completeness(self) -> None:
        complete = self.completeness.is_complete(self.index)
        ready = self.completeness.is_ready(self.index, self.fully_loaded)
        changed = (complete, ready) != (self._complete, self._ready)
        self._complete, self._ready = complete, ready
        if changed:
            self.event_bus.publish(
                EventType.COMPLETENESS_CHANGED, complete=complete, ready=ready,
            )

    def _on_selection_changed(self, **data) -> None:
        self._refresh_completeness()
        logger.debug("Selection: body=%s items=%s skin=%s",
                     data.get("body"), data.get("items"), data.get("skin"))

    def _on_loading_complete(self, **data) -> None:
        self._refresh_completeness()

    # ── Output ──

    def publish(self) -> list:
        return self.publisher.publish()

    def publish_inv_data(self) -> str:
        return self.publisher.publish_json()

    def describe(self) -> list[str]:
        """Visible body, skin and items as text lines (debug overlay data)."""
        lines = []
        body = self.index.visible_body
        if body is not None:
            lines.append(f"body_name: {body.name}")
            if body.skin is not None:
                lines.append(f"skin_name: {body.skin.skin_name}")
        for item in self.index.visible_items():
            lines.append(f"item_name: {item.name}")
        return lines

    def update(self, delta: float) -> None:
        """Advance every body's animation clock and refresh world matrices (once per frame)."""
        self.composer.update(delta)
        self.scene.update()
