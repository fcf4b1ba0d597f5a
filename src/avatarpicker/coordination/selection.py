"""The avatar selection state machine.

State is the AvatarState record plus each composed node's visibility.
Every public operation either applies completely or, for a recoverable
miss (unknown body/item/skin, incomplete skin), logs a warning, reports
it as SELECTION_WARNING and leaves everything unchanged.  When the
outermost operation returns, SELECTION_CHANGED is published so that
completeness and debug observers run before control returns to the caller.
"""

import logging
from contextlib import contextmanager
from typing import Optional

from avatarpicker.constants import SKIN_INV_SLOT, SKIN_SLOTS
from avatarpicker.catalog.catalog import Catalog
from avatarpicker.core.errors import (
    AvatarError, IncompleteSkin, UnknownBody, UnknownItem, UnknownSkin,
)
from avatarpicker.core.events import EventBus, EventType
from avatarpicker.core.material import TextureEncoding
from avatarpicker.core.scene_graph import BodyNode, SkinApplication
from avatarpicker.core.state import AvatarState
from avatarpicker.coordination.visibility import SceneIndex
from avatarpicker.loaders.asset_loader import AssetLoader

logger = logging.getLogger(__name__)


class SelectionController:
    """Mutates the selection while keeping the visibility invariants."""

    def __init__(
        self,
        catalog: Catalog,
        index: SceneIndex,
        loader: AssetLoader,
        event_bus: EventBus,
    ):
        self.catalog = catalog
        self.index = index
        self.loader = loader
        self.event_bus = event_bus

        settings = catalog.settings
        self.state = AvatarState(
            body_number=settings.default_body_number,
            head_number=settings.default_head_number,
        )
        self._depth = 0

    # ── Notification ──

    @contextmanager
    def _mutation(self):
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._notify()

    def _notify(self) -> None:
        body = self.index.visible_body
        self.event_bus.publish(
            EventType.SELECTION_CHANGED,
            body=body.name if body is not None else None,
            items=[item.name for item in self.index.visible_items()],
            skin=self.state.active_skin_name,
        )

    def _warn(self, error: AvatarError) -> bool:
        logger.warning("%s", error)
        self.event_bus.publish(EventType.SELECTION_WARNING, error=error)
        return False

    # ── Body selection ──

    def apply_default_state(self) -> bool:
        """Select the catalog's default sex, body and head, dressed with defaults."""
        settings = self.catalog.settings
        with self._mutation():
            self.state.body_number = settings.default_body_number
            self.state.head_number = settings.default_head_number
            self.state.sex = settings.default_sex
            return self.set_body_by_name(self.state.derive_body_name())

    def set_sex(self, sex: str) -> bool:
        if sex == self.state.sex:
            return True
        with self._mutation():
            self.state.sex = sex
            return self.set_body_by_name(self.state.derive_body_name())

    def set_body_by_number(self, body_number) -> bool:
        with self._mutation():
            self.state.body_number = str(body_number)
            return self.set_body_by_name(self.state.derive_body_name())

    def set_head_number(self, head_number) -> bool:
        with self._mutation():
            self.state.head_number = str(head_number)
            return self.set_body_by_name(self.state.derive_body_name())

    def set_body_by_name(self, body_name: str) -> bool:
        """Show *body_name*, strip every item and re-dress it with the defaults.

        An unknown or not-yet-loaded body leaves no body visible.
        """
        with self._mutation():
            self.index.hide_all_items()
            self.state.visible_item_by_location.clear()

            body = self.index.show_body(body_name)
            self.state.selected_body_name = body_name
            if body is None:
                self.state.active_skin_name = None
                detail = "not loaded yet" if self.catalog.find_body(body_name) else "not in catalog"
                return self._warn(UnknownBody(body_name, detail))

            self.state.active_skin_name = body.skin.skin_name if body.skin else None
            self._apply_default_items()
            return True

    def _apply_default_items(self) -> None:
        settings = self.catalog.settings
        for item_name in settings.items_for(self.state.sex):
            self.set_item_by_name(item_name)
        skin_name = settings.skin_for(self.state.sex)
        if skin_name:
            self.set_skin_by_name(skin_name)

    # ── Items ──

    def set_item_by_name(self, item_name: str) -> bool:
        """Show an item of the selected body, replacing its location's current item."""
        owner = self.state.selected_body_name
        item = self.index.item(owner, item_name) if owner else None
        if item is None:
            return self._warn(UnknownItem(item_name, f"not available for body {owner}"))
        with self._mutation():
            self.index.show_item(item)
            self.state.visible_item_by_location[item.location] = item.name
        return True

    def remove_item_by_name(self, item_name: str) -> bool:
        owner = self.state.selected_body_name
        item = self.index.item(owner, item_name) if owner else None
        if item is None:
            return self._warn(UnknownItem(item_name, f"not available for body {owner}"))
        with self._mutation():
            self.index.hide_item(item)
            if self.state.visible_item_by_location.get(item.location) == item.name:
                del self.state.visible_item_by_location[item.location]
        return True

    def remove_item_by_location(self, location: str) -> bool:
        owner = self.state.selected_body_name
        items = [i for i in self.index.items_of(owner) if i.location == location] if owner else []
        if not items:
            return self._warn(UnknownItem(location, f"no items at this location for body {owner}"))
        with self._mutation():
            for item in items:
                self.index.hide_item(item)
            self.state.visible_item_by_location.pop(location, None)
        return True

    # ── Skins ──

    def set_skin_by_name(self, skin_name: str) -> bool:
        """Apply all three textures of a skin to the selected body, or nothing."""
        if self.catalog.find_skin(skin_name) is None:
            return self._warn(UnknownSkin(skin_name, "not in catalog"))

        bundle = self.loader.skin_bundle(skin_name)
        if bundle is None:
            if self.loader.skin_in_flight(skin_name):
                return self._warn(IncompleteSkin(skin_name, SKIN_SLOTS))
            return self._warn(UnknownSkin(skin_name, "not loaded"))
        if not bundle.is_complete:
            return self._warn(IncompleteSkin(skin_name, bundle.missing_slots()))

        body = self._selected_body()
        if body is None:
            return self._warn(UnknownBody(str(self.state.selected_body_name), "no body to skin"))

        with self._mutation():
            for mesh in body.collect_meshes():
                slot = mesh.material.name
                if slot not in SKIN_SLOTS:
                    continue
                texture = bundle.texture(slot)
                texture.flip_y = False
                texture.encoding = TextureEncoding.SRGB
                mesh.material.map = texture
                if slot == SKIN_INV_SLOT:
                    mesh.material.user_data["inv_data"] = bundle.inv_data
            body.skin = SkinApplication(skin_name=skin_name, inv_data=bundle.inv_data)
            self.state.active_skin_name = skin_name
            self.event_bus.publish(EventType.SKIN_APPLIED, body=body.name, skin=skin_name)
        return True

    def _selected_body(self) -> Optional[BodyNode]:
        name = self.state.selected_body_name
        return self.index.body(name) if name else None
