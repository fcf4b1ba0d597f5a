"""Name indices over composed nodes and the visibility flips on them.

All visibility changes go through SceneIndex so the node flags and the
indices never disagree:
  - at most one body node is visible
  - at most one item is visible per (body_owner, location)
"""

import logging
from typing import Optional

from avatarpicker.core.scene_graph import BodyNode, ItemNode

logger = logging.getLogger(__name__)


class SceneIndex:
    """Body and item lookup tables maintained as nodes are composed."""

    def __init__(self):
        self._bodies: dict[str, BodyNode] = {}
        self._items: dict[tuple[str, str], ItemNode] = {}        # (owner, name)
        self._items_by_owner: dict[str, list[ItemNode]] = {}
        self._item_order: list[ItemNode] = []
        self._visible_body: Optional[BodyNode] = None
        self._visible_items: dict[tuple[str, str], ItemNode] = {}  # (owner, location)

    # ── Registration ──

    def register_body(self, body: BodyNode) -> None:
        if body.name in self._bodies:
            logger.warning("Body %s composed twice; keeping the newest", body.name)
        self._bodies[body.name] = body
        if body.visible:
            self.show_body(body.name)

    def register_item(self, item: ItemNode) -> None:
        key = (item.body_owner, item.name)
        if key in self._items:
            logger.warning("Item %s composed twice for %s; keeping the newest",
                           item.name, item.body_owner)
            self._items_by_owner[item.body_owner].remove(self._items[key])
            self._item_order.remove(self._items[key])
        self._items[key] = item
        self._items_by_owner.setdefault(item.body_owner, []).append(item)
        self._item_order.append(item)
        if item.visible:
            self.show_item(item)

    def unregister_body(self, name: str) -> list:
        """Drop a body and its items from every index; returns the dropped nodes."""
        body = self._bodies.pop(name, None)
        if body is None:
            return []
        if self._visible_body is body:
            self._visible_body = None
        items = self._items_by_owner.pop(name, [])
        for item in items:
            del self._items[(name, item.name)]
            self._item_order.remove(item)
            key = (name, item.location)
            if self._visible_items.get(key) is item:
                del self._visible_items[key]
        return [body, *items]

    # ── Lookups ──

    def body(self, name: str) -> Optional[BodyNode]:
        return self._bodies.get(name)

    def item(self, owner: str, name: str) -> Optional[ItemNode]:
        return self._items.get((owner, name))

    def items_of(self, owner: str) -> list[ItemNode]:
        return list(self._items_by_owner.get(owner, []))

    def body_names(self) -> list[str]:
        return list(self._bodies)

    def has_body(self, name: str) -> bool:
        return name in self._bodies

    @property
    def visible_body(self) -> Optional[BodyNode]:
        return self._visible_body

    def visible_bodies(self) -> list[BodyNode]:
        return [b for b in self._bodies.values() if b.visible]

    def visible_items(self) -> list[ItemNode]:
        """Visible items in composition order."""
        return [i for i in self._item_order if i.visible]

    def visible_item_at(self, owner: str, location: str) -> Optional[ItemNode]:
        return self._visible_items.get((owner, location))

    # ── Visibility ──

    def show_body(self, name: str) -> Optional[BodyNode]:
        """Show body *name* and hide every other body.

        Returns the shown body, or None (no body visible) if *name* is unknown.
        """
        target = self._bodies.get(name)
        for body in self._bodies.values():
            body.visible = body is target
        self._visible_body = target
        return target

    def show_item(self, item: ItemNode) -> None:
        """Show *item*, hiding whatever its owner shows at the same location."""
        key = (item.body_owner, item.location)
        current = self._visible_items.get(key)
        if current is not None and current is not item:
            current.visible = False
        item.visible = True
        self._visible_items[key] = item

    def hide_item(self, item: ItemNode) -> bool:
        """Hide *item*; returns whether it was visible."""
        was_visible = item.visible
        item.visible = False
        key = (item.body_owner, item.location)
        if self._visible_items.get(key) is item:
            del self._visible_items[key]
        return was_visible

    def hide_all_items(self) -> None:
        for item in self._item_order:
            item.visible = False
        self._visible_items.clear()
