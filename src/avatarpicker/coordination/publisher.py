"""Serializes the visible parts' inventory data for provisioning."""

import json
import logging

from avatarpicker.core.scene_graph import BodyNode, ItemNode, Scene

logger = logging.getLogger(__name__)


class InventoryPublisher:
    """Walks the scene and collects inventory data of everything visible.

    Order: the visible body, its applied skin (if any), then visible items
    in composition order.  Stable for a fixed selection.
    """

    def __init__(self, scene: Scene):
        self.scene = scene

    def publish(self) -> list:
        bodies: list = []
        items: list = []
        for node in self.scene.children:
            if not node.visible:
                continue
            if isinstance(node, BodyNode):
                bodies.append(node.inv_data)
                if node.skin is not None:
                    bodies.append(node.skin.inv_data)
            elif isinstance(node, ItemNode):
                items.append(node.inv_data)
        return bodies + items

    def publish_json(self) -> str:
        json_data = json.dumps(self.publish())
        logger.info("JSON data representing the selected items: %s", json_data)
        return json_data
