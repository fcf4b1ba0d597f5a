"""Turns loaded bundles into hidden body and item instances in the scene."""

import logging
from typing import Optional

from avatarpicker.constants import BODY_CATEGORY, ITEM_CATEGORY
from avatarpicker.body.animation import AnimationGroup
from avatarpicker.body.retarget import find_skeleton, retarget_item
from avatarpicker.core.errors import AvatarError, MissingBody, NoAnimation
from avatarpicker.core.scene_graph import BodyNode, ItemNode, Scene
from avatarpicker.coordination.visibility import SceneIndex
from avatarpicker.loaders.payload import LoadedAsset

logger = logging.getLogger(__name__)


class SceneComposer:
    """Composes bundles into the scene graph.

    Scene hierarchy (items sit beside their body, not under it, so that
    hiding a body never changes an item's own visibility flag):
      scene
        ├── male_body_1_head_1   (BodyNode → cloned model)
        ├── male_shirt_1          (ItemNode, body_owner=male_body_1_head_1)
        ├── male_pants_1          (ItemNode, body_owner=male_body_1_head_1)
        ├── female_body_1_head_1
        └── ...

    Every composed node starts hidden; the selection controller decides
    what is shown.
    """

    def __init__(self, scene: Scene, index: SceneIndex):
        self.scene = scene
        self.index = index
        self.animation_groups: dict[str, AnimationGroup] = {}
        self.composition_warnings: list[AvatarError] = []

    def compose_bundle(self, bundle: list[LoadedAsset]) -> list:
        """Compose a body and all of its items.

        Raises MissingBody if the bundle has no body; nothing from that
        bundle is added to the scene then.  If composing an item fails, the
        body and the items composed so far are removed again.
        Returns the new nodes, body first.
        """
        body_asset = next((a for a in bundle if a.category == BODY_CATEGORY), None)
        if body_asset is None:
            names = ", ".join(a.name for a in bundle) or "<empty>"
            raise MissingBody(f"bundle has no body asset ({names})")

        body = self.compose_body(body_asset)
        nodes = [body]
        try:
            for asset in bundle:
                if asset.category == ITEM_CATEGORY:
                    nodes.append(self.compose_item(asset, body))
        except Exception:
            self.discard_body(body.name)
            raise
        return nodes

    def discard_body(self, body_name: str) -> None:
        """Remove a body and every item it owns from the scene and the index."""
        for node in self.index.unregister_body(body_name):
            self.scene.remove(node)
        self.animation_groups.pop(body_name, None)

    def compose_body(self, asset: LoadedAsset) -> BodyNode:
        body = BodyNode(name=asset.name, inv_data=asset.inv_data)
        body.add(asset.payload.scene.clone())
        body.visible = False

        clip = asset.payload.animations[0] if asset.payload.animations else None
        if clip is None:
            logger.warning("There is no animation present for body: %s", asset.name)
            self.composition_warnings.append(NoAnimation(asset.name))
        self.animation_groups[body.name] = AnimationGroup(body, clip)

        self.scene.add(body)
        self.index.register_body(body)
        return body

    def compose_item(self, asset: LoadedAsset, owner: BodyNode) -> ItemNode:
        item = ItemNode(
            name=asset.name,
            location=asset.location,
            body_owner=owner.name,
            inv_data=asset.inv_data,
        )
        item.add(asset.payload.scene.clone())
        item.visible = False

        body_skeleton = find_skeleton(owner)
        if body_skeleton is not None:
            retarget_item(item, body_skeleton)
        else:
            logger.warning("Body %s has no skeleton; %s is not retargeted",
                           owner.name, asset.name)

        group = self.animation_groups.get(owner.name)
        if group is not None:
            group.add(item)

        self.scene.add(item)
        self.index.register_item(item)
        return item

    def animation_group(self, body_name: str) -> Optional[AnimationGroup]:
        return self.animation_groups.get(body_name)

    def update(self, delta: float) -> None:
        for group in self.animation_groups.values():
            group.update(delta)
