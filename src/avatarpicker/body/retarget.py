"""Skeletal retargeting of items onto their owning body.

Items are authored against a reference body rig.  Each item bone takes
the position, rotation and scale of the body bone at the same index,
then the item skeleton's skinning matrices are recomputed.

Asset-pipeline contract: item and body skeletons must list their bones
in the same order.  Bone names are not compared at runtime.
"""

import logging
from typing import Optional

from avatarpicker.body.skeleton import Skeleton
from avatarpicker.core.scene_graph import SceneNode

logger = logging.getLogger(__name__)


def find_skeleton(root: SceneNode) -> Optional[Skeleton]:
    """Return the skeleton of the last skinned mesh under *root*."""
    found: list[Skeleton] = []

    def _visit(node: SceneNode):
        if node.mesh is not None and node.mesh.skeleton is not None:
            found.append(node.mesh.skeleton)

    root.traverse(_visit)
    return found[-1] if found else None


def copy_bone_transforms(target: Skeleton, source: Skeleton) -> int:
    """Copy per-bone TRS from *source* onto *target* by index.

    Returns the number of bones copied.
    """
    if len(target) != len(source):
        logger.warning(
            "Skeleton size mismatch (%d item bones, %d body bones); "
            "copying the first %d",
            len(target), len(source), min(len(target), len(source)),
        )
    count = 0
    for bone, body_bone in zip(target.bones, source.bones):
        bone.position = body_bone.position.copy()
        bone.quaternion = body_bone.quaternion.copy()
        bone.scale = body_bone.scale.copy()
        bone.mark_dirty()
        count += 1
    target.update()
    return count


def retarget_item(item_root: SceneNode, body_skeleton: Skeleton) -> int:
    """Retarget every skinned mesh under *item_root* onto *body_skeleton*.

    Returns how many skeletons were retargeted.
    """
    retargeted = 0

    def _visit(node: SceneNode):
        nonlocal retargeted
        if node.mesh is not None and node.mesh.skeleton is not None:
            copy_bone_transforms(node.mesh.skeleton, body_skeleton)
            retargeted += 1

    item_root.traverse(_visit)
    return retargeted
