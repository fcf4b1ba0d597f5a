"""Bones and skeletons for rigged (skinned) meshes."""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from avatarpicker.core.math_utils import mat4_inverse
from avatarpicker.core.scene_graph import SceneNode


class Bone(SceneNode):
    """A joint in a skeleton hierarchy."""


class Skeleton:
    """An ordered list of bones driving a skinned mesh.

    bone_inverses hold the inverse world matrix of every bone in the bind
    pose.  update() recomputes bone_matrices, the per-bone skinning
    matrices a renderer uploads.
    """

    def __init__(self, bones: list[SceneNode],
                 bone_inverses: Optional[list[NDArray[np.float64]]] = None):
        self.bones = list(bones)
        if bone_inverses is None:
            self.bone_inverses: list[NDArray[np.float64]] = []
            self.calculate_inverses()
        else:
            if len(bone_inverses) != len(self.bones):
                raise ValueError(
                    f"bone_inverses has {len(bone_inverses)} entries "
                    f"for {len(self.bones)} bones"
                )
            self.bone_inverses = [m.copy() for m in bone_inverses]
        self.bone_matrices = np.tile(np.eye(4), (len(self.bones), 1, 1))

    def __len__(self) -> int:
        return len(self.bones)

    def calculate_inverses(self) -> None:
        """Capture the current pose as the bind pose."""
        self.bone_inverses = [
            mat4_inverse(bone.refresh_world_matrix()) for bone in self.bones
        ]

    def update(self) -> None:
        """Recompute skinning matrices from the current bone transforms."""
        for i, bone in enumerate(self.bones):
            self.bone_matrices[i] = bone.refresh_world_matrix() @ self.bone_inverses[i]

    def rebound(self, mapping: dict[int, SceneNode]) -> "Skeleton":
        """Return a skeleton over the cloned bones in *mapping*."""
        bones = [mapping.get(id(bone), bone) for bone in self.bones]
        return Skeleton(bones, self.bone_inverses)
