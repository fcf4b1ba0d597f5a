"""Scene graph with hierarchical transforms, mirroring Three.js group structure."""

import copy
from dataclasses import dataclass, replace
from typing import Callable, Optional

from avatarpicker.core.math_utils import (
    Mat4, Vec3, Quat,
    mat4_identity, mat4_compose, quat_identity, vec3,
)
from avatarpicker.core.mesh import MeshInstance


class SceneNode:
    """A node in the scene graph hierarchy.

    Mirrors Three.js Object3D: position, quaternion, scale → local matrix.
    World matrix = parent.world_matrix @ local_matrix.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self.parent: Optional["SceneNode"] = None
        self.children: list["SceneNode"] = []

        # Transform
        self.position: Vec3 = vec3()
        self.quaternion: Quat = quat_identity()
        self.scale: Vec3 = vec3(1, 1, 1)

        # Matrices
        self.local_matrix: Mat4 = mat4_identity()
        self.world_matrix: Mat4 = mat4_identity()

        self.visible: bool = True

        # Optional mesh attached to this node
        self.mesh: Optional[MeshInstance] = None

        self._matrix_dirty: bool = True

    def add(self, child: "SceneNode") -> "SceneNode":
        """Add a child node. Removes from previous parent if any."""
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self.children.append(child)
        child._matrix_dirty = True
        return self

    def remove(self, child: "SceneNode") -> "SceneNode":
        if child in self.children:
            self.children.remove(child)
            child.parent = None
        return self

    def set_position(self, x: float, y: float, z: float) -> "SceneNode":
        self.position = vec3(x, y, z)
        self._matrix_dirty = True
        return self

    def set_quaternion(self, q: Quat) -> "SceneNode":
        self.quaternion = q.copy()
        self._matrix_dirty = True
        return self

    def set_scale(self, x: float, y: float, z: float) -> "SceneNode":
        self.scale = vec3(x, y, z)
        self._matrix_dirty = True
        return self

    def update_local_matrix(self) -> None:
        """Recompute local matrix from position, quaternion, scale."""
        self.local_matrix = mat4_compose(self.position, self.quaternion, self.scale)
        self._matrix_dirty = False

    def update_world_matrix(self, force: bool = False) -> None:
        """Recursively update world matrices for this node and all descendants."""
        if self._matrix_dirty or force:
            self.update_local_matrix()

        if self.parent is not None:
            self.world_matrix = self.parent.world_matrix @ self.local_matrix
        else:
            self.world_matrix = self.local_matrix.copy()

        for child in self.children:
            child.update_world_matrix(force=force)

    def refresh_world_matrix(self) -> Mat4:
        """Recompute the world matrix along the ancestor chain only.

        Used for bones, whose descendants do not need updating.
        """
        chain = []
        node: Optional[SceneNode] = self
        while node is not None:
            chain.append(node)
            node = node.parent

        world = mat4_identity()
        for node in reversed(chain):
            if node._matrix_dirty:
                node.update_local_matrix()
            world = world @ node.local_matrix
            node.world_matrix = world
        return self.world_matrix

    def traverse(self, callback: Callable[["SceneNode"], None]) -> None:
        """Visit this node and all descendants depth-first."""
        callback(self)
        for child in self.children:
            child.traverse(callback)

    def find(self, name: str) -> Optional["SceneNode"]:
        """Find first descendant with given name."""
        if self.name == name:
            return self
        for child in self.children:
            found = child.find(name)
            if found is not None:
                return found
        return None

    def mark_dirty(self) -> None:
        """Mark this node and all descendants as needing matrix update."""
        self._matrix_dirty = True
        for child in self.children:
            child.mark_dirty()

    def collect_meshes(self) -> list[MeshInstance]:
        """Return every mesh in this subtree, in traversal order."""
        result = []

        def _collect(node: SceneNode):
            if node.mesh is not None:
                result.append(node.mesh)

        self.traverse(_collect)
        return result

    def clone(self) -> "SceneNode":
        """Deep-copy this subtree.

        Transforms, meshes and materials are copied so the clone shares no
        mutable state with the source.  Skinned meshes are rebound to the
        cloned bones (SkeletonUtils.clone semantics); bones that live
        outside the cloned subtree stay shared.
        """
        mapping: dict[int, SceneNode] = {}
        root = self._clone_tree(mapping)

        def _rebind(node: SceneNode):
            if node.mesh is not None and node.mesh.skeleton is not None:
                node.mesh.skeleton = node.mesh.skeleton.rebound(mapping)

        root.traverse(_rebind)
        return root

    def _clone_tree(self, mapping: dict[int, "SceneNode"]) -> "SceneNode":
        node = copy.copy(self)
        node.parent = None
        node.children = []
        node.position = self.position.copy()
        node.quaternion = self.quaternion.copy()
        node.scale = self.scale.copy()
        node.local_matrix = self.local_matrix.copy()
        node.world_matrix = self.world_matrix.copy()
        if self.mesh is not None:
            node.mesh = replace(self.mesh, material=self.mesh.material.clone())
        mapping[id(self)] = node
        for child in self.children:
            node.add(child._clone_tree(mapping))
        return node


class Scene(SceneNode):
    """Root scene node."""

    def __init__(self):
        super().__init__(name="scene")

    def update(self) -> None:
        """Update all world matrices in the scene."""
        self.update_world_matrix(force=False)


# ── Composed avatar parts ────────────────────────────────────────────

@dataclass(frozen=True)
class SkinApplication:
    """The skin currently applied to a body."""
    skin_name: str
    inv_data: object


class BodyNode(SceneNode):
    """A composed body instance; its model is the single child."""

    def __init__(self, name: str, inv_data: object = None):
        super().__init__(name=name)
        self.inv_data = inv_data
        self.skin: Optional[SkinApplication] = None


class ItemNode(SceneNode):
    """A composed item instance, owned by exactly one body."""

    def __init__(self, name: str, location: str, body_owner: str,
                 inv_data: object = None):
        super().__init__(name=name)
        self.location = location
        self.body_owner = body_owner
        self.inv_data = inv_data
