"""Model and texture sources: the fetch side of asset loading.

A source turns a URL into a decoded payload.  The engine only depends on
the AssetSource protocol; the file-backed sources here decode local
glTF models with pygltflib and images with Pillow, off the event loop.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

import numpy as np
from PIL import Image
from pygltflib import GLTF2

from avatarpicker.body.animation import AnimationClip
from avatarpicker.body.skeleton import Bone, Skeleton
from avatarpicker.core.material import Material, Texture
from avatarpicker.core.math_utils import mat4_decompose, quat, vec3
from avatarpicker.core.mesh import MeshInstance
from avatarpicker.core.scene_graph import SceneNode
from avatarpicker.loaders.payload import ModelPayload

logger = logging.getLogger(__name__)


class AssetSource(Protocol):
    """Anything that can fetch and decode one URL."""

    async def load(self, url: str) -> Any:
        ...


def _resolve(root: Optional[Path], url: str) -> Path:
    path = Path(url)
    if root is not None and not path.is_absolute():
        path = root / path
    return path


class GLTFFileSource:
    """Loads .glb / .gltf files into ModelPayloads."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else None

    async def load(self, url: str) -> ModelPayload:
        return await asyncio.to_thread(self._load_sync, url)

    def _load_sync(self, url: str) -> ModelPayload:
        path = _resolve(self.root, url)
        if not path.exists():
            raise FileNotFoundError(f"model not found: {path}")
        gltf = GLTF2().load(str(path))
        return model_from_gltf(gltf, source=url)


class TextureFileSource:
    """Loads image files into Textures."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else None

    async def load(self, url: str) -> Texture:
        return await asyncio.to_thread(self._load_sync, url)

    def _load_sync(self, url: str) -> Texture:
        path = _resolve(self.root, url)
        with Image.open(path) as img:
            img.load()
            image = img.copy()
        return Texture(source=url, image=image)


# ── glTF → scene graph ───────────────────────────────────────────────

def model_from_gltf(gltf: GLTF2, source: str = "") -> ModelPayload:
    """Build a scene-graph payload from a parsed glTF document.

    Joint nodes become Bones; each skin becomes one Skeleton whose bind
    pose is the document's rest pose.  Meshes with several primitives get
    one child node per primitive so each keeps its own material slot.
    """
    joint_indices = {j for skin in gltf.skins for j in skin.joints}

    nodes: list[SceneNode] = []
    for i, gnode in enumerate(gltf.nodes):
        node_cls = Bone if i in joint_indices else SceneNode
        node = node_cls(name=gnode.name or f"node_{i}")
        _apply_node_transform(node, gnode)
        nodes.append(node)

    for i, gnode in enumerate(gltf.nodes):
        for child_index in gnode.children or []:
            nodes[i].add(nodes[child_index])

    root = SceneNode(name=Path(source).stem if source else "model")
    scene_index = gltf.scene if gltf.scene is not None else 0
    if gltf.scenes:
        for node_index in gltf.scenes[scene_index].nodes or []:
            root.add(nodes[node_index])
    else:
        for node in nodes:
            if node.parent is None:
                root.add(node)
    root.update_world_matrix(force=True)

    skeletons = [
        Skeleton([nodes[j] for j in skin.joints]) for skin in gltf.skins
    ]

    for i, gnode in enumerate(gltf.nodes):
        if gnode.mesh is None:
            continue
        skeleton = skeletons[gnode.skin] if gnode.skin is not None else None
        _attach_mesh(gltf, nodes[i], gltf.meshes[gnode.mesh], skeleton)

    animations = [_make_clip(gltf, anim, i) for i, anim in enumerate(gltf.animations)]
    logger.debug(
        "Decoded %s: %d nodes, %d skins, %d animations",
        source or "model", len(nodes), len(skeletons), len(animations),
    )
    return ModelPayload(scene=root, animations=animations, source=source)


def _apply_node_transform(node: SceneNode, gnode) -> None:
    if gnode.matrix is not None:
        m = np.array(gnode.matrix, dtype=np.float64).reshape(4, 4).T
        node.position, node.quaternion, node.scale = mat4_decompose(m)
        node.mark_dirty()
        return
    if gnode.translation is not None:
        node.position = vec3(*gnode.translation)
    if gnode.rotation is not None:
        node.quaternion = quat(*gnode.rotation)
    if gnode.scale is not None:
        node.scale = vec3(*gnode.scale)
    node.mark_dirty()


def _material_for(gltf: GLTF2, index: Optional[int]) -> Material:
    if index is None or index >= len(gltf.materials):
        return Material()
    return Material(name=gltf.materials[index].name or "")


def _attach_mesh(gltf: GLTF2, node: SceneNode, gmesh, skeleton: Optional[Skeleton]) -> None:
    mesh_name = gmesh.name or node.name
    primitives = gmesh.primitives or []
    if len(primitives) == 1:
        node.mesh = MeshInstance(
            name=mesh_name,
            material=_material_for(gltf, primitives[0].material),
            skeleton=skeleton,
            geometry=primitives[0],
        )
        return
    for p, primitive in enumerate(primitives):
        child = SceneNode(name=f"{mesh_name}_{p}")
        child.mesh = MeshInstance(
            name=child.name,
            material=_material_for(gltf, primitive.material),
            skeleton=skeleton,
            geometry=primitive,
        )
        node.add(child)


def _make_clip(gltf: GLTF2, anim, index: int) -> AnimationClip:
    duration = 0.0
    for sampler in anim.samplers or []:
        accessor = gltf.accessors[sampler.input]
        if accessor.max:
            duration = max(duration, float(accessor.max[0]))
    return AnimationClip(name=anim.name or f"clip_{index}", duration=duration, source=anim)
