"""Shared fixtures: an in-memory catalog and fake asset sources."""

import asyncio
import copy

import pytest

from avatarpicker.body.animation import AnimationClip
from avatarpicker.body.skeleton import Bone, Skeleton
from avatarpicker.catalog.catalog import Catalog
from avatarpicker.core.material import Material, Texture
from avatarpicker.core.mesh import MeshInstance
from avatarpicker.core.scene_graph import SceneNode
from avatarpicker.loaders.payload import ModelPayload
from avatarpicker.session import AvatarSession

BONE_NAMES = ("hips", "spine", "chest", "neck", "head")


def build_rigged_model(
    name: str,
    materials=("mesh",),
    bone_offset: float = 0.0,
    clip: bool = True,
) -> ModelPayload:
    """A model with one bone chain and one skinned mesh per material."""
    root = SceneNode(name=name)
    armature = SceneNode(name="armature")
    root.add(armature)

    bones = []
    parent = armature
    for i, bone_name in enumerate(BONE_NAMES):
        bone = Bone(name=bone_name)
        bone.set_position(0.0, 0.1 + bone_offset * (i + 1), 0.0)
        parent.add(bone)
        bones.append(bone)
        parent = bone
    root.update_world_matrix(force=True)
    skeleton = Skeleton(bones)

    for material_name in materials:
        node = SceneNode(name=f"{name}_{material_name}")
        node.mesh = MeshInstance(
            name=node.name,
            material=Material(name=material_name),
            skeleton=skeleton,
        )
        root.add(node)

    animations = [AnimationClip(name="idle", duration=2.0)] if clip else []
    return ModelPayload(scene=root, animations=animations, source=name)


class FakeModelSource:
    """Builds rigged models from the URL; records every request.

    Body URLs (containing "body") get lower/upper/head materials and a
    posed skeleton; item URLs get an unposed skeleton.  URLs in broken
    decode to a payload without a scene.
    """

    def __init__(self, failures=(), no_clip=(), broken=()):
        self.requests: list[str] = []
        self.failures = set(failures)
        self.no_clip = set(no_clip)
        self.broken = set(broken)

    async def load(self, url: str) -> ModelPayload:
        self.requests.append(url)
        await asyncio.sleep(0)
        if url in self.failures:
            raise OSError(f"404 {url}")
        if url in self.broken:
            return ModelPayload(scene=None, source=url)
        stem = url.rsplit("/", 1)[-1].split(".")[0]
        if "body" in url:
            return build_rigged_model(
                stem, materials=("lower", "upper", "head"),
                bone_offset=0.25, clip=url not in self.no_clip,
            )
        return build_rigged_model(stem, materials=("cloth",), clip=False)


class FakeTextureSource:
    def __init__(self, failures=()):
        self.requests: list[str] = []
        self.failures = set(failures)

    async def load(self, url: str) -> Texture:
        self.requests.append(url)
        await asyncio.sleep(0)
        if url in self.failures:
            raise OSError(f"404 {url}")
        return Texture(source=url, image=object())


def _skin(name, inv):
    return {
        "name": name,
        "lower": f"textures/{name}_lower.png",
        "upper": f"textures/{name}_upper.png",
        "head": f"textures/{name}_head.png",
        "inv_data": inv,
    }


CATALOG_DOCUMENT = {
    "bodies": [
        {
            "name": "male_body_1_head_1",
            "filename": "models/male_body_1_head_1.glb",
            "category": "body",
            "items": ["male_shirt_1", "male_pants_1", "male_pants_2"],
            "skins": ["male_skin_1"],
            "inv_data": "inv/male_body_1_head_1",
        },
        {
            "name": "male_body_2_head_1",
            "filename": "models/male_body_2_head_1.glb",
            "category": "body",
            "items": ["male_shirt_1", "male_pants_1"],
            "skins": ["male_skin_1"],
            "inv_data": "inv/male_body_2_head_1",
        },
        {
            "name": "female_body_1_head_1",
            "filename": "models/female_body_1_head_1.glb",
            "category": "body",
            "items": ["female_shirt_1", "female_pants_1"],
            "skins": ["female_skin_1"],
            "inv_data": "inv/female_body_1_head_1",
        },
    ],
    "items": [
        {"name": "male_shirt_1", "filename": "models/male_shirt_1.glb",
         "category": "item", "location": "upper", "inv_data": "inv/male_shirt_1"},
        {"name": "male_pants_1", "filename": "models/male_pants_1.glb",
         "category": "item", "location": "lower", "inv_data": "inv/male_pants_1"},
        {"name": "male_pants_2", "filename": "models/male_pants_2.glb",
         "category": "item", "location": "lower", "inv_data": "inv/male_pants_2"},
        {"name": "female_shirt_1", "filename": "models/female_shirt_1.glb",
         "category": "item", "location": "upper", "inv_data": "inv/female_shirt_1"},
        {"name": "female_pants_1", "filename": "models/female_pants_1.glb",
         "category": "item", "location": "lower", "inv_data": "inv/female_pants_1"},
    ],
    "skins": [
        _skin("male_skin_1", "inv/male_skin_1"),
        _skin("female_skin_1", "inv/female_skin_1"),
    ],
    "settings": {
        "default_sex": "male",
        "default_body_number": "1",
        "default_head_number": "1",
        "default_items": {
            "male": ["male_shirt_1", "male_pants_1"],
            "female": ["female_shirt_1", "female_pants_1"],
        },
        "default_skin": {"male": "male_skin_1", "female": "female_skin_1"},
        "required_locations": ["lower", "upper"],
    },
}


@pytest.fixture
def catalog_document():
    return copy.deepcopy(CATALOG_DOCUMENT)


@pytest.fixture
def catalog(catalog_document):
    return Catalog.load(catalog_document)


@pytest.fixture
def model_source():
    return FakeModelSource()


@pytest.fixture
def texture_source():
    return FakeTextureSource()


@pytest.fixture
def session(catalog, model_source, texture_source):
    """A session with every body loaded and the default state applied."""
    s = AvatarSession(catalog, model_source, texture_source)
    asyncio.run(s.run())
    return s
