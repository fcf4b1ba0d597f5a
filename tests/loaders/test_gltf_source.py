"""Tests for decoding glTF documents and image files."""

import asyncio

import numpy as np
import pytest
from PIL import Image
from pygltflib import (
    GLTF2, Accessor, Animation, AnimationSampler, Material as GLTFMaterial,
    Mesh, Node, Primitive, Scene, Skin,
)

from avatarpicker.body.skeleton import Bone
from avatarpicker.core.material import Texture
from avatarpicker.loaders.sources import (
    GLTFFileSource, TextureFileSource, model_from_gltf,
)


def _make_rigged_gltf() -> GLTF2:
    """Root -> hips -> spine joints, plus a skinned two-primitive mesh."""
    return GLTF2(
        scene=0,
        scenes=[Scene(nodes=[0])],
        nodes=[
            Node(name="Armature", children=[1, 3]),
            Node(name="hips", translation=[0.0, 1.0, 0.0], children=[2]),
            Node(name="spine", translation=[0.0, 0.5, 0.0]),
            Node(name="Body", mesh=0, skin=0),
        ],
        skins=[Skin(joints=[1, 2])],
        meshes=[Mesh(name="BodyMesh", primitives=[
            Primitive(material=0), Primitive(material=1),
        ])],
        materials=[GLTFMaterial(name="lower"), GLTFMaterial(name="upper")],
        accessors=[Accessor(count=2, max=[1.5], min=[0.0])],
        animations=[Animation(
            name="idle",
            samplers=[AnimationSampler(input=0, output=0)],
        )],
    )


def test_joints_become_bones():
    payload = model_from_gltf(_make_rigged_gltf(), source="models/body.glb")
    root = payload.scene
    assert root.name == "body"
    assert isinstance(root.find("hips"), Bone)
    assert isinstance(root.find("spine"), Bone)
    assert not isinstance(root.find("Body"), Bone)


def test_rest_pose_world_matrices():
    payload = model_from_gltf(_make_rigged_gltf())
    spine = payload.scene.find("spine")
    np.testing.assert_allclose(spine.world_matrix[:3, 3], [0.0, 1.5, 0.0])


def test_primitives_split_into_material_slots():
    payload = model_from_gltf(_make_rigged_gltf())
    meshes = payload.scene.collect_meshes()
    assert [m.material.name for m in meshes] == ["lower", "upper"]
    assert all(m.is_skinned for m in meshes)
    assert meshes[0].skeleton is meshes[1].skeleton
    assert [b.name for b in meshes[0].skeleton.bones] == ["hips", "spine"]


def test_bind_pose_inverses():
    payload = model_from_gltf(_make_rigged_gltf())
    skeleton = payload.scene.collect_meshes()[0].skeleton
    skeleton.update()
    # At rest every skinning matrix is the identity
    for m in skeleton.bone_matrices:
        np.testing.assert_allclose(m, np.eye(4), atol=1e-12)


def test_animation_duration_from_sampler_input():
    payload = model_from_gltf(_make_rigged_gltf())
    assert len(payload.animations) == 1
    clip = payload.animations[0]
    assert clip.name == "idle"
    assert clip.duration == pytest.approx(1.5)


def test_matrix_node_transform():
    matrix = np.eye(4)
    matrix[:3, 3] = [1.0, 2.0, 3.0]
    gltf = GLTF2(
        scenes=[Scene(nodes=[0])],
        nodes=[Node(name="prop", matrix=matrix.T.flatten().tolist())],
    )
    payload = model_from_gltf(gltf)
    prop = payload.scene.find("prop")
    np.testing.assert_allclose(prop.position, [1.0, 2.0, 3.0])
    np.testing.assert_allclose(prop.world_matrix, matrix, atol=1e-12)
    assert payload.animations == []


def test_missing_model_file(tmp_path):
    source = GLTFFileSource(tmp_path)
    with pytest.raises(FileNotFoundError):
        asyncio.run(source.load("models/nope.glb"))


def test_texture_file_source(tmp_path):
    Image.new("RGB", (4, 2), (200, 150, 100)).save(tmp_path / "skin_lower.png")
    source = TextureFileSource(tmp_path)
    texture = asyncio.run(source.load("skin_lower.png"))
    assert isinstance(texture, Texture)
    assert texture.source == "skin_lower.png"
    assert texture.image.size == (4, 2)
    assert texture.flip_y
