"""Asset loading: sources, progress tracking and the body bundle loader."""

from avatarpicker.loaders.asset_loader import AssetLoader, BodyDependencies
from avatarpicker.loaders.loading_manager import LoadingManager
from avatarpicker.loaders.payload import LoadedAsset, ModelPayload, SkinTextureBundle
from avatarpicker.loaders.sources import (
    AssetSource, GLTFFileSource, TextureFileSource, model_from_gltf,
)

__all__ = [
    "AssetLoader",
    "AssetSource",
    "BodyDependencies",
    "GLTFFileSource",
    "LoadedAsset",
    "LoadingManager",
    "ModelPayload",
    "SkinTextureBundle",
    "TextureFileSource",
    "model_from_gltf",
]
