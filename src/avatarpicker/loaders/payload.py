"""Decoded asset payloads passed from the loaders to the composer."""

from dataclasses import dataclass, field
from typing import Any, Optional

from avatarpicker.constants import SKIN_SLOTS
from avatarpicker.body.animation import AnimationClip
from avatarpicker.core.material import Texture
from avatarpicker.core.scene_graph import SceneNode


@dataclass
class ModelPayload:
    """A decoded model: its scene root plus any animation clips.

    The composer never mutates a payload; it clones scene for every
    instance it builds.
    """
    scene: SceneNode
    animations: list[AnimationClip] = field(default_factory=list)
    source: str = ""


@dataclass
class LoadedAsset:
    """Transient result of one model fetch."""
    name: str
    category: str
    payload: ModelPayload
    location: str = ""
    inv_data: Any = None


@dataclass
class SkinTextureBundle:
    """The three textures of a skin.  Cached per skin name, never evicted."""
    name: str
    lower: Optional[Texture] = None
    upper: Optional[Texture] = None
    head: Optional[Texture] = None
    inv_data: Any = None

    def texture(self, slot: str) -> Optional[Texture]:
        return getattr(self, slot)

    def missing_slots(self) -> tuple[str, ...]:
        return tuple(slot for slot in SKIN_SLOTS if self.texture(slot) is None)

    @property
    def is_complete(self) -> bool:
        return not self.missing_slots()
