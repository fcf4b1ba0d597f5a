"""Material and texture definitions for composed meshes."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional


class TextureEncoding(Enum):
    LINEAR = auto()
    SRGB = auto()


@dataclass
class Texture:
    """A decoded texture image.

    image holds whatever the texture source produced (a PIL image for
    file-backed sources); the engine never inspects pixels.
    """
    source: str
    image: Any = None
    flip_y: bool = True
    encoding: TextureEncoding = TextureEncoding.LINEAR


@dataclass
class Material:
    """Rendering material properties.

    name identifies the material slot a skin texture is applied to
    ("lower", "upper", "head").  user_data carries engine metadata
    such as the active skin's inventory data.
    """
    name: str = ""
    color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    opacity: float = 1.0
    map: Optional[Texture] = None
    user_data: dict[str, Any] = field(default_factory=dict)

    def clone(self) -> "Material":
        return Material(
            name=self.name,
            color=self.color,
            opacity=self.opacity,
            map=self.map,
            user_data=dict(self.user_data),
        )

