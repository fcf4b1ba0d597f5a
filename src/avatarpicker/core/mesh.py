"""Mesh instances attached to scene nodes (no GL dependencies)."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from avatarpicker.core.material import Material

if TYPE_CHECKING:
    from avatarpicker.body.skeleton import Skeleton


@dataclass
class MeshInstance:
    """A mesh with material, linking geometry to rendering properties.

    Geometry buffers stay with the renderer; the engine only tracks the
    material slot and, for rigged meshes, the skeleton driving it.
    """
    name: str
    material: Material = field(default_factory=Material)
    visible: bool = True
    skeleton: Optional["Skeleton"] = None
    # Renderer-side handle (decoded buffers, GL objects); shared across clones
    geometry: object = None

    @property
    def is_skinned(self) -> bool:
        return self.skeleton is not None
