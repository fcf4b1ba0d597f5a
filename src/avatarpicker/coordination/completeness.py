"""Decides whether the current selection may proceed."""

from collections.abc import Iterable

from avatarpicker.constants import DEFAULT_REQUIRED_LOCATIONS
from avatarpicker.coordination.visibility import SceneIndex


class CompletenessPolicy:
    """Exactly one visible body plus a visible item at every required location."""

    def __init__(self, required_locations: Iterable[str] = DEFAULT_REQUIRED_LOCATIONS):
        self.required_locations = tuple(required_locations)

    def is_complete(self, index: SceneIndex) -> bool:
        bodies = index.visible_bodies()
        if len(bodies) != 1:
            return False
        owner = bodies[0].name
        return all(
            index.visible_item_at(owner, location) is not None
            for location in self.required_locations
        )

    def is_ready(self, index: SceneIndex, fully_loaded: bool) -> bool:
        """Complete and every catalog body has finished loading."""
        return fully_loaded and self.is_complete(index)

    def missing_locations(self, index: SceneIndex) -> list[str]:
        body = index.visible_body
        if body is None:
            return list(self.required_locations)
        return [
            location for location in self.required_locations
            if index.visible_item_at(body.name, location) is None
        ]
