"""Mutable avatar selection state."""

from dataclasses import dataclass, field
from typing import Optional

from avatarpicker.constants import body_name_for


@dataclass
class AvatarState:
    """The current avatar configuration.

    selected_body_name follows sex/body_number/head_number through
    derive_body_name(); visible_item_by_location mirrors which owned item
    is shown at each location.
    """
    sex: str = ""
    body_number: str = "1"
    head_number: str = "1"
    selected_body_name: Optional[str] = None
    visible_item_by_location: dict[str, str] = field(default_factory=dict)
    active_skin_name: Optional[str] = None

    def derive_body_name(self) -> str:
        return body_name_for(self.sex, self.body_number, self.head_number)

    def snapshot(self) -> dict:
        return {
            "sex": self.sex,
            "body_number": self.body_number,
            "head_number": self.head_number,
            "selected_body_name": self.selected_body_name,
            "visible_item_by_location": dict(self.visible_item_by_location),
            "active_skin_name": self.active_skin_name,
        }
