"""Animation clips and the groups that play them in lockstep.

A body and all of its items share one AnimationGroup, so every member
plays the same clip on the same clock.  The group only owns that clock:
sampling the clip's keyframes onto member bones at `time` is left to the
renderer, which holds the decoded keyframe buffers.
"""

from dataclasses import dataclass
from typing import Optional

from avatarpicker.core.scene_graph import SceneNode


@dataclass(frozen=True)
class AnimationClip:
    """A named clip; keyframe data stays with the decoded model."""
    name: str
    duration: float = 0.0
    source: object = None


class AnimationGroup:
    """Playback clock for one clip shared by a set of member objects.

    Members are the body and its retargeted items; a renderer evaluates
    clip.source at `time` for each of them.
    """

    def __init__(self, root: SceneNode, clip: Optional[AnimationClip] = None):
        self.members: list[SceneNode] = [root]
        self.clip = clip
        self.time: float = 0.0
        self.playing: bool = clip is not None

    def add(self, node: SceneNode) -> None:
        if node not in self.members:
            self.members.append(node)

    def update(self, delta: float) -> None:
        """Advance the clock, wrapping at the clip duration."""
        if not self.playing or self.clip is None:
            return
        self.time += delta
        if self.clip.duration > 0.0:
            self.time %= self.clip.duration
