"""
Latest-pose holder fed by the localization topic.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Pose:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0
    qw: float = 1.0


class PoseTracker:
    """Keeps only the most recent pose. Updates swap the reference, never mutate."""

    def __init__(self):
        self._pose = Pose()
        self._updated = False

    def update(self, pose: Pose):
        self._pose = pose
        self._updated = True

    def current(self) -> Pose:
        return self._pose

    @property
    def has_pose(self):
        return self._updated
