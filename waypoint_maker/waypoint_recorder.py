"""
Turns a capture request into a CSV line (x,y,yaw) plus an RViz arrow marker.
"""

import math
import os
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from waypoint_maker.pose_tracker import Pose


ARROW_SCALE = (0.3, 0.1, 0.0)        # length, width, height
ARROW_COLOR = (1.0, 0.0, 0.0, 1.0)   # solid red


def yaw_from_quaternion(qz, qw):
    """Planar yaw. Assumes roll and pitch are zero (qx = qy = 0).

    (qz=1, qw=0) gives +pi.
    """
    return math.atan2(2.0 * qw * qz, 1.0 - 2.0 * qz * qz)


@dataclass(frozen=True)
class Waypoint:
    id: int
    x: float
    y: float
    yaw: float


@dataclass(frozen=True)
class ArrowMarker:
    id: int
    pose: Pose
    frame_id: str = 'map'
    namespace: str = 'waypoints'
    scale: Tuple[float, float, float] = ARROW_SCALE
    color: Tuple[float, float, float, float] = ARROW_COLOR


class WaypointStore:
    """Append-only CSV of x,y,yaw. The id is not written."""

    def __init__(self, path):
        self.path = path

    def append(self, waypoint: Waypoint):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'a') as f:
            f.write(f'{waypoint.x:.6f},{waypoint.y:.6f},{waypoint.yaw:.6f}\n')

    def load(self) -> np.ndarray:
        if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
            return np.empty((0, 3))
        return np.loadtxt(self.path, delimiter=',', ndmin=2)

    def count(self):
        return int(self.load().shape[0])


def resume_first_id(store, logger):
    """First waypoint id when continuing an existing store: one past its last line."""
    try:
        count = store.count()
    except (OSError, ValueError) as e:
        logger.error(f'Could not read {store.path}, ids start at 0: {e}')
        return 0
    logger.info(f'Resuming after {count} stored waypoints')
    return count


class WaypointRecorder:
    def __init__(self, tracker, store, marker_sink, logger,
                 frame_id='map', namespace='waypoints', first_id=0):
        self.tracker = tracker
        self.store = store
        self.marker_sink = marker_sink
        self.logger = logger
        self.frame_id = frame_id
        self.namespace = namespace
        self._next_id = first_id

    @property
    def next_id(self):
        return self._next_id

    def on_tick(self, capture_requested) -> bool:
        """Service a pending capture.

        Returns True once the waypoint is stored and its marker emitted. A
        failed write returns False and leaves the id unconsumed; the caller
        drops the request either way, so the operator has to press again.
        """
        if not capture_requested:
            return False

        if not self.tracker.has_pose:
            self.logger.warning('No pose received yet, capturing the default pose')

        pose = self.tracker.current()
        self.logger.info(f'Current position: x = {pose.x:f}, y = {pose.y:f}')

        waypoint = Waypoint(
            id=self._next_id,
            x=pose.x,
            y=pose.y,
            yaw=yaw_from_quaternion(pose.qz, pose.qw),
        )

        try:
            self.store.append(waypoint)
        except OSError as e:
            self.logger.error(f'Could not write waypoint to {self.store.path}: {e}')
            return False

        self._next_id += 1
        self.logger.info(
            f'📍 Waypoint {waypoint.id} saved: [{waypoint.x:f}, {waypoint.y:f}, {waypoint.yaw:f}]')

        self.marker_sink(ArrowMarker(
            id=waypoint.id,
            pose=pose,
            frame_id=self.frame_id,
            namespace=self.namespace,
        ))
        return True
