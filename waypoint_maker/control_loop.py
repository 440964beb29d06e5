"""
Fixed-rate loop: drain inbound poses / joystick samples, publish velocity,
then give the recorder its per-tick check.

Everything runs on one thread. Producers only append to the inboxes.
"""

import time
from collections import deque

from waypoint_maker.capture_trigger import InvalidInputError, VelocityCommand


class ControlLoop:
    def __init__(self, tracker, trigger, recorder, velocity_sink, logger,
                 period=0.1, queue_depth=10):
        if period <= 0:
            raise ValueError(f'period must be positive, got {period}')

        self.tracker = tracker
        self.trigger = trigger
        self.recorder = recorder
        self.velocity_sink = velocity_sink
        self.logger = logger
        self.period = period

        # Keep-last inboxes, oldest entries fall off when full
        self.pose_inbox = deque(maxlen=queue_depth)
        self.input_inbox = deque(maxlen=queue_depth)

        # State
        self.velocity = VelocityCommand()
        self.capture_pending = False
        self.ticks = 0

    def push_pose(self, pose):
        self.pose_inbox.append(pose)

    def push_input(self, sample):
        self.input_inbox.append(sample)

    def drain(self):
        while self.pose_inbox:
            self.tracker.update(self.pose_inbox.popleft())

        while self.input_inbox:
            sample = self.input_inbox.popleft()
            try:
                output = self.trigger.process(sample)
            except InvalidInputError as e:
                self.logger.warning(f'Skipping controller sample: {e}')
                continue

            self.velocity = output.velocity
            if output.capture_requested:
                self.capture_pending = True

    def tick(self):
        self.drain()
        self.velocity_sink(self.velocity)

        # One attempt per request, a failed write waits for the next press
        self.recorder.on_tick(self.capture_pending)
        self.capture_pending = False

        self.ticks += 1

    def spin(self, ok, sleep=time.sleep, clock=time.monotonic):
        """Blocking fixed-cadence loop. `ok()` is checked once per cycle."""
        while ok():
            started = clock()
            self.tick()
            remaining = self.period - (clock() - started)
            if remaining > 0:
                sleep(remaining)
