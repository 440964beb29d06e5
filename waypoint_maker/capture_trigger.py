"""
Joystick sample -> (velocity command, capture request).
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence


class InvalidInputError(ValueError):
    """Controller sample is missing an axis or button we index into."""


@dataclass(frozen=True)
class ControlInput:
    axes: Sequence[float]
    buttons: Sequence[int]


@dataclass(frozen=True)
class VelocityCommand:
    linear: float = 0.0
    angular: float = 0.0


@dataclass(frozen=True)
class TriggerOutput:
    velocity: VelocityCommand
    capture_requested: bool


class CaptureTrigger:
    def __init__(self, linear_axis=3, angular_axis=0, capture_button=2,
                 mapping: Optional[Callable[[ControlInput], VelocityCommand]] = None):
        for name, index in (('linear_axis', linear_axis),
                            ('angular_axis', angular_axis),
                            ('capture_button', capture_button)):
            if index < 0:
                raise ValueError(f'{name} must be >= 0, got {index}')

        self.linear_axis = linear_axis
        self.angular_axis = angular_axis
        self.capture_button = capture_button
        self.mapping = mapping or self.passthrough

    def passthrough(self, sample: ControlInput) -> VelocityCommand:
        """Raw stick values straight through. No deadzone, no smoothing."""
        return VelocityCommand(
            linear=float(sample.axes[self.linear_axis]),
            angular=float(sample.axes[self.angular_axis]),
        )

    def validate(self, sample: ControlInput):
        needed_axes = max(self.linear_axis, self.angular_axis) + 1
        if len(sample.axes) < needed_axes:
            raise InvalidInputError(
                f'expected at least {needed_axes} axes, got {len(sample.axes)}')
        if len(sample.buttons) <= self.capture_button:
            raise InvalidInputError(
                f'expected at least {self.capture_button + 1} buttons, '
                f'got {len(sample.buttons)}')

    def process(self, sample: ControlInput) -> TriggerOutput:
        self.validate(sample)
        # Level-triggered: a held button requests a capture on every sample.
        pressed = sample.buttons[self.capture_button] == 1
        return TriggerOutput(velocity=self.mapping(sample), capture_requested=pressed)
