#!/usr/bin/env python3
"""
BELLOWS_ANIMATION.PY - Auto-oscillate demo clock

The clock lives outside the geometry engine: it only advances a phase
and turns it into fresh DeformationState values. The engine is re-solved
from scratch for every state it produces.

Contains:
- OscillationClock: monotonically advancing phase
- oscillate_state: deformation for a given phase
- animation_states: finite state sequence for frame export
"""

import math
from dataclasses import replace
from typing import Iterator

from bellows_models import DeformationState
from joint_catalog import JointConfig


# Oscillation amplitudes
AXIAL_AMPLITUDE = 40.0      # %
LATERAL_AMPLITUDE = 60.0    # %, one-sided
ANGULAR_AMPLITUDE = 15.0    # degrees


class OscillationClock:
    """Phase accumulator advanced once per display refresh."""

    def __init__(self, speed: float = 0.03):
        self.speed = speed
        self.phase = 0.0

    def tick(self) -> float:
        self.phase += self.speed
        return self.phase

    def reset(self):
        self.phase = 0.0


def oscillate_state(phase: float, base: DeformationState,
                    joint: JointConfig) -> DeformationState:
    """Sine-wave deformation for the motions the joint allows.

    Pressure and rendering mode are carried over from `base`.
    """
    allowed = joint.allowed_deformation
    wave = math.sin(phase)
    return replace(
        base,
        axial=wave * AXIAL_AMPLITUDE if allowed.axial else 0.0,
        lateral=abs(wave) * LATERAL_AMPLITUDE if allowed.lateral else 0.0,
        angular=wave * ANGULAR_AMPLITUDE if allowed.angular else 0.0,
    )


def animation_states(joint: JointConfig, base: DeformationState, frames: int,
                     speed: float = 0.03) -> Iterator[DeformationState]:
    """Yield `frames` consecutive states, starting from phase 0."""
    clock = OscillationClock(speed)
    phase = clock.phase
    for _ in range(frames):
        yield oscillate_state(phase, base, joint)
        phase = clock.tick()
