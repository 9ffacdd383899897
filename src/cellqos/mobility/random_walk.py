"""
Bounded Random Walk Mobility

Moves a terminal according to its RandomWalkDescriptor: each leg has a
uniformly drawn heading and speed and lasts a fixed distance or time.
Terminals reflect off the rectangle bounds.
"""

import math
import logging
from typing import Tuple

import numpy as np

from ..network.topology import Position
from .scatter import RandomWalkDescriptor, RandomWalkMode, Terminal

logger = logging.getLogger(__name__)


class RandomWalkModel:
    """Random walk state of a single terminal"""

    def __init__(self, terminal: Terminal, rng: np.random.Generator):
        self.terminal_id = terminal.terminal_id
        self.descriptor: RandomWalkDescriptor = terminal.mobility
        self.rng = rng
        self.x = terminal.initial_position.x
        self.y = terminal.initial_position.y
        self.z = terminal.initial_position.z
        self.speed = 0.0
        self.direction = 0.0
        self.leg_remaining = 0.0
        self.distance_travelled = 0.0
        self.time = 0.0
        self._start_leg()

    def _start_leg(self):
        """Draw a new heading and speed."""
        self.direction = self.rng.uniform(0, 2 * np.pi)
        self.speed = self.rng.uniform(self.descriptor.min_speed, self.descriptor.max_speed)

        if self.descriptor.mode == RandomWalkMode.DISTANCE and self.speed > 0:
            self.leg_remaining = self.descriptor.leg_distance / self.speed
        else:
            self.leg_remaining = self.descriptor.leg_time

    @staticmethod
    def _reflect(value: float, velocity: float, low: float, high: float) -> Tuple[float, float]:
        while value < low or value > high:
            if value < low:
                value = 2 * low - value
            else:
                value = 2 * high - value
            velocity = -velocity
        return value, velocity

    def advance(self, dt: float) -> Position:
        """
        Advance the walk by dt seconds.

        Returns:
            Position after the move
        """
        min_x, max_x, min_y, max_y = self.descriptor.bounds
        self.time += max(dt, 0.0)

        while dt > 0:
            step = min(dt, self.leg_remaining)
            vx = self.speed * math.cos(self.direction)
            vy = self.speed * math.sin(self.direction)

            self.x, vx = self._reflect(self.x + vx * step, vx, min_x, max_x)
            self.y, vy = self._reflect(self.y + vy * step, vy, min_y, max_y)
            self.direction = math.atan2(vy, vx)
            self.distance_travelled += self.speed * step

            dt -= step
            self.leg_remaining -= step
            if self.leg_remaining <= 0:
                self._start_leg()

        return self.position

    def advance_to(self, time: float) -> Position:
        """Advance the walk up to an absolute time; earlier times are a no-op."""
        return self.advance(time - self.time)

    @property
    def position(self) -> Position:
        return Position(self.x, self.y, self.z)
