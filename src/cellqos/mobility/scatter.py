"""
Terminal Scatter

Draws the initial positions of user terminals uniformly over the city
area and attaches the shared bounded random walk descriptor.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from ..core.config import TERMINAL_HEIGHT
from ..network.topology import Position

logger = logging.getLogger(__name__)


class RandomWalkMode(Enum):
    """When a random walk leg ends and a new heading is drawn"""
    DISTANCE = "distance"
    TIME = "time"


@dataclass(frozen=True)
class RandomWalkDescriptor:
    """2D random walk confined to a rectangle."""
    bounds: Tuple[float, float, float, float]  # (min_x, max_x, min_y, max_y)
    min_speed: float = 0.5  # m/s
    max_speed: float = 2.0  # m/s
    mode: RandomWalkMode = RandomWalkMode.DISTANCE
    leg_distance: float = 1.0  # meters, DISTANCE mode
    leg_time: float = 1.0  # seconds, TIME mode

    def __post_init__(self):
        if self.leg_distance <= 0 or self.leg_time <= 0:
            raise ValueError("Random walk legs must have positive distance and time")

    def contains(self, x: float, y: float) -> bool:
        min_x, max_x, min_y, max_y = self.bounds
        return min_x <= x <= max_x and min_y <= y <= max_y


@dataclass(frozen=True)
class Terminal:
    """User terminal with its initial position and mobility description."""
    terminal_id: int
    initial_position: Position
    mobility: RandomWalkDescriptor


def scatter_terminals(num_terminals: int, area_size: float,
                      rng: Optional[np.random.Generator] = None,
                      min_speed: float = 0.5, max_speed: float = 2.0,
                      height: float = TERMINAL_HEIGHT) -> List[Terminal]:
    """
    Draw terminal positions uniformly over [-A/2, A/2] on both axes.

    Terminals are independent and may overlap. All of them share one
    random walk descriptor bounded by the same square.

    Args:
        num_terminals: Number of terminals (M)
        area_size: Side of the square area in meters (A)
        rng: Random generator; a fresh unseeded one is used when omitted
        min_speed: Lower bound of the walk speed (m/s)
        max_speed: Upper bound of the walk speed (m/s)
        height: Terminal height in meters

    Returns:
        List of terminals ordered by index

    Raises:
        ValueError: On a non-positive area, negative count or bad speed range
    """
    if area_size <= 0:
        raise ValueError(f"Area size must be positive, got {area_size}")
    if num_terminals < 0:
        raise ValueError(f"Number of UEs cannot be negative, got {num_terminals}")
    if not 0 <= min_speed <= max_speed:
        raise ValueError(f"Invalid speed range [{min_speed}, {max_speed}]")

    if rng is None:
        rng = np.random.default_rng()

    half = area_size / 2.0
    mobility = RandomWalkDescriptor(
        bounds=(-half, half, -half, half),
        min_speed=min_speed,
        max_speed=max_speed
    )

    coordinates = rng.uniform(-half, half, size=(num_terminals, 2))
    terminals = [
        Terminal(terminal_id=i, initial_position=Position(float(x), float(y), height), mobility=mobility)
        for i, (x, y) in enumerate(coordinates)
    ]

    for terminal in terminals:
        logger.debug(f"UE {terminal.terminal_id} at ({terminal.initial_position.x:.2f}, "
                     f"{terminal.initial_position.y:.2f}, {height:.1f})")

    logger.info(f"Scattered {num_terminals} UEs over {area_size}m x {area_size}m, "
                f"speed {min_speed}-{max_speed} m/s")
    return terminals
