"""
Base Station Topology Generation

This module places base stations over a square city area centered at the
origin using a near-square grid that leaves a free margin on every side.
"""

import math
import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from ..core.config import BASE_STATION_HEIGHT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Position:
    """3D position in meters."""
    x: float
    y: float
    z: float = 0.0

    def distance_to(self, other: 'Position') -> float:
        """Calculate 3D distance to another position."""
        return math.sqrt((self.x - other.x)**2 + (self.y - other.y)**2 + (self.z - other.z)**2)


@dataclass(frozen=True)
class BaseStation:
    """Fixed-position radio access point."""
    station_id: int
    position: Position


@dataclass(frozen=True)
class GridLayout:
    """Row/column arrangement of base stations over the area."""
    rows: int
    columns: int
    dx: float  # horizontal spacing (m)
    dy: float  # vertical spacing (m)

    @property
    def capacity(self) -> int:
        return self.rows * self.columns


def compute_grid_layout(num_stations: int, area_size: float) -> GridLayout:
    """
    Compute the grid used to place base stations.

    Rows are floor(sqrt(N)) clamped to at least one, columns are
    ceil(N / rows); the trailing row may be partially filled.

    Args:
        num_stations: Number of base stations (N)
        area_size: Side of the square area in meters (A)

    Returns:
        GridLayout with spacings A / (columns + 1) and A / (rows + 1)

    Raises:
        ValueError: If the area size is not positive or N is negative
    """
    if area_size <= 0:
        raise ValueError(f"Area size must be positive, got {area_size}")
    if num_stations < 0:
        raise ValueError(f"Number of base stations cannot be negative, got {num_stations}")

    rows = int(np.floor(np.sqrt(num_stations)))
    if rows == 0:
        rows = 1
    columns = int(np.ceil(num_stations / rows))

    return GridLayout(
        rows=rows,
        columns=columns,
        dx=area_size / (columns + 1),
        dy=area_size / (rows + 1)
    )


def generate_grid_topology(num_stations: int, area_size: float,
                           height: float = BASE_STATION_HEIGHT) -> List[BaseStation]:
    """
    Place base stations on a grid over a square area centered at the origin.

    Station i sits at row i // columns and column i % columns, at
    x = -A/2 + (col + 1) * dx and y = -A/2 + (row + 1) * dy.

    Args:
        num_stations: Number of base stations
        area_size: Side of the square area in meters
        height: Mounting height of every station in meters

    Returns:
        List of base stations ordered by index
    """
    layout = compute_grid_layout(num_stations, area_size)

    if num_stations == 0:
        logger.warning("No base stations requested, topology is empty")
        return []

    half = area_size / 2.0
    stations = []

    for i in range(num_stations):
        row = i // layout.columns
        col = i % layout.columns

        x = -half + (col + 1) * layout.dx
        y = -half + (row + 1) * layout.dy

        stations.append(BaseStation(station_id=i, position=Position(x, y, height)))
        logger.info(f"eNodeB {i} at ({x:.2f}, {y:.2f}, {height:.1f})")

    logger.info(f"Placed {num_stations} base stations on a {layout.rows}x{layout.columns} grid "
                f"over {area_size}m x {area_size}m")
    return stations
