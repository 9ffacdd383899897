"""
Network module for deployment simulations.

This module implements base station placement and terminal attachment.
"""

from .topology import Position, BaseStation, GridLayout, compute_grid_layout, generate_grid_topology
from .attachment import attach_terminals, received_power_dbm

__all__ = ['Position', 'BaseStation', 'GridLayout', 'compute_grid_layout',
           'generate_grid_topology', 'attach_terminals', 'received_power_dbm']
