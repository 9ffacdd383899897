"""
Mobility module for deployment simulations.

This module scatters user terminals over the area and implements their
bounded random walk.
"""

from .scatter import Terminal, RandomWalkDescriptor, RandomWalkMode, scatter_terminals
from .random_walk import RandomWalkModel

__all__ = ['Terminal', 'RandomWalkDescriptor', 'RandomWalkMode', 'scatter_terminals', 'RandomWalkModel']
