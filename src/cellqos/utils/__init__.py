"""
Utility modules for deployment simulations.

This module provides configuration management and visualization utilities.
"""

from .config_parser import ConfigParser
from .visualization import DeploymentVisualizer

__all__ = ['ConfigParser', 'DeploymentVisualizer']
