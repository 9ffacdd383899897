"""Core configuration components."""

from .config import SimulationConfig, DeploymentVariant, AttachmentMode
from .technology import TechnologyProfile, ProfileCharacteristics

__all__ = ['SimulationConfig', 'DeploymentVariant', 'AttachmentMode', 'TechnologyProfile', 'ProfileCharacteristics']
