"""
Configuration classes for the deployment QoS framework
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .technology import TechnologyProfile


class DeploymentVariant(Enum):
    """Deployment layouts supported by the framework"""
    SINGLE_CELL = "single_cell"
    MULTI_CELL = "multi_cell"


class AttachmentMode(Enum):
    """How terminals pick their serving base station"""
    STRONGEST_SIGNAL = "strongest_signal"
    SINGLE_STATION = "single_station"


# Mounting heights (meters)
BASE_STATION_HEIGHT = 30.0
TERMINAL_HEIGHT = 1.5


@dataclass
class SimulationConfig:
    """Configuration parameters for a deployment run"""
    simulation_time: float = 60.0  # seconds
    random_seed: Optional[int] = None
    log_level: str = "INFO"
    verbose: bool = True
    output_directory: str = "results"
    enable_plots: bool = False

    # Deployment configuration
    variant: str = "multi_cell"
    technology: str = "4g"
    num_enbs: int = 4
    area_size: float = 2000.0  # side of the square city area, meters
    attachment_mode: str = "strongest_signal"

    # Terminal configuration
    num_ues: int = 100
    min_speed: float = 0.5  # m/s
    max_speed: float = 2.0  # m/s

    # Traffic configuration
    packet_size: int = 200  # bytes
    packet_interval: float = 0.02  # seconds
    client_start_time: float = 0.5  # seconds
    server_start_time: float = 0.1  # seconds

    @classmethod
    def for_variant(cls, variant: str, **overrides) -> 'SimulationConfig':
        """
        Create a configuration carrying the defaults of a deployment variant.

        Args:
            variant: "single_cell" or "multi_cell"
            **overrides: Field values replacing the variant defaults

        Raises:
            ValueError: If the variant is unknown
        """
        deployment = DeploymentVariant(variant)

        if deployment == DeploymentVariant.SINGLE_CELL:
            config = cls(
                simulation_time=30.0,
                variant=deployment.value,
                num_enbs=1,
                area_size=1000.0,
                attachment_mode=AttachmentMode.SINGLE_STATION.value,
                num_ues=50,
                packet_interval=0.1
            )
        else:
            config = cls()

        return replace(config, **overrides)

    @property
    def deployment_variant(self) -> DeploymentVariant:
        return DeploymentVariant(self.variant)

    @property
    def attachment(self) -> AttachmentMode:
        return AttachmentMode(self.attachment_mode)

    def validate(self):
        """
        Check parameter ranges and enumerated selectors.

        Raises:
            ValueError: On the first invalid parameter found
        """
        # Lookups raise ValueError for unknown selectors
        self.deployment_variant
        self.attachment
        TechnologyProfile.get_profile(self.technology)

        if self.num_ues < 1:
            raise ValueError(f"Number of UEs must be positive, got {self.num_ues}")
        if self.num_enbs < 1:
            raise ValueError(f"Number of eNodeBs must be positive, got {self.num_enbs}")
        if self.area_size <= 0:
            raise ValueError(f"Area size must be positive, got {self.area_size}")
        if self.simulation_time <= 0:
            raise ValueError(f"Simulation time must be positive, got {self.simulation_time}")
        if self.packet_size <= 0:
            raise ValueError(f"Packet size must be positive, got {self.packet_size}")
        if self.packet_interval <= 0:
            raise ValueError(f"Packet interval must be positive, got {self.packet_interval}")
        if not 0 <= self.min_speed <= self.max_speed:
            raise ValueError(f"Invalid speed range [{self.min_speed}, {self.max_speed}]")
