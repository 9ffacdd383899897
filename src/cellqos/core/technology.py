"""
Technology Profile Definitions

Maps a technology selector ("4g" or "5g") to the radio and core network
parameters used by a deployment: resource blocks per cell and the
transport link between the packet gateway and the remote host.
"""

from dataclasses import dataclass
from typing import Dict, List
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileCharacteristics:
    """Radio and transport characteristics of a technology profile"""
    name: str
    dl_bandwidth_rbs: int  # resource blocks
    ul_bandwidth_rbs: int  # resource blocks
    backhaul_data_rate_bps: float
    transport_delay_s: float
    description: str

    @property
    def ul_bandwidth_hz(self) -> float:
        return self.ul_bandwidth_rbs * TechnologyProfile.RESOURCE_BLOCK_BANDWIDTH_HZ


class TechnologyProfile:
    """
    Technology profile registry.

    Both profiles run on the same LTE-style radio model: the "5g" profile
    emulates a faster network through a wider allocation and a shorter
    core transport delay.
    """

    RESOURCE_BLOCK_BANDWIDTH_HZ = 180e3

    PROFILES: Dict[str, ProfileCharacteristics] = {
        "4g": ProfileCharacteristics(
            name="4g",
            dl_bandwidth_rbs=50,
            ul_bandwidth_rbs=50,
            backhaul_data_rate_bps=10e9,
            transport_delay_s=0.010,
            description="Narrowband profile (10 MHz, 10 ms core transport)"
        ),
        "5g": ProfileCharacteristics(
            name="5g",
            dl_bandwidth_rbs=100,
            ul_bandwidth_rbs=100,
            backhaul_data_rate_bps=10e9,
            transport_delay_s=0.002,
            description="Wideband profile (20 MHz, 2 ms core transport)"
        ),
    }

    @classmethod
    def get_profile(cls, technology: str) -> ProfileCharacteristics:
        """
        Get the characteristics of a technology profile.

        Raises:
            ValueError: If the selector is not a recognized profile
        """
        if technology not in cls.PROFILES:
            logger.error(f"Invalid technology profile: {technology!r}")
            raise ValueError(
                f"Invalid value for technology: {technology!r} "
                f"(use one of {', '.join(cls.get_supported_profiles())})"
            )
        return cls.PROFILES[technology]

    @classmethod
    def get_supported_profiles(cls) -> List[str]:
        return list(cls.PROFILES.keys())
