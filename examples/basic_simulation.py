#!/usr/bin/env python3
"""
Basic Deployment Comparison Example

Runs the same multi-cell deployment with the narrowband "4g" profile and
the wideband "5g" profile and prints both summaries.
"""

import sys
import os
import logging

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from cellqos.core.config import SimulationConfig
from cellqos.core.technology import TechnologyProfile
from cellqos.simulation.deployment import DeploymentSimulation


def main():
    """Run basic comparison example"""

    # Setup logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    logger.info("Starting 4G vs 5G deployment comparison")

    for technology in TechnologyProfile.get_supported_profiles():
        profile = TechnologyProfile.get_profile(technology)
        logger.info(f"Profile {technology}: {profile.description}")

        config = SimulationConfig.for_variant(
            "multi_cell",
            technology=technology,
            simulation_time=10.0,
            random_seed=42,
            num_ues=40,
            num_enbs=4,
            area_size=2000.0,
            verbose=False
        )

        simulation = DeploymentSimulation(config)
        results = simulation.run()
        print(simulation.summary(results))

    logger.info("Comparison completed successfully!")


if __name__ == "__main__":
    main()
