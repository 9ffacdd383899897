"""
Deployment Simulation

Coordinates a complete run: configuration checks, base station placement,
terminal scatter, traffic set-up, the RAN engine run and the final flow
statistics aggregation.
"""

import logging
import time
from typing import List, Optional, Sequence

import numpy as np

from ..core.config import SimulationConfig, DeploymentVariant
from ..core.technology import TechnologyProfile
from ..mobility.scatter import Terminal, scatter_terminals
from ..network.topology import BaseStation, generate_grid_topology
from ..traffic.cbr import TrafficProfile, build_sink, build_traffic_profiles
from .engine import Deployment, RanSimulationEngine, SimPyRanEngine
from .metrics import (FlowRecord, SimulationResults, aggregate_flow_statistics,
                      flow_records_to_dataframe, format_report)

logger = logging.getLogger(__name__)


class DeploymentSimulation:
    """
    Runs one deployment from configuration to aggregate report.

    Configuration errors (including an unknown technology profile) are
    raised from the constructor, before any simulation work starts.
    """

    def __init__(self, config: SimulationConfig, engine: Optional[RanSimulationEngine] = None):
        config.validate()
        self.profile = TechnologyProfile.get_profile(config.technology)
        self.config = config
        self.engine = engine if engine is not None else SimPyRanEngine(random_seed=config.random_seed)
        self.rng = np.random.default_rng(config.random_seed)

        self.stations: List[BaseStation] = []
        self.terminals: List[Terminal] = []
        self.traffic: List[TrafficProfile] = []

        logger.info(f"Deployment simulation initialized: {config.num_ues} UEs, {config.num_enbs} eNodeBs, "
                    f"tech={config.technology}, area={config.area_size}m x {config.area_size}m")

    def setup_network(self):
        """Place base stations and scatter terminals"""
        logger.info("Setting up network topology")
        self.stations = generate_grid_topology(self.config.num_enbs, self.config.area_size)
        self.terminals = scatter_terminals(
            self.config.num_ues,
            self.config.area_size,
            rng=self.rng,
            min_speed=self.config.min_speed,
            max_speed=self.config.max_speed
        )

    def setup_traffic(self):
        """Create one CBR flow per terminal"""
        logger.info("Setting up traffic generators")
        self.traffic = build_traffic_profiles(
            self.terminals,
            self.config.simulation_time,
            packet_size=self.config.packet_size,
            packet_interval=self.config.packet_interval,
            start_time=self.config.client_start_time
        )

    def run(self) -> SimulationResults:
        """
        Run the deployment.

        Returns:
            SimulationResults with the aggregate report and per-flow data
        """
        start_time = time.time()

        self.setup_network()
        self.setup_traffic()

        deployment = Deployment(
            stations=self.stations,
            terminals=self.terminals,
            attachment_mode=self.config.attachment,
            profile=self.profile,
            sink=build_sink(self.config.simulation_time, self.config.server_start_time),
            simulation_time=self.config.simulation_time
        )

        records = self.engine.run(deployment, self.traffic)
        self._check_flow_records(records, self.traffic)

        report = aggregate_flow_statistics(records, self.config.simulation_time,
                                           report_flows=self.config.verbose)

        execution_time = time.time() - start_time
        logger.info(f"Simulation completed in {execution_time:.2f} seconds")

        return SimulationResults(
            report=report,
            flow_data=flow_records_to_dataframe(records, self.config.simulation_time),
            flow_records=list(records),
            stations=self.stations,
            terminals=self.terminals,
            serving_stations=list(getattr(self.engine, 'serving_stations', [])),
            execution_time=execution_time,
            config=self.config
        )

    @staticmethod
    def _check_flow_records(records: Sequence[FlowRecord], traffic: Sequence[TrafficProfile]):
        """
        Check the engine output against the offered traffic.

        Raises:
            ValueError: If the record count differs from the terminal count
                or a flow received more packets than it offered
        """
        if len(records) != len(traffic):
            raise ValueError(f"Engine returned {len(records)} flow records for {len(traffic)} UEs")

        for record, profile in zip(records, traffic):
            offered = profile.offered_packets()
            if record.rx_packets > offered:
                raise ValueError(f"Flow {record.flow_id} received {record.rx_packets} packets "
                                 f"but only {offered} were offered")

    def summary(self, results: SimulationResults) -> str:
        """Fixed-format summary of a finished run."""
        multi_cell = self.config.deployment_variant == DeploymentVariant.MULTI_CELL
        return format_report(
            results.report,
            num_ues=self.config.num_ues,
            simulation_time=self.config.simulation_time,
            technology=self.config.technology,
            area_size=self.config.area_size,
            num_enbs=self.config.num_enbs if multi_cell else None
        )
