"""
RAN simulation engine for deployment QoS evaluation.

The rest of the framework only depends on RanSimulationEngine.run and the
shape of the FlowRecords it returns. SimPyRanEngine is the reference
implementation: an event-driven uplink model where every cell is a
single-server queue shared by its attached terminals.
"""

import ipaddress
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import simpy

from ..core.config import AttachmentMode
from ..core.technology import ProfileCharacteristics
from ..mobility.random_walk import RandomWalkModel
from ..mobility.scatter import Terminal
from ..network.attachment import attach_terminals, attachment_summary, free_space_path_loss_db
from ..network.topology import BaseStation, Position
from ..traffic.cbr import SinkDescriptor, TrafficProfile
from .flow_monitor import FlowMonitor
from .metrics import FlowRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    """Everything the engine needs to know about the network layout."""
    stations: List[BaseStation]
    terminals: List[Terminal]
    attachment_mode: AttachmentMode
    profile: ProfileCharacteristics
    sink: SinkDescriptor
    simulation_time: float


class RanSimulationEngine(ABC):
    """Interface of a radio access network simulation engine"""

    @abstractmethod
    def run(self, deployment: Deployment, traffic: Sequence[TrafficProfile]) -> List[FlowRecord]:
        """
        Simulate the deployment and return one FlowRecord per terminal.

        Args:
            deployment: Stations, terminals and technology profile
            traffic: One traffic profile per terminal, in terminal order

        Returns:
            Flow records in terminal order
        """
        pass


class SimPyRanEngine(RanSimulationEngine):
    """
    Reference uplink engine built on SimPy.

    Features:
    - Attachment by strongest signal or forced single station
    - Bounded random walk of the terminals during the run
    - Per-cell FIFO uplink scheduler with a finite buffer
    - Link rate from the profile bandwidth and a capped Shannon efficiency
    - HARQ retransmissions and core transport delay
    """

    TTI = 0.001  # seconds
    HARQ_RTT = 0.008  # seconds
    MAX_HARQ_RETRANSMISSIONS = 3
    HEADER_OVERHEAD = 28  # IPv4 + UDP bytes
    UE_TX_POWER_DBM = 23.0
    UL_FREQUENCY_HZ = 1930e6
    NOISE_FIGURE_DB = 5.0
    THERMAL_NOISE_DENSITY_DBM_HZ = -174.0
    MAX_SPECTRAL_EFFICIENCY = 4.4  # bit/s/Hz
    MIN_SNR_DB = -6.0

    UE_NETWORK = ipaddress.IPv4Address("7.0.0.2")
    REMOTE_HOST_ADDRESS = "1.0.0.2"
    UE_SOURCE_PORT = 49153

    def __init__(self, random_seed: Optional[int] = None, block_error_rate: float = 0.1,
                 max_queue_packets: int = 1000, max_per_hop_delay: float = 10.0):
        if not 0 <= block_error_rate < 1:
            raise ValueError(f"Block error rate must be in [0, 1), got {block_error_rate}")
        self.random_seed = random_seed
        self.block_error_rate = block_error_rate
        self.max_queue_packets = max_queue_packets
        self.max_per_hop_delay = max_per_hop_delay

        self.serving_stations: List[Optional[int]] = []
        self.execution_time = 0.0

    def run(self, deployment: Deployment, traffic: Sequence[TrafficProfile]) -> List[FlowRecord]:
        if len(traffic) != len(deployment.terminals):
            raise ValueError(f"Expected one traffic profile per UE, got {len(traffic)} profiles "
                             f"for {len(deployment.terminals)} UEs")

        env = simpy.Environment()
        rng = np.random.default_rng(self.random_seed)
        monitor = FlowMonitor(self.max_per_hop_delay)

        self.serving_stations = attach_terminals(
            deployment.stations,
            [terminal.initial_position for terminal in deployment.terminals],
            deployment.attachment_mode
        )
        for station_id, count in sorted(attachment_summary(self.serving_stations).items(),
                                        key=lambda item: (item[0] is None, item[0] or 0)):
            logger.info(f"eNodeB {station_id}: {count} UEs attached")

        stations: Dict[int, BaseStation] = {s.station_id: s for s in deployment.stations}
        cells: Dict[int, simpy.Resource] = {s.station_id: simpy.Resource(env, capacity=1)
                                            for s in deployment.stations}

        for terminal, profile, serving_id in zip(deployment.terminals, traffic, self.serving_stations):
            flow_id = terminal.terminal_id + 1
            monitor.register_flow(
                flow_id=flow_id,
                source_address=str(self.UE_NETWORK + terminal.terminal_id),
                destination_address=self.REMOTE_HOST_ADDRESS,
                source_port=self.UE_SOURCE_PORT,
                destination_port=profile.destination_port
            )

            if serving_id is None:
                continue

            walker = RandomWalkModel(terminal, rng)
            env.process(self._client_process(
                env, flow_id, profile, stations[serving_id], cells[serving_id],
                walker, deployment, monitor, rng
            ))

        logger.info(f"Starting RAN simulation for {deployment.simulation_time} seconds")
        start_time = time.time()
        env.run(until=deployment.simulation_time)
        self.execution_time = time.time() - start_time

        monitor.check_for_lost_packets(env.now)
        logger.info(f"RAN simulation completed in {self.execution_time:.2f} seconds, "
                    f"{monitor.in_flight_packets()} packets still in flight")

        return monitor.get_flow_records()

    def _client_process(self, env: simpy.Environment, flow_id: int, profile: TrafficProfile,
                        station: BaseStation, cell: simpy.Resource, walker: RandomWalkModel,
                        deployment: Deployment, monitor: FlowMonitor, rng: np.random.Generator):
        """CBR client: one datagram every interval during the activation window."""
        yield env.timeout(profile.start_time)

        sequence = 0
        limit = profile.offered_packets()
        while sequence < limit and env.now < profile.stop_time:
            env.process(self._deliver_packet(
                env, flow_id, sequence, profile, station, cell, walker, deployment, monitor, rng
            ))
            sequence += 1
            yield env.timeout(profile.interval)

    def _deliver_packet(self, env: simpy.Environment, flow_id: int, sequence: int,
                        profile: TrafficProfile, station: BaseStation, cell: simpy.Resource,
                        walker: RandomWalkModel, deployment: Deployment,
                        monitor: FlowMonitor, rng: np.random.Generator):
        """Carry one datagram from the terminal to the sink."""
        size = profile.packet_size + self.HEADER_OVERHEAD
        monitor.record_tx(flow_id, sequence, size, env.now)

        if len(cell.queue) >= self.max_queue_packets:
            monitor.record_drop(flow_id, sequence)
            return

        position = walker.advance_to(env.now)
        link_rate = self.link_rate_bps(station.position, position, deployment.profile)
        if link_rate <= 0:
            monitor.record_drop(flow_id, sequence)
            return

        with cell.request() as request:
            yield request
            yield env.timeout(size * 8 / link_rate)

        retransmissions = int(rng.geometric(1 - self.block_error_rate)) - 1
        if retransmissions > self.MAX_HARQ_RETRANSMISSIONS:
            monitor.record_drop(flow_id, sequence)
            return

        backhaul = size * 8 / deployment.profile.backhaul_data_rate_bps
        yield env.timeout(self.TTI + retransmissions * self.HARQ_RTT
                          + deployment.profile.transport_delay_s + backhaul)

        if deployment.sink.is_active(env.now):
            monitor.record_rx(flow_id, sequence, size, env.now)
        else:
            monitor.record_drop(flow_id, sequence)

    def link_rate_bps(self, station_position: Position, terminal_position: Position,
                      profile: ProfileCharacteristics) -> float:
        """
        Uplink rate of a terminal over the whole cell allocation.

        Returns:
            Rate in bit/s, 0 when the terminal is below the minimum SNR
        """
        distance = station_position.distance_to(terminal_position)
        bandwidth = profile.ul_bandwidth_hz

        noise_dbm = self.THERMAL_NOISE_DENSITY_DBM_HZ + 10 * np.log10(bandwidth) + self.NOISE_FIGURE_DB
        rx_power_dbm = self.UE_TX_POWER_DBM - free_space_path_loss_db(distance, self.UL_FREQUENCY_HZ)
        snr_db = float(rx_power_dbm - noise_dbm)

        if snr_db < self.MIN_SNR_DB:
            return 0.0

        efficiency = min(np.log2(1 + 10 ** (snr_db / 10)), self.MAX_SPECTRAL_EFFICIENCY)
        return float(efficiency * bandwidth)
