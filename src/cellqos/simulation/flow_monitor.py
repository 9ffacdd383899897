"""
Per-flow packet accounting for the RAN engine.

Tracks transmitted, received and lost packets of every flow together with
the cumulative one-way delay and jitter, and hands out immutable
FlowRecord snapshots once the run is over.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .metrics import FlowRecord

logger = logging.getLogger(__name__)


@dataclass
class FlowState:
    """Mutable counters of a flow while the simulation runs"""
    flow_id: int
    source_address: str
    destination_address: str
    source_port: int
    destination_port: int
    tx_packets: int = 0
    tx_bytes: int = 0
    rx_packets: int = 0
    rx_bytes: int = 0
    lost_packets: int = 0
    delay_sum: float = 0.0
    jitter_sum: float = 0.0
    last_delay: float = 0.0
    in_flight: Dict[int, float] = field(default_factory=dict)  # sequence -> tx time


class FlowMonitor:
    """
    Flow monitor for the simulated uplink flows.

    Packets still in flight at the end of the run are declared lost only
    when they have been in flight longer than max_per_hop_delay.
    """

    def __init__(self, max_per_hop_delay: float = 10.0):
        self.max_per_hop_delay = max_per_hop_delay
        self.flows: Dict[int, FlowState] = {}

    def register_flow(self, flow_id: int, source_address: str, destination_address: str,
                      source_port: int, destination_port: int):
        self.flows[flow_id] = FlowState(
            flow_id=flow_id,
            source_address=source_address,
            destination_address=destination_address,
            source_port=source_port,
            destination_port=destination_port
        )

    def record_tx(self, flow_id: int, sequence: int, size: int, time: float):
        flow = self.flows[flow_id]
        flow.tx_packets += 1
        flow.tx_bytes += size
        flow.in_flight[sequence] = time

    def record_rx(self, flow_id: int, sequence: int, size: int, time: float):
        flow = self.flows[flow_id]
        tx_time = flow.in_flight.pop(sequence)
        delay = time - tx_time

        flow.delay_sum += delay
        if flow.rx_packets > 0:
            flow.jitter_sum += abs(delay - flow.last_delay)
        flow.last_delay = delay

        flow.rx_packets += 1
        flow.rx_bytes += size

    def record_drop(self, flow_id: int, sequence: int):
        flow = self.flows[flow_id]
        flow.in_flight.pop(sequence, None)
        flow.lost_packets += 1

    def check_for_lost_packets(self, now: float) -> int:
        """
        Declare stale in-flight packets lost.

        Returns:
            Number of packets declared lost by this call
        """
        declared = 0
        for flow in self.flows.values():
            stale = [seq for seq, tx_time in flow.in_flight.items()
                     if now - tx_time > self.max_per_hop_delay]
            for seq in stale:
                del flow.in_flight[seq]
            flow.lost_packets += len(stale)
            declared += len(stale)

        if declared:
            logger.info(f"{declared} packets in flight for more than "
                        f"{self.max_per_hop_delay}s declared lost")
        return declared

    def in_flight_packets(self) -> int:
        return sum(len(flow.in_flight) for flow in self.flows.values())

    def get_flow_records(self) -> List[FlowRecord]:
        """Snapshot every flow as an immutable FlowRecord, ordered by flow id."""
        return [
            FlowRecord(
                flow_id=flow.flow_id,
                source_address=flow.source_address,
                destination_address=flow.destination_address,
                rx_packets=flow.rx_packets,
                rx_bytes=flow.rx_bytes,
                lost_packets=flow.lost_packets,
                delay_sum=flow.delay_sum,
                jitter_sum=flow.jitter_sum,
                tx_packets=flow.tx_packets,
                tx_bytes=flow.tx_bytes,
                source_port=flow.source_port,
                destination_port=flow.destination_port
            )
            for _, flow in sorted(self.flows.items())
        ]
