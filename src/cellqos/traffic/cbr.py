"""
Constant Bit Rate Traffic Descriptors

Every terminal runs one UDP client sending fixed-size datagrams at a fixed
interval towards a single sink on the remote host.
"""

import math
import logging
from dataclasses import dataclass
from typing import List, Sequence

from ..mobility.scatter import Terminal

logger = logging.getLogger(__name__)

DEFAULT_SINK_PORT = 1234
UNBOUNDED_PACKETS = 0xFFFFFFFF


@dataclass(frozen=True)
class TrafficProfile:
    """CBR uplink flow parameters of one terminal."""
    terminal_id: int
    packet_size: int  # bytes
    interval: float  # seconds
    start_time: float  # seconds
    stop_time: float  # seconds
    max_packets: int = UNBOUNDED_PACKETS
    destination_port: int = DEFAULT_SINK_PORT

    def __post_init__(self):
        if self.packet_size <= 0:
            raise ValueError(f"Packet size must be positive, got {self.packet_size}")
        if self.interval <= 0:
            raise ValueError(f"Packet interval must be positive, got {self.interval}")

    @property
    def active_duration(self) -> float:
        return max(0.0, self.stop_time - self.start_time)

    @property
    def data_rate_bps(self) -> float:
        """Offered application rate while the flow is active."""
        return self.packet_size * 8 / self.interval

    def offered_packets(self) -> int:
        """Number of datagrams the client sends over its activation window."""
        if self.active_duration <= 0:
            return 0
        # Quotients within float noise of an integer count as that integer
        return min(int(math.ceil(round(self.active_duration / self.interval, 9))), self.max_packets)


@dataclass(frozen=True)
class SinkDescriptor:
    """UDP server collecting every flow at the aggregation endpoint."""
    port: int
    start_time: float
    stop_time: float

    def is_active(self, time: float) -> bool:
        return self.start_time <= time <= self.stop_time


def build_traffic_profiles(terminals: Sequence[Terminal], simulation_time: float,
                           packet_size: int = 200, packet_interval: float = 0.02,
                           start_time: float = 0.5,
                           port: int = DEFAULT_SINK_PORT) -> List[TrafficProfile]:
    """
    Create one CBR profile per terminal.

    Clients start slightly after the simulation begins so that attachment
    can settle, and stop at the simulation horizon.
    """
    profiles = [
        TrafficProfile(
            terminal_id=terminal.terminal_id,
            packet_size=packet_size,
            interval=packet_interval,
            start_time=start_time,
            stop_time=simulation_time,
            destination_port=port
        )
        for terminal in terminals
    ]

    if profiles:
        logger.info(f"Configured {len(profiles)} CBR flows: {packet_size} bytes every "
                    f"{packet_interval * 1000:.0f} ms ({profiles[0].data_rate_bps / 1e3:.1f} kbps each) "
                    f"from {start_time}s to {simulation_time}s")
    else:
        logger.warning("No terminals, no CBR flows configured")
    return profiles


def build_sink(simulation_time: float, start_time: float = 0.1,
               port: int = DEFAULT_SINK_PORT) -> SinkDescriptor:
    """Create the shared sink at the aggregation endpoint."""
    return SinkDescriptor(port=port, start_time=start_time, stop_time=simulation_time)
