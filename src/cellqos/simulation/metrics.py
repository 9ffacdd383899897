"""
Flow statistics aggregation for deployment simulations.

This module turns the per-flow delivery records produced by the RAN
engine into the deployment-level QoS report, and provides per-flow
tables, the fixed-format summary and result export.
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowRecord:
    """Delivery statistics of one flow, snapshot at the end of a run."""
    flow_id: int
    source_address: str
    destination_address: str
    rx_packets: int
    rx_bytes: int
    lost_packets: int
    delay_sum: float  # seconds, over all received packets
    jitter_sum: float  # seconds, over consecutive received packets
    tx_packets: int = 0
    tx_bytes: int = 0
    source_port: int = 0
    destination_port: int = 0
    protocol: int = 17  # UDP

    def __post_init__(self):
        for name in ('rx_packets', 'rx_bytes', 'lost_packets', 'tx_packets', 'tx_bytes'):
            if getattr(self, name) < 0:
                raise ValueError(f"Flow {self.flow_id}: {name} cannot be negative")
        if self.delay_sum < 0 or self.jitter_sum < 0:
            raise ValueError(f"Flow {self.flow_id}: delay and jitter sums cannot be negative")

    def throughput_mbps(self, duration: float) -> float:
        return (self.rx_bytes * 8.0) / (duration * 1e6)

    def mean_delay_ms(self) -> float:
        if self.rx_packets > 0:
            return (self.delay_sum / self.rx_packets) * 1000.0
        return 0.0

    def mean_jitter_ms(self) -> float:
        if self.rx_packets > 1:
            return (self.jitter_sum / (self.rx_packets - 1)) * 1000.0
        return 0.0


@dataclass(frozen=True)
class AggregateReport:
    """Deployment-level QoS metrics."""
    mean_delay_ms: float
    mean_jitter_ms: float
    throughput_mbps: float
    loss_rate_pct: float
    rx_packets: int
    lost_packets: int
    rx_bytes: int = 0
    num_flows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FlowStatisticsAggregator:
    """
    Folds a complete set of flow records into an AggregateReport.

    The aggregation is a pure function of the records and the simulation
    horizon; calling it twice on the same records gives the same report.
    """

    def __init__(self, simulation_time: float, report_flows: bool = False):
        if simulation_time <= 0:
            raise ValueError(f"Simulation time must be positive, got {simulation_time}")
        self.simulation_time = simulation_time
        self.report_flows = report_flows

    def aggregate(self, records: Sequence[FlowRecord]) -> AggregateReport:
        """
        Aggregate flow records.

        Delay sums are added for every flow. Jitter sums are only added for
        flows with more than one received packet, and the mean jitter is
        taken over the global received count minus one.

        Args:
            records: One record per flow

        Returns:
            AggregateReport with zeroed metrics where a denominator is zero
        """
        total_delay = 0.0
        total_jitter = 0.0
        total_rx_packets = 0
        total_rx_bytes = 0
        total_lost_packets = 0

        for record in records:
            if self.report_flows:
                self._log_flow(record)

            total_delay += record.delay_sum
            if record.rx_packets > 1:
                total_jitter += record.jitter_sum
            total_rx_packets += record.rx_packets
            total_rx_bytes += record.rx_bytes
            total_lost_packets += record.lost_packets

        mean_delay_ms = 0.0
        jitter_ms = 0.0
        throughput_mbps = 0.0
        loss_rate_pct = 0.0

        if total_rx_packets > 0:
            mean_delay = total_delay / total_rx_packets
            mean_jitter = 0.0

            if total_rx_packets > 1:
                # Approximation: total jitter over (N - 1) received packets
                mean_jitter = total_jitter / (total_rx_packets - 1)

            mean_delay_ms = mean_delay * 1000.0
            jitter_ms = mean_jitter * 1000.0
            throughput_mbps = (total_rx_bytes * 8.0) / (self.simulation_time * 1e6)
        else:
            logger.warning("No packets received by any flow")

        total_offered_packets = total_rx_packets + total_lost_packets
        if total_offered_packets > 0:
            loss_rate_pct = total_lost_packets * 100.0 / total_offered_packets

        return AggregateReport(
            mean_delay_ms=mean_delay_ms,
            mean_jitter_ms=jitter_ms,
            throughput_mbps=throughput_mbps,
            loss_rate_pct=loss_rate_pct,
            rx_packets=total_rx_packets,
            lost_packets=total_lost_packets,
            rx_bytes=total_rx_bytes,
            num_flows=len(records)
        )

    def _log_flow(self, record: FlowRecord):
        logger.info(f"Flow {record.flow_id} ({record.source_address} -> {record.destination_address}): "
                    f"Throughput = {record.throughput_mbps(self.simulation_time):g} Mbps, "
                    f"Mean delay = {record.mean_delay_ms():g} ms, "
                    f"RxPackets = {record.rx_packets}, "
                    f"LostPackets = {record.lost_packets}")


def aggregate_flow_statistics(records: Sequence[FlowRecord], simulation_time: float,
                              report_flows: bool = False) -> AggregateReport:
    """Aggregate flow records over a simulation horizon (seconds)."""
    return FlowStatisticsAggregator(simulation_time, report_flows).aggregate(records)


FLOW_COLUMNS = [
    'flow_id', 'source_address', 'destination_address', 'source_port', 'destination_port',
    'protocol', 'tx_packets', 'tx_bytes', 'rx_packets', 'rx_bytes', 'lost_packets',
    'delay_sum_s', 'jitter_sum_s', 'throughput_mbps', 'mean_delay_ms', 'mean_jitter_ms'
]


def flow_records_to_dataframe(records: Sequence[FlowRecord], simulation_time: float) -> pd.DataFrame:
    """Create a per-flow table with derived throughput, delay and jitter."""
    rows = []
    for record in records:
        rows.append({
            'flow_id': record.flow_id,
            'source_address': record.source_address,
            'destination_address': record.destination_address,
            'source_port': record.source_port,
            'destination_port': record.destination_port,
            'protocol': record.protocol,
            'tx_packets': record.tx_packets,
            'tx_bytes': record.tx_bytes,
            'rx_packets': record.rx_packets,
            'rx_bytes': record.rx_bytes,
            'lost_packets': record.lost_packets,
            'delay_sum_s': record.delay_sum,
            'jitter_sum_s': record.jitter_sum,
            'throughput_mbps': record.throughput_mbps(simulation_time),
            'mean_delay_ms': record.mean_delay_ms(),
            'mean_jitter_ms': record.mean_jitter_ms()
        })

    return pd.DataFrame(rows, columns=FLOW_COLUMNS)


@dataclass
class SimulationResults:
    """Container for deployment simulation results."""
    report: AggregateReport
    flow_data: pd.DataFrame
    flow_records: List[FlowRecord] = field(default_factory=list)
    stations: List[Any] = field(default_factory=list)
    terminals: List[Any] = field(default_factory=list)
    serving_stations: List[Optional[int]] = field(default_factory=list)
    execution_time: float = 0.0
    config: Optional[Any] = None


def format_report(report: AggregateReport, num_ues: int, simulation_time: float,
                  technology: str, area_size: float, num_enbs: Optional[int] = None) -> str:
    """
    Render the fixed-format summary of a run.

    The base station line is only printed for multi-cell deployments,
    which callers signal by passing num_enbs.
    """
    title = f" RESULTS MULTI-CELL ({technology}) " if num_enbs is not None else f" RESULTS ({technology}) "
    lines = [
        title.center(64, '='),
        f"{'Users (UEs):':<27}{num_ues}",
    ]
    if num_enbs is not None:
        lines.append(f"{'eNodeBs (cells):':<27}{num_enbs}")
    lines.extend([
        f"{'City area (m):':<27}{area_size:g} x {area_size:g}",
        f"{'Simulation time (s):':<27}{simulation_time:g}",
        f"{'Mean delay (ms):':<27}{report.mean_delay_ms:g}",
        f"{'Mean jitter (ms):':<27}{report.mean_jitter_ms:g}",
        f"{'Total throughput (Mbps):':<27}{report.throughput_mbps:g}",
        f"{'Loss rate (%):':<27}{report.loss_rate_pct:g}",
        f"{'Packets received:':<27}{report.rx_packets}",
        f"{'Packets lost:':<27}{report.lost_packets}",
        '=' * 64
    ])
    return "\n".join(lines)


def export_results(results: SimulationResults, output_file: str):
    """Export results to file."""
    if output_file.endswith('.json'):
        _export_json(results, output_file)
    elif output_file.endswith('.csv'):
        _export_csv(results, output_file)
    else:
        raise ValueError(f"Unsupported file format: {output_file}")
    logger.info(f"Results saved to {output_file}")


def _export_json(results: SimulationResults, filename: str):
    """Export summary and per-flow statistics to JSON."""
    export_data = {
        'summary': results.report.to_dict(),
        'flows': results.flow_data.to_dict(orient='records'),
        'execution_time': results.execution_time,
        'config': asdict(results.config) if results.config is not None else None
    }

    with open(filename, 'w') as f:
        json.dump(export_data, f, indent=2, default=str)


def _export_csv(results: SimulationResults, filename: str):
    """Export per-flow statistics to CSV."""
    results.flow_data.to_csv(filename, index=False)
