"""
Tests for flow statistics aggregation, reporting and export.
"""

import unittest
import sys
import os
import json
import tempfile

import pandas as pd

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from cellqos.core.config import SimulationConfig
from cellqos.simulation.flow_monitor import FlowMonitor
from cellqos.simulation.metrics import (FLOW_COLUMNS, FlowRecord, FlowStatisticsAggregator,
                                        SimulationResults, aggregate_flow_statistics,
                                        export_results, flow_records_to_dataframe, format_report)


def make_record(flow_id=1, rx_packets=0, rx_bytes=0, lost_packets=0, delay_sum=0.0, jitter_sum=0.0):
    return FlowRecord(
        flow_id=flow_id,
        source_address=f"7.0.0.{flow_id + 1}",
        destination_address="1.0.0.2",
        rx_packets=rx_packets,
        rx_bytes=rx_bytes,
        lost_packets=lost_packets,
        delay_sum=delay_sum,
        jitter_sum=jitter_sum
    )


class TestFlowStatisticsAggregator(unittest.TestCase):
    """Test deployment-level aggregation."""

    def test_no_records(self):
        """Test that an empty record set yields an all-zero report."""
        report = aggregate_flow_statistics([], simulation_time=10.0)

        self.assertEqual(report.mean_delay_ms, 0.0)
        self.assertEqual(report.mean_jitter_ms, 0.0)
        self.assertEqual(report.throughput_mbps, 0.0)
        self.assertEqual(report.loss_rate_pct, 0.0)
        self.assertEqual(report.rx_packets, 0)
        self.assertEqual(report.lost_packets, 0)
        self.assertEqual(report.num_flows, 0)

    def test_single_packet_flow(self):
        """Test one flow with a single received packet."""
        record = make_record(rx_packets=1, rx_bytes=100, delay_sum=0.05)
        report = aggregate_flow_statistics([record], simulation_time=10.0)

        self.assertAlmostEqual(report.mean_delay_ms, 50.0)
        self.assertEqual(report.mean_jitter_ms, 0.0)
        self.assertAlmostEqual(report.throughput_mbps, 0.00008)
        self.assertEqual(report.loss_rate_pct, 0.0)
        self.assertEqual(report.rx_packets, 1)

    def test_two_flows(self):
        """Test aggregation over two flows with losses."""
        records = [
            make_record(flow_id=1, rx_packets=10, rx_bytes=2280, lost_packets=2,
                        delay_sum=1.0, jitter_sum=0.2),
            make_record(flow_id=2, rx_packets=5, rx_bytes=1140, lost_packets=0,
                        delay_sum=0.3, jitter_sum=0.05),
        ]
        report = aggregate_flow_statistics(records, simulation_time=60.0)

        self.assertEqual(report.rx_packets, 15)
        self.assertEqual(report.lost_packets, 2)
        self.assertAlmostEqual(report.mean_delay_ms, 1300.0 / 15)
        self.assertAlmostEqual(report.mean_jitter_ms, 250.0 / 14)
        self.assertAlmostEqual(report.loss_rate_pct, 200.0 / 17)
        self.assertAlmostEqual(report.throughput_mbps, 3420 * 8 / 60e6)
        self.assertEqual(report.num_flows, 2)

    def test_single_packet_flows_excluded_from_jitter(self):
        """Test that jitter of flows with at most one packet is ignored."""
        records = [
            make_record(flow_id=1, rx_packets=3, rx_bytes=300, delay_sum=0.3, jitter_sum=0.02),
            make_record(flow_id=2, rx_packets=1, rx_bytes=100, delay_sum=0.1, jitter_sum=0.5),
        ]
        report = aggregate_flow_statistics(records, simulation_time=10.0)

        # Delay still counts both flows, jitter only the first over (4 - 1)
        self.assertAlmostEqual(report.mean_delay_ms, 100.0)
        self.assertAlmostEqual(report.mean_jitter_ms, 20.0 / 3)

    def test_everything_lost(self):
        """Test a deployment where no packet arrives."""
        records = [make_record(flow_id=i, lost_packets=4) for i in range(1, 4)]
        report = aggregate_flow_statistics(records, simulation_time=10.0)

        self.assertEqual(report.mean_delay_ms, 0.0)
        self.assertEqual(report.throughput_mbps, 0.0)
        self.assertEqual(report.loss_rate_pct, 100.0)
        self.assertEqual(report.lost_packets, 12)

    def test_aggregation_is_repeatable(self):
        """Test that aggregating twice gives the same report."""
        records = [make_record(flow_id=1, rx_packets=8, rx_bytes=800, lost_packets=1,
                               delay_sum=0.4, jitter_sum=0.01)]
        aggregator = FlowStatisticsAggregator(simulation_time=20.0)
        self.assertEqual(aggregator.aggregate(records), aggregator.aggregate(records))

    def test_per_flow_logging(self):
        """Test per-flow statistics lines."""
        records = [make_record(flow_id=1, rx_packets=2, rx_bytes=200, delay_sum=0.1)]
        with self.assertLogs('cellqos.simulation.metrics', level='INFO') as logs:
            aggregate_flow_statistics(records, simulation_time=10.0, report_flows=True)
        self.assertTrue(any("Flow 1 (7.0.0.2 -> 1.0.0.2)" in line for line in logs.output))

    def test_invalid_simulation_time(self):
        """Test rejection of a non-positive horizon."""
        with self.assertRaises(ValueError):
            FlowStatisticsAggregator(simulation_time=0.0)

    def test_negative_counters_rejected(self):
        """Test that flow records cannot carry negative counters."""
        with self.assertRaises(ValueError):
            make_record(rx_packets=-1)
        with self.assertRaises(ValueError):
            make_record(delay_sum=-0.1)


class TestFlowRecord(unittest.TestCase):
    """Test per-flow derived metrics."""

    def test_derived_metrics(self):
        """Test throughput, delay and jitter of one flow."""
        record = make_record(rx_packets=5, rx_bytes=1000, delay_sum=0.25, jitter_sum=0.04)
        self.assertAlmostEqual(record.throughput_mbps(10.0), 0.0008)
        self.assertAlmostEqual(record.mean_delay_ms(), 50.0)
        self.assertAlmostEqual(record.mean_jitter_ms(), 10.0)

    def test_empty_flow(self):
        """Test derived metrics of a flow that received nothing."""
        record = make_record(lost_packets=3)
        self.assertEqual(record.mean_delay_ms(), 0.0)
        self.assertEqual(record.mean_jitter_ms(), 0.0)


class TestFlowMonitor(unittest.TestCase):
    """Test packet accounting."""

    def setUp(self):
        self.monitor = FlowMonitor(max_per_hop_delay=10.0)
        self.monitor.register_flow(1, "7.0.0.2", "1.0.0.2", 49153, 1234)

    def test_delay_and_jitter_accumulation(self):
        """Test cumulative delay and jitter over consecutive packets."""
        for sequence, (tx, rx) in enumerate([(1.0, 1.010), (2.0, 2.030), (3.0, 3.015)]):
            self.monitor.record_tx(1, sequence, 228, tx)
            self.monitor.record_rx(1, sequence, 228, rx)

        record = self.monitor.get_flow_records()[0]
        self.assertEqual(record.rx_packets, 3)
        self.assertEqual(record.rx_bytes, 684)
        self.assertAlmostEqual(record.delay_sum, 0.055)
        self.assertAlmostEqual(record.jitter_sum, 0.035)

    def test_stale_packets_declared_lost(self):
        """Test in-flight packets at the end of a run."""
        self.monitor.record_tx(1, 0, 228, 1.0)
        self.monitor.record_tx(1, 1, 228, 15.0)

        self.assertEqual(self.monitor.check_for_lost_packets(20.0), 1)
        self.assertEqual(self.monitor.in_flight_packets(), 1)
        self.assertEqual(self.monitor.get_flow_records()[0].lost_packets, 1)

    def test_record_carries_five_tuple(self):
        """Test flow classification fields of the snapshot."""
        record = self.monitor.get_flow_records()[0]
        self.assertEqual((record.source_address, record.destination_address, record.source_port,
                          record.destination_port, record.protocol),
                         ("7.0.0.2", "1.0.0.2", 49153, 1234, 17))


class TestReportingAndExport(unittest.TestCase):
    """Test summary rendering, per-flow tables and export."""

    def setUp(self):
        self.records = [
            make_record(flow_id=1, rx_packets=10, rx_bytes=2280, lost_packets=2,
                        delay_sum=1.0, jitter_sum=0.2),
            make_record(flow_id=2, rx_packets=5, rx_bytes=1140, delay_sum=0.3, jitter_sum=0.05),
        ]
        self.report = aggregate_flow_statistics(self.records, simulation_time=60.0)

    def test_dataframe(self):
        """Test per-flow table layout."""
        df = flow_records_to_dataframe(self.records, simulation_time=60.0)
        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(list(df.columns), FLOW_COLUMNS)
        self.assertEqual(len(df), 2)
        self.assertAlmostEqual(df.loc[0, 'mean_delay_ms'], 100.0)

    def test_empty_dataframe(self):
        """Test per-flow table without flows."""
        df = flow_records_to_dataframe([], simulation_time=60.0)
        self.assertEqual(list(df.columns), FLOW_COLUMNS)
        self.assertTrue(df.empty)

    def test_multi_cell_summary(self):
        """Test summary of a multi-cell run."""
        text = format_report(self.report, num_ues=2, simulation_time=60.0, technology='5g',
                             area_size=2000.0, num_enbs=4)

        self.assertIn("RESULTS MULTI-CELL (5g)", text)
        self.assertIn("eNodeBs (cells):", text)
        self.assertIn("City area (m):             2000 x 2000", text)
        self.assertIn("Packets received:          15", text)
        self.assertIn("Packets lost:              2", text)

    def test_single_cell_summary(self):
        """Test that single-cell summaries omit the base station count."""
        text = format_report(self.report, num_ues=2, simulation_time=30.0, technology='4g',
                             area_size=1000.0)

        self.assertIn("RESULTS (4g)", text)
        self.assertNotIn("eNodeBs", text)
        self.assertIn("Users (UEs):", text)
        self.assertIn("Loss rate (%):", text)

    def _results(self):
        return SimulationResults(
            report=self.report,
            flow_data=flow_records_to_dataframe(self.records, 60.0),
            flow_records=self.records,
            config=SimulationConfig()
        )

    def test_export_json(self):
        """Test JSON export."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'results.json')
            export_results(self._results(), path)

            with open(path) as f:
                data = json.load(f)

        self.assertEqual(data['summary']['rx_packets'], 15)
        self.assertEqual(len(data['flows']), 2)
        self.assertEqual(data['config']['technology'], '4g')

    def test_export_csv(self):
        """Test CSV export."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'flows.csv')
            export_results(self._results(), path)
            df = pd.read_csv(path)

        self.assertEqual(list(df.columns), FLOW_COLUMNS)
        self.assertEqual(df['rx_packets'].sum(), 15)

    def test_export_unsupported_format(self):
        """Test rejection of unknown export formats."""
        with self.assertRaises(ValueError):
            export_results(self._results(), 'results.txt')


if __name__ == '__main__':
    unittest.main()
