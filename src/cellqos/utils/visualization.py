"""
Visualization utilities for deployment simulations.

This module plots the deployment topology and per-flow QoS distributions.
"""

import logging
import os
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from ..simulation.metrics import SimulationResults

logger = logging.getLogger(__name__)


class DeploymentVisualizer:
    """Visualization for deployment simulation results."""

    def __init__(self, style: str = 'seaborn-v0_8'):
        try:
            plt.style.use(style)
        except OSError:
            # Fallback to default if seaborn style not available
            plt.style.use('default')

    def create_report(self, results: SimulationResults, output_dir: str = "./results/"):
        """Create every plot of a run in output_dir."""
        os.makedirs(output_dir, exist_ok=True)
        self.plot_topology(results, os.path.join(output_dir, "deployment_topology.png"))
        self.plot_flow_distributions(results, os.path.join(output_dir, "flow_distributions.png"))
        logger.info(f"Visualization report created in {output_dir}")

    def plot_topology(self, results: SimulationResults, output_file: str,
                      max_terminals: Optional[int] = 5000):
        """Plot base stations and initial terminal positions, colored by serving cell."""
        fig, ax = plt.subplots(figsize=(10, 10))

        terminals = results.terminals
        serving = results.serving_stations
        if max_terminals is not None and len(terminals) > max_terminals:
            # Large deployments are subsampled to keep the figure readable
            step = int(np.ceil(len(terminals) / max_terminals))
            terminals = terminals[::step]
            serving = serving[::step] if serving else serving

        if terminals:
            ue_x = [t.initial_position.x for t in terminals]
            ue_y = [t.initial_position.y for t in terminals]
            colors = [s if s is not None else -1 for s in serving] if serving else 'blue'
            ax.scatter(ue_x, ue_y, c=colors, cmap='tab10', s=12, alpha=0.6, label='UEs')

        if results.stations:
            enb_x = [s.position.x for s in results.stations]
            enb_y = [s.position.y for s in results.stations]
            ax.scatter(enb_x, enb_y, c='red', s=200, marker='^', label='eNodeBs', edgecolors='black')

            for station in results.stations:
                ax.annotate(f'eNB {station.station_id}', (station.position.x, station.position.y),
                            xytext=(5, 5), textcoords='offset points')

        if results.config is not None:
            half = results.config.area_size / 2.0
            ax.set_xlim(-half, half)
            ax.set_ylim(-half, half)

        ax.set_title('Deployment Topology', fontsize=14, fontweight='bold')
        ax.set_xlabel('X Position (m)')
        ax.set_ylabel('Y Position (m)')
        ax.legend()
        ax.grid(True, alpha=0.3)
        ax.set_aspect('equal')

        plt.tight_layout()
        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def plot_flow_distributions(self, results: SimulationResults, output_file: str):
        """Plot per-flow mean delay, mean jitter, throughput and loss distributions."""
        fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2, figsize=(14, 10))
        df = results.flow_data

        if not df.empty:
            received = df[df['rx_packets'] > 0]
            offered = (df['rx_packets'] + df['lost_packets']).replace(0, np.nan)
            loss_pct = (df['lost_packets'] * 100.0 / offered).dropna()

            sns.histplot(received['mean_delay_ms'], bins=30, ax=ax1, color='steelblue')
            sns.histplot(received['mean_jitter_ms'], bins=30, ax=ax2, color='orange')
            sns.histplot(df['throughput_mbps'], bins=30, ax=ax3, color='green')
            sns.histplot(loss_pct, bins=30, ax=ax4, color='red')

        ax1.set_title('Mean Delay per Flow')
        ax1.set_xlabel('Delay (ms)')
        ax2.set_title('Mean Jitter per Flow')
        ax2.set_xlabel('Jitter (ms)')
        ax3.set_title('Throughput per Flow')
        ax3.set_xlabel('Throughput (Mbps)')
        ax4.set_title('Loss Rate per Flow')
        ax4.set_xlabel('Loss (%)')
        for ax in (ax1, ax2, ax3, ax4):
            ax.set_ylabel('Number of Flows')
            ax.grid(True, alpha=0.3)

        plt.tight_layout()
        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)
