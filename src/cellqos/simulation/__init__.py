"""
Simulation module for deployment QoS evaluation.

This module provides the RAN engine interface, flow statistics
aggregation and the deployment run coordinator.
"""

from .metrics import (FlowRecord, AggregateReport, FlowStatisticsAggregator, SimulationResults,
                      aggregate_flow_statistics)
from .engine import Deployment, RanSimulationEngine, SimPyRanEngine
from .deployment import DeploymentSimulation

__all__ = ['FlowRecord', 'AggregateReport', 'FlowStatisticsAggregator', 'SimulationResults',
           'aggregate_flow_statistics', 'Deployment', 'RanSimulationEngine', 'SimPyRanEngine',
           'DeploymentSimulation']
