"""
Cellular Deployment QoS Evaluation Framework

This package places base stations and user terminals over a city area,
drives a radio access network simulation with constant-bit-rate uplink
traffic and aggregates the per-flow delivery records into deployment-level
QoS metrics (delay, jitter, throughput and loss).
"""

__version__ = "1.0.0"
