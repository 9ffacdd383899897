"""
Traffic module for deployment simulations.

This module describes the constant bit rate uplink flows of the terminals.
"""

from .cbr import TrafficProfile, SinkDescriptor, build_traffic_profiles, build_sink

__all__ = ['TrafficProfile', 'SinkDescriptor', 'build_traffic_profiles', 'build_sink']
