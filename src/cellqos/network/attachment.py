"""
Terminal Attachment Policies

Decides the serving base station of every terminal at attachment time.
Two policies are supported: strongest received signal, and the
single-cell convenience mode that forces every terminal onto station 0.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.config import AttachmentMode
from .topology import BaseStation, Position

logger = logging.getLogger(__name__)

SPEED_OF_LIGHT = 3e8  # m/s
DEFAULT_ENB_TX_POWER_DBM = 30.0
DEFAULT_DL_FREQUENCY_HZ = 2120e6
ATTACHMENT_CHUNK_SIZE = 10000


def free_space_path_loss_db(distance, frequency_hz: float):
    """
    Free space path loss in dB.

    Accepts scalars or numpy arrays; distances below 1 m are clamped to 1 m.
    """
    distance = np.maximum(distance, 1.0)
    return 20 * np.log10(4 * np.pi * distance * frequency_hz / SPEED_OF_LIGHT)


def received_power_dbm(distance, tx_power_dbm: float = DEFAULT_ENB_TX_POWER_DBM,
                       frequency_hz: float = DEFAULT_DL_FREQUENCY_HZ):
    """Received power over a free-space link in dBm."""
    return tx_power_dbm - free_space_path_loss_db(distance, frequency_hz)


def attach_terminals(stations: Sequence[BaseStation], terminal_positions: Sequence[Position],
                     mode: AttachmentMode = AttachmentMode.STRONGEST_SIGNAL,
                     tx_power_dbm: float = DEFAULT_ENB_TX_POWER_DBM,
                     frequency_hz: float = DEFAULT_DL_FREQUENCY_HZ) -> List[Optional[int]]:
    """
    Select the serving station of every terminal.

    Args:
        stations: Placed base stations
        terminal_positions: Position of each terminal at attachment time
        mode: Attachment policy
        tx_power_dbm: Station transmit power used for the signal comparison
        frequency_hz: Downlink carrier frequency

    Returns:
        Serving station id per terminal (None when no station exists)
    """
    num_terminals = len(terminal_positions)

    if not stations:
        logger.warning(f"No base stations available, {num_terminals} UEs left unattached")
        return [None] * num_terminals

    if mode == AttachmentMode.SINGLE_STATION:
        serving_id = stations[0].station_id
        logger.info(f"All {num_terminals} UEs attached to eNodeB {serving_id} (single-cell)")
        return [serving_id] * num_terminals

    station_xyz = np.array([[s.position.x, s.position.y, s.position.z] for s in stations])
    station_ids = np.array([s.station_id for s in stations])
    serving: List[Optional[int]] = []

    # Chunked to keep the distance matrix small for very large deployments
    for start in range(0, num_terminals, ATTACHMENT_CHUNK_SIZE):
        chunk = terminal_positions[start:start + ATTACHMENT_CHUNK_SIZE]
        terminal_xyz = np.array([[p.x, p.y, p.z] for p in chunk])
        distances = np.linalg.norm(terminal_xyz[:, None, :] - station_xyz[None, :, :], axis=2)
        rsrp = received_power_dbm(distances, tx_power_dbm, frequency_hz)
        best = np.argmax(rsrp, axis=1)
        serving.extend(int(station_ids[b]) for b in best)

    logger.info(f"Attached {num_terminals} UEs to best eNodeB (RSRP)")
    return serving


def attachment_summary(serving: Sequence[Optional[int]]) -> Dict[Optional[int], int]:
    """Count attached terminals per serving station."""
    summary: Dict[Optional[int], int] = {}
    for station_id in serving:
        summary[station_id] = summary.get(station_id, 0) + 1
    return summary
