"""
Tests for base station topology generation.
"""

import unittest
import sys
import os
import itertools

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from cellqos.network.topology import (Position, BaseStation, compute_grid_layout,
                                      generate_grid_topology)


class TestGridLayout(unittest.TestCase):
    """Test grid layout computation."""

    def test_seven_stations(self):
        """Test rows and columns for a non-square station count."""
        layout = compute_grid_layout(7, 2000.0)
        self.assertEqual(layout.rows, 2)
        self.assertEqual(layout.columns, 4)
        self.assertEqual(layout.capacity, 8)
        self.assertAlmostEqual(layout.dx, 400.0)
        self.assertAlmostEqual(layout.dy, 2000.0 / 3)

    def test_perfect_square(self):
        """Test a perfect square station count."""
        layout = compute_grid_layout(9, 900.0)
        self.assertEqual(layout.rows, 3)
        self.assertEqual(layout.columns, 3)
        self.assertAlmostEqual(layout.dx, 225.0)

    def test_zero_stations_clamps_rows(self):
        """Test that rows are clamped to one for an empty deployment."""
        layout = compute_grid_layout(0, 1000.0)
        self.assertEqual(layout.rows, 1)
        self.assertEqual(layout.columns, 0)
        self.assertAlmostEqual(layout.dx, 1000.0)

    def test_invalid_area(self):
        """Test rejection of a non-positive area."""
        with self.assertRaises(ValueError):
            compute_grid_layout(4, 0.0)
        with self.assertRaises(ValueError):
            compute_grid_layout(4, -10.0)


class TestGridTopology(unittest.TestCase):
    """Test base station placement."""

    def test_single_station_at_center(self):
        """Test that one station is placed at the area center."""
        stations = generate_grid_topology(1, 1000.0)
        self.assertEqual(len(stations), 1)
        self.assertEqual(stations[0].station_id, 0)
        self.assertAlmostEqual(stations[0].position.x, 0.0)
        self.assertAlmostEqual(stations[0].position.y, 0.0)
        self.assertEqual(stations[0].position.z, 30.0)

    def test_seventh_station_position(self):
        """Test the position of station 6 in a 7-station deployment."""
        stations = generate_grid_topology(7, 2000.0)
        self.assertEqual(len(stations), 7)
        self.assertAlmostEqual(stations[6].position.x, 200.0)
        self.assertAlmostEqual(stations[6].position.y, 333.3333, places=3)

    def test_positions_inside_area_and_distinct(self):
        """Test count, bounds and uniqueness for a range of deployments."""
        for num_stations, area in itertools.product([1, 2, 3, 5, 7, 12, 30, 120], [10.0, 2000.0, 20000.0]):
            stations = generate_grid_topology(num_stations, area)
            half = area / 2.0

            self.assertEqual(len(stations), num_stations)
            for station in stations:
                self.assertGreater(station.position.x, -half)
                self.assertLess(station.position.x, half)
                self.assertGreater(station.position.y, -half)
                self.assertLess(station.position.y, half)

            positions = {(s.position.x, s.position.y) for s in stations}
            self.assertEqual(len(positions), num_stations)

    def test_margin_of_one_spacing(self):
        """Test that every station keeps at least one spacing from the border."""
        layout = compute_grid_layout(5, 1000.0)
        for station in generate_grid_topology(5, 1000.0):
            self.assertGreaterEqual(station.position.x + 500.0, layout.dx - 1e-9)
            self.assertGreaterEqual(500.0 - station.position.x, layout.dx - 1e-9)
            self.assertGreaterEqual(station.position.y + 500.0, layout.dy - 1e-9)

    def test_trailing_row_partially_filled(self):
        """Test row-major filling with a partial last row."""
        stations = generate_grid_topology(5, 1200.0)
        # rows = 2, columns = 3: second row holds stations 3 and 4
        self.assertAlmostEqual(stations[3].position.y, stations[4].position.y)
        self.assertAlmostEqual(stations[3].position.x, stations[0].position.x)
        self.assertGreater(stations[3].position.y, stations[0].position.y)

    def test_zero_stations(self):
        """Test that an empty deployment yields an empty topology."""
        self.assertEqual(generate_grid_topology(0, 1000.0), [])

    def test_custom_height(self):
        """Test mounting height override."""
        stations = generate_grid_topology(4, 1000.0, height=25.0)
        self.assertTrue(all(s.position.z == 25.0 for s in stations))

    def test_stations_are_immutable(self):
        """Test that placed stations cannot be modified."""
        station = generate_grid_topology(1, 100.0)[0]
        self.assertIsInstance(station, BaseStation)
        with self.assertRaises(AttributeError):
            station.station_id = 5


class TestPosition(unittest.TestCase):
    """Test Position class."""

    def test_distance_calculation(self):
        """Test 3D distance."""
        pos1 = Position(0, 0, 0)
        pos2 = Position(3, 4, 12)
        self.assertAlmostEqual(pos1.distance_to(pos2), 13.0, places=5)


if __name__ == '__main__':
    unittest.main()
