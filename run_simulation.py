#!/usr/bin/env python3
"""
Main simulation runner for the Cellular Deployment QoS Framework.

This script evaluates the delay, jitter, throughput and loss experienced by
the users of a cellular deployment and prints a fixed-format summary.

Usage:
    python run_simulation.py --tech 4g --num-ues 200 --num-enbs 7 --area-size 2000 --sim-time 60
    python run_simulation.py --scenario single_cell_5g
    python run_simulation.py --config scenarios/my_city.yaml --output results.json
    python run_simulation.py --help
"""

import argparse
import logging
import os
import sys
import traceback
from dataclasses import replace

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from cellqos.core.config import SimulationConfig
from cellqos.core.technology import TechnologyProfile
from cellqos.simulation.deployment import DeploymentSimulation
from cellqos.simulation.metrics import export_results
from cellqos.utils.config_parser import ConfigParser

logger = logging.getLogger("cellqos")


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Cellular Deployment QoS Evaluation Framework',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --tech 4g --num-ues 200 --num-enbs 7 --area-size 2000 --sim-time 60
  %(prog)s --variant single_cell --tech 5g --num-ues 50 --sim-time 30
  %(prog)s --scenario multi_cell_5g
  %(prog)s --create-scenario dense_city_5g --config-output scenarios/dense.yaml
        """
    )

    # Execution modes
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--config', '-c', type=str,
                       help='Configuration file path (JSON or YAML)')
    group.add_argument('--scenario', '-s', type=str,
                       choices=ConfigParser.get_available_scenarios(),
                       help='Use predefined scenario')
    group.add_argument('--create-scenario', type=str,
                       choices=ConfigParser.get_available_scenarios(),
                       help='Create a new scenario configuration file')

    # Deployment parameters (override config and scenario values)
    parser.add_argument('--variant', type=str, choices=['single_cell', 'multi_cell'],
                        help='Deployment variant (default: multi_cell)')
    parser.add_argument('--num-ues', type=int, help='Number of UEs (users)')
    parser.add_argument('--num-enbs', type=int, help='Number of eNodeBs (cells)')
    parser.add_argument('--area-size', type=float, help='Side of the city area (m)')
    parser.add_argument('--sim-time', type=float, help='Simulation time (s)')
    parser.add_argument('--tech', type=str,
                        help=f"Technology profile ({' or '.join(TechnologyProfile.get_supported_profiles())})")
    parser.add_argument('--seed', type=int, help='Random seed')

    # Output
    parser.add_argument('--output', '-o', type=str,
                        help='Output file for results (.json or .csv)')
    parser.add_argument('--results-dir', type=str, default='results',
                        help='Directory for results and visualizations')
    parser.add_argument('--config-output', type=str,
                        help='Output path for created scenario (used with --create-scenario)')
    parser.add_argument('--plots', action='store_true',
                        help='Generate topology and flow distribution plots')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose output (INFO logs, per-flow statistics)')

    return parser.parse_args(argv)


def setup_logging(verbose: bool):
    """Configure root logging for the run."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_config(args) -> SimulationConfig:
    """
    Build the run configuration from file, scenario and command line overrides.

    Raises:
        ValueError: If --variant is combined with a config file or scenario,
            which already fix the deployment layout
    """
    if args.variant and (args.config or args.scenario):
        raise ValueError("--variant cannot be combined with --config or --scenario; "
                         "set the variant in the configuration file instead")

    if args.config:
        config = ConfigParser.load_config(args.config)
    elif args.scenario:
        config = ConfigParser.load_scenario(args.scenario)
    else:
        config = SimulationConfig.for_variant(args.variant or 'multi_cell')

    overrides = {
        'num_ues': args.num_ues,
        'num_enbs': args.num_enbs,
        'area_size': args.area_size,
        'simulation_time': args.sim_time,
        'technology': args.tech,
        'random_seed': args.seed,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if args.plots:
        overrides['enable_plots'] = True
    overrides['verbose'] = args.verbose

    return replace(config, **overrides)


def run_deployment(config: SimulationConfig, args) -> bool:
    """Run one deployment and print its summary."""
    try:
        simulation = DeploymentSimulation(config)
    except ValueError as e:
        # Configuration errors abort before any simulation work
        logger.error(f"Invalid configuration: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return False

    try:
        results = simulation.run()
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user", file=sys.stderr)
        return False
    except Exception as e:
        print(f"Error running simulation: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return False

    print(simulation.summary(results))

    if args.output:
        os.makedirs(args.results_dir, exist_ok=True)
        output_path = os.path.join(args.results_dir, os.path.basename(args.output))
        export_results(results, output_path)
        print(f"Results saved to: {output_path}")

    if config.enable_plots:
        from cellqos.utils.visualization import DeploymentVisualizer

        try:
            DeploymentVisualizer().create_report(results, args.results_dir)
            print(f"Visualizations created in: {args.results_dir}")
        except Exception as e:
            print(f"Warning: Error generating visualizations: {e}", file=sys.stderr)
            if args.verbose:
                traceback.print_exc()

    return True


def create_scenario_config(scenario: str, args) -> bool:
    """Create a new scenario configuration file."""
    output_file = args.config_output or f"scenarios/{scenario}.json"
    print(f"Creating {scenario} scenario configuration...")

    try:
        os.makedirs(os.path.dirname(output_file) or '.', exist_ok=True)
        ConfigParser.create_default_config(output_file, scenario)
        print(f"Configuration created: {output_file}")
        print("You can now modify this file and run it with:")
        print(f"  python run_simulation.py --config {output_file}")
        return True
    except Exception as e:
        print(f"Error creating configuration: {e}", file=sys.stderr)
        return False


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    if args.create_scenario:
        success = create_scenario_config(args.create_scenario, args)
    else:
        try:
            config = build_config(args)
        except Exception as e:
            print(f"Error loading configuration: {e}", file=sys.stderr)
            success = False
        else:
            success = run_deployment(config, args)

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
