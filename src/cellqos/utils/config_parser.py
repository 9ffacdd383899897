"""
Configuration Parser for the Deployment QoS Framework

This module handles loading and validation of simulation configuration files.
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Any, List

import jsonschema
import yaml

from ..core.config import SimulationConfig

logger = logging.getLogger(__name__)


class ConfigParser:
    """
    Configuration parser and validator for deployment parameters
    """

    # JSON Schema for configuration validation
    CONFIG_SCHEMA = {
        "type": "object",
        "properties": {
            "simulation": {
                "type": "object",
                "properties": {
                    "simulation_time": {"type": "number", "exclusiveMinimum": 0},
                    "random_seed": {"type": ["integer", "null"]},
                    "log_level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
                    "verbose": {"type": "boolean"},
                    "output_directory": {"type": "string"},
                    "enable_plots": {"type": "boolean"}
                },
                "required": ["simulation_time"],
                "additionalProperties": False
            },
            "network": {
                "type": "object",
                "properties": {
                    "variant": {"type": "string", "enum": ["single_cell", "multi_cell"]},
                    "technology": {"type": "string"},
                    "num_enbs": {"type": "integer", "minimum": 1},
                    "area_size": {"type": "number", "exclusiveMinimum": 0},
                    "attachment_mode": {"type": "string", "enum": ["strongest_signal", "single_station"]}
                },
                "required": ["technology"],
                "additionalProperties": False
            },
            "ue": {
                "type": "object",
                "properties": {
                    "num_ues": {"type": "integer", "minimum": 1},
                    "min_speed": {"type": "number", "minimum": 0},
                    "max_speed": {"type": "number", "minimum": 0}
                },
                "required": ["num_ues"],
                "additionalProperties": False
            },
            "traffic": {
                "type": "object",
                "properties": {
                    "packet_size": {"type": "integer", "minimum": 1},
                    "packet_interval": {"type": "number", "exclusiveMinimum": 0},
                    "client_start_time": {"type": "number", "minimum": 0},
                    "server_start_time": {"type": "number", "minimum": 0}
                },
                "additionalProperties": False
            }
        },
        "required": ["simulation", "network", "ue"],
        "additionalProperties": False
    }

    @classmethod
    def load_config(cls, config_path: str) -> SimulationConfig:
        """
        Load configuration from a JSON or YAML file

        Args:
            config_path: Path to configuration file

        Returns:
            SimulationConfig object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file format is not supported
            json.JSONDecodeError: If JSON is invalid
            jsonschema.ValidationError: If config doesn't match schema
        """
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        logger.info(f"Loading configuration from {config_path}")

        with open(config_file, 'r') as f:
            if config_file.suffix.lower() in ['.yaml', '.yml']:
                config_data = yaml.safe_load(f)
            elif config_file.suffix.lower() == '.json':
                try:
                    config_data = json.load(f)
                except json.JSONDecodeError as e:
                    logger.error(f"Invalid JSON in configuration file: {e}")
                    raise
            else:
                raise ValueError(f"Unsupported configuration file format: {config_file.suffix}")

        cls.validate_config(config_data)
        logger.info("Configuration loaded and validated successfully")

        return cls._dict_to_config(config_data)

    @classmethod
    def validate_config(cls, config_data: Dict[str, Any]):
        """
        Validate configuration against schema

        Raises:
            jsonschema.ValidationError: If config is invalid
        """
        try:
            jsonschema.validate(config_data, cls.CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            logger.error(f"Configuration validation error: {e.message}")
            raise

    @classmethod
    def _dict_to_config(cls, config_data: Dict[str, Any]) -> SimulationConfig:
        """Convert configuration dictionary to SimulationConfig object"""

        sim_config = config_data.get('simulation', {})
        net_config = config_data.get('network', {})
        ue_config = config_data.get('ue', {})
        traffic_config = config_data.get('traffic', {})

        # Variant defaults first, explicit values override them
        overrides = {}
        overrides.update(sim_config)
        overrides.update({k: v for k, v in net_config.items() if k != 'variant'})
        overrides.update(ue_config)
        overrides.update(traffic_config)

        return SimulationConfig.for_variant(net_config.get('variant', 'multi_cell'), **overrides)

    @classmethod
    def config_to_dict(cls, config: SimulationConfig) -> Dict[str, Any]:
        """Convert a SimulationConfig to the sectioned file layout"""
        values = asdict(config)
        sections = {
            "simulation": ["simulation_time", "random_seed", "log_level", "verbose",
                           "output_directory", "enable_plots"],
            "network": ["variant", "technology", "num_enbs", "area_size", "attachment_mode"],
            "ue": ["num_ues", "min_speed", "max_speed"],
            "traffic": ["packet_size", "packet_interval", "client_start_time", "server_start_time"]
        }
        return {section: {key: values[key] for key in keys} for section, keys in sections.items()}

    @classmethod
    def create_default_config(cls, output_path: str = "config_template.json", scenario: str = "multi_cell_4g"):
        """Create a configuration file from a predefined scenario"""
        scenarios = cls.get_scenario_configs()
        if scenario not in scenarios:
            raise ValueError(f"Unknown scenario: {scenario}")

        config = scenarios[scenario]
        path = Path(output_path)

        try:
            with open(path, 'w') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    yaml.dump(config, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config, f, indent=2)
            logger.info(f"Default configuration template created: {output_path}")
        except IOError as e:
            logger.error(f"Failed to create configuration template: {e}")
            raise

    @classmethod
    def validate_config_file(cls, config_path: str) -> bool:
        """
        Validate configuration file without running it

        Returns:
            True if valid, False otherwise
        """
        try:
            cls.load_config(config_path).validate()
            return True
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            return False

    @classmethod
    def get_scenario_configs(cls) -> Dict[str, Dict]:
        """Get predefined scenario configurations"""

        single_cell = {
            "simulation": {
                "simulation_time": 30.0,
                "random_seed": 1,
                "log_level": "INFO",
                "output_directory": "results/single_cell"
            },
            "network": {
                "variant": "single_cell",
                "num_enbs": 1,
                "area_size": 1000.0,
                "attachment_mode": "single_station"
            },
            "ue": {
                "num_ues": 50,
                "min_speed": 0.5,
                "max_speed": 2.0
            },
            "traffic": {
                "packet_size": 200,
                "packet_interval": 0.1
            }
        }

        multi_cell = {
            "simulation": {
                "simulation_time": 60.0,
                "random_seed": 1,
                "log_level": "INFO",
                "output_directory": "results/multi_cell"
            },
            "network": {
                "variant": "multi_cell",
                "num_enbs": 4,
                "area_size": 2000.0,
                "attachment_mode": "strongest_signal"
            },
            "ue": {
                "num_ues": 100,
                "min_speed": 0.5,
                "max_speed": 2.0
            },
            "traffic": {
                "packet_size": 200,
                "packet_interval": 0.02
            }
        }

        dense_city = cls.merge_configs(multi_cell, {
            "simulation": {"output_directory": "results/dense_city"},
            "network": {"num_enbs": 7, "technology": "5g"},
            "ue": {"num_ues": 200}
        })

        return {
            "single_cell_4g": cls.merge_configs(single_cell, {
                "network": {"technology": "4g"},
                "simulation": {"output_directory": "results/single_cell_4g"}
            }),
            "single_cell_5g": cls.merge_configs(single_cell, {
                "network": {"technology": "5g"},
                "simulation": {"output_directory": "results/single_cell_5g"}
            }),
            "multi_cell_4g": cls.merge_configs(multi_cell, {
                "network": {"technology": "4g"},
                "simulation": {"output_directory": "results/multi_cell_4g"}
            }),
            "multi_cell_5g": cls.merge_configs(multi_cell, {
                "network": {"technology": "5g"},
                "simulation": {"output_directory": "results/multi_cell_5g"}
            }),
            "dense_city_5g": dense_city
        }

    @classmethod
    def get_available_scenarios(cls) -> List[str]:
        """Get list of available predefined scenarios."""
        return list(cls.get_scenario_configs().keys())

    @classmethod
    def load_scenario(cls, scenario: str) -> SimulationConfig:
        """Build the SimulationConfig of a predefined scenario"""
        scenarios = cls.get_scenario_configs()
        if scenario not in scenarios:
            raise ValueError(f"Unknown scenario: {scenario}")

        config_data = scenarios[scenario]
        cls.validate_config(config_data)
        return cls._dict_to_config(config_data)

    @classmethod
    def merge_configs(cls, base_config: Dict, override_config: Dict) -> Dict:
        """
        Merge two configuration dictionaries

        Args:
            base_config: Base configuration
            override_config: Override values

        Returns:
            Merged configuration
        """
        def deep_merge(base: Dict, override: Dict) -> Dict:
            result = base.copy()

            for key, value in override.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = deep_merge(result[key], value)
                else:
                    result[key] = value

            return result

        return deep_merge(base_config, override_config)
