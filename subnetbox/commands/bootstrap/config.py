"""
Configuration management for bootstrap workflows.
"""

import copy
from typing import Any, Optional

import yaml

from subnetbox.commands.constants import (
    BASE_HTTP_PORT,
    DEFAULT_CONFIG_FILE,
    DEFAULT_FUNDED_KEY,
    DEFAULT_HOST,
    DEFAULT_KEYSTORE_PASSWORD,
    DEFAULT_KEYSTORE_USERNAME,
    DEFAULT_SCHEME,
    DEFAULT_VM_NAME,
    EXPECTED_SUBNET_ID,
    LONG_WAIT_TIME,
    NUM_NODES,
    PORT_STEP,
    VALIDATOR_END_OFFSET,
    VALIDATOR_START_OFFSET,
    VALIDATOR_WEIGHT,
    WAIT_TIME,
)
from subnetbox.commands.errors import ConfigurationError
from subnetbox.commands.utils import console

# Sections merged with user values; anything the file leaves out comes from here
DEFAULT_SECTIONS: dict[str, dict[str, Any]] = {
    "nodes": {
        "count": NUM_NODES,
        "host": DEFAULT_HOST,
        "base_port": BASE_HTTP_PORT,
        "port_step": PORT_STEP,
        "scheme": DEFAULT_SCHEME,
    },
    "keystore": {
        "username": DEFAULT_KEYSTORE_USERNAME,
        "password": DEFAULT_KEYSTORE_PASSWORD,
        "private_key": DEFAULT_FUNDED_KEY,
    },
    "subnet": {
        "expected_id": EXPECTED_SUBNET_ID,
        "threshold": 1,
    },
    "validators": {
        "weight": VALIDATOR_WEIGHT,
        "start_offset": VALIDATOR_START_OFFSET,
        "end_offset": VALIDATOR_END_OFFSET,
    },
    "vm": {
        "name": DEFAULT_VM_NAME,
    },
    "polling": {
        "interval": WAIT_TIME,
        "long_interval": LONG_WAIT_TIME,
        "parallel": False,
    },
}


def apply_defaults(config: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Return a copy of ``config`` with every missing section and key filled in."""
    merged = copy.deepcopy(config) if config else {}
    merged.setdefault("name", "Local subnet bootstrap")
    for section, defaults in DEFAULT_SECTIONS.items():
        value = merged.get(section)
        if value is None:
            merged[section] = dict(defaults)
        elif isinstance(value, dict):
            merged[section] = {**defaults, **value}
        # Non-dict sections are left for the validator to report
    # No deadline unless asked for; the workflow waits until cancelled
    merged.setdefault("workflow_timeout", 0)
    return merged


def merge_cli_overrides(config: dict[str, Any], **overrides: Any) -> dict[str, Any]:
    """Apply CLI values on top of the YAML config. CLI options take precedence.

    Recognised keys: vm_id, genesis, vm_name, timeout, parallel. ``None``
    means "not given on the command line".
    """
    vm = config.setdefault("vm", {})
    if overrides.get("vm_id") is not None:
        vm["vm_id"] = overrides["vm_id"]
    if overrides.get("genesis") is not None:
        vm["genesis"] = overrides["genesis"]
    if overrides.get("vm_name") is not None:
        vm["name"] = overrides["vm_name"]
    if overrides.get("timeout") is not None:
        config["workflow_timeout"] = overrides["timeout"]
    if overrides.get("parallel"):
        config.setdefault("polling", {})["parallel"] = True
    return config


def load_bootstrap_config(config_path: str) -> dict[str, Any]:
    """Load a bootstrap configuration from a YAML file and fill in defaults."""
    try:
        with open(config_path) as file:
            config = yaml.safe_load(file)
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Bootstrap configuration file not found: {config_path}",
            config_file=config_path,
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML format: {str(e)}", config_file=config_path
        ) from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            "Bootstrap configuration must be a mapping", config_file=config_path
        )
    return apply_defaults(config)


def create_sample_bootstrap_config(output_path: str = DEFAULT_CONFIG_FILE) -> None:
    """Create a sample bootstrap configuration file."""
    sample_config = {
        "name": "Sample subnet bootstrap",
        "description": "Create a subnet, register all nodes as validators and deploy a custom VM",
        # Nodes of the local cluster; node i listens on base_port + i * port_step
        "nodes": {
            "count": NUM_NODES,
            "host": DEFAULT_HOST,
            "base_port": BASE_HTTP_PORT,
            "port_step": PORT_STEP,
            # Optional; discovered with info.getNodeID when omitted
            # "node_ids": ["NodeID-...", ...],
        },
        "keystore": {
            "username": DEFAULT_KEYSTORE_USERNAME,
            "password": DEFAULT_KEYSTORE_PASSWORD,
        },
        # Subnet id the nodes were started to track
        "subnet": {"expected_id": EXPECTED_SUBNET_ID},
        "validators": {
            "weight": VALIDATOR_WEIGHT,
            "start_offset": VALIDATOR_START_OFFSET,
            "end_offset": VALIDATOR_END_OFFSET,
        },
        "vm": {
            "vm_id": "<your VM id>",
            "genesis": "./genesis.json",
            "name": DEFAULT_VM_NAME,
        },
        "polling": {
            "interval": WAIT_TIME,
            "long_interval": LONG_WAIT_TIME,
            "parallel": False,
        },
        # Seconds before the run is cancelled; 0 waits until interrupted
        "workflow_timeout": 0,
    }

    try:
        with open(output_path, "w") as file:
            yaml.dump(sample_config, file, default_flow_style=False, sort_keys=False)
        console.print(f"[green]✓ Sample bootstrap config created: {output_path}[/green]")
    except OSError as e:
        console.print(f"[red]Failed to create sample config: {str(e)}[/red]")
        raise ConfigurationError(
            f"Failed to create sample config: {e}", config_file=output_path
        ) from e
