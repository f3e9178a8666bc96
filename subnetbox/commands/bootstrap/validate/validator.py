"""
Bootstrap configuration validator.

Checks a configuration (after defaults have been applied) without touching
the cluster. Step-level checks are delegated to the step classes themselves
so the validator and the executor can never disagree.
"""

from typing import Any

from subnetbox.commands.bootstrap.run.executor import build_steps


def validate_bootstrap_config(config: dict, require_vm: bool = True) -> dict:
    """
    Validate a bootstrap configuration without executing it.

    Args:
        config: The configuration dictionary, with defaults applied
        require_vm: Whether vm.vm_id and vm.genesis must be present

    Returns:
        Dictionary with 'valid' boolean and 'errors' list
    """
    errors: list[str] = []

    for section in ("nodes", "keystore", "subnet", "validators", "vm", "polling"):
        if not isinstance(config.get(section), dict):
            errors.append(f"'{section}' must be a dictionary")
    if errors:
        return {"valid": False, "errors": errors}

    errors.extend(validate_nodes_config(config["nodes"]))
    errors.extend(validate_vm_config(config["vm"], require_vm))

    for field in ("username", "password"):
        value = config["keystore"].get(field)
        if not isinstance(value, str) or not value:
            errors.append(f"keystore.{field} must be a non-empty string")

    timeout = config.get("workflow_timeout", 0)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
        errors.append("'workflow_timeout' must be a non-negative number")

    try:
        build_steps(config)
    except ValueError as e:
        errors.append(str(e))

    return {"valid": len(errors) == 0, "errors": errors}


def validate_nodes_config(nodes: dict[str, Any]) -> list[str]:
    errors = []
    endpoints = nodes.get("endpoints")
    if endpoints is not None:
        if not isinstance(endpoints, list) or not endpoints:
            errors.append("nodes.endpoints must be a non-empty list of URLs")
        count = len(endpoints) if isinstance(endpoints, list) else 0
    else:
        count = nodes.get("count")
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            errors.append("nodes.count must be a positive integer")
            count = 0
        for field in ("base_port", "port_step"):
            value = nodes.get(field)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                errors.append(f"nodes.{field} must be a positive integer")
        base_port = nodes.get("base_port")
        port_step = nodes.get("port_step")
        if (
            isinstance(base_port, int)
            and isinstance(port_step, int)
            and count
            and base_port + (count - 1) * port_step > 65535
        ):
            errors.append("nodes: highest node port exceeds 65535")

    node_ids = nodes.get("node_ids")
    if node_ids is not None:
        if not isinstance(node_ids, list) or not all(
            isinstance(n, str) and n for n in node_ids
        ):
            errors.append("nodes.node_ids must be a list of node id strings")
        elif count and len(node_ids) != count:
            errors.append(
                f"nodes.node_ids lists {len(node_ids)} ids for {count} nodes"
            )
        elif len(set(node_ids)) != len(node_ids):
            errors.append("nodes.node_ids contains duplicates")
    return errors


def validate_vm_config(vm: dict[str, Any], require_vm: bool) -> list[str]:
    errors = []
    vm_id = vm.get("vm_id")
    if vm_id is None:
        if require_vm:
            errors.append("vm.vm_id is required (set it in the config or pass --vm-id)")
    elif not isinstance(vm_id, str) or not vm_id.strip():
        errors.append("vm.vm_id must be a non-empty string")

    genesis = vm.get("genesis")
    if genesis is None:
        if require_vm:
            errors.append(
                "vm.genesis is required (set it in the config or pass --genesis)"
            )
    elif not isinstance(genesis, str) or not genesis.strip():
        errors.append("vm.genesis must be a path to the genesis file")
    return errors
