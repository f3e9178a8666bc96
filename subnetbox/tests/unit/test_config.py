"""
Unit tests for bootstrap configuration loading and validation.
"""

import pytest
import yaml

from subnetbox.commands.bootstrap.config import (
    apply_defaults,
    create_sample_bootstrap_config,
    load_bootstrap_config,
    merge_cli_overrides,
)
from subnetbox.commands.bootstrap.validate import validate_bootstrap_config
from subnetbox.commands.constants import (
    EXPECTED_SUBNET_ID,
    LONG_WAIT_TIME,
    VALIDATOR_WEIGHT,
    WAIT_TIME,
)
from subnetbox.commands.errors import ConfigurationError


def valid_config(**overrides):
    config = apply_defaults({"vm": {"vm_id": "M1", "genesis": "genesis.json"}})
    config.update(overrides)
    return config


class TestApplyDefaults:
    def test_empty_config(self):
        config = apply_defaults(None)
        assert config["nodes"]["count"] == 5
        assert config["subnet"]["expected_id"] == EXPECTED_SUBNET_ID
        assert config["validators"]["weight"] == VALIDATOR_WEIGHT
        assert config["polling"] == {
            "interval": WAIT_TIME,
            "long_interval": LONG_WAIT_TIME,
            "parallel": False,
        }
        assert config["workflow_timeout"] == 0

    def test_user_values_win(self):
        config = apply_defaults({"nodes": {"count": 3}, "workflow_timeout": 60})
        assert config["nodes"]["count"] == 3
        assert config["nodes"]["base_port"] == 9650
        assert config["workflow_timeout"] == 60

    def test_input_is_not_mutated(self):
        original = {"nodes": {"count": 3}}
        apply_defaults(original)
        assert original == {"nodes": {"count": 3}}


class TestMergeCliOverrides:
    def test_overrides_take_precedence(self):
        config = apply_defaults({"vm": {"vm_id": "from-file"}})
        merge_cli_overrides(
            config, vm_id="from-cli", genesis="g.json", vm_name="named", timeout=30, parallel=True
        )
        assert config["vm"]["vm_id"] == "from-cli"
        assert config["vm"]["genesis"] == "g.json"
        assert config["vm"]["name"] == "named"
        assert config["workflow_timeout"] == 30
        assert config["polling"]["parallel"] is True

    def test_missing_options_keep_file_values(self):
        config = apply_defaults({"vm": {"vm_id": "from-file"}, "workflow_timeout": 10})
        merge_cli_overrides(config, vm_id=None, genesis=None, timeout=None, parallel=False)
        assert config["vm"]["vm_id"] == "from-file"
        assert config["workflow_timeout"] == 10
        assert config["polling"]["parallel"] is False


class TestLoadBootstrapConfig:
    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "subnetbox.yml"
        path.write_text(yaml.dump({"nodes": {"count": 2}, "vm": {"vm_id": "M1"}}))

        config = load_bootstrap_config(str(path))

        assert config["nodes"]["count"] == 2
        assert config["vm"]["vm_id"] == "M1"
        assert config["keystore"]["username"] == "test"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_bootstrap_config(str(path))["nodes"]["count"] == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_bootstrap_config(str(tmp_path / "missing.yml"))
        assert "not found" in exc_info.value.message

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("nodes: [unclosed")
        with pytest.raises(ConfigurationError) as exc_info:
            load_bootstrap_config(str(path))
        assert "Invalid YAML" in exc_info.value.message

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_bootstrap_config(str(path))

    def test_sample_config_round_trips_through_validator(self, tmp_path):
        path = tmp_path / "sample.yml"
        create_sample_bootstrap_config(str(path))

        config = load_bootstrap_config(str(path))

        assert validate_bootstrap_config(config)["valid"] is True


class TestValidateBootstrapConfig:
    def test_valid_config(self):
        assert validate_bootstrap_config(valid_config()) == {"valid": True, "errors": []}

    def test_vm_required_for_run(self):
        result = validate_bootstrap_config(apply_defaults({}))
        assert result["valid"] is False
        assert any("vm.vm_id" in e for e in result["errors"])
        assert any("vm.genesis" in e for e in result["errors"])

    def test_vm_optional_for_validate_only(self):
        assert validate_bootstrap_config(apply_defaults({}), require_vm=False)["valid"] is True

    def test_non_dict_section(self):
        config = valid_config(nodes=["a"])
        result = validate_bootstrap_config(config)
        assert result["errors"] == ["'nodes' must be a dictionary"]

    @pytest.mark.parametrize(
        "nodes, message",
        [
            ({"count": 0}, "nodes.count"),
            ({"count": True}, "nodes.count"),
            ({"base_port": 65530}, "exceeds 65535"),
            ({"endpoints": []}, "nodes.endpoints"),
            ({"node_ids": ["NodeID-1"]}, "lists 1 ids for 5 nodes"),
            ({"count": 2, "node_ids": ["NodeID-1", "NodeID-1"]}, "duplicates"),
        ],
    )
    def test_invalid_nodes(self, nodes, message):
        config = valid_config()
        config["nodes"].update(nodes)
        result = validate_bootstrap_config(config)
        assert result["valid"] is False
        assert any(message in e for e in result["errors"])

    def test_negative_timeout(self):
        result = validate_bootstrap_config(valid_config(workflow_timeout=-1))
        assert "'workflow_timeout' must be a non-negative number" in result["errors"]

    def test_empty_keystore_password(self):
        config = valid_config()
        config["keystore"]["password"] = ""
        result = validate_bootstrap_config(config)
        assert "keystore.password must be a non-empty string" in result["errors"]

    def test_step_validation_errors_are_reported(self):
        config = valid_config()
        config["validators"]["end_offset"] = 10
        config["validators"]["start_offset"] = 20
        result = validate_bootstrap_config(config)
        assert result["valid"] is False
        assert any("end_offset" in e for e in result["errors"])

    @pytest.mark.parametrize("expected_id", [None, ""])
    def test_expected_subnet_cannot_be_switched_off(self, tmp_path, expected_id):
        path = tmp_path / "no-subnet-check.yml"
        path.write_text(
            yaml.dump(
                {
                    "subnet": {"expected_id": expected_id},
                    "vm": {"vm_id": "M1", "genesis": "genesis.json"},
                }
            )
        )

        result = validate_bootstrap_config(load_bootstrap_config(str(path)))

        assert result["valid"] is False
        assert any("expected_id" in e for e in result["errors"])
