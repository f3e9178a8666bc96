"""
Unit tests for the subnetbox typed error classes.
"""

import pytest

from subnetbox.commands.errors import (
    AbortedOperationError,
    BootstrapCancelledError,
    BootstrapError,
    ConfigurationError,
    ConsistencyMismatchError,
    GenesisReadError,
    RejectedOperationError,
    SubnetboxError,
    TransportError,
)


class TestSubnetboxError:
    """Tests for the base SubnetboxError class."""

    def test_basic_error(self):
        """Test basic error creation with message only."""
        error = SubnetboxError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code is None
        assert error.details == {}

    def test_error_with_code(self):
        """Test error with code."""
        error = SubnetboxError("Something went wrong", code="ERR_001")
        assert str(error) == "[ERR_001] Something went wrong"

    def test_to_dict(self):
        """Test error serialization to dictionary."""
        error = SubnetboxError("Test error", code="TEST_CODE", details={"key": "value"})
        assert error.to_dict() == {
            "type": "SubnetboxError",
            "message": "Test error",
            "code": "TEST_CODE",
            "details": {"key": "value"},
        }

    def test_to_dict_minimal(self):
        """Test minimal error serialization."""
        error = SubnetboxError("Test error")
        assert error.to_dict() == {"type": "SubnetboxError", "message": "Test error"}


class TestBootstrapError:
    """Tests for BootstrapError and step attribution."""

    def test_step_name_in_details(self):
        error = BootstrapError("boom", step_name="create_subnet")
        assert error.step_name == "create_subnet"
        assert error.details["step_name"] == "create_subnet"

    def test_set_step_fills_missing_step(self):
        error = BootstrapError("boom")
        error.set_step("add_validators")
        assert error.step_name == "add_validators"
        assert error.details["step_name"] == "add_validators"

    def test_set_step_keeps_existing_step(self):
        """An inner step name wins over the outer one."""
        error = BootstrapError("boom", step_name="discover_nodes")
        error.set_step("report")
        assert error.step_name == "discover_nodes"


class TestTaxonomy:
    """Tests for the concrete failure kinds."""

    def test_transport_error(self):
        error = TransportError("timed out", url="http://n1/ext/P", status_code=502)
        assert error.code == "TRANSPORT_ERROR"
        assert error.details == {"url": "http://n1/ext/P", "status_code": 502}

    def test_rejected_operation(self):
        error = RejectedOperationError(
            "rejected", url="http://n1/ext/P", method="platform.createSubnet", rpc_code=-32000
        )
        assert error.code == "OPERATION_REJECTED"
        assert error.details["method"] == "platform.createSubnet"
        assert error.details["rpc_code"] == -32000

    def test_aborted_operation(self):
        error = AbortedOperationError("aborted", operation_id="tx-1", status="Aborted")
        assert error.code == "OPERATION_ABORTED"
        assert error.operation_id == "tx-1"
        assert error.details["status"] == "Aborted"

    def test_consistency_mismatch_keeps_both_values(self):
        error = ConsistencyMismatchError("mismatch", expected="A", observed="B")
        assert error.code == "CONSISTENCY_MISMATCH"
        assert error.details["expected"] == "A"
        assert error.details["observed"] == "B"

    def test_consistency_mismatch_records_missing_observation(self):
        error = ConsistencyMismatchError("nothing found", expected="A")
        assert "observed" in error.details
        assert error.details["observed"] is None

    def test_genesis_read_error(self):
        error = GenesisReadError("cannot read", source="/tmp/genesis.bin")
        assert error.code == "GENESIS_UNREADABLE"
        assert error.details["source"] == "/tmp/genesis.bin"

    def test_cancelled_defaults(self):
        error = BootstrapCancelledError(reason="deadline")
        assert str(error) == "[CANCELLED] Bootstrap cancelled"
        assert error.reason == "deadline"

    def test_configuration_error_with_file(self):
        error = ConfigurationError("Invalid config", config_file="subnetbox.yml")
        assert error.code == "CONFIGURATION_ERROR"
        assert error.config_file == "subnetbox.yml"
        assert error.details["config_file"] == "subnetbox.yml"


class TestErrorHierarchy:
    """Tests for error class hierarchy."""

    @pytest.mark.parametrize(
        "error_class",
        [
            TransportError,
            RejectedOperationError,
            AbortedOperationError,
            ConsistencyMismatchError,
            GenesisReadError,
            BootstrapCancelledError,
        ],
    )
    def test_failures_are_bootstrap_errors(self, error_class):
        error = error_class("test")
        assert isinstance(error, BootstrapError)
        assert isinstance(error, SubnetboxError)

    def test_cancellation_is_distinguishable(self):
        """Test cancellation is not caught by handlers for network failures."""
        with pytest.raises(BootstrapCancelledError):
            try:
                raise BootstrapCancelledError()
            except (TransportError, RejectedOperationError, AbortedOperationError):
                pytest.fail("cancellation caught as a network failure")

    def test_configuration_error_is_not_a_step_failure(self):
        assert not isinstance(ConfigurationError("bad"), BootstrapError)
