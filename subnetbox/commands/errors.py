"""
Typed error classes for subnetbox.

This module provides the error hierarchy used by the bootstrap workflow:
- SubnetboxError: Base exception for all subnetbox errors
- ConfigurationError: Problems with the bootstrap configuration
- BootstrapError: Base for failures of a bootstrap step, carrying the step name
- TransportError: An RPC call failed or timed out
- RejectedOperationError: The cluster explicitly refused a request
- AbortedOperationError: A submitted operation reached a failure terminal state
- ConsistencyMismatchError: Observed cluster state disagrees with expectation
- GenesisReadError: The genesis payload could not be read
- BootstrapCancelledError: The caller cancelled the workflow
"""

from typing import Any, Optional


class SubnetboxError(Exception):
    """Base exception class for all subnetbox errors.

    Attributes:
        message: Human-readable error message
        code: Optional error code for programmatic handling
        details: Optional dictionary with additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for serialization."""
        result: dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            result["code"] = self.code
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigurationError(SubnetboxError):
    """Configuration-related errors.

    Raised when:
    - Configuration file is missing or malformed
    - Required configuration values are not set
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.config_file = config_file
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        super().__init__(
            message, code=code or "CONFIGURATION_ERROR", details=details
        )


class BootstrapError(SubnetboxError):
    """Errors raised while running the bootstrap workflow.

    The executor stamps the name of the failing step onto the error before
    propagating it, so callers always know where the workflow stopped.
    """

    def __init__(
        self,
        message: str,
        step_name: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.step_name = step_name
        details = details or {}
        if step_name:
            details["step_name"] = step_name
        super().__init__(message, code=code, details=details)

    def set_step(self, step_name: str) -> None:
        """Record the failing step unless an inner step already did."""
        if self.step_name is None:
            self.step_name = step_name
            self.details["step_name"] = step_name


class TransportError(BootstrapError):
    """Raised when an RPC call fails or times out before a response arrives."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.url = url
        self.status_code = status_code
        details = details or {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, code="TRANSPORT_ERROR", details=details)


class RejectedOperationError(BootstrapError):
    """Raised when a node answers a request with a JSON-RPC error."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        method: Optional[str] = None,
        rpc_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.url = url
        self.method = method
        self.rpc_code = rpc_code
        details = details or {}
        if url:
            details["url"] = url
        if method:
            details["method"] = method
        if rpc_code is not None:
            details["rpc_code"] = rpc_code
        super().__init__(message, code="OPERATION_REJECTED", details=details)


class AbortedOperationError(BootstrapError):
    """Raised when a submitted operation reaches a failure terminal state."""

    def __init__(
        self,
        message: str,
        operation_id: Optional[str] = None,
        status: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.operation_id = operation_id
        self.status = status
        details = details or {}
        if operation_id:
            details["operation_id"] = operation_id
        if status:
            details["status"] = status
        super().__init__(message, code="OPERATION_ABORTED", details=details)


class ConsistencyMismatchError(BootstrapError):
    """Raised when the cluster's view disagrees with what the workflow expects."""

    def __init__(
        self,
        message: str,
        expected: Optional[Any] = None,
        observed: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.expected = expected
        self.observed = observed
        details = details or {}
        details["expected"] = expected
        details["observed"] = observed
        super().__init__(message, code="CONSISTENCY_MISMATCH", details=details)


class GenesisReadError(BootstrapError):
    """Raised when the genesis payload cannot be read from its source."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.source = source
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, code="GENESIS_UNREADABLE", details=details)


class BootstrapCancelledError(BootstrapError):
    """Raised when the caller cancels the workflow or its deadline passes.

    Shares only BootstrapError with the other failure classes, so handlers
    for network failures never catch it.
    """

    def __init__(
        self,
        message: str = "Bootstrap cancelled",
        reason: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.reason = reason
        details = details or {}
        if reason:
            details["reason"] = reason
        super().__init__(message, code="CANCELLED", details=details)


# Export all error classes for convenient importing
__all__ = [
    "SubnetboxError",
    "ConfigurationError",
    "BootstrapError",
    "TransportError",
    "RejectedOperationError",
    "AbortedOperationError",
    "ConsistencyMismatchError",
    "GenesisReadError",
    "BootstrapCancelledError",
]
