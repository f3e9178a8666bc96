"""
Result utilities for consistent success/error shapes across commands.

Note: Error details may be included in results. Keystore
passwords and private keys must never be passed to error classes, as they may
be logged or printed.
"""

from typing import Any, Optional

from subnetbox.commands.errors import (
    BootstrapCancelledError,
    BootstrapError,
    SubnetboxError,
)


def ok(data: Optional[Any] = None, **extras: Any) -> dict[str, Any]:
    """Standard success result shape."""
    result: dict[str, Any] = {"success": True}
    if data is not None:
        result["data"] = data
    if extras:
        result.update(extras)
    return result


def fail(
    message: str,
    *,
    error: Optional[Exception] = None,
    **extras: Any,
) -> dict[str, Any]:
    """Standard failure result shape with optional exception details.

    For bootstrap errors the failing step and whether the run was cancelled
    are lifted to the top level, so a caller can decide between "test failed"
    and "run aborted" without inspecting the exception.
    """
    result: dict[str, Any] = {"success": False, "error": message}
    if error is not None:
        formatted = format_error(error)
        result["exception"] = formatted
        result["error_type"] = formatted["type"]
        if "code" in formatted:
            result["error_code"] = formatted["code"]
        if "details" in formatted:
            result["error_details"] = formatted["details"]
        if isinstance(error, BootstrapError):
            result["step_name"] = error.step_name
        result["cancelled"] = isinstance(error, BootstrapCancelledError)
    if extras:
        result.update(extras)
    return result


def format_error(error: Exception) -> dict[str, Any]:
    """Format an exception with type and message.

    SubnetboxError subclasses also contribute their code and details.
    """
    result = {
        "type": type(error).__name__,
        "message": str(error),
    }
    if isinstance(error, SubnetboxError):
        if error.code:
            result["code"] = error.code
        if error.details:
            result["details"] = error.details
    return result
