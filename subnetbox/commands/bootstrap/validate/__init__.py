"""
Validate module - Bootstrap configuration validation functionality.
"""

from .validator import validate_bootstrap_config

__all__ = ["validate_bootstrap_config"]
