"""
Bootstrap command package - Create a subnet and deploy a custom VM on a local network.

This package provides:
- bootstrap: Main CLI command with run/validate/create-sample subcommands
- The bootstrap executor and its steps
- Configuration loading and validation
"""

from .bootstrap import bootstrap

__all__ = ["bootstrap"]
