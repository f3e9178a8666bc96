"""
Run module - Bootstrap execution functionality.

This module handles:
- Building the ordered bootstrap steps from configuration
- Connecting to the cluster and running the steps
- Cancellation via signals and the optional workflow deadline
"""

from .executor import BootstrapExecutor, build_steps
from .run import run_bootstrap, run_bootstrap_sync, run_bootstrap_workflow

__all__ = [
    "BootstrapExecutor",
    "build_steps",
    "run_bootstrap",
    "run_bootstrap_sync",
    "run_bootstrap_workflow",
]
