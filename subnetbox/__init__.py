"""
Subnetbox - bootstrap a subnet and custom VM on a local multi-node test network.
"""

__version__ = "0.1.0"
