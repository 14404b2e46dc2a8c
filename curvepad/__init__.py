"""curvepad: bonding-curve token launchpad."""

__version__ = "0.1.0"
