"""Storage, raw logging, deployment and host access for Stylus-style EVM programs."""

__version__ = "0.1.2"