"""Swap quote request validation and routing for a DEX aggregation API."""

__version__ = "0.1.0"
