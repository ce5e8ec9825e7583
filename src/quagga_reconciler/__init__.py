"""Declarative reconciliation of Quagga/FRR routing configuration."""

__version__ = "0.1.0"
