"""Prometheus exporter for the OpenStack networking service."""

__version__ = "0.1.0"
