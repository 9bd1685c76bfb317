"""Optimal lineup and roster-efficiency engine for fantasy football dashboards."""

__version__ = "0.1.0"
