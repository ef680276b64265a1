"""Bounded task loop driving an external coding agent."""

__version__ = "1.0.0"
