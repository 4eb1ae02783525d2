"""Acceptance Engine -- declarative acceptance checks over project files."""

__version__ = "0.1.0"
