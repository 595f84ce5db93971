"""Shared helpers for the Lanes test suite."""
