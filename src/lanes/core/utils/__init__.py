"""Shared utilities for Lanes core modules."""
