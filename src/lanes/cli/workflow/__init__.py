"""Workflow template commands."""
