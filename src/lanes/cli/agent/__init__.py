"""Code agent commands."""
