"""Core library for Lanes (no CLI or terminal concerns)."""
