"""Commands invoked by agent lifecycle hooks."""
