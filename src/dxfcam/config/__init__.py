"""Default settings and persisted preferences."""
