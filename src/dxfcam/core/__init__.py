"""Geometry, chaining and toolpath core."""
