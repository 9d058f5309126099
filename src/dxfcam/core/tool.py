"""Cutting tool definition, used for the program's tool comment."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Tool:
    """A cutting tool.  Dimensions in inches."""
    number: int
    name: str
    diameter: float = 0.125

    def describe(self) -> str:
        return f"T{self.number} {self.name} D={self.diameter:g}"
