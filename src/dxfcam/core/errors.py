"""Build-abort errors.

All of these are deterministic functions of the input: retrying without
changing geometry or options gives the same result.
"""

from __future__ import annotations


class BuildError(RuntimeError):
    """Base class for errors that abort a build."""


class EmptyGeometryError(BuildError):
    """No usable segments remained after extraction and snap filtering."""

    def __init__(self, message: str = "Drawing contains no cuttable geometry"):
        super().__init__(message)


class NoPathsProducedError(BuildError):
    """Chaining or post-processing produced no contours."""

    def __init__(
        self,
        message: str = "No contours produced; try relaxing the chain tolerance",
    ):
        super().__init__(message)
