"""Operation sanity checks.

The build pipeline trusts whatever ranges it is given; callers run these
checks first and refuse to build on errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.operation import ChainMode, Operation


@dataclass
class ValidationIssue:
    """A single validation problem found in the operation."""

    severity: str  # "error" or "warning"
    message: str
    field_name: str = ""


@dataclass
class ValidationResult:
    """Result of validating an operation."""

    issues: list[ValidationIssue] = field(default_factory=list)

    def error(self, message: str, field_name: str = "") -> None:
        self.issues.append(ValidationIssue("error", message, field_name))

    def warning(self, message: str, field_name: str = "") -> None:
        self.issues.append(ValidationIssue("warning", message, field_name))

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "warning" for i in self.issues)

    @property
    def is_ok(self) -> bool:
        return len(self.issues) == 0


def validate_operation(op: Operation) -> ValidationResult:
    """Check *op* for values the pipeline cannot work with.

    Errors: non-positive step-down, feeds or chain tolerance; non-positive
    snap grid in tracing mode; negative output precision.
    Warnings: safe Z at or below the stock top, zero cut depth, an angular
    tolerance that accepts any heading.
    """
    result = ValidationResult()

    if op.step_down <= 0:
        result.error(f"Step-down {op.step_down} must be positive", "step_down")
    if op.feed_xy <= 0:
        result.error(f"XY feed {op.feed_xy} must be positive", "feed_xy")
    if op.feed_z <= 0:
        result.error(f"Z feed {op.feed_z} must be positive", "feed_z")
    if op.chain_tolerance <= 0:
        result.error(
            f"Chain tolerance {op.chain_tolerance} must be positive",
            "chain_tolerance",
        )
    if op.fusion_tolerance < 0:
        result.error(
            f"Fusion tolerance {op.fusion_tolerance} must not be negative",
            "fusion_tolerance",
        )
    if op.chain_mode is ChainMode.TRACE and op.snap_grid <= 0:
        result.error(f"Snap grid {op.snap_grid} must be positive", "snap_grid")
    if op.precision < 0:
        result.error(f"Precision {op.precision} must not be negative", "precision")

    if op.safe_z <= 0:
        result.warning(
            f"Safe Z {op.safe_z} is at or below the stock top", "safe_z",
        )
    if op.total_depth == 0:
        result.warning("Cut depth is zero; no passes will be generated", "total_depth")
    if op.chain_mode is ChainMode.TRACE and op.angle_tolerance >= 360:
        result.warning(
            f"Angle tolerance {op.angle_tolerance}° accepts any heading",
            "angle_tolerance",
        )

    return result
