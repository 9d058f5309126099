"""Low-level G-code line formatting helpers."""

from __future__ import annotations

from typing import Optional


def fmt(value: float, decimals: int = 4) -> str:
    """Format a float for G-code, quantized and stripped of trailing zeros."""
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def rapid(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
    decimals: int = 4,
) -> str:
    """G0 rapid traverse."""
    parts = ["G0"]
    if x is not None:
        parts.append(f"X{fmt(x, decimals)}")
    if y is not None:
        parts.append(f"Y{fmt(y, decimals)}")
    if z is not None:
        parts.append(f"Z{fmt(z, decimals)}")
    return " ".join(parts)


def linear(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
    f: Optional[float] = None,
    decimals: int = 4,
) -> str:
    """G1 linear interpolation."""
    parts = ["G1"]
    if x is not None:
        parts.append(f"X{fmt(x, decimals)}")
    if y is not None:
        parts.append(f"Y{fmt(y, decimals)}")
    if z is not None:
        parts.append(f"Z{fmt(z, decimals)}")
    if f is not None:
        parts.append(f"F{fmt(f, decimals)}")
    return " ".join(parts)


def arc(
    x: float,
    y: float,
    i: float,
    j: float,
    ccw: bool,
    decimals: int = 4,
) -> str:
    """G2 (clockwise) / G3 (counter-clockwise) arc with incremental center."""
    word = "G3" if ccw else "G2"
    return (
        f"{word} X{fmt(x, decimals)} Y{fmt(y, decimals)} "
        f"I{fmt(i, decimals)} J{fmt(j, decimals)}"
    )


def feed(f: float, decimals: int = 4) -> str:
    """Standalone feed-rate word."""
    return f"F{fmt(f, decimals)}"


def comment(text: str) -> str:
    """Wrap *text* in a parenthetical comment."""
    # Nested parens end the comment early on most controls
    cleaned = text.replace("(", "").replace(")", "")
    return f"({cleaned})"
