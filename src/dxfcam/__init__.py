"""2D DXF contour to 3-axis G-code toolpath generator."""

__version__ = "0.1.0"
