"""
Error taxonomy for hextile.

All errors are structural problems with the input or configuration; nothing
here is transient, so callers should not retry.
"""


class HextileError(ValueError):
    """Base class for every error raised by the tiling engine."""


class ConfigError(HextileError):
    """Invalid or degenerate configuration (shape, projection, basis axes)."""


class GeometryError(HextileError):
    """Malformed input geometry, detected before tracing starts."""


class DegenerateLatticeError(HextileError):
    """The 2-axis solver cannot resolve an intersection (parallel axes)."""
