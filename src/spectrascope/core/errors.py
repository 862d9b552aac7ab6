"""
Error taxonomy for the synthesis and analysis core.

Analyzers and validators raise these; the frame engine is the only
place that turns them into an error result.
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure categories reported in a frame result."""

    SIZE = "SizeError"
    PARAMETER = "ParameterError"
    INTERNAL = "InternalError"


class SpectrascopeError(Exception):
    """Base class for all core failures."""

    kind = ErrorKind.INTERNAL


class SizeError(SpectrascopeError, ValueError):
    """Signal length or grid size is not a supported power of two."""

    kind = ErrorKind.SIZE


class ParameterError(SpectrascopeError, ValueError):
    """A synthesis parameter is non-finite or outside its range."""

    kind = ErrorKind.PARAMETER


class InternalError(SpectrascopeError, RuntimeError):
    """Unexpected numeric failure, e.g. a non-finite output buffer."""

    kind = ErrorKind.INTERNAL
