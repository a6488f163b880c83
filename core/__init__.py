"""
Core Module Package.

This package contains the core infrastructure components
that all other modules depend on.

Components:
- exceptions: Custom exception hierarchy
- constants: Column schemas, markers and default file locations
- config: Loader configuration (environment / YAML)
"""

from .exceptions import (
    LoaderException,
    SourceReadError,
    SinkWriteError,
    MalformedRowError,
    UnknownNodeKindError,
    PipelineError,
)

__all__ = [
    "LoaderException",
    "SourceReadError",
    "SinkWriteError",
    "MalformedRowError",
    "UnknownNodeKindError",
    "PipelineError",
]
