"""Domain layer: errors and schemas."""

from .errors import (
    ErrorCodes,
    FileReadError,
    GenerationError,
    StudioError,
    ValidationError,
)
from .schemas import (
    GenerationRun,
    ImageReference,
    ProjectEntry,
    RegistryState,
    RunResult,
    SourceFile,
)

__all__ = [
    "StudioError",
    "FileReadError",
    "ValidationError",
    "GenerationError",
    "ErrorCodes",
    "SourceFile",
    "ImageReference",
    "ProjectEntry",
    "RegistryState",
    "GenerationRun",
    "RunResult",
]
