from wallpaperer.compositor.compositor import (
    CompositionResult,
    Compositor,
    DimensionMismatch,
    ValidationResult,
)

__all__ = [
    "CompositionResult",
    "Compositor",
    "DimensionMismatch",
    "ValidationResult",
]
