"""Atlas data model."""
from .atlas import (
    Rectangle,
    Placement,
    PlacementTable,
    SourceImage,
    Canvas,
    AtlasArtifact,
    BYTES_PER_PIXEL,
    TRANSPARENT,
    U32_MAX,
)

__all__ = [
    "Rectangle",
    "Placement",
    "PlacementTable",
    "SourceImage",
    "Canvas",
    "AtlasArtifact",
    "BYTES_PER_PIXEL",
    "TRANSPARENT",
    "U32_MAX",
]
