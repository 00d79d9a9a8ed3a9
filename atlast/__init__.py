"""
atlast - Pack many small images into one texture atlas

Builds a single .atlas file holding the composed image (atlas.png) and a
binary table of where every source image was placed (atlas.meta).
"""

from atlast.config import AtlasConfig
from atlast.loader import load_directory, load_image
from atlast.packing import compose_atlas, pack_rectangles
from atlast.pipeline import AtlasBuild, build_atlas, build_atlas_from_directory, load_atlas
from atlast.schema import AtlasArtifact, Canvas, Placement, PlacementTable, Rectangle, SourceImage
from atlast.serialization import deserialize_atlas, serialize_atlas

__version__ = "0.1.0"
__all__ = [
    "AtlasConfig",
    "AtlasBuild",
    "build_atlas",
    "build_atlas_from_directory",
    "load_atlas",
    "load_directory",
    "load_image",
    "pack_rectangles",
    "compose_atlas",
    "serialize_atlas",
    "deserialize_atlas",
    "AtlasArtifact",
    "Canvas",
    "Placement",
    "PlacementTable",
    "Rectangle",
    "SourceImage",
]
