"""
Atlas build pipeline

Runs load → pack → compose → serialize → write, strictly in sequence.
Any failure aborts the run before the output file is touched.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from atlast.config import AtlasConfig
from atlast.loader import index_images, load_directory
from atlast.packing import compose_atlas, pack_rectangles
from atlast.schema import AtlasArtifact, Canvas, PlacementTable, SourceImage
from atlast.serialization import deserialize_atlas, read_artifact, serialize_atlas, write_artifact

logger = logging.getLogger(__name__)


@dataclass
class AtlasBuild:
    """
    Result of one atlas build.

    Attributes:
        canvas: Composed pixel buffer
        table: Placements in packing order
        artifact: Serialized container bytes
        efficiency: Fraction of the canvas covered by images
    """
    canvas: Canvas
    table: PlacementTable
    artifact: AtlasArtifact
    efficiency: float

    def save(self, path: Union[str, Path]) -> Path:
        """Write the artifact atomically."""
        return write_artifact(self.artifact, path)


def build_atlas(images: Iterable[SourceImage], config: Optional[AtlasConfig] = None) -> AtlasBuild:
    """
    Pack, compose and serialize images into an in-memory atlas.

    Raises:
        DuplicateNameError: If two images share a name
        PackingError: If the images can't be packed
        ComposeError: If composition fails
        SerializeError: If encoding fails
    """
    config = config or AtlasConfig()
    sources = index_images(images)

    rectangles = {name: image.rectangle for name, image in sources.items()}
    result = pack_rectangles(rectangles, config.max_dimension)

    canvas = compose_atlas(result.canvas_width, result.canvas_height, result.table, sources)
    artifact = serialize_atlas(canvas, result.table, config)

    return AtlasBuild(canvas=canvas, table=result.table, artifact=artifact, efficiency=result.efficiency)


def build_atlas_from_directory(
    asset_dir: Union[str, Path],
    output_path: Union[str, Path],
    config: Optional[AtlasConfig] = None
) -> AtlasBuild:
    """
    Build an atlas from every image under asset_dir and write it to output_path.

    The output file is only created once the whole atlas is built in memory.
    """
    config = config or AtlasConfig()
    images = load_directory(asset_dir, config)
    build = build_atlas(images, config)
    build.save(output_path)
    return build


def load_atlas(path: Union[str, Path], config: Optional[AtlasConfig] = None) -> Tuple[Canvas, PlacementTable]:
    """Read and decode an .atlas file."""
    return deserialize_atlas(read_artifact(path, config), config)
