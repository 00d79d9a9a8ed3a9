"""
Atlas composition.

Copies every source image into its placement on a transparent canvas.
"""

import logging
from typing import Iterable, Mapping, Union

from PIL import Image

from atlast.exceptions import ComposeError, DimensionMismatchError, MissingSourceError
from atlast.schema import Canvas, PlacementTable, SourceImage, TRANSPARENT

logger = logging.getLogger(__name__)


def _index_sources(source_images: Union[Mapping[str, SourceImage], Iterable[SourceImage]]) -> Mapping[str, SourceImage]:
    if isinstance(source_images, Mapping):
        return source_images
    return {image.name: image for image in source_images}


def compose_atlas(
    canvas_width: int,
    canvas_height: int,
    table: PlacementTable,
    source_images: Union[Mapping[str, SourceImage], Iterable[SourceImage]]
) -> Canvas:
    """
    Compose the atlas pixel buffer.

    Every placement is checked before any pixel is written, so a bad table
    fails without producing a half-composed canvas.

    Args:
        canvas_width: Canvas width in pixels (from the packer)
        canvas_height: Canvas height in pixels (from the packer)
        table: Placements to fill
        source_images: Dict of name -> SourceImage, or an iterable of SourceImage

    Returns:
        Canvas with every placement filled and everything else (0, 0, 0, 0)

    Raises:
        MissingSourceError: If a placement names an image that was not supplied
        DimensionMismatchError: If an image's size differs from its placement
        ComposeError: If a placement reaches outside the canvas
    """
    sources = _index_sources(source_images)

    for placement in table.placements:
        image = sources.get(placement.name)
        if image is None:
            raise MissingSourceError(placement.name)
        if (image.width, image.height) != (placement.width, placement.height):
            raise DimensionMismatchError(
                placement.name,
                (placement.width, placement.height),
                (image.width, image.height)
            )
        if not placement.fits_within(canvas_width, canvas_height):
            raise ComposeError(
                f"Placement '{placement.name}' at ({placement.x}, {placement.y}) size "
                f"{placement.width}x{placement.height} is outside the {canvas_width}x{canvas_height} canvas"
            )

    atlas = Image.new('RGBA', (canvas_width, canvas_height), TRANSPARENT)

    for placement in table.placements:
        image = sources[placement.name]
        tile = Image.frombytes('RGBA', (image.width, image.height), image.pixels)
        # No mask: the tile's alpha replaces the canvas pixels instead of blending
        atlas.paste(tile, (placement.x, placement.y))

    logger.info(f"Composed {len(table)} images into {canvas_width}x{canvas_height} atlas")
    return Canvas(canvas_width, canvas_height, atlas.tobytes())
