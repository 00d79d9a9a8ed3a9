"""
Source image loading.

Walks an asset directory for image files and decodes each one to RGBA8.
Names are paths relative to the asset directory, in POSIX form, so images in
different subdirectories never collide.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from PIL import Image, UnidentifiedImageError

from atlast.config import AtlasConfig, DEFAULT_MAX_DIMENSION
from atlast.exceptions import DuplicateNameError, InvalidImageError
from atlast.schema import SourceImage
from atlast.serialization.image import pixel_limit

logger = logging.getLogger(__name__)


def image_to_source(name: str, image: Image.Image) -> SourceImage:
    """Convert a PIL image (any mode) into an RGBA8 SourceImage."""
    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    return SourceImage(name=name, width=image.width, height=image.height, pixels=image.tobytes())


def load_image(
    path: Union[str, Path],
    name: Optional[str] = None,
    max_dimension: int = DEFAULT_MAX_DIMENSION
) -> SourceImage:
    """
    Decode one image file.

    Args:
        path: Image file to read
        name: Name to record (default: the file name)
        max_dimension: Images up to max_dimension² pixels are accepted by
                       the decompression-bomb guard

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidImageError: If the file can't be decoded or is empty
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    try:
        with pixel_limit(max_dimension), Image.open(path) as img:
            img.load()
            return image_to_source(name or path.name, img)
    except Image.DecompressionBombError as e:
        raise InvalidImageError(f"{path} is too large to decode: {e}") from e
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise InvalidImageError(f"Could not decode {path}: {e}") from e


def find_image_files(asset_dir: Union[str, Path], config: Optional[AtlasConfig] = None) -> List[Path]:
    """Recursively list image files under asset_dir, sorted by relative path."""
    config = config or AtlasConfig()
    root = Path(asset_dir)

    files = []
    for path in root.rglob('*'):
        if not path.is_file():
            continue
        if path.suffix.lower() in config.extensions:
            files.append(path)
        else:
            logger.debug(f"Skipping non-image file {path}")
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def load_directory(asset_dir: Union[str, Path], config: Optional[AtlasConfig] = None) -> List[SourceImage]:
    """
    Load every image under asset_dir.

    Raises:
        FileNotFoundError: If asset_dir doesn't exist or isn't a directory
        InvalidImageError: If any matching file can't be decoded or its
                           path is not valid UTF-8
    """
    config = config or AtlasConfig()
    root = Path(asset_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Asset directory not found: {asset_dir}")

    images = []
    for path in find_image_files(root, config):
        name = path.relative_to(root).as_posix()
        try:
            name.encode('utf-8')
        except UnicodeEncodeError as e:
            raise InvalidImageError(f"Image path {name!r} is not valid UTF-8") from e
        logger.debug(f"Adding {name}")
        images.append(load_image(path, name=name, max_dimension=config.max_dimension))

    if not images:
        logger.warning(f"No images found in {asset_dir}")
    else:
        logger.info(f"Loaded {len(images)} images from {asset_dir}")
    return images


def index_images(images: Iterable[SourceImage]) -> Dict[str, SourceImage]:
    """
    Map images by name, preserving order.

    Raises:
        DuplicateNameError: If two images share a name
    """
    indexed: Dict[str, SourceImage] = {}
    for image in images:
        if image.name in indexed:
            raise DuplicateNameError(f"Duplicate image name '{image.name}'")
        indexed[image.name] = image
    return indexed
