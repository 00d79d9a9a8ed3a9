"""Canvas <-> PNG payload"""

from contextlib import contextmanager
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from atlast.config import DEFAULT_MAX_DIMENSION
from atlast.exceptions import CorruptArtifactError
from atlast.schema import Canvas


@contextmanager
def pixel_limit(max_dimension: int):
    """
    Let Pillow open images up to max_dimension² pixels.

    Pillow's decompression-bomb guard is a module global; it is set for the
    duration of the block and restored afterwards.
    """
    previous = Image.MAX_IMAGE_PIXELS
    Image.MAX_IMAGE_PIXELS = max_dimension * max_dimension
    try:
        yield
    finally:
        Image.MAX_IMAGE_PIXELS = previous


def encode_canvas(canvas: Canvas) -> bytes:
    """Encode a canvas as an 8-bit RGBA PNG."""
    img = Image.frombytes('RGBA', (canvas.width, canvas.height), canvas.pixels)
    buf = BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


def decode_canvas(data: bytes, max_dimension: Optional[int] = None) -> Canvas:
    """
    Decode a PNG payload into an RGBA8 canvas.

    Raises:
        CorruptArtifactError: If the payload isn't a readable PNG or either
                              side exceeds max_dimension
    """
    max_dimension = max_dimension or DEFAULT_MAX_DIMENSION
    try:
        with pixel_limit(max_dimension):
            img = Image.open(BytesIO(data))
            if img.width > max_dimension or img.height > max_dimension:
                raise CorruptArtifactError(
                    f"Image payload is {img.width}x{img.height}, larger than "
                    f"{max_dimension}x{max_dimension}"
                )
            img.load()
    except Image.DecompressionBombError as e:
        raise CorruptArtifactError(f"Image payload is too large to decode: {e}") from e
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise CorruptArtifactError(f"Image payload is not a readable PNG: {e}") from e

    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return Canvas(img.width, img.height, img.tobytes())
