"""
Atlas container (.atlas)

A zip archive holding exactly two entries:
- atlas.png:  the composed canvas (RGBA8 PNG)
- atlas.meta: the placement table (see metadata.py for the layout)

Entries carry a fixed timestamp so identical input produces identical bytes.
"""

import logging
import os
import tempfile
import zipfile
import zlib
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple, Union

from atlast.config import AtlasConfig
from atlast.exceptions import CorruptArtifactError, IOFailureError
from atlast.schema import AtlasArtifact, Canvas, PlacementTable

from .image import decode_canvas, encode_canvas
from .metadata import decode_placements, encode_placements

logger = logging.getLogger(__name__)

_FIXED_DATE = (1980, 1, 1, 0, 0, 0)


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def _entry(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_FIXED_DATE)
    info.compress_type = zipfile.ZIP_DEFLATED
    return info


def serialize_atlas(
    canvas: Canvas,
    table: PlacementTable,
    config: Optional[AtlasConfig] = None
) -> AtlasArtifact:
    """
    Bundle a canvas and its placement table into an in-memory artifact.

    Raises:
        IOFailureError: If writing the archive fails
    """
    config = config or AtlasConfig()

    png_bytes = encode_canvas(canvas)
    meta_bytes = encode_placements(table)

    buf = BytesIO()
    try:
        with zipfile.ZipFile(buf, 'w') as zf:
            zf.writestr(_entry(config.image_entry), png_bytes)
            zf.writestr(_entry(config.meta_entry), meta_bytes)
    except OSError as e:
        raise IOFailureError(f"Failed to build atlas archive: {e}") from e

    artifact = AtlasArtifact(buf.getvalue(), config.image_entry, config.meta_entry)
    logger.debug(
        f"Serialized atlas: {len(png_bytes)} byte image, {len(meta_bytes)} byte metadata, "
        f"{len(artifact)} byte archive"
    )
    return artifact


def deserialize_atlas(
    artifact: Union[AtlasArtifact, bytes],
    config: Optional[AtlasConfig] = None
) -> Tuple[Canvas, PlacementTable]:
    """
    Unpack an artifact into its canvas and placement table.

    The canvas may be as large as config.max_dimension on each side, the
    same limit the packer grows to.

    Raises:
        CorruptArtifactError: If the archive, either entry, or the
                              placements-vs-canvas bounds are invalid
    """
    if not isinstance(artifact, AtlasArtifact):
        artifact = AtlasArtifact(bytes(artifact))

    try:
        with zipfile.ZipFile(BytesIO(artifact.data)) as zf:
            names = set(zf.namelist())
            for entry in (artifact.image_entry, artifact.meta_entry):
                if entry not in names:
                    raise CorruptArtifactError(f"Atlas archive has no '{entry}' entry")
            png_bytes = zf.read(artifact.image_entry)
            meta_bytes = zf.read(artifact.meta_entry)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError) as e:
        raise CorruptArtifactError(f"Not a valid atlas archive: {e}") from e

    config = config or AtlasConfig()
    canvas = decode_canvas(png_bytes, config.max_dimension)
    table = decode_placements(meta_bytes)

    for placement in table.placements:
        if not placement.fits_within(canvas.width, canvas.height):
            raise CorruptArtifactError(
                f"Placement '{placement.name}' lies outside the {canvas.width}x{canvas.height} canvas"
            )

    return canvas, table


def write_artifact(artifact: AtlasArtifact, path: Union[str, Path]) -> Path:
    """
    Write an artifact to disk atomically.

    The bytes go to a temporary file next to the destination which is renamed
    into place only after a complete write. On failure no file is left behind
    and an existing destination is untouched.

    Raises:
        IOFailureError: On any underlying write failure
    """
    path = Path(path)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix='.tmp', delete=False
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(artifact.data)
            tmp.flush()
            os.fsync(tmp.fileno())
        # NamedTemporaryFile is created 0600; give the atlas the mode open() would
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise IOFailureError(f"Failed to write atlas to {path}: {e}") from e

    logger.info(f"Wrote {len(artifact)} byte atlas to {path}")
    return path


def read_artifact(path: Union[str, Path], config: Optional[AtlasConfig] = None) -> AtlasArtifact:
    """
    Read an artifact from disk.

    Raises:
        IOFailureError: If the file cannot be read
    """
    config = config or AtlasConfig()
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise IOFailureError(f"Failed to read atlas from {path}: {e}") from e
    return AtlasArtifact(data, config.image_entry, config.meta_entry)
