"""
Atlas data model

PIPELINE:
    SourceImage  → Rectangle (derived, geometry only)
                 → Placement (assigned by the packer)
                 → Canvas    (composed pixel buffer)
                 → AtlasArtifact (serialized container bytes)

PIXEL FORMAT:
- Every pixel buffer is RGBA8: 4 bytes per pixel, rows top to bottom,
  no padding between rows. A w×h buffer is exactly w*h*4 bytes.

COORDINATES:
- Integer pixels, origin at the top-left corner of the canvas.
- A placement covers [x, x+width) × [y, y+height).
- Every integer fits in an unsigned 32-bit field (the metadata wire format).

Geometric records (Rectangle, Placement, PlacementTable) are pydantic models so
that anything decoded from an artifact is validated on the way in. Pixel-carrying
records are plain dataclasses; their buffers are large and are only checked
for length.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

U32_MAX = 2 ** 32 - 1
BYTES_PER_PIXEL = 4
TRANSPARENT = (0, 0, 0, 0)


#########################
# GEOMETRY
#########################

class Rectangle(BaseModel):
    """Size of one source image, without position or pixels."""
    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0, le=U32_MAX)
    height: int = Field(..., gt=0, le=U32_MAX)

    @property
    def area(self) -> int:
        return self.width * self.height


class Placement(BaseModel):
    """Where one source image ended up inside the canvas."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    name: str = Field(..., description="Name of the SourceImage this placement belongs to.")
    x: int = Field(..., ge=0, le=U32_MAX)
    y: int = Field(..., ge=0, le=U32_MAX)
    width: int = Field(..., ge=0, le=U32_MAX)
    height: int = Field(..., ge=0, le=U32_MAX)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def intersection_area(self, other: "Placement") -> int:
        """Area shared with another placement (0 when they only touch)."""
        w = min(self.right, other.right) - max(self.x, other.x)
        h = min(self.bottom, other.bottom) - max(self.y, other.y)
        if w <= 0 or h <= 0:
            return 0
        return w * h

    def fits_within(self, canvas_width: int, canvas_height: int) -> bool:
        return self.right <= canvas_width and self.bottom <= canvas_height

    def uv(self, canvas_width: int, canvas_height: int) -> Tuple[float, float, float, float]:
        """
        Normalized texture coordinates [u1, v1, u2, v2] of this placement.

        Engines usually address atlas regions in 0-1 space rather than pixels.
        """
        return (
            self.x / canvas_width,
            self.y / canvas_height,
            self.right / canvas_width,
            self.bottom / canvas_height,
        )


class PlacementTable(BaseModel):
    """
    Ordered placements for one atlas.

    Order is packing order (tallest first), not load order. Names are unique.
    """
    model_config = ConfigDict(frozen=True, extra='forbid')

    placements: List[Placement] = Field(default_factory=list)

    @field_validator('placements')
    @classmethod
    def validate_unique_names(cls, v):
        seen = set()
        for placement in v:
            if placement.name in seen:
                raise ValueError(f"Duplicate placement name '{placement.name}'")
            seen.add(placement.name)
        return v

    def __len__(self) -> int:
        return len(self.placements)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self.placements)

    def records(self) -> Iterator[Placement]:
        return iter(self.placements)

    def names(self) -> List[str]:
        return [p.name for p in self.placements]

    def get(self, name: str) -> Optional[Placement]:
        return next((p for p in self.placements if p.name == name), None)

    def by_name(self) -> Dict[str, Placement]:
        return {p.name: p for p in self.placements}


#########################
# PIXEL CARRIERS
#########################

def _check_buffer(kind: str, width: int, height: int, pixels: bytes) -> None:
    expected = width * height * BYTES_PER_PIXEL
    if len(pixels) != expected:
        raise ValueError(
            f"{kind} is {width}x{height} and needs {expected} RGBA bytes, got {len(pixels)}"
        )


@dataclass(frozen=True)
class SourceImage:
    """A decoded input image, immutable once handed to the packer."""
    name: str
    width: int
    height: int
    pixels: bytes

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image '{self.name}' has empty size {self.width}x{self.height}")
        _check_buffer(f"Image '{self.name}'", self.width, self.height, self.pixels)

    @property
    def rectangle(self) -> Rectangle:
        return Rectangle(width=self.width, height=self.height)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        i = (y * self.width + x) * BYTES_PER_PIXEL
        return tuple(self.pixels[i:i + BYTES_PER_PIXEL])


@dataclass(frozen=True)
class Canvas:
    """The composed atlas pixel buffer."""
    width: int
    height: int
    pixels: bytes

    def __post_init__(self):
        _check_buffer("Canvas", self.width, self.height, self.pixels)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        i = (y * self.width + x) * BYTES_PER_PIXEL
        return tuple(self.pixels[i:i + BYTES_PER_PIXEL])

    def region(self, placement: Placement) -> bytes:
        """Copy the RGBA rows covered by a placement out of the canvas."""
        stride = self.width * BYTES_PER_PIXEL
        row_bytes = placement.width * BYTES_PER_PIXEL
        start = placement.x * BYTES_PER_PIXEL
        return b''.join(
            self.pixels[row * stride + start: row * stride + start + row_bytes]
            for row in range(placement.y, placement.bottom)
        )


@dataclass(frozen=True)
class AtlasArtifact:
    """The serialized container (zip bytes). Write-once."""
    data: bytes
    image_entry: str = "atlas.png"
    meta_entry: str = "atlas.meta"

    def __len__(self) -> int:
        return len(self.data)
