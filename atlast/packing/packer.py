"""
Guillotine Rectangle Packer

Places named rectangles into a canvas that grows on demand, then crops the
canvas to the tight bounding box of everything placed.

Free space is a flat list of non-overlapping regions. Each placement consumes
one region and splits the L-shaped leftover into at most two new regions:

    +--------+-----------+        +--------+-----------+
    | placed |   right   |        | placed |           |
    +--------+-----------+   or   +--------+   right   |
    |       bottom       |        | bottom |           |
    +--------------------+        +--------+-----------+

    (shorter leftover is to the right)   (shorter leftover is below)

The cut runs along the shorter leftover edge so the larger fragment stays whole.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Mapping, NamedTuple, Optional, Tuple

from atlast.config import DEFAULT_MAX_DIMENSION
from atlast.exceptions import CanvasOverflowError, EmptyInputError, OversizedRectangleError
from atlast.schema import Placement, PlacementTable, Rectangle

logger = logging.getLogger(__name__)


def next_power_of_2(n: int) -> int:
    """Return the next power of 2 >= n."""
    if n <= 0:
        return 1
    return 2 ** math.ceil(math.log2(n))


@dataclass
class FreeRegion:
    """An empty area of the canvas that can still receive a rectangle."""
    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    def can_hold(self, width: int, height: int) -> bool:
        return width <= self.width and height <= self.height


class PackResult(NamedTuple):
    """Outcome of a packing run. Unpacks as (canvas_width, canvas_height, table)."""
    canvas_width: int
    canvas_height: int
    table: PlacementTable

    @property
    def efficiency(self) -> float:
        """Fraction of the canvas covered by placements (0-1)."""
        canvas_area = self.canvas_width * self.canvas_height
        if canvas_area == 0:
            return 0.0
        return sum(p.area for p in self.table.placements) / canvas_area


class GuillotinePacker:
    """
    Packs rectangles one at a time into a growing canvas.

    A packer instance holds the free list for a single run; create a new one
    per run (pack_rectangles does this).
    """

    def __init__(self, width: int, height: int, max_dimension: int = DEFAULT_MAX_DIMENSION):
        self.width = width
        self.height = height
        self.max_dimension = max_dimension
        self.free_regions: List[FreeRegion] = [FreeRegion(0, 0, width, height)]

    def insert(self, width: int, height: int) -> Tuple[int, int]:
        """Place a rectangle, growing the canvas until it fits. Returns (x, y)."""
        while True:
            index = self._find_region(width, height)
            if index is not None:
                return self._place(index, width, height)
            self._grow(width, height)

    def _find_region(self, width: int, height: int) -> Optional[int]:
        """Best area fit, ties broken by smallest leftover width, then top-left-most."""
        best_index = None
        best_key = None
        for i, region in enumerate(self.free_regions):
            if not region.can_hold(width, height):
                continue
            key = (region.area - width * height, region.width - width, region.y, region.x)
            if best_key is None or key < best_key:
                best_index = i
                best_key = key
        return best_index

    def _place(self, index: int, width: int, height: int) -> Tuple[int, int]:
        region = self.free_regions.pop(index)
        leftover_w = region.width - width
        leftover_h = region.height - height

        if leftover_w <= leftover_h:
            # Horizontal cut: bottom fragment spans the full region width
            right = FreeRegion(region.x + width, region.y, leftover_w, height)
            bottom = FreeRegion(region.x, region.y + height, region.width, leftover_h)
        else:
            # Vertical cut: right fragment spans the full region height
            right = FreeRegion(region.x + width, region.y, leftover_w, region.height)
            bottom = FreeRegion(region.x, region.y + height, width, leftover_h)

        for fragment in (right, bottom):
            if fragment.width > 0 and fragment.height > 0:
                self.free_regions.append(fragment)

        return region.x, region.y

    def _grow(self, width: int, height: int) -> None:
        grow_w = width > self.width
        grow_h = height > self.height
        if not grow_w and not grow_h:
            # Fits the canvas, just not any free region: double the smaller side
            if self.width < self.height:
                grow_w = True
            else:
                grow_h = True

        # Fall back to the other side once one side has hit the limit
        if grow_w and not grow_h and self.width >= self.max_dimension:
            grow_w, grow_h = False, True
        elif grow_h and not grow_w and self.height >= self.max_dimension:
            grow_w, grow_h = True, False

        if (grow_w and self.width >= self.max_dimension) or (grow_h and self.height >= self.max_dimension):
            raise CanvasOverflowError(
                f"Could not fit {width}x{height} rectangle within "
                f"{self.max_dimension}x{self.max_dimension} canvas"
            )

        if grow_w:
            new_width = min(self.width * 2, self.max_dimension)
            self.free_regions.append(FreeRegion(self.width, 0, new_width - self.width, self.height))
            self.width = new_width
        if grow_h:
            new_height = min(self.height * 2, self.max_dimension)
            self.free_regions.append(FreeRegion(0, self.height, self.width, new_height - self.height))
            self.height = new_height

        logger.debug(f"Grew canvas to {self.width}x{self.height} for {width}x{height} rectangle")


def sort_for_packing(rectangles: Mapping[str, Rectangle]) -> List[Tuple[str, Rectangle]]:
    """Tallest first, then widest, then by name."""
    return sorted(rectangles.items(), key=lambda item: (-item[1].height, -item[1].width, item[0]))


def pack_rectangles(
    rectangles: Mapping[str, Rectangle],
    max_dimension: int = DEFAULT_MAX_DIMENSION
) -> PackResult:
    """
    Pack named rectangles into the smallest canvas this heuristic finds.

    Args:
        rectangles: Dict of name -> Rectangle
        max_dimension: Largest width/height the canvas may reach

    Returns:
        PackResult(canvas_width, canvas_height, table) with the canvas cropped
        to the placements' bounding box. Table order is packing order.

    Raises:
        EmptyInputError: If no rectangles are given
        OversizedRectangleError: If one rectangle is larger than max_dimension
        CanvasOverflowError: If the set does not fit within max_dimension²
    """
    if not rectangles:
        raise EmptyInputError("No rectangles to pack")

    for name in sorted(rectangles):
        rect = rectangles[name]
        if rect.width > max_dimension or rect.height > max_dimension:
            raise OversizedRectangleError(name, rect.width, rect.height, max_dimension)

    ordered = sort_for_packing(rectangles)

    start_w = min(max_dimension, next_power_of_2(max(r.width for r in rectangles.values())))
    start_h = min(max_dimension, next_power_of_2(max(r.height for r in rectangles.values())))
    packer = GuillotinePacker(start_w, start_h, max_dimension)

    placements = []
    for name, rect in ordered:
        x, y = packer.insert(rect.width, rect.height)
        placements.append(Placement(name=name, x=x, y=y, width=rect.width, height=rect.height))

    canvas_width = max(p.right for p in placements)
    canvas_height = max(p.bottom for p in placements)
    result = PackResult(canvas_width, canvas_height, PlacementTable(placements=placements))

    logger.info(
        f"Packed {len(placements)} rectangles into {canvas_width}x{canvas_height} canvas "
        f"({result.efficiency:.0%} used)"
    )
    return result
