"""
Tests for atlas composition
"""
import numpy as np
import pytest
from atlast.exceptions import ComposeError, DimensionMismatchError, MissingSourceError
from atlast.packing import compose_atlas, pack_rectangles
from atlast.schema import Placement, PlacementTable, SourceImage


def solid(name, width, height, color):
    """Create a single-colour RGBA source image"""
    return SourceImage(name=name, width=width, height=height, pixels=bytes(color) * (width * height))


def gradient(name, width, height):
    """Create an image whose every pixel is distinct"""
    pixels = bytearray()
    for y in range(height):
        for x in range(width):
            pixels += bytes((x * 10 % 256, y * 10 % 256, (x + y) % 256, 255))
    return SourceImage(name=name, width=width, height=height, pixels=bytes(pixels))


def as_array(canvas):
    return np.frombuffer(canvas.pixels, dtype=np.uint8).reshape(canvas.height, canvas.width, 4)


class TestCompose:
    """Composition results"""

    def test_three_image_scenario(self):
        """Each placement's pixels match its source; unclaimed pixels are transparent"""
        images = {
            'A': gradient('A', 2, 2),
            'B': solid('B', 4, 4, (255, 0, 0, 255)),
            'C': solid('C', 2, 4, (0, 0, 255, 128)),
        }
        width, height, table = pack_rectangles({n: i.rectangle for n, i in images.items()})
        canvas = compose_atlas(width, height, table, images)

        a = table.get('A')
        assert canvas.pixel(a.x, a.y) == images['A'].pixel(0, 0)

        arr = as_array(canvas)
        claimed = np.zeros((height, width), dtype=bool)
        for p in table.placements:
            src = np.frombuffer(images[p.name].pixels, dtype=np.uint8).reshape(p.height, p.width, 4)
            assert np.array_equal(arr[p.y:p.bottom, p.x:p.right], src)
            claimed[p.y:p.bottom, p.x:p.right] = True

        assert np.all(arr[~claimed] == 0)

    def test_empty_canvas_is_transparent(self):
        """A canvas with no placements is all (0, 0, 0, 0)"""
        canvas = compose_atlas(3, 2, PlacementTable(), {})
        assert canvas.pixels == bytes(3 * 2 * 4)

    def test_alpha_is_copied_not_blended(self):
        """Semi-transparent pixels keep their exact values"""
        image = solid('ghost', 2, 2, (10, 20, 30, 40))
        table = PlacementTable(placements=[Placement(name='ghost', x=1, y=1, width=2, height=2)])
        canvas = compose_atlas(3, 3, table, [image])
        assert canvas.pixel(1, 1) == (10, 20, 30, 40)
        assert canvas.pixel(0, 0) == (0, 0, 0, 0)

    def test_accepts_iterable_of_images(self):
        """Sources may be a list instead of a dict"""
        images = [solid('x', 1, 1, (1, 2, 3, 4)), solid('y', 1, 1, (5, 6, 7, 8))]
        table = PlacementTable(placements=[
            Placement(name='y', x=0, y=0, width=1, height=1),
            Placement(name='x', x=1, y=0, width=1, height=1),
        ])
        canvas = compose_atlas(2, 1, table, images)
        assert canvas.pixels == bytes((5, 6, 7, 8, 1, 2, 3, 4))


class TestComposeErrors:
    """Composition failure modes"""

    def test_missing_source(self):
        """A placement with no matching image raises MissingSourceError"""
        table = PlacementTable(placements=[Placement(name='ghost', x=0, y=0, width=1, height=1)])
        with pytest.raises(MissingSourceError) as exc_info:
            compose_atlas(1, 1, table, {'other': solid('other', 1, 1, (0, 0, 0, 255))})
        assert exc_info.value.name == 'ghost'

    def test_dimension_mismatch(self):
        """An image whose size differs from its placement is rejected"""
        table = PlacementTable(placements=[Placement(name='img', x=0, y=0, width=2, height=2)])
        with pytest.raises(DimensionMismatchError) as exc_info:
            compose_atlas(4, 4, table, [solid('img', 3, 2, (0, 0, 0, 255))])
        assert exc_info.value.expected == (2, 2)
        assert exc_info.value.actual == (3, 2)

    def test_out_of_bounds_placement(self):
        """A placement reaching past the canvas edge is rejected"""
        table = PlacementTable(placements=[Placement(name='img', x=3, y=0, width=2, height=2)])
        with pytest.raises(ComposeError):
            compose_atlas(4, 4, table, [solid('img', 2, 2, (0, 0, 0, 255))])

    def test_compose_errors_share_base_class(self):
        assert issubclass(MissingSourceError, ComposeError)
        assert issubclass(DimensionMismatchError, ComposeError)
