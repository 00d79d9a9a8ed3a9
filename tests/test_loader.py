"""
Tests for loading source images from disk
"""
import os
import sys

import pytest
from PIL import Image
from atlast.config import AtlasConfig
from atlast.exceptions import DuplicateNameError, InvalidImageError, LoaderError
from atlast.loader import (
    find_image_files,
    image_to_source,
    index_images,
    load_directory,
    load_image,
)
from atlast.schema import SourceImage


def write_png(path, size, color, mode='RGBA'):
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path, format='PNG')
    return path


class TestLoadImage:
    """Decoding single files"""

    def test_rgba_png(self, tmp_path):
        path = write_png(tmp_path / 'red.png', (3, 2), (255, 0, 0, 128))
        image = load_image(path)
        assert image.name == 'red.png'
        assert (image.width, image.height) == (3, 2)
        assert image.pixel(2, 1) == (255, 0, 0, 128)

    def test_rgb_png_is_converted(self, tmp_path):
        """Non-RGBA files gain an opaque alpha channel"""
        path = write_png(tmp_path / 'rgb.png', (2, 2), (0, 255, 0), mode='RGB')
        image = load_image(path, name='custom')
        assert image.name == 'custom'
        assert image.pixel(0, 0) == (0, 255, 0, 255)
        assert len(image.pixels) == 2 * 2 * 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / 'nope.png')

    def test_not_an_image(self, tmp_path):
        path = tmp_path / 'fake.png'
        path.write_bytes(b'this is not a png')
        with pytest.raises(InvalidImageError):
            load_image(path)

    def test_large_image_within_max_dimension(self, tmp_path, monkeypatch):
        """Pillow's global pixel limit doesn't apply below max_dimension²"""
        path = write_png(tmp_path / 'big.png', (20, 20), (1, 2, 3, 255))
        monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 100)
        image = load_image(path)
        assert (image.width, image.height) == (20, 20)
        assert Image.MAX_IMAGE_PIXELS == 100

    def test_decompression_bomb(self, tmp_path):
        """Images far past max_dimension² raise InvalidImageError"""
        path = write_png(tmp_path / 'big.png', (20, 20), (1, 2, 3, 255))
        with pytest.raises(InvalidImageError):
            load_image(path, max_dimension=4)

    def test_image_to_source_palette(self):
        image = image_to_source('p', Image.new('P', (2, 1)))
        assert len(image.pixels) == 8


class TestLoadDirectory:
    """Scanning an asset directory"""

    def test_recursive_scan_with_relative_names(self, tmp_path):
        write_png(tmp_path / 'b.png', (1, 1), (0, 0, 0, 255))
        write_png(tmp_path / 'a.png', (1, 1), (0, 0, 0, 255))
        write_png(tmp_path / 'ui' / 'a.png', (2, 2), (0, 0, 0, 255))
        (tmp_path / 'notes.txt').write_text('ignore me')

        images = load_directory(tmp_path)
        assert [i.name for i in images] == ['a.png', 'b.png', 'ui/a.png']

    def test_extension_is_case_insensitive(self, tmp_path):
        write_png(tmp_path / 'SHOUT.PNG', (1, 1), (0, 0, 0, 255))
        assert [p.name for p in find_image_files(tmp_path)] == ['SHOUT.PNG']

    def test_custom_extensions(self, tmp_path):
        write_png(tmp_path / 'a.png', (1, 1), (0, 0, 0, 255))
        (tmp_path / 'b.bmp').write_bytes(b'BM')
        config = AtlasConfig(extensions=('bmp',))
        assert [p.name for p in find_image_files(tmp_path, config)] == ['b.bmp']

    def test_empty_directory(self, tmp_path):
        assert load_directory(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_directory(tmp_path / 'missing')

    @pytest.mark.skipif(sys.platform != 'linux', reason="needs a filesystem that accepts non-UTF-8 names")
    def test_non_utf8_file_name(self, tmp_path):
        """File names that can't be stored as UTF-8 are rejected at load time"""
        write_png(tmp_path / os.fsdecode(b'\xff.png'), (1, 1), (0, 0, 0, 255))
        with pytest.raises(InvalidImageError):
            load_directory(tmp_path)

    def test_corrupt_file_aborts(self, tmp_path):
        write_png(tmp_path / 'good.png', (1, 1), (0, 0, 0, 255))
        (tmp_path / 'bad.png').write_bytes(b'\x89PNG broken')
        with pytest.raises(InvalidImageError):
            load_directory(tmp_path)


class TestIndexImages:
    """Name uniqueness"""

    def test_index_preserves_order(self):
        images = [SourceImage('b', 1, 1, bytes(4)), SourceImage('a', 1, 1, bytes(4))]
        assert list(index_images(images)) == ['b', 'a']

    def test_duplicate_names(self):
        images = [SourceImage('same', 1, 1, bytes(4)), SourceImage('same', 2, 1, bytes(8))]
        with pytest.raises(DuplicateNameError):
            index_images(images)

    def test_loader_errors_share_base_class(self):
        assert issubclass(DuplicateNameError, LoaderError)
        assert issubclass(InvalidImageError, LoaderError)
