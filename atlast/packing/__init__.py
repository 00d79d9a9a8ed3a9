"""
Packing and composition.

Decides where each image goes and paints the atlas canvas.
"""
from .packer import GuillotinePacker, PackResult, pack_rectangles
from .composer import compose_atlas

__all__ = [
    'GuillotinePacker',
    'PackResult',
    'pack_rectangles',
    'compose_atlas',
]
