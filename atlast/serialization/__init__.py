"""
Atlas serialization.

Turns a composed canvas plus its placement table into a single .atlas file
and back.
"""
from .container import serialize_atlas, deserialize_atlas, write_artifact, read_artifact
from .metadata import encode_placements, decode_placements
from .image import encode_canvas, decode_canvas

__all__ = [
    'serialize_atlas',
    'deserialize_atlas',
    'write_artifact',
    'read_artifact',
    'encode_placements',
    'decode_placements',
    'encode_canvas',
    'decode_canvas',
]
