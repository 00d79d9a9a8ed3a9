"""Custom exceptions for atlas building"""


class AtlastError(Exception):
    """Base exception for atlas errors"""
    pass


class PackingError(AtlastError):
    """Rectangle placement failed"""
    pass


class EmptyInputError(PackingError):
    """Nothing to pack"""
    pass


class CanvasOverflowError(PackingError):
    """The rectangles do not fit within the maximum canvas size"""
    pass


class OversizedRectangleError(PackingError):
    """A single rectangle exceeds the maximum canvas dimension"""

    def __init__(self, name: str, width: int, height: int, limit: int):
        self.name = name
        self.width = width
        self.height = height
        self.limit = limit
        super().__init__(
            f"Rectangle '{name}' ({width}x{height}) exceeds the maximum canvas dimension {limit}"
        )


class ComposeError(AtlastError):
    """Pixel composition failed"""
    pass


class MissingSourceError(ComposeError):
    """A placement references an image that was not supplied"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No source image named '{name}'")


class DimensionMismatchError(ComposeError):
    """A source image does not match the size recorded in its placement"""

    def __init__(self, name: str, expected, actual):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Source image '{name}' is {actual[0]}x{actual[1]}, "
            f"placement expects {expected[0]}x{expected[1]}"
        )


class SerializeError(AtlastError):
    """Artifact encoding, decoding or storage failed"""
    pass


class IOFailureError(SerializeError):
    """Underlying read/write failure (not retried)"""
    pass


class CorruptArtifactError(SerializeError):
    """Artifact bytes could not be decoded"""
    pass


class InvalidNameError(SerializeError):
    """A placement name cannot be stored as a length-prefixed UTF-8 string"""
    pass


class LoaderError(AtlastError):
    """Source images could not be loaded"""
    pass


class DuplicateNameError(LoaderError):
    """Two source images share a name"""
    pass


class InvalidImageError(LoaderError):
    """A source file could not be decoded as an image"""
    pass
