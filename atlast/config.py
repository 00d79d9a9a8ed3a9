"""Runtime settings shared by the loader, packer and serializer"""

import os
from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MAX_DIMENSION = 16384
DEFAULT_OUTPUT = "output.atlas"


class AtlasConfig(BaseModel):
    """
    Settings for one atlas build.

    Attributes:
        max_dimension: Largest canvas width/height the packer may grow to.
                       Any single image larger than this is rejected.
        image_entry: Container entry name for the PNG payload
        meta_entry: Container entry name for the placement records
        extensions: File suffixes the loader picks up (case-insensitive)
    """
    model_config = ConfigDict(extra='forbid', frozen=True)

    max_dimension: int = Field(DEFAULT_MAX_DIMENSION, gt=0)
    image_entry: str = Field("atlas.png", min_length=1)
    meta_entry: str = Field("atlas.meta", min_length=1)
    extensions: Tuple[str, ...] = (".png",)

    @field_validator('extensions')
    @classmethod
    def normalize_extensions(cls, v):
        return tuple(ext.lower() if ext.startswith('.') else f".{ext.lower()}" for ext in v)

    @classmethod
    def from_env(cls, **overrides) -> "AtlasConfig":
        """
        Build settings, taking ATLAST_MAX_DIMENSION from the environment when set.

        Explicit keyword overrides win over the environment.
        """
        values = {}
        env_max = os.environ.get("ATLAST_MAX_DIMENSION")
        if env_max:
            values["max_dimension"] = env_max
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
