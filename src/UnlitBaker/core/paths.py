"""Output path helpers for baked textures."""

import os
import re

from .records import AlphaMode, MaterialDescriptor

# Path separators, Windows-reserved characters, and control characters.
_UNSAFE_NAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def safe_stem(name: str) -> str:
    """Return `name` with characters that would escape a directory replaced."""
    stem = _UNSAFE_NAME_CHARS.sub("_", name)
    if stem in (".", ".."):
        stem = stem.replace(".", "_")
    return stem


def unlit_extension(alpha_mode: AlphaMode) -> str:
    """Opaque materials bake to JPEG, anything with alpha to PNG."""
    return ".jpg" if alpha_mode is AlphaMode.OPAQUE else ".png"


def unlit_filename(material: MaterialDescriptor) -> str:
    """Return the baked texture file name for a material."""
    ext = unlit_extension(material.alpha_mode)
    if material.name is not None:
        return f"{safe_stem(material.name)}_unlit{ext}"
    return f"unlit_{material.index}{ext}"


def get_output_path(material: MaterialDescriptor, output_dir: str) -> str:
    """Return the baked texture path for a material under `output_dir`."""
    return os.path.join(output_dir, unlit_filename(material))
