"""Core utilities -- re-exports all public symbols for convenience."""

from .records import AlphaMode, ChannelRef, MaterialDescriptor, MaterialResult
from .io import load_rgba, save_rgba
from .gltf import AssetDocument, load_asset, describe_material
from .paths import get_output_path, unlit_filename, unlit_extension, safe_stem
from .logging import setup_logging

__all__ = [
    "AlphaMode", "ChannelRef", "MaterialDescriptor", "MaterialResult",
    "load_rgba", "save_rgba",
    "AssetDocument", "load_asset", "describe_material",
    "get_output_path", "unlit_filename", "unlit_extension", "safe_stem",
    "setup_logging",
]
