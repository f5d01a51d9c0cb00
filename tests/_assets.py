"""Helpers that write small glTF assets and texture files for tests."""

import json
import os

import numpy as np
from PIL import Image


def solid(height, width, rgba):
    """Return a uniform uint8 raster with as many channels as `rgba` has."""
    return np.full((height, width, len(rgba)), rgba, dtype=np.uint8)


def write_png(path, arr):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    Image.fromarray(np.ascontiguousarray(arr)).save(path)
    return path


def write_gltf(path, materials, image_uris=(), extra_images=()):
    """Write a minimal glTF whose texture ``i`` samples ``image_uris[i]``.

    `extra_images` are raw image dicts appended after the URI images (for
    buffer-view sources).
    """
    images = [{"uri": uri} for uri in image_uris] + list(extra_images)
    doc = {
        "asset": {"version": "2.0"},
        "images": images,
        "textures": [{"source": i} for i in range(len(images))],
        "materials": materials,
    }
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f)
    return path
