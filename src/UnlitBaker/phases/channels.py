"""Resolve material channel references to decoded RGBA rasters.

A channel that cannot be loaded is reported as a warning and treated as
absent; the material is still baked from whatever channels remain.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import unquote

import numpy as np

from ..config import BakeConfig
from ..core import ChannelRef, MaterialDescriptor, load_rgba

logger = logging.getLogger("unlit_baker.channels")


@dataclass
class MaterialChannels:
    """Decoded channel maps for one material; `None` marks an absent channel."""

    base_color: Optional[np.ndarray] = None
    occlusion: Optional[np.ndarray] = None
    emissive: Optional[np.ndarray] = None

    def present(self) -> Dict[str, np.ndarray]:
        """Return loaded channels keyed by name, in compositing order."""
        return {
            name: raster
            for name, raster in (
                ("base_color", self.base_color),
                ("occlusion", self.occlusion),
                ("emissive", self.emissive),
            )
            if raster is not None
        }


class ChannelLoader:
    """Load the base color, occlusion, and emissive maps of a material."""

    def __init__(self, config: BakeConfig):
        self.config = config

    def load(self, base_dir: str, ref: Optional[ChannelRef]) -> Optional[np.ndarray]:
        """Decode the image behind `ref`, or return None when it is unavailable."""
        if ref is None:
            return None

        if ref.embedded:
            logger.warning(
                "Images embedded in buffer views or data URIs are not supported. "
                "Skipping image[%d].",
                ref.image_index,
            )
            return None

        path = os.path.join(base_dir, unquote(ref.uri))
        try:
            raster = load_rgba(path, max_pixels=self.config.max_image_pixels)
        except (OSError, ValueError) as e:
            logger.warning("Could not decode image[%d] '%s': %s", ref.image_index, ref.uri, e)
            return None
        logger.debug(
            "Loaded image[%d] %s (%dx%d)",
            ref.image_index, path, raster.shape[1], raster.shape[0],
        )
        return raster

    def load_material(self, base_dir: str, material: MaterialDescriptor) -> MaterialChannels:
        return MaterialChannels(
            base_color=self.load(base_dir, material.base_color_channel),
            occlusion=self.load(base_dir, material.occlusion_channel),
            emissive=self.load(base_dir, material.emissive_channel),
        )
