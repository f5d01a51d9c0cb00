"""Write baked composites to disk."""

import logging

import numpy as np

from ..config import BakeConfig
from ..core import MaterialDescriptor, get_output_path, save_rgba
from ..errors import SinkWriteError

logger = logging.getLogger("unlit_baker.sink")


class UnlitSink:
    """Encode a composite as JPEG (opaque) or PNG (blend/mask)."""

    def __init__(self, config: BakeConfig):
        self.config = config
        self.cfg = config.sink

    def write(self, material: MaterialDescriptor, composite: np.ndarray,
              output_dir: str) -> str:
        """Write `composite` for `material` and return the written path."""
        path = get_output_path(material, output_dir)
        try:
            save_rgba(
                composite,
                path,
                quality=self.cfg.jpeg_quality,
                optimize=self.cfg.png_optimize,
            )
        except (OSError, ValueError) as e:
            raise SinkWriteError(f"Failed to write {path}: {e}") from e
        logger.info("Wrote %s for %s", path, material.label)
        return path
