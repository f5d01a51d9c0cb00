"""Composite base color, occlusion, and emissive maps into one unlit raster.

All arithmetic stays in the 8-bit domain: each step computes in float32
and truncates back to uint8 (toward zero, saturating at 0 and 255) before
the next step runs. Output bytes therefore depend on the step order

    base color -> occlusion multiply -> emissive add

and on the truncation error compounded across the three steps.
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ..config import BakeConfig
from ..core import MaterialDescriptor
from ..errors import DimensionMismatchError, NoInputMapsError
from .channels import MaterialChannels

logger = logging.getLogger("unlit_baker.composite")

_MAX = np.float32(255.0)


def _truncate(values: np.ndarray) -> np.ndarray:
    """Cast float samples to uint8 by truncation, saturating at 0 and 255."""
    return np.clip(values, 0.0, _MAX).astype(np.uint8)


def _saturating_add(a: np.ndarray, b) -> np.ndarray:
    """Add two uint8 arrays (or an array and a scalar) clamping at 255."""
    return np.minimum(a.astype(np.uint16) + b, 255).astype(np.uint8)


def reconcile_dimensions(channels: MaterialChannels) -> Tuple[int, int]:
    """Return the common ``(width, height)`` of every loaded channel.

    Raises:
        NoInputMapsError: no channel was loaded.
        DimensionMismatchError: two loaded channels differ in size. Maps are
            never resized since that would change the material's look.
    """
    present = channels.present()
    if not present:
        raise NoInputMapsError(
            "No input maps were loaded; cannot synthesize fallback without a "
            "reference size"
        )

    ref_name, ref_raster = next(iter(present.items()))
    ref_h, ref_w = ref_raster.shape[:2]
    for name, raster in present.items():
        h, w = raster.shape[:2]
        if (w, h) != (ref_w, ref_h):
            raise DimensionMismatchError(
                f"Dimension mismatch: {ref_name} is {ref_w}x{ref_h} "
                f"but {name} is {w}x{h}"
            )
    return ref_w, ref_h


def synthesize_solid(size: Tuple[int, int], factor: Sequence[float]) -> np.ndarray:
    """Return a uniform RGBA raster of `size` filled with ``trunc(factor * 255)``."""
    width, height = size
    color = _truncate(np.asarray(factor, dtype=np.float32) * _MAX)
    return np.full((height, width, 4), color, dtype=np.uint8)


def apply_base_color(raster: np.ndarray, factor: Sequence[float],
                     lighten: float = 0.0) -> np.ndarray:
    """Scale a base color map by its factor and lift RGB by `lighten`."""
    out = _truncate(raster.astype(np.float32) * np.asarray(factor, dtype=np.float32))
    lift = int(np.float32(lighten) * _MAX)
    if lift:
        out[:, :, :3] = _saturating_add(out[:, :, :3], lift)
    return out


def apply_occlusion(composite: np.ndarray, occlusion: np.ndarray,
                    strength: float) -> None:
    """Multiply RGB in place by ``(occlusion.r / 255) * strength``."""
    factor = occlusion[:, :, 0].astype(np.float32) / _MAX * np.float32(strength)
    composite[:, :, :3] = _truncate(
        composite[:, :, :3].astype(np.float32) * factor[:, :, None]
    )


def apply_emissive(composite: np.ndarray, emissive: np.ndarray,
                   factor: Sequence[float]) -> None:
    """Add ``trunc(emissive.rgb * factor)`` to RGB in place, saturating at 255."""
    contribution = _truncate(
        emissive[:, :, :3].astype(np.float32) * np.asarray(factor, dtype=np.float32)
    )
    composite[:, :, :3] = _saturating_add(composite[:, :, :3], contribution)


class UnlitCompositor:
    """Build the unlit composite for a single material."""

    def __init__(self, config: BakeConfig):
        self.config = config
        self.cfg = config.composite

    def composite(self, material: MaterialDescriptor,
                  channels: MaterialChannels) -> np.ndarray:
        """Return the ``(H, W, 4)`` uint8 unlit raster for `material`."""
        size = reconcile_dimensions(channels)
        composite: Optional[np.ndarray] = None

        if channels.base_color is not None:
            composite = apply_base_color(
                channels.base_color, material.base_color_factor, self.cfg.lighten,
            )
        elif self.cfg.solid_color_fallback:
            logger.debug(
                "%s has no base color map; using solid %s at %dx%d",
                material.label, material.base_color_factor, *size,
            )
            composite = synthesize_solid(size, material.base_color_factor)

        if channels.occlusion is not None:
            if composite is None:
                composite = channels.occlusion.copy()
            apply_occlusion(composite, channels.occlusion, material.occlusion_strength)

        if channels.emissive is not None:
            if composite is None:
                composite = channels.emissive.copy()
            apply_emissive(composite, channels.emissive, material.emissive_factor)

        return composite
