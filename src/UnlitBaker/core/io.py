"""Image I/O utilities -- load/save 8-bit RGBA numpy rasters."""

import logging
import os
import threading
from pathlib import Path

import numpy as np
from PIL import Image

# Pixel-count validation happens per call in load_rgba() after reading the
# header, so Pillow's global decompression bomb check is disabled.
Image.MAX_IMAGE_PIXELS = None

logger = logging.getLogger("unlit_baker")

_SIXTEEN_BIT_MODES = ("I;16", "I;16B", "I;16L", "I;16N")


def _infer_integer_mode_bit_depth(img: Image.Image, ext: str) -> int:
    """Infer bit depth for Pillow mode ``I`` images.

    Prefers explicit metadata over the file extension.
    """
    bits_info = img.info.get("bits")
    if isinstance(bits_info, int) and bits_info > 0:
        return bits_info

    # TIFF BitsPerSample tag
    tag_v2 = getattr(img, "tag_v2", None)
    if tag_v2 is not None:
        bits_tag = tag_v2.get(258)
        if isinstance(bits_tag, tuple) and bits_tag:
            bits_tag = bits_tag[0]
        if isinstance(bits_tag, int) and bits_tag > 0:
            return bits_tag

    # PNG and TIFF "I" is nearly always 16-bit data promoted to "I".
    if ext in (".png", ".tif", ".tiff"):
        return 16
    return 32


def _gray_to_rgba(gray: np.ndarray) -> np.ndarray:
    h, w = gray.shape[:2]
    out = np.empty((h, w, 4), dtype=np.uint8)
    out[:, :, :3] = gray[:, :, None]
    out[:, :, 3] = 255
    return out


def load_rgba(path: str, max_pixels: int = 0) -> np.ndarray:
    """Load an image as a ``(H, W, 4)`` uint8 RGBA array.

    High bit-depth sources keep their most significant 8 bits, float
    sources are read as [0, 1] and truncated into the 8-bit domain.
    """
    ext = Path(path).suffix.lower()
    try:
        with Image.open(path) as img:
            if max_pixels > 0 and img.width * img.height > max_pixels:
                raise ValueError(
                    f"Image too large: {img.width}x{img.height} = "
                    f"{img.width * img.height:,} pixels (max {max_pixels:,})."
                )

            if img.mode in _SIXTEEN_BIT_MODES:
                logger.debug("Loading %s as 16-bit integer mode %s", path, img.mode)
                arr = np.asarray(img).astype(np.uint16)
                return _gray_to_rgba((arr >> 8).astype(np.uint8))

            if img.mode == "I":
                bit_depth = _infer_integer_mode_bit_depth(img, ext)
                logger.debug(
                    "Loading %s as integer mode I with inferred bit depth %d",
                    path, bit_depth,
                )
                arr = np.asarray(img).astype(np.int64)
                arr = arr >> max(bit_depth - 8, 0)
                return _gray_to_rgba(np.clip(arr, 0, 255).astype(np.uint8))

            if img.mode == "F":
                logger.debug("Loading %s as float mode", path)
                arr = np.asarray(img, dtype=np.float32)
                arr = np.nan_to_num(arr, nan=0.0) * np.float32(255.0)
                return _gray_to_rgba(np.clip(arr, 0.0, 255.0).astype(np.uint8))

            if img.mode == "RGBA":
                return np.array(img, dtype=np.uint8)

            logger.debug("Converting image '%s' from %s->RGBA", path, img.mode)
            with img.convert("RGBA") as converted:
                return np.array(converted, dtype=np.uint8)
    except ValueError:
        raise
    except Exception as e:
        raise IOError(
            f"Failed to open image: {path} (format: {ext or 'unknown'}): {e}"
        ) from e


def save_rgba(arr: np.ndarray, path: str, quality: int = 95,
              optimize: bool = True):
    """Save a uint8 RGB/RGBA array.

    JPEG output drops the alpha channel. Uses atomic write (temp file +
    ``os.replace``) so a crash never leaves a truncated texture behind.
    """
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected uint8 raster, got {arr.dtype}")
    if arr.ndim != 3 or arr.shape[-1] not in (3, 4) or arr.size == 0:
        raise ValueError(
            f"Cannot save array of shape {arr.shape} to {path}; expected HxWx3/4"
        )

    ext = Path(path).suffix.lower()
    parent_dir = os.path.dirname(path) or "."
    os.makedirs(parent_dir, exist_ok=True)

    # Keep original extension so Pillow can infer the format.
    tmp_path = f"{path}.tmp.{os.getpid()}.{threading.get_ident()}{ext}"
    try:
        with Image.fromarray(np.ascontiguousarray(arr)) as img:
            if ext in (".jpg", ".jpeg"):
                with img.convert("RGB") as converted:
                    converted.save(tmp_path, quality=quality)
            elif ext == ".png":
                img.save(tmp_path, optimize=optimize)
            else:
                img.save(tmp_path)
        os.replace(tmp_path, path)
        logger.debug("Saved: %s (%s)", path, arr.shape)
    finally:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                pass
