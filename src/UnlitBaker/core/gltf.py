"""Load a glTF asset and convert its materials into `MaterialDescriptor` records.

Structural problems (dangling texture/image indices, malformed factors,
unknown alpha modes) are fatal and raised as `AssetDescriptionError`.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from pygltflib import GLTF2

from ..errors import AssetDescriptionError
from .records import AlphaMode, ChannelRef, MaterialDescriptor

logger = logging.getLogger("unlit_baker.gltf")

SUPPORTED_EXTENSIONS = (".gltf", ".glb")

_DEFAULT_BASE_COLOR_FACTOR = (1.0, 1.0, 1.0, 1.0)
_DEFAULT_EMISSIVE_FACTOR = (0.0, 0.0, 0.0)
_DEFAULT_OCCLUSION_STRENGTH = 1.0


@dataclass
class AssetDocument:
    """A loaded asset plus the material views derived from it."""

    path: str
    gltf: GLTF2
    materials: List[MaterialDescriptor] = field(default_factory=list)

    @property
    def base_dir(self) -> str:
        """Directory external image URIs are resolved against."""
        return os.path.dirname(os.path.abspath(self.path))


def load_asset(path: str) -> AssetDocument:
    """Open, parse, and validate a ``.gltf``/``.glb`` file."""
    if not os.path.isfile(path):
        raise AssetDescriptionError(f"Asset file not found: {path}")
    ext = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise AssetDescriptionError(
            f"Unsupported asset format '{ext}' for {path}; "
            f"expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    try:
        gltf = GLTF2().load(path)
    except Exception as e:
        raise AssetDescriptionError(f"Failed to parse asset '{path}': {e}") from e
    if gltf is None:
        raise AssetDescriptionError(f"Failed to parse asset '{path}'")

    materials = [
        describe_material(gltf, index, material)
        for index, material in enumerate(gltf.materials or [])
    ]
    logger.debug("Loaded %s with %d material(s)", path, len(materials))
    return AssetDocument(path=path, gltf=gltf, materials=materials)


def _channel_ref(gltf: GLTF2, texture_info, slot: str, where: str) -> Optional[ChannelRef]:
    if texture_info is None or texture_info.index is None:
        return None

    textures = gltf.textures or []
    images = gltf.images or []
    texture_index = texture_info.index
    if not (0 <= texture_index < len(textures)):
        raise AssetDescriptionError(
            f"{where}.{slot} references texture {texture_index}, "
            f"but the asset has {len(textures)} texture(s)"
        )
    image_index = textures[texture_index].source
    if image_index is None:
        raise AssetDescriptionError(f"texture[{texture_index}] has no image source")
    if not (0 <= image_index < len(images)):
        raise AssetDescriptionError(
            f"texture[{texture_index}] references image {image_index}, "
            f"but the asset has {len(images)} image(s)"
        )
    image = images[image_index]
    if image.uri is None and image.bufferView is None:
        raise AssetDescriptionError(
            f"image[{image_index}] must define either a uri or a bufferView"
        )
    return ChannelRef(texture_index=texture_index, image_index=image_index, uri=image.uri)


def _factor(values, default, size: int, label: str):
    if values is None:
        return default
    try:
        factor = tuple(float(v) for v in values)
    except (TypeError, ValueError) as e:
        raise AssetDescriptionError(f"{label} must be numeric, got {values!r}") from e
    if len(factor) != size:
        raise AssetDescriptionError(
            f"{label} must have {size} components, got {len(factor)}"
        )
    return factor


def describe_material(gltf: GLTF2, index: int, material) -> MaterialDescriptor:
    """Build the compositor's view of one glTF material."""
    where = f"materials[{index}]"
    pbr = material.pbrMetallicRoughness

    base_color_factor = _factor(
        pbr.baseColorFactor if pbr is not None else None,
        _DEFAULT_BASE_COLOR_FACTOR, 4, f"{where}.pbrMetallicRoughness.baseColorFactor",
    )
    emissive_factor = _factor(
        material.emissiveFactor, _DEFAULT_EMISSIVE_FACTOR, 3, f"{where}.emissiveFactor",
    )

    occlusion = material.occlusionTexture
    occlusion_strength = _DEFAULT_OCCLUSION_STRENGTH
    if occlusion is not None and occlusion.strength is not None:
        occlusion_strength = float(occlusion.strength)

    try:
        alpha_mode = AlphaMode(material.alphaMode or AlphaMode.OPAQUE.value)
    except ValueError as e:
        raise AssetDescriptionError(
            f"{where}.alphaMode must be one of "
            f"{[m.value for m in AlphaMode]}, got {material.alphaMode!r}"
        ) from e

    try:
        return MaterialDescriptor(
            index=index,
            name=material.name,
            alpha_mode=alpha_mode,
            base_color_factor=base_color_factor,
            base_color_channel=_channel_ref(
                gltf, pbr.baseColorTexture if pbr is not None else None,
                "baseColorTexture", where,
            ),
            occlusion_strength=occlusion_strength,
            occlusion_channel=_channel_ref(gltf, occlusion, "occlusionTexture", where),
            emissive_factor=emissive_factor,
            emissive_channel=_channel_ref(
                gltf, material.emissiveTexture, "emissiveTexture", where,
            ),
        )
    except AssetDescriptionError:
        raise
    except ValueError as e:
        raise AssetDescriptionError(f"{where}: {e}") from e
