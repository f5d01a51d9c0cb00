"""Link baked unlit textures back into the glTF document.

Each baked material gets a sibling ``KHR_materials_unlit`` material that
samples the baked texture. The original material points at it through the
``MOZ_alt_materials`` extension so viewers can switch to the unlit variant.
"""

import logging
import os
from typing import Optional, Sequence

from pygltflib import GLTF2, Image, Material, PbrMetallicRoughness, Texture, TextureInfo

from ..config import BakeConfig

logger = logging.getLogger("unlit_baker.alt_materials")

ALT_MATERIALS_EXTENSION = "MOZ_alt_materials"
UNLIT_EXTENSION = "KHR_materials_unlit"


def add_unlit_alt_materials(gltf: GLTF2, output_paths: Sequence[Optional[str]],
                            roughness_factor: float = 0.9,
                            metallic_factor: float = 0.0) -> int:
    """Append an unlit material for every non-null entry in `output_paths`.

    `output_paths` is indexed by material position. Returns the number of
    alt materials added.
    """
    materials = gltf.materials
    original_count = len(materials)
    if len(output_paths) != original_count:
        raise ValueError(
            f"Expected {original_count} output path(s), got {len(output_paths)}"
        )

    if gltf.images is None:
        gltf.images = []
    if gltf.textures is None:
        gltf.textures = []

    added = 0
    for index in range(original_count):
        baked = output_paths[index]
        if baked is None:
            continue

        gltf.images.append(Image(uri=os.path.basename(baked)))
        gltf.textures.append(Texture(source=len(gltf.images) - 1))
        materials.append(Material(
            pbrMetallicRoughness=PbrMetallicRoughness(
                baseColorTexture=TextureInfo(index=len(gltf.textures) - 1),
                roughnessFactor=roughness_factor,
                metallicFactor=metallic_factor,
            ),
            extensions={UNLIT_EXTENSION: {}},
        ))

        original = materials[index]
        if original.extensions is None:
            original.extensions = {}
        original.extensions[ALT_MATERIALS_EXTENSION] = {
            UNLIT_EXTENSION: len(materials) - 1,
        }
        added += 1

    if added:
        if gltf.extensionsUsed is None:
            gltf.extensionsUsed = []
        for name in (ALT_MATERIALS_EXTENSION, UNLIT_EXTENSION):
            if name not in gltf.extensionsUsed:
                gltf.extensionsUsed.append(name)
    return added


class AltMaterialWriter:
    """Write a copy of the asset that references the baked textures."""

    def __init__(self, config: BakeConfig):
        self.config = config
        self.cfg = config.alt_materials

    def write(self, gltf: GLTF2, asset_path: str,
              output_paths: Sequence[Optional[str]], output_dir: str) -> Optional[str]:
        """Patch `gltf` in place and save it under `output_dir`.

        Returns the written path, or None when no texture was baked.
        """
        added = add_unlit_alt_materials(
            gltf,
            output_paths,
            roughness_factor=self.cfg.roughness_factor,
            metallic_factor=self.cfg.metallic_factor,
        )
        if not added:
            logger.info("No unlit textures were baked; skipping glTF update.")
            return None

        out_path = os.path.join(output_dir, os.path.basename(asset_path))
        if os.path.abspath(out_path) == os.path.abspath(asset_path):
            logger.info("Updating %s in place.", asset_path)
        os.makedirs(output_dir or ".", exist_ok=True)
        gltf.save(out_path)
        logger.info("Wrote %s with %d unlit alt material(s)", out_path, added)
        return out_path
