"""Orchestrate unlit texture baking for every material of an asset.

`UnlitBakePipeline` loads the asset, runs loader -> compositor -> sink once
per material, and collects one `MaterialResult` per material in the
asset's material order.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

from tqdm import tqdm

from .config import BakeConfig
from .core import (
    AssetDocument, MaterialDescriptor, MaterialResult, get_output_path, load_asset,
)
from .errors import BakeError
from .phases.alt_materials import AltMaterialWriter
from .phases.channels import ChannelLoader
from .phases.composite import UnlitCompositor
from .phases.sink import UnlitSink

logger = logging.getLogger("unlit_baker")


class UnlitBakePipeline:
    """Bake one unlit texture per material.

    Stages per material:
    1. Channel loading (base color, occlusion, emissive)
    2. Compositing
    3. Writing the baked texture

    A failure in any stage only affects the material being processed.
    """

    def __init__(
        self,
        config: BakeConfig,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ):
        self.config = config
        self._progress_callback = progress_callback
        self.loader = ChannelLoader(config)
        self.compositor = UnlitCompositor(config)
        self.sink = UnlitSink(config)
        self.alt_writer = AltMaterialWriter(config)
        self.results: List[MaterialResult] = []
        self.output_dir: Optional[str] = None
        self.gltf_output_path: Optional[str] = None
        self._failed_materials = 0

    def resolve_output_dir(self, document: AssetDocument) -> str:
        """Return the configured output directory, or the asset's own directory."""
        return self.config.output_dir or document.base_dir

    def _report_progress(self, done: int, total: int) -> None:
        if self._progress_callback is None:
            return
        try:
            self._progress_callback(done, total)
        except Exception as exc:
            logger.debug("Progress callback failed: %s", exc)

    def _warn_on_name_collisions(self, materials: List[MaterialDescriptor],
                                 output_dir: str) -> None:
        """Warn when several materials would write the same texture file."""
        claimed = {}
        for material in materials:
            path = get_output_path(material, output_dir)
            first = claimed.setdefault(path, material)
            if first is not material:
                logger.warning(
                    "%s and %s both write %s; the later material overwrites it",
                    first.label, material.label, path,
                )

    def bake_material(self, document: AssetDocument, material: MaterialDescriptor,
                      output_dir: str) -> MaterialResult:
        """Run all stages for one material, converting failures into a result."""
        try:
            channels = self.loader.load_material(document.base_dir, material)
            composite = self.compositor.composite(material, channels)
            path = self.sink.write(material, composite, output_dir)
        except BakeError as e:
            logger.warning("Skipping %s: %s", material.label, e)
            return MaterialResult.failed(material.index, str(e))
        except Exception as e:
            logger.error("Failed %s: %s", material.label, e, exc_info=True)
            return MaterialResult.failed(material.index, str(e))
        return MaterialResult(index=material.index, ok=True, path=path)

    def run(self, asset_path: str) -> List[MaterialResult]:
        """Bake every material of `asset_path`.

        Raises:
            AssetDescriptionError: the asset could not be loaded. Nothing is
                written in that case.
        """
        start_time = time.time()
        self.results = []
        self._failed_materials = 0
        self.gltf_output_path = None

        document = load_asset(asset_path)
        output_dir = self.resolve_output_dir(document)
        self.output_dir = output_dir
        materials = document.materials
        total = len(materials)

        if not materials:
            logger.warning("No materials found in %s", asset_path)
        self._warn_on_name_collisions(materials, output_dir)

        slots: List[Optional[MaterialResult]] = [None] * total
        workers = min(self.config.max_workers, max(total, 1))
        done = 0

        if workers <= 1:
            for material in tqdm(materials, desc="Baking", disable=None):
                slots[material.index] = self.bake_material(document, material, output_dir)
                done += 1
                self._report_progress(done, total)
        else:
            # Results are slotted by material index, never by completion order.
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self.bake_material, document, material, output_dir): material
                    for material in materials
                }
                with tqdm(total=total, desc="Baking", disable=None) as pbar:
                    for future in as_completed(futures):
                        material = futures[future]
                        slots[material.index] = future.result()
                        pbar.update(1)
                        done += 1
                        self._report_progress(done, total)

        self.results = slots
        self._failed_materials = sum(1 for r in slots if not r.ok)

        if self.config.alt_materials.enabled:
            try:
                self.gltf_output_path = self.alt_writer.write(
                    document.gltf, asset_path, self.output_paths(), output_dir,
                )
            except (OSError, ValueError) as e:
                logger.error("Failed to write updated asset for %s: %s", asset_path, e)

        elapsed = time.time() - start_time
        summary = self.summary()
        logger.info(
            "Baked %d/%d material(s) in %.2fs (%d failed). Output: %s",
            summary["baked"], summary["total"], elapsed, summary["failed"], output_dir,
        )
        return self.results

    def output_paths(self) -> List[Optional[str]]:
        """Return written paths in material order, None for failed materials."""
        return [r.path if r.ok else None for r in self.results]

    def summary(self) -> dict:
        total = len(self.results)
        return {
            "total": total,
            "baked": total - self._failed_materials,
            "failed": self._failed_materials,
        }
