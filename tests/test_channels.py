"""Tests for channel loading and failure isolation."""

import os
import shutil
import tempfile
import unittest

import numpy as np

from UnlitBaker.config import BakeConfig
from UnlitBaker.core import ChannelRef, MaterialDescriptor
from UnlitBaker.phases.channels import ChannelLoader, MaterialChannels

from _assets import solid, write_png


class TestChannelLoader(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.loader = ChannelLoader(BakeConfig())

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_absent_reference_returns_none(self):
        self.assertIsNone(self.loader.load(self.tmpdir, None))

    def test_buffer_view_image_warns_and_skips(self):
        ref = ChannelRef(texture_index=0, image_index=3, uri=None)
        with self.assertLogs("unlit_baker.channels", level="WARNING") as cm:
            self.assertIsNone(self.loader.load(self.tmpdir, ref))
        self.assertTrue(any("image[3]" in msg for msg in cm.output))

    def test_data_uri_is_treated_as_embedded(self):
        ref = ChannelRef(texture_index=0, image_index=0, uri="data:image/png;base64,AAAA")
        self.assertTrue(ref.embedded)
        with self.assertLogs("unlit_baker.channels", level="WARNING"):
            self.assertIsNone(self.loader.load(self.tmpdir, ref))

    def test_missing_file_warns_and_skips(self):
        ref = ChannelRef(texture_index=0, image_index=0, uri="nope.png")
        with self.assertLogs("unlit_baker.channels", level="WARNING") as cm:
            self.assertIsNone(self.loader.load(self.tmpdir, ref))
        self.assertTrue(any("nope.png" in msg for msg in cm.output))

    def test_undecodable_file_warns_and_skips(self):
        path = os.path.join(self.tmpdir, "broken.png")
        with open(path, "wb") as f:
            f.write(b"not an image")
        ref = ChannelRef(texture_index=0, image_index=0, uri="broken.png")
        with self.assertLogs("unlit_baker.channels", level="WARNING"):
            self.assertIsNone(self.loader.load(self.tmpdir, ref))

    def test_rgb_source_is_promoted_to_rgba(self):
        write_png(os.path.join(self.tmpdir, "ao.png"), solid(4, 6, (90, 10, 20)))
        ref = ChannelRef(texture_index=0, image_index=0, uri="ao.png")
        raster = self.loader.load(self.tmpdir, ref)
        self.assertEqual(raster.shape, (4, 6, 4))
        self.assertEqual(raster.dtype, np.uint8)
        self.assertEqual(raster[0, 0].tolist(), [90, 10, 20, 255])

    def test_uri_is_percent_decoded_and_relative_to_base_dir(self):
        write_png(
            os.path.join(self.tmpdir, "tex", "base color.png"),
            solid(2, 2, (1, 2, 3, 4)),
        )
        ref = ChannelRef(texture_index=0, image_index=0, uri="tex/base%20color.png")
        raster = self.loader.load(self.tmpdir, ref)
        self.assertEqual(raster[1, 1].tolist(), [1, 2, 3, 4])

    def test_oversized_image_is_skipped(self):
        config = BakeConfig()
        config.max_image_pixels = 10
        loader = ChannelLoader(config)
        write_png(os.path.join(self.tmpdir, "big.png"), solid(4, 4, (0, 0, 0)))
        ref = ChannelRef(texture_index=0, image_index=0, uri="big.png")
        with self.assertLogs("unlit_baker.channels", level="WARNING"):
            self.assertIsNone(loader.load(self.tmpdir, ref))

    def test_load_material_keeps_remaining_channels(self):
        write_png(os.path.join(self.tmpdir, "emissive.png"), solid(2, 2, (9, 9, 9)))
        material = MaterialDescriptor(
            index=0,
            base_color_channel=ChannelRef(texture_index=0, image_index=0, uri=None),
            emissive_channel=ChannelRef(texture_index=1, image_index=1, uri="emissive.png"),
        )
        with self.assertLogs("unlit_baker.channels", level="WARNING"):
            channels = self.loader.load_material(self.tmpdir, material)
        self.assertIsNone(channels.base_color)
        self.assertIsNone(channels.occlusion)
        self.assertEqual(channels.emissive.shape, (2, 2, 4))
        self.assertEqual(list(channels.present()), ["emissive"])


class TestMaterialChannels(unittest.TestCase):
    def test_present_preserves_compositing_order(self):
        channels = MaterialChannels(
            emissive=solid(1, 1, (0, 0, 0, 0)),
            base_color=solid(1, 1, (0, 0, 0, 0)),
        )
        self.assertEqual(list(channels.present()), ["base_color", "emissive"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
