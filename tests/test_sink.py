"""Tests for output naming and baked texture writing."""

import os
import shutil
import tempfile
import unittest
from unittest import mock

import numpy as np
from PIL import Image

from UnlitBaker.config import BakeConfig
from UnlitBaker.core import AlphaMode, MaterialDescriptor, safe_stem, unlit_filename
from UnlitBaker.errors import SinkWriteError
from UnlitBaker.phases.sink import UnlitSink

from _assets import solid


class TestUnlitFilename(unittest.TestCase):
    def test_named_opaque_material_uses_jpg(self):
        material = MaterialDescriptor(index=2, name="Brick")
        self.assertEqual(unlit_filename(material), "Brick_unlit.jpg")

    def test_unnamed_material_uses_index(self):
        material = MaterialDescriptor(index=3, alpha_mode=AlphaMode.BLEND)
        self.assertEqual(unlit_filename(material), "unlit_3.png")

    def test_mask_mode_uses_png(self):
        material = MaterialDescriptor(index=0, name="Leaves", alpha_mode=AlphaMode.MASK)
        self.assertEqual(unlit_filename(material), "Leaves_unlit.png")

    def test_separators_in_names_are_replaced(self):
        self.assertEqual(safe_stem("walls/brick:old"), "walls_brick_old")
        self.assertEqual(safe_stem(".."), "__")
        material = MaterialDescriptor(index=0, name="../escape")
        self.assertEqual(unlit_filename(material), ".._escape_unlit.jpg")


class TestUnlitSink(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.sink = UnlitSink(BakeConfig())

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_writes_png_with_alpha(self):
        material = MaterialDescriptor(index=0, name="Glass", alpha_mode=AlphaMode.BLEND)
        composite = solid(4, 4, (10, 20, 30, 40))
        path = self.sink.write(material, composite, os.path.join(self.tmpdir, "out"))
        self.assertEqual(path, os.path.join(self.tmpdir, "out", "Glass_unlit.png"))
        with Image.open(path) as img:
            np.testing.assert_array_equal(np.asarray(img), composite)

    def test_writes_jpeg_without_alpha(self):
        material = MaterialDescriptor(index=1)
        path = self.sink.write(material, solid(4, 4, (10, 20, 30, 40)), self.tmpdir)
        self.assertTrue(path.endswith("unlit_1.jpg"))
        with Image.open(path) as img:
            self.assertEqual(img.mode, "RGB")

    def test_write_failure_raises_sink_error(self):
        blocker = os.path.join(self.tmpdir, "not_a_dir")
        with open(blocker, "w", encoding="utf-8") as f:
            f.write("x")
        material = MaterialDescriptor(index=0)
        with self.assertRaises(SinkWriteError):
            self.sink.write(material, solid(2, 2, (0, 0, 0, 255)), blocker)


def test_png_optimize_flag_is_forwarded(tmp_dir, default_config):
    default_config.sink.png_optimize = False
    sink = UnlitSink(default_config)
    material = MaterialDescriptor(index=0, name="Glass", alpha_mode=AlphaMode.BLEND)
    with mock.patch("UnlitBaker.phases.sink.save_rgba") as save:
        path = sink.write(material, solid(2, 2, (1, 2, 3, 4)), tmp_dir)
    assert path == os.path.join(tmp_dir, "Glass_unlit.png")
    assert save.call_args.kwargs["optimize"] is False
    assert save.call_args.kwargs["quality"] == 95


if __name__ == "__main__":
    unittest.main(verbosity=2)
