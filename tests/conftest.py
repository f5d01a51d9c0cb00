"""Shared test fixtures."""

import shutil
import tempfile

import pytest

from UnlitBaker.config import BakeConfig


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def default_config():
    return BakeConfig()
