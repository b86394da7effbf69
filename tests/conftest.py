"""Shared fixtures: tiny PNG files and stylesheet writers."""

from __future__ import annotations

import random
from pathlib import Path

import pytest
from PIL import Image


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)


@pytest.fixture
def make_png():
    """Write a solid-colour PNG and return its path."""

    def _make(path: Path, size: tuple[int, int] = (16, 16), color=RED) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGBA", size, color).save(path, format="PNG")
        return path

    return _make


@pytest.fixture
def make_noise_png():
    """Write a PNG of random pixels, which compresses badly."""

    def _make(path: Path, size: tuple[int, int] = (32, 32), seed: int = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        rng = random.Random(seed)
        data = bytes(rng.getrandbits(8) for _ in range(size[0] * size[1] * 4))
        Image.frombytes("RGBA", size, data).save(path, format="PNG")
        return path

    return _make


@pytest.fixture
def write_css():
    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
