"""Shared test fixtures for the seamcarve test suite."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest
from seamcarve.grid import Grid
from seamcarve.view import ImageView

# 5x4 grayscale image, row-major, and its base energy
IMAGE_DATA = [9, 9, 0, 9, 9,
              9, 1, 9, 8, 9,
              9, 9, 9, 9, 0,
              9, 9, 9, 0, 9]
IMAGE_ENERGY = [0, 145, 81, 82, 0,
                64, 0, 130, 0, 82,
                0, 64, 0, 145, 81,
                0, 0, 81, 81, 162]


@pytest.fixture
def small_gray():
    """The 5x4 grayscale fixture image as a (H, W) uint8 tensor."""
    return torch.tensor(IMAGE_DATA, dtype=torch.uint8).reshape(4, 5)


@pytest.fixture
def energy_grid():
    """The 5x4 fixture values used directly as an energy map."""
    return Grid.from_values(5, 4, IMAGE_DATA)


def make_random_image(H, W, channels=3, seed=42):
    """Random uint8 image (C, H, W), or (H, W) when channels == 0."""
    gen = torch.Generator().manual_seed(seed)
    shape = (channels, H, W) if channels > 0 else (H, W)
    return torch.randint(0, 256, shape, generator=gen, dtype=torch.uint8)


def make_edge_image(H, W, edge_col, channels=3):
    """Black left of ``edge_col``, bright from ``edge_col`` onward."""
    image = torch.zeros(channels, H, W, dtype=torch.uint8)
    image[:, :, edge_col:] = 200
    return image


def assert_valid_seam(seam, length, bound):
    """Seam has one index per line, stays in [0, bound) and is connected."""
    assert seam.shape == (length,)
    assert (seam >= 0).all() and (seam < bound).all()
    if length > 1:
        assert (seam[1:] - seam[:-1]).abs().max() <= 1
