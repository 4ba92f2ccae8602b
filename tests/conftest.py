"""Shared test fixtures for the seamedit test suite."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest
from seamedit.grid import PixelGrid


RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
YELLOW = (255, 255, 0)
ORANGE = (255, 200, 0)
CYAN = (0, 255, 255)
MAGENTA = (255, 0, 255)
PINK = (255, 175, 175)
GRAY = (128, 128, 128)


def make_raster(rows):
    """Raster (C, H, W) from nested lists of per-pixel color tuples."""
    return torch.tensor(rows, dtype=torch.uint8).permute(2, 0, 1).contiguous()


def make_coded_raster(H, W):
    """Every pixel distinct: R = column, G = row, B = 7*column + 3*row."""
    ys, xs = torch.meshgrid(torch.arange(H), torch.arange(W), indexing='ij')
    return torch.stack([xs, ys, (7 * xs + 3 * ys) % 256]).to(torch.uint8)


def make_random_raster(H, W, channels=3, seed=0):
    gen = torch.Generator().manual_seed(seed)
    return torch.randint(0, 256, (channels, H, W), dtype=torch.uint8, generator=gen)


def remove_columns(raster, columns):
    """Reference removal: drop columns[i] from row i of a raster."""
    C, H, W = raster.shape
    rows = []
    for i in range(H):
        col = int(columns[i])
        rows.append(torch.cat([raster[:, i, :col], raster[:, i, col + 1:]], dim=1))
    return torch.stack(rows, dim=1)


@pytest.fixture
def colorful_raster():
    """3x3 image with nine distinct colors."""
    return make_raster([
        [RED, GREEN, BLUE],
        [YELLOW, ORANGE, CYAN],
        [MAGENTA, PINK, GRAY],
    ])


@pytest.fixture
def colorful_grid(colorful_raster):
    return PixelGrid.from_raster(colorful_raster)


@pytest.fixture
def coded_grid():
    """4 rows x 5 columns, cell (y, x) has index 5 * y + x."""
    return PixelGrid.from_raster(make_coded_raster(4, 5))
