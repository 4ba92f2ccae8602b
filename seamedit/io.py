"""
Raster file I/O.

Rasters are uint8 tensors (C, H, W). Pillow handles the file formats;
errors from reading or writing are left to the caller.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import torch
from PIL import Image

from .config import PREVIEW_PREFIX

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_image(path: PathLike) -> torch.Tensor:
    """Load an image file as a uint8 tensor (C, H, W), keeping alpha if present."""
    img = Image.open(path)
    img = img.convert('RGBA' if img.mode in ('RGBA', 'LA', 'PA') else 'RGB')
    img_array = np.array(img, dtype=np.uint8)
    return torch.from_numpy(img_array).permute(2, 0, 1).contiguous()


def save_image(raster: torch.Tensor, path: PathLike):
    """Save a uint8 tensor (C, H, W) as an image file."""
    img_array = raster.permute(1, 2, 0).cpu().numpy().astype(np.uint8)
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(img_array).save(path)
    logger.info("Saved: %s", path)


class PreviewWriter:
    """Writes numbered preview images: previewIMG0.png, previewIMG1.png, ..."""

    def __init__(self, directory: PathLike, prefix: str = PREVIEW_PREFIX):
        self.directory = Path(directory)
        self.prefix = prefix
        self.counter = 0

    def next_path(self) -> Path:
        return self.directory / f"{self.prefix}{self.counter}.png"

    def write(self, raster: torch.Tensor) -> Path:
        path = self.next_path()
        save_image(raster, path)
        self.counter += 1
        return path
