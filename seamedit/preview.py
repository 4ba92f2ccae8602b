"""
Seam highlighting for previews.
"""

from typing import Sequence

import torch


def highlight_seam(raster: torch.Tensor, columns: torch.Tensor,
                   color: Sequence[int] = (255, 0, 0)) -> torch.Tensor:
    """
    Paint one pixel per row of a raster.

    Args:
        raster: uint8 image tensor (C, H, W)
        columns: Column to paint in each row (H,)
        color: RGB color; an alpha channel, if present, is made opaque

    Returns:
        Highlighted copy of the raster
    """
    C, H, W = raster.shape
    if columns.shape != (H,):
        raise ValueError(f"Expected {H} seam columns, got shape {tuple(columns.shape)}")

    img_vis = raster.clone()
    paint = torch.tensor(list(color) + [255] * (C - 3), dtype=raster.dtype)
    rows = torch.arange(H)
    img_vis[:, rows, columns] = paint.unsqueeze(1).expand(C, H)
    return img_vis
