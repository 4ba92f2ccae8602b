"""
Energy functions for seam editing.

The energy function determines which pixels are "important".
Low-energy seams are preferred for removal.

Energy is a Sobel gradient magnitude on brightness. Because the grid is a
linked mesh rather than a dense array, the 3x3 neighborhood of each cell is
read through the link table instead of by convolution, so energies always
reflect the cell's *current* neighbors after seams have been removed.
"""

import torch

from .cell import UP, DOWN, LEFT, RIGHT, NO_CELL


def brightness(colors: torch.Tensor) -> torch.Tensor:
    """
    Average of the R, G and B channels.

    Args:
        colors: Integer colors (N, C) with C >= 3; alpha is ignored

    Returns:
        Brightness (N,) as float64
    """
    rgb_sum = colors[:, :3].to(torch.int64).sum(dim=1)
    return rgb_sum.to(torch.float64) / 3.0


def follow(links: torch.Tensor, cells: torch.Tensor, direction: int) -> torch.Tensor:
    """Step every cell in `cells` one link in `direction`; NO_CELL stays NO_CELL."""
    out = torch.full_like(cells, NO_CELL)
    present = cells != NO_CELL
    out[present] = links[cells[present], direction]
    return out


def mesh_energy(brightness: torch.Tensor, links: torch.Tensor,
                cells: torch.Tensor) -> torch.Tensor:
    """
    Sobel gradient magnitude over the linked mesh.

    Missing neighbors (mesh border) take the cell's own brightness:

        h = (UL + 2L + DL) - (UR + 2R + DR)
        v = (UL + 2U + UR) - (DL + 2D + DR)
        E = sqrt(h^2 + v^2)

    Diagonals are reached through the vertical neighbor (UL is up.left).

    Args:
        brightness: Brightness of every arena cell (N,)
        links: Link table (N, 4), NO_CELL where absent
        cells: Indices of the cells to evaluate (K,)

    Returns:
        Energy (K,) as float64, aligned with `cells`
    """
    own = brightness[cells]

    def sample(neighbors):
        return torch.where(neighbors != NO_CELL,
                           brightness[neighbors.clamp(min=0)], own)

    up = follow(links, cells, UP)
    down = follow(links, cells, DOWN)

    b_up = sample(up)
    b_down = sample(down)
    b_left = sample(follow(links, cells, LEFT))
    b_right = sample(follow(links, cells, RIGHT))
    b_up_left = sample(follow(links, up, LEFT))
    b_up_right = sample(follow(links, up, RIGHT))
    b_down_left = sample(follow(links, down, LEFT))
    b_down_right = sample(follow(links, down, RIGHT))

    horizontal = (b_up_left + 2 * b_left + b_down_left) - (b_up_right + 2 * b_right + b_down_right)
    vertical = (b_up_left + 2 * b_up + b_up_right) - (b_down_left + 2 * b_down + b_down_right)

    return torch.sqrt(horizontal ** 2 + vertical ** 2)
