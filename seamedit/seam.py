"""
Seam search over a linked pixel mesh.

Two dynamic programs, each a single top-to-bottom sweep:
1. Minimum energy: the seam whose summed cell energy is smallest
2. Maximum blueness: the seam whose summed blue channel is largest

A cell's predecessors are its up neighbor and that neighbor's left and
right neighbors. Predecessors are compared in the order up-left, up,
up-right and the first best one wins; the final cell is the first best one
scanning the bottom row left to right.

Seams are returned as cell indices (H,), ordered top to bottom.
"""

import enum
import logging
from typing import List, Union

import torch

from .cell import UP, DOWN, LEFT, RIGHT, NO_CELL
from .energy import follow
from .grid import PixelGrid

logger = logging.getLogger(__name__)


class Criterion(str, enum.Enum):
    MIN_ENERGY = 'min_energy'
    MAX_BLUENESS = 'max_blueness'


def empty_seam() -> torch.Tensor:
    return torch.empty(0, dtype=torch.long)


def _predecessors(grid: PixelGrid, row: torch.Tensor) -> torch.Tensor:
    """Candidate predecessors (3, W) ordered up-left, up, up-right."""
    up = follow(grid.links, row, UP)
    return torch.stack([follow(grid.links, up, LEFT), up, follow(grid.links, up, RIGHT)])


def _backtrack(edge_to: torch.Tensor, last: int) -> torch.Tensor:
    seam = []
    node = last
    while node != NO_CELL:
        seam.append(node)
        node = int(edge_to[node])
    seam.reverse()
    return torch.tensor(seam, dtype=torch.long)


def min_energy_seam(grid: PixelGrid) -> torch.Tensor:
    """
    Find the connected top-to-bottom seam of minimum total energy.

    M(first row) = E
    M(cell) = E(cell) + min(M(up-left), M(up), M(up-right))

    Cells without any computed predecessor keep an infinite cost and are
    never selected.

    Args:
        grid: Mesh with energies computed

    Returns:
        Seam cell indices (H,), or an empty seam if the grid is empty
    """
    rows = grid.rows()
    if not rows:
        return empty_seam()

    n_cells = grid.colors.shape[0]
    cumulative = torch.full((n_cells,), float('inf'), dtype=torch.float64)
    edge_to = torch.full((n_cells,), NO_CELL, dtype=torch.long)

    cumulative[rows[0]] = grid.energy[rows[0]]

    for row in rows[1:]:
        preds = _predecessors(grid, row)
        costs = torch.where(preds != NO_CELL, cumulative[preds.clamp(min=0)],
                            torch.full(preds.shape, float('inf'), dtype=torch.float64))
        best_idx = costs.argmin(dim=0).unsqueeze(0)
        best_cost = costs.gather(0, best_idx).squeeze(0)
        best_pred = preds.gather(0, best_idx).squeeze(0)

        reachable = torch.isfinite(best_cost)
        cells = row[reachable]
        cumulative[cells] = grid.energy[cells] + best_cost[reachable]
        edge_to[cells] = best_pred[reachable]

    last_row = rows[-1]
    last = int(last_row[torch.argmin(cumulative[last_row])])
    seam = _backtrack(edge_to, last)
    logger.debug("Min-energy seam total %.3f", float(cumulative[last]))
    return seam


def max_blueness_seam(grid: PixelGrid) -> torch.Tensor:
    """
    Find the connected top-to-bottom seam of maximum total blue channel.

    B(first row) = blue
    B(cell) = max over predecessors p of (B(p) + blue(cell))

    The current cell's blue is added to each candidate before comparing,
    unlike min_energy_seam which adds the cell's energy after picking.

    Args:
        grid: Mesh to search

    Returns:
        Seam cell indices (H,), or an empty seam if the grid is empty
    """
    rows = grid.rows()
    if not rows:
        return empty_seam()

    n_cells = grid.colors.shape[0]
    blue = grid.colors[:, 2].to(torch.int64)
    unreachable = torch.iinfo(torch.int64).min
    cumulative = torch.full((n_cells,), unreachable, dtype=torch.int64)
    edge_to = torch.full((n_cells,), NO_CELL, dtype=torch.long)

    cumulative[rows[0]] = blue[rows[0]]

    for row in rows[1:]:
        preds = _predecessors(grid, row)
        known = preds != NO_CELL
        pred_totals = cumulative[preds.clamp(min=0)]
        known &= pred_totals != unreachable
        totals = torch.where(known, pred_totals + blue[row].unsqueeze(0),
                             torch.full(preds.shape, unreachable, dtype=torch.int64))
        best_idx = totals.argmax(dim=0).unsqueeze(0)
        best_total = totals.gather(0, best_idx).squeeze(0)
        best_pred = preds.gather(0, best_idx).squeeze(0)

        reachable = best_total != unreachable
        cells = row[reachable]
        cumulative[cells] = best_total[reachable]
        edge_to[cells] = best_pred[reachable]

    last_row = rows[-1]
    last = int(last_row[torch.argmax(cumulative[last_row])])
    seam = _backtrack(edge_to, last)
    logger.debug("Max-blueness seam total %d", int(cumulative[last]))
    return seam


def find_seam(grid: PixelGrid, criterion: Union[str, Criterion]) -> torch.Tensor:
    """
    Find a seam by criterion.

    Args:
        grid: Mesh to search
        criterion: 'min_energy' or 'max_blueness'

    Returns:
        Seam cell indices (H,)
    """
    try:
        criterion = Criterion(criterion)
    except ValueError:
        raise ValueError(f"Invalid criterion: {criterion}") from None

    if criterion is Criterion.MIN_ENERGY:
        return min_energy_seam(grid)
    return max_blueness_seam(grid)


def seam_energy(grid: PixelGrid, seam: torch.Tensor) -> float:
    """Total energy of the cells in a seam."""
    return float(grid.energy[seam].sum())


def seam_blueness(grid: PixelGrid, seam: torch.Tensor) -> int:
    """Total blue channel of the cells in a seam."""
    return int(grid.colors[seam, 2].to(torch.int64).sum())


def all_seams(grid: PixelGrid) -> List[torch.Tensor]:
    """
    Enumerate every connected top-to-bottom seam of the current mesh.

    Exponential in the height, meant for checking results on tiny grids.
    """
    rows = grid.rows()
    if not rows:
        return []

    paths = [[int(c)] for c in rows[0]]
    for row in rows[1:]:
        members = set(row.tolist())
        extended = []
        for path in paths:
            down = int(grid.links[path[-1], DOWN])
            if down == NO_CELL:
                continue
            for nxt in (int(grid.links[down, LEFT]), down, int(grid.links[down, RIGHT])):
                if nxt != NO_CELL and nxt in members:
                    extended.append(path + [nxt])
        paths = extended
    return [torch.tensor(p, dtype=torch.long) for p in paths]
