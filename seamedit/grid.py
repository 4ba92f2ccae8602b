"""
Linked pixel mesh.

Every pixel of the source raster becomes one cell of an arena. Cells are
addressed by a stable integer index and connected to their four neighbors
through a link table:

    links[i] = (up, down, left, right), NO_CELL where there is no neighbor

The arena never moves or copies a cell once it is built. Removing a seam
detaches one cell per row and stitches the mesh around the gap; the detached
cells keep their own links so the seam can be put back exactly. Width and
height are never stored, they are derived by walking links from the root.
"""

import logging
from typing import List, Optional

import torch

from .cell import PixelCell, UP, DOWN, LEFT, RIGHT, NO_CELL
from .energy import brightness, mesh_energy

logger = logging.getLogger(__name__)

_OPPOSITE = {UP: DOWN, DOWN: UP, LEFT: RIGHT, RIGHT: LEFT}
_NAMES = {UP: 'up', DOWN: 'down', LEFT: 'left', RIGHT: 'right'}


class InvalidSeamError(ValueError):
    """A seam handed to excision or restoration does not fit the mesh."""


class PixelGrid:
    """
    Arena of linked pixel cells.

    Attributes:
        colors: Cell colors (N, C) uint8, C in {3, 4}
        brightness: Cell brightness (N,) float64
        energy: Cell energy (N,) float64, valid for live cells after
            compute_energies()
        links: Link table (N, 4) int64
        alive: Which cells are currently part of the mesh (N,) bool
        root: Index of the top-left cell, or None for an empty grid
    """

    def __init__(self, colors: torch.Tensor, links: torch.Tensor, root: Optional[int]):
        self.colors = colors
        self.links = links
        self.root = root
        n_cells = colors.shape[0]
        self.alive = torch.ones(n_cells, dtype=torch.bool)
        self.brightness = brightness(colors)
        self.energy = torch.zeros(n_cells, dtype=torch.float64)

    @classmethod
    def from_raster(cls, raster: torch.Tensor) -> 'PixelGrid':
        """
        Build the mesh from a raster.

        Cells are numbered row-major, so cell (y, x) gets index y * W + x.
        Each cell is linked to its left and upper neighbors and back.

        Args:
            raster: Integer image tensor (C, H, W) with C in {3, 4}

        Returns:
            Grid rooted at the top-left pixel, with energies computed
        """
        if raster.dim() != 3:
            raise ValueError(f"Expected a (C, H, W) raster, got shape {tuple(raster.shape)}")
        if raster.is_floating_point():
            raise ValueError("Raster must hold integer channel values")

        C, H, W = raster.shape
        if C not in (3, 4):
            raise ValueError(f"Raster must have 3 or 4 channels, got {C}")
        if H == 0 or W == 0:
            raise ValueError("Cannot build a grid from an empty raster")

        colors = raster.permute(1, 2, 0).reshape(H * W, C).to(torch.uint8).clone()

        index = torch.arange(H * W, dtype=torch.long).view(H, W)
        links = torch.full((H, W, 4), NO_CELL, dtype=torch.long)
        links[1:, :, UP] = index[:-1, :]
        links[:-1, :, DOWN] = index[1:, :]
        links[:, 1:, LEFT] = index[:, :-1]
        links[:, :-1, RIGHT] = index[:, 1:]

        grid = cls(colors, links.view(H * W, 4), root=0)
        grid.compute_energies()
        logger.debug("Built %dx%d grid with %d channels", W, H, C)
        return grid

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def __len__(self):
        return int(self.alive.sum())

    def cell(self, index: int) -> PixelCell:
        return PixelCell(self, index)

    @property
    def root_cell(self) -> Optional[PixelCell]:
        return None if self.root is None else PixelCell(self, self.root)

    def _walk(self, start: int, direction: int) -> List[int]:
        links = self.links
        out = []
        node = start
        while node != NO_CELL:
            out.append(node)
            node = int(links[node, direction])
        return out

    @property
    def width(self) -> int:
        """Cells in the top row."""
        return 0 if self.root is None else len(self._walk(self.root, RIGHT))

    @property
    def height(self) -> int:
        """Cells in the left column."""
        return 0 if self.root is None else len(self._walk(self.root, DOWN))

    def rows(self) -> List[torch.Tensor]:
        """Cell indices of every row, top to bottom, each left to right."""
        if self.root is None:
            return []
        links = self.links.tolist()
        rows = []
        row_start = self.root
        while row_start != NO_CELL:
            row = []
            node = row_start
            while node != NO_CELL:
                row.append(node)
                node = links[node][RIGHT]
            rows.append(torch.tensor(row, dtype=torch.long))
            row_start = links[row_start][DOWN]
        return rows

    # ------------------------------------------------------------------
    # Energy
    # ------------------------------------------------------------------

    def compute_energies(self):
        """Recompute the energy of every live cell from its current neighbors."""
        cells = self.alive.nonzero(as_tuple=True)[0]
        if cells.numel() == 0:
            return
        self.energy[cells] = mesh_energy(self.brightness, self.links, cells)

    # ------------------------------------------------------------------
    # Seam surgery
    # ------------------------------------------------------------------

    def _seam_cells(self, seam: torch.Tensor) -> List[int]:
        if seam.dim() != 1 or seam.numel() == 0:
            raise InvalidSeamError("Seam must be a non-empty 1-D tensor of cell indices")
        cells = [int(c) for c in seam.tolist()]
        if len(set(cells)) != len(cells):
            raise InvalidSeamError("Seam visits the same cell twice")
        n_cells = self.colors.shape[0]
        for c in cells:
            if not 0 <= c < n_cells:
                raise InvalidSeamError(f"Cell {c} is outside the grid")
        return cells

    def validate_seam(self, seam: torch.Tensor) -> List[int]:
        """
        Check that a seam can be excised from the current mesh.

        A valid seam holds one live cell per row, starts in the top row,
        ends in the bottom row, and each cell's successor is the cell
        below it or that cell's left or right neighbor.

        Returns:
            The seam as a list of cell indices

        Raises:
            InvalidSeamError: if any condition fails. Nothing is modified.
        """
        cells = self._seam_cells(seam)
        if not all(bool(self.alive[c]) for c in cells):
            raise InvalidSeamError("Seam contains a cell that is not in the mesh")

        height = self.height
        if len(cells) != height:
            raise InvalidSeamError(f"Seam has {len(cells)} cells but the grid has {height} rows")

        links = self.links
        if int(links[cells[0], UP]) != NO_CELL:
            raise InvalidSeamError("Seam does not start in the top row")
        if int(links[cells[-1], DOWN]) != NO_CELL:
            raise InvalidSeamError("Seam does not end in the bottom row")

        for row, (above, below) in enumerate(zip(cells, cells[1:])):
            down = int(links[above, DOWN])
            allowed = (down, int(links[down, LEFT]), int(links[down, RIGHT])) if down != NO_CELL else ()
            if below not in allowed:
                raise InvalidSeamError(f"Seam is not 8-connected between rows {row} and {row + 1}")

        return cells

    def excise_seam(self, seam: torch.Tensor):
        """
        Detach a seam from the mesh, one cell per row, top to bottom.

        Each cell is spliced out of its row. Where the seam steps diagonally,
        the cell below the removed one is re-attached to the removed cell's
        left or right neighbor, whichever now sits in the same column:

            next seam cell is down.left  -> left.down = down
            next seam cell is down.right -> right.down = down

        The detached cells keep their links for restore_seam().

        Args:
            seam: Cell indices (H,), top to bottom
        """
        cells = self.validate_seam(seam)
        links = self.links

        for i, cell in enumerate(cells):
            nxt = cells[i + 1] if i + 1 < len(cells) else NO_CELL
            left = int(links[cell, LEFT])
            right = int(links[cell, RIGHT])
            down = int(links[cell, DOWN])

            if cell == self.root:
                self.root = right if right != NO_CELL else None

            if left != NO_CELL:
                links[left, RIGHT] = right
            if right != NO_CELL:
                links[right, LEFT] = left

            if down != NO_CELL:
                if nxt == int(links[down, LEFT]):
                    links[left, DOWN] = down
                    links[down, UP] = left
                elif nxt == int(links[down, RIGHT]):
                    links[right, DOWN] = down
                    links[down, UP] = right

            self.alive[cell] = False

        logger.debug("Excised seam of %d cells", len(cells))

    def validate_restorable(self, seam: torch.Tensor) -> List[int]:
        """
        Check that a detached seam fits back into the current mesh.

        Every cell must be detached, and the live cells it used to sit
        between must still be adjacent to each other. This fails when seams
        are restored out of the order they were removed in.

        Raises:
            InvalidSeamError: if the seam does not fit. Nothing is modified.
        """
        cells = self._seam_cells(seam)
        if any(bool(self.alive[c]) for c in cells):
            raise InvalidSeamError("Seam contains a cell that is still in the mesh")

        links = self.links
        for cell in cells:
            left = int(links[cell, LEFT])
            right = int(links[cell, RIGHT])
            for neighbor in (left, right):
                if neighbor != NO_CELL and not bool(self.alive[neighbor]):
                    raise InvalidSeamError(f"Neighbor {neighbor} of cell {cell} is detached")
            if left != NO_CELL and int(links[left, RIGHT]) != right:
                raise InvalidSeamError(f"Cell {cell} no longer fits between {left} and {right}")
            if left == NO_CELL and right != NO_CELL and int(links[right, LEFT]) != NO_CELL:
                raise InvalidSeamError(f"Cell {cell} no longer fits left of {right}")

        return cells

    def restore_seam(self, seam: torch.Tensor):
        """
        Re-attach a seam removed by excise_seam().

        Each cell points its four former neighbors back at itself. A cell
        with neither a left nor an upper neighbor becomes the root again.

        Args:
            seam: Cell indices (H,) exactly as passed to excise_seam()
        """
        cells = self.validate_restorable(seam)
        links = self.links

        for cell in cells:
            for direction in (UP, DOWN, LEFT, RIGHT):
                neighbor = int(links[cell, direction])
                if neighbor != NO_CELL:
                    links[neighbor, _OPPOSITE[direction]] = cell

            if int(links[cell, LEFT]) == NO_CELL and int(links[cell, UP]) == NO_CELL:
                self.root = cell

            self.alive[cell] = True

        logger.debug("Restored seam of %d cells", len(cells))

    def release_seam(self, seam: torch.Tensor):
        """Clear the links of detached cells that will never be restored."""
        cells = self._seam_cells(seam)
        if any(bool(self.alive[c]) for c in cells):
            raise InvalidSeamError("Cannot release cells that are still in the mesh")
        self.links[torch.tensor(cells, dtype=torch.long)] = NO_CELL

    def seam_columns(self, seam: torch.Tensor) -> torch.Tensor:
        """
        Column position of each seam cell within its row of the current mesh.

        Returns:
            Column indices (H,), one per row
        """
        cells = self._seam_cells(seam)
        rows = self.rows()
        if len(cells) != len(rows):
            raise InvalidSeamError(f"Seam has {len(cells)} cells but the grid has {len(rows)} rows")

        columns = torch.zeros(len(rows), dtype=torch.long)
        for i, (row, cell) in enumerate(zip(rows, cells)):
            hits = (row == cell).nonzero(as_tuple=True)[0]
            if hits.numel() == 0:
                raise InvalidSeamError(f"Cell {cell} is not in row {i}")
            columns[i] = hits[0]
        return columns

    # ------------------------------------------------------------------
    # Export and checks
    # ------------------------------------------------------------------

    def export(self) -> Optional[torch.Tensor]:
        """
        Raster of the current mesh.

        Returns:
            uint8 tensor (C, H, W), or None if the grid is empty
        """
        rows = self.rows()
        if not rows:
            logger.warning("No image data available.")
            return None

        widths = {row.numel() for row in rows}
        if len(widths) != 1:
            raise RuntimeError(f"Mesh rows have differing widths: {sorted(widths)}")

        pixels = torch.stack([self.colors[row] for row in rows])  # (H, W, C)
        return pixels.permute(2, 0, 1).contiguous()

    def check_links(self) -> List[str]:
        """
        Verify link symmetry and root placement over the live mesh.

        Returns:
            Descriptions of every problem found, empty when consistent
        """
        problems = []
        if self.root is not None:
            if not bool(self.alive[self.root]):
                problems.append(f"root {self.root} is detached")
            for direction in (UP, LEFT):
                if int(self.links[self.root, direction]) != NO_CELL:
                    problems.append(f"root {self.root} has a {_NAMES[direction]} neighbor")

        links = self.links.tolist()
        alive = self.alive.tolist()
        for cell, is_alive in enumerate(alive):
            if not is_alive:
                continue
            for direction in (UP, DOWN, LEFT, RIGHT):
                neighbor = links[cell][direction]
                if neighbor == NO_CELL:
                    continue
                if not alive[neighbor]:
                    problems.append(f"cell {cell} links {_NAMES[direction]} to detached cell {neighbor}")
                elif links[neighbor][_OPPOSITE[direction]] != cell:
                    problems.append(f"cell {cell} {_NAMES[direction]} link to {neighbor} is not mirrored")
        return problems
