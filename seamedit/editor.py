"""
Seam editing session.

Ties a grid to its edit history: find a seam, optionally highlight it,
remove it, undo removals. Degenerate requests (nothing highlighted, a
single column left, nothing to undo) are logged and return a "nothing
done" value instead of raising.
"""

import logging
from typing import Optional, Tuple, Union

import torch

from .config import HIGHLIGHT_COLORS
from .grid import PixelGrid
from .history import EditHistory, RemoveSeamCommand
from .io import PathLike, load_image
from .preview import highlight_seam
from .seam import Criterion, empty_seam, find_seam

logger = logging.getLogger(__name__)


class SeamEditor:
    """
    One editing session over one image.

    Attributes:
        grid: The linked pixel mesh being edited
        history: Executed removals, most recent last
        raster: Export of the grid after the latest edit
        highlighted: Seam from the last highlight() call, cleared by removal
    """

    def __init__(self, raster: torch.Tensor):
        self.grid = PixelGrid.from_raster(raster)
        self.history = EditHistory()
        self.raster = self.grid.export()
        self.highlighted: Optional[torch.Tensor] = None

    @classmethod
    def from_file(cls, path: PathLike) -> 'SeamEditor':
        return cls(load_image(path))

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    def find_seam(self, criterion: Union[str, Criterion]) -> torch.Tensor:
        """
        Find a seam without changing anything.

        Returns:
            Seam cell indices, empty if only one column is left
        """
        criterion = Criterion(criterion)
        if self.grid.width <= 1:
            logger.warning("Only one column remains. You can not create an empty image.")
            return empty_seam()
        return find_seam(self.grid, criterion)

    def highlight(self, criterion: Union[str, Criterion]
                  ) -> Tuple[torch.Tensor, Optional[torch.Tensor]]:
        """
        Find a seam, remember it for remove(), and render it.

        Returns:
            (seam, preview) where preview is the current raster with the
            seam painted, or (empty seam, None) if nothing can be removed
        """
        criterion = Criterion(criterion)
        seam = self.find_seam(criterion)
        if seam.numel() == 0:
            return seam, None

        self.highlighted = seam
        columns = self.grid.seam_columns(seam)
        preview = highlight_seam(self.grid.export(), columns, HIGHLIGHT_COLORS[criterion.value])
        return seam, preview

    def remove(self, seam: Optional[torch.Tensor] = None) -> Optional[RemoveSeamCommand]:
        """
        Remove a seam and record it for undo.

        Args:
            seam: Seam to remove; defaults to the highlighted seam

        Returns:
            The executed command, or None if there was nothing to remove
        """
        if seam is None:
            seam = self.highlighted
        if seam is None or seam.numel() == 0:
            logger.warning("No seam has been highlighted yet. Please highlight a seam before trying to delete.")
            return None
        if self.grid.width <= 1:
            logger.warning("Only one column remains. You can not create an empty image.")
            return None

        command = RemoveSeamCommand(self.grid, seam)
        command.execute()
        self.history.push(command)
        # The highlighted seam refers to a topology that no longer exists
        self.highlighted = None
        self.raster = command.raster
        logger.info("Removed seam; image is now %dx%d", self.width, self.height)
        return command

    def undo(self) -> bool:
        """Undo the most recent removal. Returns False if there was none."""
        command = self.history.peek()
        if not self.history.undo():
            return False
        self.highlighted = None
        self.raster = command.raster
        logger.info("Undid seam removal; image is now %dx%d", self.width, self.height)
        return True

    def export(self) -> Optional[torch.Tensor]:
        return self.grid.export()

    def close(self):
        """
        Make the current edits permanent.

        Drops the undo history and releases the cells of every removed
        seam. The image keeps its current shape; undo() returns False
        afterwards.
        """
        released = len(self.history)
        self.history.clear()
        self.highlighted = None
        logger.debug("Closed session, released %d removed seams", released)
