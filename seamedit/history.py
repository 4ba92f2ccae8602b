"""
Undoable edits.

Each edit is a command object that knows how to apply and reverse itself.
Executed commands are kept on a last-in-first-out stack so they can be
undone in reverse order.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import torch

from .grid import PixelGrid

logger = logging.getLogger(__name__)


class EditCommand(ABC):
    """Abstract base class for reversible edits"""

    @abstractmethod
    def execute(self):
        """Apply the edit."""

    @abstractmethod
    def undo(self):
        """Reverse the effects of execute()."""

    def release(self):
        """Called when the command leaves the history for good."""


class RemoveSeamCommand(EditCommand):
    """
    Remove one seam from a grid.

    The command owns its own copy of the seam, so the caller may drop or
    reuse the tensor it passed in. The seam's cells stay detached (but
    intact) while the command is executed, which is what allows undo() to
    put them back.

    Attributes:
        grid: Grid being edited
        seam: Cell indices of the seam, top to bottom
        raster: Export of the grid after the last execute() or undo()
    """

    def __init__(self, grid: PixelGrid, seam: torch.Tensor):
        self.grid = grid
        self.seam = seam.clone()
        self.raster: Optional[torch.Tensor] = None
        self.executed = False

    def execute(self):
        self.grid.excise_seam(self.seam)
        self.grid.compute_energies()
        self.raster = self.grid.export()
        self.executed = True

    def undo(self):
        self.grid.restore_seam(self.seam)
        self.grid.compute_energies()
        self.raster = self.grid.export()
        self.executed = False

    def release(self):
        # Cells of a command that is still applied are detached and unreachable
        if self.executed:
            self.grid.release_seam(self.seam)

    def __repr__(self):
        return f"RemoveSeamCommand(cells={self.seam.numel()}, executed={self.executed})"


class EditHistory:
    """Stack of executed commands."""

    def __init__(self):
        self._commands: List[EditCommand] = []

    def __len__(self):
        return len(self._commands)

    def __bool__(self):
        return bool(self._commands)

    def push(self, command: EditCommand):
        self._commands.append(command)

    def peek(self) -> Optional[EditCommand]:
        return self._commands[-1] if self._commands else None

    def pop(self) -> Optional[EditCommand]:
        return self._commands.pop() if self._commands else None

    def undo(self) -> bool:
        """
        Undo the most recent command.

        Returns:
            True if a command was undone, False if the history was empty
        """
        command = self.pop()
        if command is None:
            logger.info("Nothing left to undo.")
            return False
        try:
            command.undo()
        except Exception:
            self._commands.append(command)
            raise
        logger.debug("Undid %r", command)
        return True

    def clear(self):
        """Drop every command, releasing what they hold."""
        while self._commands:
            self._commands.pop().release()
