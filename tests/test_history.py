"""Tests for undoable seam removal commands and the edit history."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest
from seamedit.cell import NO_CELL
from seamedit.grid import PixelGrid, InvalidSeamError
from seamedit.history import EditCommand, EditHistory, RemoveSeamCommand
from seamedit.seam import min_energy_seam

from conftest import make_raster, make_coded_raster, remove_columns


class TestRemoveSeamCommand:
    def test_execute_removes_and_exports(self, coded_grid):
        original = coded_grid.export()
        command = RemoveSeamCommand(coded_grid, torch.tensor([2, 8, 12, 16]))
        command.execute()
        assert command.executed
        assert torch.equal(command.raster, remove_columns(original, [2, 3, 2, 1]))

    def test_undo_restores_raster(self, coded_grid):
        original = coded_grid.export()
        command = RemoveSeamCommand(coded_grid, torch.tensor([2, 8, 12, 16]))
        command.execute()
        command.undo()
        assert not command.executed
        assert torch.equal(command.raster, original)
        assert coded_grid.check_links() == []

    def test_owns_a_copy_of_the_seam(self, coded_grid):
        seam = torch.tensor([2, 8, 12, 16])
        command = RemoveSeamCommand(coded_grid, seam)
        seam[0] = 0
        command.execute()
        assert command.seam.tolist() == [2, 8, 12, 16]

    def test_energies_recomputed_after_execute_and_undo(self):
        black, white = (0, 0, 0), (255, 255, 255)
        grid = PixelGrid.from_raster(make_raster([[black, black, white]] * 3))
        before = grid.energy.clone()

        command = RemoveSeamCommand(grid, torch.tensor([2, 5, 8]))
        command.execute()
        live = grid.alive.nonzero(as_tuple=True)[0]
        assert torch.all(grid.energy[live] == 0)

        command.undo()
        assert torch.allclose(grid.energy, before)

    def test_failed_execute_leaves_grid_untouched(self, coded_grid):
        links = coded_grid.links.clone()
        command = RemoveSeamCommand(coded_grid, torch.tensor([2, 9, 12, 16]))
        with pytest.raises(InvalidSeamError):
            command.execute()
        assert not command.executed
        assert torch.equal(coded_grid.links, links)

    def test_is_an_edit_command(self, coded_grid):
        assert isinstance(RemoveSeamCommand(coded_grid, torch.tensor([0, 5, 10, 15])), EditCommand)
        with pytest.raises(TypeError):
            EditCommand()


class TestEditHistory:
    def test_undo_on_empty_history_is_a_no_op(self, coded_grid):
        history = EditHistory()
        links = coded_grid.links.clone()
        assert history.undo() is False
        assert len(history) == 0
        assert not history
        assert torch.equal(coded_grid.links, links)

    def test_undo_is_last_in_first_out(self):
        raster = make_coded_raster(5, 6)
        grid = PixelGrid.from_raster(raster)
        history = EditHistory()
        exports = [grid.export()]

        for _ in range(3):
            command = RemoveSeamCommand(grid, min_energy_seam(grid))
            command.execute()
            history.push(command)
            exports.append(command.raster)

        assert len(history) == 3
        assert grid.width == 3

        for expected in reversed(exports[:-1]):
            assert history.undo() is True
            assert torch.equal(grid.export(), expected)

        assert history.undo() is False
        assert torch.equal(grid.export(), raster)
        assert grid.check_links() == []

    def test_peek_and_pop(self, coded_grid):
        history = EditHistory()
        assert history.peek() is None
        assert history.pop() is None

        command = RemoveSeamCommand(coded_grid, torch.tensor([0, 5, 10, 15]))
        history.push(command)
        assert history.peek() is command
        assert history.pop() is command
        assert len(history) == 0

    def test_clear_releases_detached_cells(self, coded_grid):
        history = EditHistory()
        command = RemoveSeamCommand(coded_grid, torch.tensor([0, 5, 10, 15]))
        command.execute()
        history.push(command)

        history.clear()
        assert len(history) == 0
        assert torch.all(coded_grid.links[command.seam] == NO_CELL)
        assert coded_grid.check_links() == []

    def test_failed_undo_keeps_command(self, coded_grid):
        history = EditHistory()
        first = RemoveSeamCommand(coded_grid, torch.tensor([1, 6, 11, 16]))
        second = RemoveSeamCommand(coded_grid, torch.tensor([2, 7, 12, 17]))
        first.execute()
        second.execute()
        # Pushed in the wrong order: undoing `first` while `second` is applied cannot work
        history.push(second)
        history.push(first)

        with pytest.raises(InvalidSeamError):
            history.undo()
        assert history.peek() is first
