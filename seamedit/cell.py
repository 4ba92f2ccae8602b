"""
Single-cell view over a PixelGrid arena.

Cells live in the grid's tensors and are addressed by a stable index.
A PixelCell is only a handle: it never copies color, energy or links,
so two handles to the same slot always observe the same state.
"""

from typing import Optional, Tuple

UP, DOWN, LEFT, RIGHT = 0, 1, 2, 3
NO_CELL = -1


class PixelCell:
    """Handle to one cell of a PixelGrid."""

    __slots__ = ('grid', 'index')

    def __init__(self, grid, index: int):
        self.grid = grid
        self.index = int(index)

    def _neighbor(self, direction: int) -> Optional['PixelCell']:
        other = int(self.grid.links[self.index, direction])
        if other == NO_CELL:
            return None
        return PixelCell(self.grid, other)

    @property
    def up(self) -> Optional['PixelCell']:
        return self._neighbor(UP)

    @property
    def down(self) -> Optional['PixelCell']:
        return self._neighbor(DOWN)

    @property
    def left(self) -> Optional['PixelCell']:
        return self._neighbor(LEFT)

    @property
    def right(self) -> Optional['PixelCell']:
        return self._neighbor(RIGHT)

    @property
    def color(self) -> Tuple[int, ...]:
        return tuple(int(c) for c in self.grid.colors[self.index].tolist())

    @property
    def blue(self) -> int:
        return int(self.grid.colors[self.index, 2])

    @property
    def brightness(self) -> float:
        return float(self.grid.brightness[self.index])

    @property
    def energy(self) -> float:
        return float(self.grid.energy[self.index])

    @property
    def alive(self) -> bool:
        """False once the cell has been excised with a seam."""
        return bool(self.grid.alive[self.index])

    def __eq__(self, other):
        if not isinstance(other, PixelCell):
            return NotImplemented
        return self.grid is other.grid and self.index == other.index

    def __hash__(self):
        return hash((id(self.grid), self.index))

    def __repr__(self):
        return f"PixelCell(index={self.index}, color={self.color})"
