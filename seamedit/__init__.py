"""
Content-aware image editing by seam removal.

An image is held as a linked mesh of pixel cells. Seams (connected
top-to-bottom paths of one cell per row) are found by dynamic programming
and removed by relinking the mesh, which can be undone exactly.
"""

__version__ = "0.1.0"

from .cell import PixelCell
from .grid import PixelGrid, InvalidSeamError
from .energy import brightness, mesh_energy
from .seam import (Criterion, find_seam, min_energy_seam, max_blueness_seam,
                   seam_energy, seam_blueness)
from .history import EditCommand, RemoveSeamCommand, EditHistory
from .editor import SeamEditor

__all__ = [
    'PixelCell',
    'PixelGrid',
    'InvalidSeamError',
    'brightness',
    'mesh_energy',
    'Criterion',
    'find_seam',
    'min_energy_seam',
    'max_blueness_seam',
    'seam_energy',
    'seam_blueness',
    'EditCommand',
    'RemoveSeamCommand',
    'EditHistory',
    'SeamEditor',
]
