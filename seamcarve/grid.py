"""
Two-dimensional grids used for intermediate carving data.

A grid is a flat, row-major tensor with one cell per pixel coordinate.
Cells are either a single value (the energy map) or an
``(cost, parent)`` pair (the cost map built by the dynamic programs).

All index math lives in ``Grid.index``: cell (x, y) is stored at
``y * width + x``.
"""

from typing import NamedTuple, Optional, Sequence, Tuple

import torch

# Field positions inside an EnergyCell grid
COST = 0
PARENT = 1


class EnergyCell(NamedTuple):
    """Cumulative seam cost at a cell and the predecessor it came from."""
    cost: int
    parent: int


class Grid:
    """
    Flat row-major container holding one payload per (x, y) coordinate.

    Args:
        width: Number of columns
        height: Number of rows
        cell_shape: Shape of each cell's payload, ``()`` for scalar cells
            or ``(2,)`` for energy cells
        dtype: Storage dtype
        data: Optional existing storage of shape (width * height, *cell_shape)
    """

    def __init__(self, width: int, height: int, cell_shape: Tuple[int, ...] = (),
                 dtype: torch.dtype = torch.int64, data: Optional[torch.Tensor] = None):
        if width < 0 or height < 0:
            raise ValueError(f"Invalid grid size: {width}x{height}")
        self.width = width
        self.height = height
        self.cell_shape = tuple(cell_shape)

        shape = (width * height,) + self.cell_shape
        if data is None:
            data = torch.zeros(shape, dtype=dtype)
        elif tuple(data.shape) != shape:
            raise ValueError(f"Grid storage has shape {tuple(data.shape)}, expected {shape}")
        self.data = data

    @classmethod
    def energy_cells(cls, width: int, height: int) -> 'Grid':
        """Allocate a grid of (cost, parent) cells."""
        return cls(width, height, cell_shape=(2,))

    @classmethod
    def from_values(cls, width: int, height: int, values: Sequence[int]) -> 'Grid':
        """Build a scalar grid from row-major values."""
        return cls(width, height, data=torch.tensor(list(values), dtype=torch.int64))

    @classmethod
    def from_tensor(cls, tensor: torch.Tensor) -> 'Grid':
        """Build a grid from an (H, W, *cell_shape) tensor."""
        height, width = tensor.shape[0], tensor.shape[1]
        cell_shape = tuple(tensor.shape[2:])
        data = tensor.reshape((width * height,) + cell_shape).clone()
        return cls(width, height, cell_shape=cell_shape, dtype=tensor.dtype, data=data)

    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    def index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} grid")
        return y * self.width + x

    def __getitem__(self, xy):
        x, y = xy
        cell = self.data[self.index(x, y)]
        if self.cell_shape == ():
            return cell.item()
        return cell

    def __setitem__(self, xy, value):
        x, y = xy
        self.data[self.index(x, y)] = torch.as_tensor(value, dtype=self.data.dtype)

    def get_pixel(self, x: int, y: int):
        """Same as ``grid[x, y]``; lets a grid sit behind ``Transposed``."""
        return self[x, y]

    def cell(self, x: int, y: int) -> EnergyCell:
        """Read an energy cell as an ``EnergyCell`` tuple."""
        cost, parent = self.data[self.index(x, y)].tolist()
        return EnergyCell(cost, parent)

    def row(self, y: int) -> torch.Tensor:
        """View of row y, shape (width, *cell_shape)."""
        if not 0 <= y < self.height:
            raise IndexError(f"Row {y} outside grid of height {self.height}")
        start = y * self.width
        return self.data[start:start + self.width]

    def column(self, x: int) -> torch.Tensor:
        """View of column x, shape (height, *cell_shape)."""
        if not 0 <= x < self.width:
            raise IndexError(f"Column {x} outside grid of width {self.width}")
        return self.data[x::self.width]

    def segment(self, y: int, start: int, stop: int) -> torch.Tensor:
        """Writable view of columns [start, stop) of row y."""
        return self.row(y)[start:stop]

    def to_tensor(self) -> torch.Tensor:
        """Return the grid as an (H, W, *cell_shape) tensor view."""
        return self.data.view((self.height, self.width) + self.cell_shape)

    def __len__(self) -> int:
        return self.data.shape[0]

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height}, cell_shape={self.cell_shape})"
