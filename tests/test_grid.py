"""Tests for the flat two-dimensional grid."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import torch
import pytest
from seamcarve.grid import COST, PARENT, EnergyCell, Grid


class TestGridIndexing:
    def test_row_major_index(self):
        """Cell (x, y) lives at y * width + x."""
        grid = Grid(5, 4)
        assert grid.index(0, 0) == 0
        assert grid.index(4, 0) == 4
        assert grid.index(0, 1) == 5
        assert grid.index(2, 3) == 17

    def test_storage_matches_dimensions(self):
        grid = Grid(7, 3)
        assert len(grid) == 21
        assert grid.dimensions() == (7, 3)

    def test_out_of_bounds_raises(self):
        grid = Grid(5, 4)
        with pytest.raises(IndexError):
            grid.index(5, 0)
        with pytest.raises(IndexError):
            grid[0, 4]
        with pytest.raises(IndexError):
            grid.index(-1, 0)

    def test_get_and_set(self, energy_grid):
        assert energy_grid[2, 0] == 0
        assert energy_grid[1, 1] == 1
        energy_grid[1, 1] = 42
        assert energy_grid.get_pixel(1, 1) == 42

    def test_rejects_wrong_storage(self):
        with pytest.raises(ValueError):
            Grid(3, 3, data=torch.zeros(8, dtype=torch.int64))


class TestGridViews:
    def test_row_and_column(self, energy_grid):
        assert energy_grid.row(1).tolist() == [9, 1, 9, 8, 9]
        assert energy_grid.column(4).tolist() == [9, 9, 0, 9]

    def test_segment_writes_through(self):
        """Writing a row segment updates only those cells of the grid."""
        grid = Grid(6, 2)
        grid.segment(1, 2, 4)[:] = torch.tensor([7, 8])
        assert grid.row(1).tolist() == [0, 0, 7, 8, 0, 0]
        assert grid.row(0).tolist() == [0] * 6

    def test_to_tensor_shape(self, energy_grid):
        tensor = energy_grid.to_tensor()
        assert tensor.shape == (4, 5)
        assert tensor[1, 3].item() == 8

    def test_from_tensor_roundtrip(self):
        tensor = torch.arange(12).reshape(3, 4)
        grid = Grid.from_tensor(tensor)
        assert grid.dimensions() == (4, 3)
        assert grid[3, 2] == 11


class TestEnergyCells:
    def test_cell_layout(self):
        grid = Grid.energy_cells(3, 2)
        assert grid.data.shape == (6, 2)
        grid[1, 1] = (5, 0)
        assert grid.cell(1, 1) == EnergyCell(cost=5, parent=0)
        assert grid.row(1)[1, COST].item() == 5
        assert grid.row(1)[1, PARENT].item() == 0
