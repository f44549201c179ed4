"""
Seam computation and removal.

A seam is found in two steps: a dynamic program (see ``energy``) builds a
grid of cumulative costs with back-pointers, then ``trace_seam`` picks the
cheapest cell of the last row and follows the back-pointers up to row 0.

Horizontal seams reuse the vertical algorithm on a ``Transposed`` view.
"""

from abc import ABC, abstractmethod
from typing import Union

import torch

from .energy import cumulative_energy, forward_energy, gradient_magnitude_energy
from .errors import DegenerateImage, SeamIntegrityError
from .grid import COST, PARENT, Grid
from .pixels import PixelDistance
from .view import ImageView, Transposed

DIRECTIONS = ('vertical', 'horizontal')


def check_direction(direction: str):
    if direction not in DIRECTIONS:
        raise ValueError(f"Invalid direction: {direction}")


def trace_seam(costs: Grid) -> torch.Tensor:
    """
    Walk back-pointers from the cheapest cell of the last row.

    Ties on the last row go to the lowest column.

    Args:
        costs: Grid of (cost, parent) cells

    Returns:
        Seam indices (height,), one column index per row, top to bottom
    """
    width, height = costs.dimensions()
    if width == 0 or height == 0:
        raise DegenerateImage(f"No seam exists in a {width}x{height} grid")

    # torch.argmin returns the first minimum
    col = int(torch.argmin(costs.row(height - 1)[:, COST]))
    seam = torch.empty(height, dtype=torch.long)
    seam[height - 1] = col

    for y in range(height - 1, 0, -1):
        parent = int(costs.row(y)[col, PARENT])
        if not 0 <= parent < width or abs(parent - col) > 1:
            raise SeamIntegrityError(
                f"Back-pointer {parent} at ({col}, {y}) is not adjacent to its cell")
        col = parent
        seam[y - 1] = col

    return seam


def energy_to_seam(energy: Grid, direction: str = 'vertical', workers: int = 1) -> torch.Tensor:
    """
    Find the minimum-energy seam through a base energy map.

    Args:
        energy: Grid of energies (H, W)
        direction: 'vertical' or 'horizontal'
        workers: Number of column segments evaluated concurrently per row

    Returns:
        Seam indices - for vertical: (H,) with column index per row
                      for horizontal: (W,) with row index per column
    """
    check_direction(direction)
    source = energy if direction == 'vertical' else Transposed(energy)
    return trace_seam(cumulative_energy(source, workers=workers))


class SeamFinder(ABC):
    """
    Finds the next seam to remove from an image.

    Subclasses must implement ``cost_map`` for a vertical seam on any accessor;
    horizontal seams come from running it on the transposed image.

    Args:
        image: Pixel accessor to search
        distance: Pixel-pair distance name or callable
        workers: Number of concurrent segments used by the builders
    """

    def __init__(self, image, distance: Union[str, PixelDistance] = 'rgb', workers: int = 1):
        self.image = image
        self.distance = distance
        self.workers = workers

    @abstractmethod
    def cost_map(self, image) -> Grid:
        """Grid of (cost, parent) cells for a vertical seam through ``image``."""

    def _find(self, image) -> torch.Tensor:
        width, height = image.dimensions()
        if width < 2 or height < 1:
            raise DegenerateImage(
                f"Cannot carve a seam across {width} pixel(s) of a {width}x{height} image")
        return trace_seam(self.cost_map(image))

    def find_vertical_seam(self) -> torch.Tensor:
        """Column index per row, top to bottom."""
        return self._find(self.image)

    def find_horizontal_seam(self) -> torch.Tensor:
        """Row index per column, left to right."""
        return self._find(Transposed(self.image))

    def find_seam(self, direction: str = 'vertical') -> torch.Tensor:
        check_direction(direction)
        if direction == 'vertical':
            return self.find_vertical_seam()
        return self.find_horizontal_seam()


class BaseEnergySeamFinder(SeamFinder):
    """Gradient energy followed by the cumulative minimum-path program."""

    def cost_map(self, image) -> Grid:
        energy = gradient_magnitude_energy(image, distance=self.distance, workers=self.workers)
        return cumulative_energy(energy, workers=self.workers)


class ForwardEnergySeamFinder(SeamFinder):
    """Forward energy dynamic program."""

    def cost_map(self, image) -> Grid:
        return forward_energy(image, distance=self.distance, workers=self.workers)


SEAM_FINDERS = {
    'base': BaseEnergySeamFinder,
    'forward': ForwardEnergySeamFinder,
}


def get_seam_finder(energy: str):
    try:
        return SEAM_FINDERS[energy]
    except KeyError:
        raise ValueError(f"Invalid energy: {energy!r}. "
                         f"Must be one of {sorted(SEAM_FINDERS)}") from None


def _remove_vertical(samples: torch.Tensor, seam: torch.Tensor) -> torch.Tensor:
    H, W, C = samples.shape
    if seam.shape != (H,):
        raise SeamIntegrityError(f"Seam of length {seam.numel()} does not fit height {H}")
    if H and (seam.min() < 0 or seam.max() >= W):
        raise SeamIntegrityError(f"Seam leaves the image: indices must be in [0, {W})")

    keep = torch.arange(W).unsqueeze(0) != seam.unsqueeze(1)
    return samples[keep].reshape(H, W - 1, C)


def remove_seam(image: Union[ImageView, torch.Tensor], seam: torch.Tensor,
                direction: str = 'vertical') -> Union[ImageView, torch.Tensor]:
    """
    Remove a seam from an image.

    Pixels before the seam stay in place and pixels after it shift by one
    to close the gap. The input is not modified.

    Args:
        image: ImageView, or image tensor (C, H, W) or (H, W)
        seam: Seam indices
        direction: 'vertical' or 'horizontal'

    Returns:
        Carved image of the same kind with one column/row removed
    """
    check_direction(direction)
    if isinstance(image, torch.Tensor):
        carved = remove_seam(ImageView.from_tensor(image), seam, direction)
        return carved.to_tensor()

    seam = torch.as_tensor(seam, dtype=torch.long)
    samples = image.pixels()

    if direction == 'vertical':
        carved = _remove_vertical(samples, seam)
    else:
        carved = _remove_vertical(samples.transpose(0, 1), seam).transpose(0, 1)

    return image.replace(carved.contiguous())
