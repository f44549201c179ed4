"""
Energy functions for seam carving.

The energy function determines which pixels are "important".
Low-energy seams are preferred for removal.

Two energies are provided (Avidan & Shamir 2007, Rubinstein et al. 2008):

- Base (gradient) energy: each pixel's distance between its left/right
  neighbours plus the distance between its up/down neighbours. Every pixel
  is independent, so the whole map is built in parallel bands of rows.
- Forward energy: a row-sequential dynamic program that charges for the
  new edges a seam creates when its neighbours are joined. Row y only
  reads row y-1, so each row is split into column segments that are
  evaluated concurrently and joined before the next row starts.

Both dynamic programs produce a Grid of (cost, parent) cells that
``seam.trace_seam`` walks back from the last row.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Tuple, Union

import torch

from .errors import DegenerateImage
from .grid import COST, PARENT, Grid
from .pixels import PixelDistance, get_distance

logger = logging.getLogger(__name__)


def segments(length: int, workers: int) -> List[Tuple[int, int]]:
    """
    Split [0, length) into contiguous, non-overlapping ranges.

    Args:
        length: Size of the range to split (row width, or grid height)
        workers: Requested number of segments, clamped to ``length``

    Returns:
        List of (start, stop) pairs covering the range in order
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    if length <= 0:
        return []

    n = min(workers, length)
    size, extra = divmod(length, n)
    bounds = []
    start = 0
    for i in range(n):
        stop = start + size + (1 if i < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds


class SegmentPool:
    """
    Evaluates a function over every segment of a range and joins them.

    With a single segment the function runs inline; otherwise each segment
    is submitted to a thread pool and ``run`` returns only after all of
    them have finished. The first exception raised by a segment is
    re-raised after the join.

    Args:
        length: Size of the range being split
        workers: Number of segments (and threads) to use
    """

    def __init__(self, length: int, workers: int = 1):
        self.segments = segments(length, workers)
        self._executor = None

    def __enter__(self) -> 'SegmentPool':
        if len(self.segments) > 1:
            self._executor = ThreadPoolExecutor(max_workers=len(self.segments),
                                                thread_name_prefix='seamcarve')
        return self

    def __exit__(self, *exc_info):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def run(self, fn, *args):
        """Call ``fn(start, stop, *args)`` for every segment and wait for all."""
        if self._executor is None:
            for start, stop in self.segments:
                fn(start, stop, *args)
            return

        futures = [self._executor.submit(fn, start, stop, *args)
                   for start, stop in self.segments]
        wait(futures)
        for future in futures:
            future.result()


def _require_pixels(width: int, height: int):
    if width == 0 or height == 0:
        raise DegenerateImage(f"Cannot compute energy of a {width}x{height} image")


def _neighbours(xs: torch.Tensor, width: int) -> Tuple[torch.Tensor, torch.Tensor]:
    """Left and right neighbour columns, clamped to the image edge."""
    return (xs - 1).clamp(min=0), (xs + 1).clamp(max=width - 1)


def gradient_magnitude_energy(image, distance: Union[str, PixelDistance] = 'rgb',
                              workers: int = 1) -> Grid:
    """
    Compute the base energy of every pixel.

    E(x, y) = D(left, right) + D(up, down)

    A neighbour missing at the image border is replaced by the pixel itself.

    Args:
        image: Pixel accessor (ImageView or Transposed)
        distance: Pixel-pair distance name ('rgb' or 'luma') or callable
        workers: Number of row bands computed concurrently

    Returns:
        Grid of int64 energies with the image's dimensions
    """
    distance = get_distance(distance)
    width, height = image.dimensions()
    _require_pixels(width, height)

    pixels = image.pixels()
    energy = Grid(width, height)
    left, right = _neighbours(torch.arange(width), width)

    def band(start, stop):
        ys = torch.arange(start, stop)
        center = pixels[start:stop]
        up = pixels[(ys - 1).clamp(min=0)]
        down = pixels[(ys + 1).clamp(max=height - 1)]
        values = distance(center[:, left], center[:, right]) + distance(up, down)
        energy.data[start * width:stop * width] = values.reshape(-1)

    with SegmentPool(height, workers) as pool:
        logger.debug("Base energy %dx%d in row bands %s", width, height, pool.segments)
        pool.run(band)

    return energy


def _cumulative_segment(start: int, stop: int, costs: Grid, y: int,
                        previous: torch.Tensor, energies: torch.Tensor):
    xs = torch.arange(start, stop)
    left, right = _neighbours(xs, costs.width)
    prev_cost = previous[:, COST]

    best = prev_cost[xs]
    parent = xs.clone()

    # The lowest predecessor column wins a tie
    take = (xs > 0) & (prev_cost[left] <= best)
    best = torch.where(take, prev_cost[left], best)
    parent = torch.where(take, left, parent)

    take = (xs < costs.width - 1) & (prev_cost[right] < best)
    best = torch.where(take, prev_cost[right], best)
    parent = torch.where(take, right, parent)

    out = costs.segment(y, start, stop)
    out[:, COST] = best + energies[xs].to(torch.int64)
    out[:, PARENT] = parent


def cumulative_energy(energy, workers: int = 1) -> Grid:
    """
    Accumulate minimum seam cost top to bottom over an energy map.

    M(x, 0) = E(x, 0)
    M(x, y) = E(x, y) + min(M(x-1, y-1), M(x, y-1), M(x+1, y-1))

    Args:
        energy: Grid of energies, or a Transposed view of one
        workers: Number of column segments evaluated concurrently per row

    Returns:
        Grid of (cost, parent) cells
    """
    width, height = energy.dimensions()
    _require_pixels(width, height)

    costs = Grid.energy_cells(width, height)
    first = costs.row(0)
    first[:, COST] = energy.row(0).to(torch.int64)
    first[:, PARENT] = torch.arange(width)

    with SegmentPool(width, workers) as pool:
        logger.debug("Cumulative energy %dx%d in column segments %s", width, height,
                     pool.segments)
        for y in range(1, height):
            pool.run(_cumulative_segment, costs, y, costs.row(y - 1), energy.row(y))

    return costs


def _forward_segment(start: int, stop: int, costs: Grid, y: int,
                     previous: torch.Tensor, above: torch.Tensor, here: torch.Tensor,
                     distance: PixelDistance):
    xs = torch.arange(start, stop)
    left, right = _neighbours(xs, costs.width)
    prev_cost = previous[:, COST]

    # Transition costs (Rubinstein et al. 2008)
    cost_up = distance(here[left], here[right])
    cost_left = cost_up + distance(above[xs], here[left])
    cost_right = cost_up + distance(above[xs], here[right])

    best = prev_cost[xs] + cost_up
    parent = xs.clone()

    # Evaluated up, up-left, up-right: the first minimum wins
    from_left = prev_cost[left] + cost_left
    take = (xs > 0) & (from_left < best)
    best = torch.where(take, from_left, best)
    parent = torch.where(take, left, parent)

    from_right = prev_cost[right] + cost_right
    take = (xs < costs.width - 1) & (from_right < best)
    best = torch.where(take, from_right, best)
    parent = torch.where(take, right, parent)

    out = costs.segment(y, start, stop)
    out[:, COST] = best
    out[:, PARENT] = parent


def forward_energy(image, distance: Union[str, PixelDistance] = 'rgb',
                   workers: int = 1) -> Grid:
    """Forward energy cost map (Rubinstein et al. 2008).

    Considers the cost of new edges introduced by seam removal, rather
    than just the energy of the pixel being removed. For vertical seams,
    the three transition costs at pixel (x, y) are:

      C_U = D(I(x-1, y), I(x+1, y))
      C_L = C_U + D(I(x, y-1), I(x-1, y))
      C_R = C_U + D(I(x, y-1), I(x+1, y))

    Row 0 is seeded with C_U alone. Neighbours outside the image are
    clamped to the edge pixel.

    Args:
        image: Pixel accessor (ImageView or Transposed)
        distance: Pixel-pair distance name ('rgb' or 'luma') or callable
        workers: Number of column segments evaluated concurrently per row

    Returns:
        Grid of (cost, parent) cells, cumulative top to bottom
    """
    distance = get_distance(distance)
    width, height = image.dimensions()
    _require_pixels(width, height)

    costs = Grid.energy_cells(width, height)
    xs = torch.arange(width)
    left, right = _neighbours(xs, width)
    top = image.row(0)
    first = costs.row(0)
    first[:, COST] = distance(top[left], top[right])
    first[:, PARENT] = xs

    with SegmentPool(width, workers) as pool:
        logger.debug("Forward energy %dx%d in column segments %s", width, height, pool.segments)
        for y in range(1, height):
            pool.run(_forward_segment, costs, y, costs.row(y - 1),
                     image.row(y - 1), image.row(y), distance)

    return costs


def normalize_energy(energy: Grid, eps: float = 1e-8) -> torch.Tensor:
    """Remap an energy grid to a (H, W) float map in [0, 1].

    This is a monotonic transform so seam positions are unchanged.
    """
    values = energy.to_tensor().to(torch.float64)
    e_min = values.min()
    e_max = values.max()
    return (values - e_min) / (e_max - e_min + eps)


def energy_to_image(energy: Grid) -> torch.Tensor:
    """
    Render an energy grid as an 8-bit grayscale image.

    Each value is scaled by 256 / max and clamped to 255.

    Args:
        energy: Grid of energies

    Returns:
        uint8 tensor (H, W)
    """
    values = energy.to_tensor().to(torch.int64)
    factor = int(values.max()) if values.numel() else 0
    if factor == 0:
        return torch.zeros_like(values, dtype=torch.uint8)
    return (values * 256 // factor).clamp(0, 255).to(torch.uint8)
