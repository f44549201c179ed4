"""
Pixel-pair distance functions.

The energy of a pixel is built from the distance between pairs of its
neighbours. Two distances are provided:

    rgb:  |Δ|² = (Δr)² + (Δg)² + (Δb)²
    luma: |Δ|² = (ΔY)²   with Y = 0.299 R + 0.587 G + 0.114 B

Both take tensors whose last dimension holds the channels, so they work on a
single pixel sample (C,) or on whole rows (W, C) at once. Results are int64.
"""

from typing import Callable, Union

import torch

PixelDistance = Callable[[torch.Tensor, torch.Tensor], torch.Tensor]


def squared_rgb_distance(p1: torch.Tensor, p2: torch.Tensor) -> torch.Tensor:
    """Sum of squared channel differences between two pixel samples."""
    diff = p1.to(torch.int64) - p2.to(torch.int64)
    return (diff * diff).sum(dim=-1)


def luma(pixels: torch.Tensor) -> torch.Tensor:
    """
    Integer luma of pixel samples.

    Args:
        pixels: Samples with channels in the last dimension. One channel is
            taken as already grayscale; three or more as RGB(A).

    Returns:
        Luma per sample, channel dimension dropped
    """
    if pixels.shape[-1] < 3:
        return pixels[..., 0].to(torch.int64)
    rgb = pixels[..., :3].to(torch.float64)
    gray = 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]
    return torch.round(gray).to(torch.int64)


def squared_luma_distance(p1: torch.Tensor, p2: torch.Tensor) -> torch.Tensor:
    """Squared difference of the two samples' luma."""
    diff = luma(p1) - luma(p2)
    return diff * diff


DISTANCES = {
    'rgb': squared_rgb_distance,
    'luma': squared_luma_distance,
}


def get_distance(distance: Union[str, PixelDistance]) -> PixelDistance:
    """Resolve a distance name (or pass a callable through)."""
    if callable(distance):
        return distance
    try:
        return DISTANCES[distance]
    except KeyError:
        raise ValueError(f"Invalid distance: {distance!r}. "
                         f"Must be one of {sorted(DISTANCES)}") from None
