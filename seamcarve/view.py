"""
Read-only pixel accessors.

``ImageView`` wraps an image tensor and exposes the small interface the
energy builders need: ``dimensions()``, ``get_pixel(x, y)`` and whole
row/column reads. ``Transposed`` presents any such accessor rotated so
that columns become rows. Running the vertical seam algorithm on a
``Transposed`` view yields a horizontal seam of the wrapped image: one
row index per column, already in the wrapped image's coordinates.
"""

from typing import Tuple

import torch


class ImageView:
    """
    Read-only accessor over integer pixel samples stored as (H, W, C).

    Use ``ImageView.from_tensor`` to wrap tensors in the (C, H, W) or
    (H, W) layouts; ``to_tensor`` returns that same layout.

    Args:
        samples: Pixel samples (H, W, C)
        grayscale: Whether ``to_tensor`` should drop the channel dimension
    """

    def __init__(self, samples: torch.Tensor, grayscale: bool = False):
        if samples.dim() != 3:
            raise ValueError(f"Expected (H, W, C) samples, got shape {tuple(samples.shape)}")
        if samples.is_floating_point():
            raise ValueError(f"Expected integer samples, got {samples.dtype}; "
                             "use ImageView.from_tensor to quantize float images")
        self.samples = samples
        self.grayscale = grayscale

    @classmethod
    def from_tensor(cls, image: torch.Tensor) -> 'ImageView':
        """
        Wrap an image tensor.

        Args:
            image: Image tensor (C, H, W) or grayscale (H, W). Floating point
                images are taken to be in [0, 1] and quantized to uint8.

        Returns:
            ImageView over a private copy of the samples
        """
        if image.is_floating_point():
            image = (image * 255.0).round().clamp(0, 255).to(torch.uint8)

        if image.dim() == 2:
            return cls(image.unsqueeze(-1).clone(), grayscale=True)
        elif image.dim() == 3:
            return cls(image.permute(1, 2, 0).clone(memory_format=torch.contiguous_format),
                       grayscale=False)
        raise ValueError(f"Expected (C, H, W) or (H, W) image, got shape {tuple(image.shape)}")

    def to_tensor(self) -> torch.Tensor:
        """Return the samples in the (C, H, W) or (H, W) layout."""
        if self.grayscale:
            return self.samples[..., 0].clone()
        return self.samples.permute(2, 0, 1).contiguous()

    @property
    def width(self) -> int:
        return self.samples.shape[1]

    @property
    def height(self) -> int:
        return self.samples.shape[0]

    @property
    def channels(self) -> int:
        return self.samples.shape[2]

    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> torch.Tensor:
        """Channel samples (C,) at column x, row y."""
        if not self.contains(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} image")
        return self.samples[y, x]

    def row(self, y: int) -> torch.Tensor:
        """Samples of row y, shape (W, C)."""
        return self.samples[y]

    def column(self, x: int) -> torch.Tensor:
        """Samples of column x, shape (H, C)."""
        return self.samples[:, x]

    def pixels(self) -> torch.Tensor:
        """All samples, shape (H, W, C)."""
        return self.samples

    def replace(self, samples: torch.Tensor) -> 'ImageView':
        """New view over ``samples`` with this view's output layout."""
        return ImageView(samples, grayscale=self.grayscale)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ImageView):
            return NotImplemented
        return (self.samples.shape == other.samples.shape
                and torch.equal(self.samples, other.samples))

    def __repr__(self) -> str:
        return f"ImageView(width={self.width}, height={self.height}, channels={self.channels})"


class Transposed:
    """
    Transposed read-only view of an accessor.

    Width and height are swapped, and every (x, y) query is answered by the
    wrapped accessor at (y, x). Works over ``ImageView``, ``Grid`` or
    another ``Transposed``.
    """

    def __init__(self, image):
        self.image = image

    @property
    def width(self) -> int:
        return self.image.dimensions()[1]

    @property
    def height(self) -> int:
        return self.image.dimensions()[0]

    def dimensions(self) -> Tuple[int, int]:
        width, height = self.image.dimensions()
        return height, width

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int):
        return self.image.get_pixel(y, x)

    def row(self, y: int) -> torch.Tensor:
        return self.image.column(y)

    def column(self, x: int) -> torch.Tensor:
        return self.image.row(x)

    def pixels(self) -> torch.Tensor:
        return self.image.pixels().transpose(0, 1)

    def __repr__(self) -> str:
        return f"Transposed({self.image!r})"
