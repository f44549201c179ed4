"""
High-level carving functions that drive repeated seam removal.

Each iteration computes a fresh cost map for the current image, traces one
seam and builds a new, smaller image from it. Nothing is cached between
iterations.
"""

import enum
import logging
from typing import Optional, Tuple, Union

import torch

from .errors import DegenerateImage, UpscaleRequested
from .pixels import PixelDistance, get_distance
from .seam import check_direction, get_seam_finder, remove_seam
from .view import ImageView

logger = logging.getLogger(__name__)


class CarveState(enum.Enum):
    BOTH_AXES_SHRINKING = 'both'
    SINGLE_AXIS_SHRINKING = 'single'
    DONE = 'done'


class CarvePlan:
    """
    State machine choosing which axis to carve next.

    While both dimensions exceed their targets, the carved axis alternates
    width, height, width, ... Once one axis reaches its target only the
    other is carved, and the plan is done when both are reached.

    Args:
        target_width: Width to carve down to
        target_height: Height to carve down to
    """

    def __init__(self, target_width: int, target_height: int):
        self.target_width = target_width
        self.target_height = target_height
        self.state = CarveState.DONE
        self.direction = None
        self._next_both = 'vertical'

    def update(self, width: int, height: int) -> CarveState:
        """Re-check the current size and move to the matching state."""
        wide = width > self.target_width
        tall = height > self.target_height

        if wide and tall:
            if self.state is not CarveState.BOTH_AXES_SHRINKING:
                self._next_both = 'vertical'
            self.state = CarveState.BOTH_AXES_SHRINKING
        elif wide or tall:
            self.state = CarveState.SINGLE_AXIS_SHRINKING
            self.direction = 'vertical' if wide else 'horizontal'
        else:
            self.state = CarveState.DONE
            self.direction = None
        return self.state

    def next_direction(self) -> Optional[str]:
        """Direction of the next seam, or None when done.

        'vertical' seams shrink the width, 'horizontal' seams the height.
        """
        if self.state is CarveState.BOTH_AXES_SHRINKING:
            self.direction = self._next_both
            self._next_both = 'horizontal' if self._next_both == 'vertical' else 'vertical'
        return self.direction


class SeamCarver:
    """
    Holds an image and carves it down to a target size.

    Args:
        image: ImageView, or image tensor (C, H, W) or (H, W)
        energy: 'forward' (default) or 'base'
        distance: Pixel-pair distance name ('rgb' or 'luma') or callable
        workers: Number of concurrent segments used per cost map
    """

    def __init__(self, image: Union[ImageView, torch.Tensor], energy: str = 'forward',
                 distance: Union[str, PixelDistance] = 'rgb', workers: int = 1):
        if isinstance(image, torch.Tensor):
            image = ImageView.from_tensor(image)
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.image = image
        self.finder = get_seam_finder(energy)
        self.distance = get_distance(distance)
        self.workers = workers
        self.seams_removed = 0

    def carve_once(self, image: ImageView, direction: str) -> ImageView:
        """Remove one seam from ``image`` and return the new image."""
        finder = self.finder(image, distance=self.distance, workers=self.workers)
        seam = finder.find_seam(direction)
        return remove_seam(image, seam, direction=direction)

    def _check_targets(self, width: int, height: int):
        current_width, current_height = self.image.dimensions()
        if width > current_width or height > current_height:
            raise UpscaleRequested(
                f"Cannot upscale a {current_width}x{current_height} image to {width}x{height}")
        if width < 1 or height < 1:
            raise DegenerateImage(f"Cannot carve down to {width}x{height}")

    def carve(self, width: int, height: int) -> ImageView:
        """
        Carve seams until the image is ``width`` x ``height``.

        Args:
            width: Target width, at most the current width
            height: Target height, at most the current height

        Returns:
            New ImageView of the target size. The held image is unchanged.
        """
        self._check_targets(width, height)
        current = self.image.replace(self.image.pixels().clone())
        self.seams_removed = 0

        logger.info("Carving %dx%d to %dx%d", current.width, current.height, width, height)
        plan = CarvePlan(width, height)
        plan.update(*current.dimensions())

        while plan.state is not CarveState.DONE:
            direction = plan.next_direction()
            current = self.carve_once(current, direction)
            self.seams_removed += 1
            logger.debug("%s %s seam removed: %dx%d", plan.state.value, direction,
                         current.width, current.height)
            plan.update(*current.dimensions())

        logger.info("Carved to %dx%d (%d seams)", current.width, current.height,
                    self.seams_removed)
        return current

    def carve_seams(self, n_seams: int, direction: str = 'vertical') -> ImageView:
        """Remove exactly ``n_seams`` seams along one axis."""
        check_direction(direction)
        if n_seams < 0:
            raise ValueError(f"n_seams must be non-negative, got {n_seams}")
        width, height = self.image.dimensions()
        if direction == 'vertical':
            return self.carve(width - n_seams, height)
        return self.carve(width, height - n_seams)


def _as_input_kind(image, carved: ImageView):
    if isinstance(image, torch.Tensor):
        return carved.to_tensor()
    return carved


def carve_image(image: Union[ImageView, torch.Tensor], width: int, height: int,
                energy: str = 'forward', distance: Union[str, PixelDistance] = 'rgb',
                workers: int = 1) -> Union[ImageView, torch.Tensor]:
    """
    Content-aware resize of an image to ``width`` x ``height``.

    Args:
        image: ImageView, or image tensor (C, H, W) or (H, W)
        width: Target width
        height: Target height
        energy: 'forward' or 'base'
        distance: 'rgb', 'luma' or a callable
        workers: Number of concurrent segments used per cost map

    Returns:
        Carved image of the same kind as ``image``. Tensors come back as uint8.
    """
    carver = SeamCarver(image, energy=energy, distance=distance, workers=workers)
    return _as_input_kind(image, carver.carve(width, height))


def carve_seams(image: Union[ImageView, torch.Tensor], n_seams: int,
                direction: str = 'vertical', energy: str = 'forward',
                distance: Union[str, PixelDistance] = 'rgb',
                workers: int = 1) -> Union[ImageView, torch.Tensor]:
    """
    Remove ``n_seams`` seams along one axis.

    Args:
        image: ImageView, or image tensor (C, H, W) or (H, W)
        n_seams: Number of seams to remove
        direction: 'vertical' (narrower) or 'horizontal' (shorter)

    Returns:
        Carved image of the same kind as ``image``
    """
    carver = SeamCarver(image, energy=energy, distance=distance, workers=workers)
    return _as_input_kind(image, carver.carve_seams(n_seams, direction=direction))


def target_size(image: Union[ImageView, torch.Tensor], width: Optional[int] = None,
                height: Optional[int] = None) -> Tuple[int, int]:
    """Fill in a missing target dimension with the image's current one."""
    if isinstance(image, torch.Tensor):
        current_height, current_width = image.shape[-2], image.shape[-1]
    else:
        current_width, current_height = image.dimensions()
    return (current_width if width is None else width,
            current_height if height is None else height)
