"""
Command-line seam carver.

    python -m seamcarve input.png output.png --width 400 --height 300
"""

import argparse
import logging
import sys

import numpy as np
import torch
from PIL import Image

from .carving import SeamCarver, target_size
from .energy import energy_to_image, gradient_magnitude_energy
from .errors import CarveError
from .pixels import DISTANCES
from .seam import SEAM_FINDERS
from .view import ImageView

logger = logging.getLogger(__name__)


def load_image(path: str) -> ImageView:
    """Load an image file as an RGB ImageView."""
    img = Image.open(path).convert('RGB')
    img_array = np.array(img, dtype=np.uint8)
    return ImageView(torch.from_numpy(img_array))


def save_image(image: ImageView, path: str):
    """Save an ImageView to an image file."""
    img_array = image.pixels().cpu().numpy().astype(np.uint8)
    if image.grayscale:
        img_array = img_array[..., 0]
    Image.fromarray(img_array).save(path)
    logger.info("Saved: %s", path)


def save_energy_map(image: ImageView, path: str, distance: str = 'rgb', workers: int = 1):
    """Save the base energy of an image as an 8-bit grayscale file."""
    energy = gradient_magnitude_energy(image, distance=distance, workers=workers)
    Image.fromarray(energy_to_image(energy).numpy()).save(path)
    logger.info("Saved energy map: %s", path)


def _configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='seamcarve',
        description="Content-aware image resizing by seam carving"
    )
    parser.add_argument('input', help='Image to carve')
    parser.add_argument('output', help='Where to write the carved image')
    parser.add_argument(
        '--width',
        type=int,
        help='Target width (default: keep current width)'
    )
    parser.add_argument(
        '--height',
        type=int,
        help='Target height (default: keep current height)'
    )
    parser.add_argument(
        '--energy',
        choices=sorted(SEAM_FINDERS),
        default='forward',
        help='Energy function (default: forward)'
    )
    parser.add_argument(
        '--distance',
        choices=sorted(DISTANCES),
        default='rgb',
        help='Pixel-pair distance (default: rgb)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Concurrent segments per cost map row (default: 1)'
    )
    parser.add_argument(
        '--energy-map',
        help='Also write the base energy map of the input to this path'
    )
    parser.add_argument(
        '--log-level',
        default='WARNING',
        help='Logging level (default: WARNING)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Shorthand for --log-level INFO'
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging('INFO' if args.verbose else args.log_level)

    try:
        image = load_image(args.input)
        if args.energy_map:
            save_energy_map(image, args.energy_map, args.distance, args.workers)

        width, height = target_size(image, args.width, args.height)
        carver = SeamCarver(image, energy=args.energy, distance=args.distance,
                            workers=args.workers)
        carved = carver.carve(width, height)
        save_image(carved, args.output)
    except (CarveError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
