"""
Content-aware image resizing (seam carving).

Based on "Seam Carving for Content-Aware Image Resizing" by Avidan & Shamir,
2007, with the forward energy of Rubinstein et al., 2008.
"""

__version__ = "0.1.0"

from .errors import CarveError, DegenerateImage, SeamIntegrityError, UpscaleRequested
from .grid import Grid, EnergyCell
from .pixels import squared_rgb_distance, squared_luma_distance, DISTANCES
from .view import ImageView, Transposed
from .energy import (gradient_magnitude_energy, cumulative_energy, forward_energy,
                     normalize_energy, energy_to_image)
from .seam import (trace_seam, energy_to_seam, remove_seam,
                   BaseEnergySeamFinder, ForwardEnergySeamFinder)
from .carving import CarvePlan, CarveState, SeamCarver, carve_image, carve_seams

__all__ = [
    'CarveError',
    'DegenerateImage',
    'SeamIntegrityError',
    'UpscaleRequested',
    'Grid',
    'EnergyCell',
    'squared_rgb_distance',
    'squared_luma_distance',
    'DISTANCES',
    'ImageView',
    'Transposed',
    'gradient_magnitude_energy',
    'cumulative_energy',
    'forward_energy',
    'normalize_energy',
    'energy_to_image',
    'trace_seam',
    'energy_to_seam',
    'remove_seam',
    'BaseEnergySeamFinder',
    'ForwardEnergySeamFinder',
    'CarvePlan',
    'CarveState',
    'SeamCarver',
    'carve_image',
    'carve_seams',
]
