"""Errors raised by the seam carving engine."""


class CarveError(Exception):
    """Base class for every error raised on purpose by this package."""


class UpscaleRequested(CarveError, ValueError):
    """A target dimension is larger than the image's current dimension.

    Seam removal can only shrink an image, so this is reported before
    any seam is carved.
    """


class DegenerateImage(CarveError, ValueError):
    """The image is too small along the carved axis to hold a seam."""


class SeamIntegrityError(CarveError, RuntimeError):
    """A back-pointer or seam coordinate falls outside the grid it describes."""
