import numpy as np
from PIL import Image


def blank_raster(lut, channels=3, dtype=np.uint8):
    """Zeroed raster sized for the LUT window; channels=None gives a 2D buffer."""
    if channels is None:
        return np.zeros(lut.shape, dtype=dtype)
    return np.zeros((*lut.shape, channels), dtype=dtype)


def to_gray(raster, scale=1.0):
    """
    Collapse a painted raster to a single uint8 channel. Painted channels are
    identical, so the first one is taken; scale stretches small intensities
    (e.g. 255 for a 0/1 frame).
    """
    level = raster if raster.ndim == 2 else raster[..., 0]
    out = np.clip(level.astype(np.float64) * scale, 0, 255)
    return out.astype(np.uint8)


def to_image(raster, scale=1.0) -> Image.Image:
    return Image.fromarray(to_gray(raster, scale))


def from_image(img: Image.Image) -> np.ndarray:
    return np.array(img.convert("L"), dtype=np.uint8)
