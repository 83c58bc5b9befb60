import logging

import numpy as np

from ..lut.index import SonarToImageLUT
from ..models.sonar import SonarSample
from ..utils.raster import blank_raster

logger = logging.getLogger(__name__)


class FanRenderer:
    """
    Keeps the lookup table for the most recent sonar geometry and paints
    incoming samples with it. A new table is fully built before it replaces
    the old one, so self.lut is always a complete table.
    """

    def __init__(self, window_size=500):
        self.window_size = int(window_size)
        self.lut = None
        self.rebuilds = 0

    def lut_for(self, sonar) -> SonarToImageLUT:
        lut = self.lut
        if lut is not None and lut.matches(sonar, self.window_size):
            return lut
        lut = SonarToImageLUT(sonar, self.window_size)
        logger.info("Rebuilt sonar LUT: %d beams x %d bins -> %dx%d px",
                    lut.beam_count, lut.bin_count, lut.window_width, lut.window_height)
        self.lut = lut
        self.rebuilds += 1
        return lut

    def set_window_size(self, window_size):
        # the next render rebuilds since matches() compares window sizes
        self.window_size = int(window_size)

    def render(self, sample: SonarSample, buffer=None):
        """Paint one sample; returns the (H, W, 3) uint8 raster unless a buffer is given."""
        lut = self.lut_for(sample)
        if buffer is None:
            buffer = blank_raster(lut)
        return lut.paint_frame(buffer, np.asarray(sample.bins))
