import logging

import numpy as np

from .geometry import build, RawCellTable
from ..models.sonar import SonarSample

logger = logging.getLogger(__name__)


def linearize(table: RawCellTable):
    """
    Flatten per-cell pixel lists into (data, offsets), CSR style: the pixels
    of flat cell i are data[offsets[i]:offsets[i + 1]].
    """
    order = np.argsort(table.cell_ids, kind="stable")
    data = table.points[order]
    offsets = np.zeros(table.cell_count + 1, dtype=np.int64)
    np.cumsum(table.cell_sizes(), out=offsets[1:])
    logger.debug("Linearized %d pixel assignments over %d cells", len(data), table.cell_count)
    return data, offsets


def _as_configuration(sonar):
    if isinstance(sonar, SonarSample):
        return sonar.configuration()
    return sonar


def _clamp(values, dtype):
    values = np.maximum(np.asarray(values), 0)
    if np.issubdtype(dtype, np.integer):
        values = np.minimum(values, np.iinfo(dtype).max)
    return values.astype(dtype)


class SonarToImageLUT:
    """
    Pixel lookup table for one sonar geometry and window size.

    Built once, then reused for every frame whose geometry matches(). Each
    (beam, bin) cell maps to a contiguous slice of pixel coordinates, so
    painting a frame only touches the pixels that receive a value.
    """

    def __init__(self, sonar, window_size):
        config = _as_configuration(sonar)
        config.validate()
        self.bin_count = config.bin_count
        self.beam_count = config.beam_count
        self.beam_width = config.beam_width
        self.bin_duration = config.bin_duration
        self.speed_of_sound = config.speed_of_sound
        self.bearings = config.bearings
        self.window_size = int(window_size)

        width, height, raw = build(config, self.window_size)
        self.window_width = width
        self.window_height = height
        self.data, self.offsets = linearize(raw)

    @classmethod
    def from_sample(cls, sample: SonarSample, window_size):
        return cls(sample.configuration(), window_size)

    @property
    def shape(self):
        return self.window_height, self.window_width

    def matches(self, sonar, window_size) -> bool:
        """True if this table is still valid for the given geometry and window size."""
        config = _as_configuration(sonar)
        if not (config.bin_count == self.bin_count
                and config.beam_count == self.beam_count
                and config.beam_width == self.beam_width
                and config.bin_duration == self.bin_duration
                and config.speed_of_sound == self.speed_of_sound
                and window_size == self.window_size):
            return False
        if len(config.bearings) != len(self.bearings):
            return False
        return all(new == old for new, old in zip(config.bearings, self.bearings))

    def cell_index(self, beam_idx, bin_idx):
        if not (0 <= beam_idx < self.beam_count and 0 <= bin_idx < self.bin_count):
            raise IndexError(f"cell ({beam_idx}, {bin_idx}) outside "
                             f"{self.beam_count}x{self.bin_count} sonar grid")
        return beam_idx * self.bin_count + bin_idx

    def cell_pixels(self, beam_idx, bin_idx):
        """(N, 2) array of (x, y) pixels lit by a cell; a view into the table."""
        i = self.cell_index(beam_idx, bin_idx)
        return self.data[self.offsets[i]:self.offsets[i + 1]]

    def _check_buffer(self, buffer):
        if buffer.shape[:2] != self.shape:
            raise ValueError(f"buffer shape {buffer.shape[:2]} does not match "
                             f"LUT window {self.shape}")

    def paint(self, buffer, beam_idx, bin_idx, value):
        """Brighten the cell's pixels to value; dimmer values never overwrite."""
        self._check_buffer(buffer)
        pts = self.cell_pixels(beam_idx, bin_idx)
        if len(pts) == 0:
            return buffer
        xs, ys = pts[:, 0], pts[:, 1]
        value = _clamp(value, buffer.dtype)
        if buffer.ndim == 2:
            buffer[ys, xs] = np.maximum(buffer[ys, xs], value)
        else:
            v = np.maximum(buffer[ys, xs, 0], value)
            buffer[ys, xs] = v[:, None]
        return buffer

    def update_image(self, buffer, global_idx, value):
        return self.paint(buffer, global_idx // self.bin_count, global_idx % self.bin_count, value)

    def paint_frame(self, buffer, bins):
        """Paint a full frame laid out as bins[beam * bin_count + bin]."""
        self._check_buffer(buffer)
        bins = np.asarray(bins).reshape(-1)
        if len(bins) != self.beam_count * self.bin_count:
            raise ValueError(f"expected {self.beam_count * self.bin_count} bins, got {len(bins)}")

        values = np.repeat(_clamp(bins, buffer.dtype), np.diff(self.offsets))
        xs, ys = self.data[:, 0], self.data[:, 1]
        level = buffer if buffer.ndim == 2 else buffer[..., 0]
        level = level.copy()
        np.maximum.at(level, (ys, xs), values)

        touched = np.zeros(self.shape, dtype=bool)
        touched[ys, xs] = True
        if buffer.ndim == 2:
            buffer[touched] = level[touched]
        else:
            buffer[touched] = level[touched][:, None]
        return buffer

    def coverage(self):
        """Number of cells each pixel belongs to, shape (height, width)."""
        counts = np.zeros(self.shape, dtype=np.int32)
        np.add.at(counts, (self.data[:, 1], self.data[:, 0]), 1)
        return counts
