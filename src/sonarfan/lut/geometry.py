"""
Polar -> Cartesian geometry for the sonar fan.

Raster convention: origin top-left, y down. The sonar head sits at the
bottom-center pixel and the beams fan upward. Bearings follow a
forward/left frame: 0 points up the image, positive bearings to the left.
"""
import logging
from dataclasses import dataclass

import numpy as np

from ..errors import InvalidConfiguration
from ..models.angle import Angle, AngleSegment
from ..models.sonar import beam_step, maximum_range

logger = logging.getLogger(__name__)


def _round(x):
    # half away from zero
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


@dataclass(frozen=True)
class WindowGeometry:
    width: int
    height: int
    distance_per_pixel: float
    max_range: float
    chord: float
    bin_length: float
    step_angle: float

    @property
    def origin(self):
        return self.width // 2, self.height


@dataclass
class RawCellTable:
    """
    Per-cell pixel lists before linearization, stored as parallel arrays:
    cell_ids[k] is the flat cell index (beam*bin_count + bin) that points[k]
    (an (x, y) pixel) belongs to. A pixel appears once per cell it falls in.
    """
    beam_count: int
    bin_count: int
    cell_ids: np.ndarray
    points: np.ndarray

    def __len__(self):
        return len(self.cell_ids)

    @property
    def cell_count(self):
        return self.beam_count * self.bin_count

    def cell_sizes(self):
        return np.bincount(self.cell_ids, minlength=self.cell_count)

    def pixels(self, beam_idx, bin_idx):
        return self.points[self.cell_ids == beam_idx * self.bin_count + bin_idx]


def compute_chord(max_range, bearings, beam_width: Angle):
    fov = bearings[0] - bearings[-1] + Angle(abs(beam_width.rad))
    return abs(2 * max_range * np.sin(fov.rad / 2))


def window_geometry(bin_count, beam_count, beam_width, bin_duration, speed_of_sound,
                    bearings, window_size) -> WindowGeometry:
    """Raster size for the fan, longest side fitted to window_size, aspect preserved."""
    max_range = maximum_range(bin_duration, bin_count, speed_of_sound)
    chord = compute_chord(max_range, bearings, beam_width)
    bin_length = max_range / bin_count
    step_angle = beam_step(bearings)

    if max_range >= chord:
        distance_per_pixel = max_range / window_size
        width = int(_round(chord / distance_per_pixel))
        height = int(window_size)
    else:
        distance_per_pixel = chord / window_size
        width = int(window_size)
        height = int(_round(max_range / distance_per_pixel))

    if width < 1 or height < 1:
        raise InvalidConfiguration(
            f"field of view yields an empty {width}x{height} raster at window size {window_size}")

    logger.debug("Sonar window %dx%d: range=%.3f chord=%.3f %.4f/px",
                 width, height, max_range, chord, distance_per_pixel)
    return WindowGeometry(width, height, distance_per_pixel, max_range, chord,
                          bin_length, step_angle)


def bin_positions(dx, dy, distance_per_pixel, bin_length):
    distance = np.hypot(dx, dy) * distance_per_pixel
    return _round(distance / bin_length).astype(np.int64)


def pixel_bearings(dx, dy):
    # raster (right, down) -> (forward, left): x' = -dy, y' = -dx
    return Angle.normalize_rad(np.arctan2(-dx, -dy).astype(np.float64))


def closest_beam_idx(theta, step_angle, initial_angle: Angle):
    delta = np.abs(Angle.normalize_rad(theta - initial_angle.rad))
    return _round(delta / step_angle).astype(np.int64)


def inside_beam(idx, theta, bearings_rad, half_beam_width):
    """True where theta lies within bearings[idx] +- half_beam_width; False for invalid idx."""
    idx = np.asarray(idx)
    valid = (idx >= 0) & (idx < len(bearings_rad))
    start = Angle.normalize_rad(bearings_rad[np.clip(idx, 0, len(bearings_rad) - 1)]
                                - half_beam_width)
    return valid & AngleSegment(start, 2 * half_beam_width).contains(theta)


def beam_index_range(dx, dy, half_beam_width, bearings, step_angle):
    """
    Inclusive (min_idx, max_idx) beam range containing each pixel's bearing.

    The closest beam is found from the angular step; pixels outside it fall
    in a gap between beams and are flagged invalid. Otherwise the range
    grows outward while neighbouring beams still contain the bearing, which
    happens when beams are wider than the step between them.
    """
    bearings_rad = np.array([b.rad for b in bearings], dtype=np.float64)
    theta = pixel_bearings(dx, dy)
    closest = closest_beam_idx(theta, step_angle, bearings[0])
    valid = inside_beam(closest, theta, bearings_rad, half_beam_width)

    lo = closest.copy()
    hi = closest.copy()
    for bound, direction in ((lo, -1), (hi, 1)):
        growing = valid.copy()
        while growing.any():
            cand = bound + direction
            growing &= inside_beam(cand, theta, bearings_rad, half_beam_width)
            bound[growing] = cand[growing]
    return valid, np.minimum(lo, hi), np.maximum(lo, hi)


def build_raw_table(bin_count, beam_count, beam_width, bin_duration, speed_of_sound,
                    bearings, window_size):
    """
    Assign every raster pixel to the (beam, bin) cells that illuminate it.

    Returns (width, height, RawCellTable). Pixels beyond the last bin or in
    a gap between beams are left unassigned.
    """
    if beam_count < 2:
        raise InvalidConfiguration(f"beam_count must be >= 2, got {beam_count}")
    if bin_count < 1:
        raise InvalidConfiguration(f"bin_count must be >= 1, got {bin_count}")
    if window_size < 1:
        raise InvalidConfiguration(f"window_size must be >= 1, got {window_size}")
    if len(bearings) != beam_count:
        raise InvalidConfiguration(
            f"beam_count is {beam_count} but {len(bearings)} bearings were given")
    if bearings[0] == bearings[-1]:
        raise InvalidConfiguration("first and last bearings are identical")
    if bin_duration * speed_of_sound <= 0:
        raise InvalidConfiguration("bin_duration and speed_of_sound must give a positive range")

    geom = window_geometry(bin_count, beam_count, beam_width, bin_duration,
                           speed_of_sound, bearings, window_size)
    ox, oy = geom.origin

    # x-major pixel order, y inner
    X, Y = np.meshgrid(np.arange(geom.width), np.arange(geom.height), indexing="ij")
    X = X.reshape(-1)
    Y = Y.reshape(-1)
    dx = X - ox
    dy = Y - oy

    bins = bin_positions(dx, dy, geom.distance_per_pixel, geom.bin_length)
    in_range = bins < bin_count
    valid, lo, hi = beam_index_range(dx[in_range], dy[in_range], beam_width.rad / 2,
                                     bearings, geom.step_angle)
    keep = np.flatnonzero(in_range)[valid]
    lo = lo[valid]
    counts = hi[valid] - lo + 1

    # one entry per (pixel, beam)
    owner = np.repeat(np.arange(len(keep)), counts)
    first = np.cumsum(counts) - counts
    beam_idx = lo[owner] + (np.arange(len(owner)) - first[owner])
    pix = keep[owner]
    cell_ids = beam_idx * bin_count + bins[pix]

    inside = (cell_ids >= 0) & (cell_ids < bin_count * beam_count)
    cell_ids = cell_ids[inside]
    pix = pix[inside]
    points = np.stack([X[pix], Y[pix]], axis=1).astype(np.int32)
    return geom.width, geom.height, RawCellTable(beam_count, bin_count, cell_ids, points)


def build(config, window_size):
    """build_raw_table() for a SonarConfiguration."""
    return build_raw_table(config.bin_count, config.beam_count, config.beam_width,
                           config.bin_duration, config.speed_of_sound,
                           config.bearings, window_size)
