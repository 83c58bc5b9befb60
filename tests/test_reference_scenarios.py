"""
Full-table checks against a pixel-by-pixel nested-loop build of the same
mapping, for the four device setups the renderer was originally tuned on.
"""
import math

import numpy as np
import pytest

from sonarfan.lut.index import SonarToImageLUT
from sonarfan.models.angle import Angle, AngleSegment
from sonarfan.models.sonar import SonarConfiguration
from sonarfan.utils.raster import blank_raster, to_gray

WINDOW_SIZE = 500

SCENARIOS = {
    # 16 beams, narrower than the step between them
    "gaps": dict(bin_count=10, beam_count=16, start=-65, step=0.25390625 * 32,
                 beam_width=0.2 * 32),
    "beam_width_equals_step": dict(bin_count=10, beam_count=512, start=-65,
                                   step=0.25390625, beam_width=0.25390625),
    "overlapping_beams": dict(bin_count=10, beam_count=512, start=-65,
                              step=0.25390625, beam_width=0.3),
    "range_exceeds_chord": dict(bin_count=100, beam_count=3, start=-10, step=10,
                                beam_width=10),
}


def _config(bin_count, beam_count, start, step, beam_width):
    return SonarConfiguration.regular(
        bin_count, beam_count, Angle.from_deg(beam_width), 1.0, 1.0,
        Angle.from_deg(start), Angle.from_deg(step))


def _round(x):
    return math.floor(x + 0.5) if x >= 0 else -math.floor(-x + 0.5)


def _reference_cells(config, window_size):
    """One pixel at a time, x outer, y inner; returns (width, height, cells)."""
    bearings = config.bearings
    half = config.beam_width.rad / 2
    max_range = config.bin_duration * config.bin_count * config.speed_of_sound
    fov = bearings[0] - bearings[-1] + Angle(abs(config.beam_width.rad))
    chord = abs(2 * max_range * math.sin(fov.rad / 2))
    bin_length = max_range / config.bin_count
    step = (bearings[-1] - bearings[0]).rad / (config.beam_count - 1)
    if max_range >= chord:
        per_pixel = max_range / window_size
        width, height = _round(chord / per_pixel), window_size
    else:
        per_pixel = chord / window_size
        width, height = window_size, _round(max_range / per_pixel)
    ox, oy = width // 2, height

    def inside(idx, theta):
        if idx < 0 or idx >= len(bearings):
            return False
        return AngleSegment(bearings[idx] - Angle(half), 2 * half).is_inside(theta)

    cells = [[] for _ in range(config.beam_count * config.bin_count)]
    for x in range(width):
        for y in range(height):
            dx, dy = x - ox, y - oy
            bin_idx = _round(math.hypot(dx, dy) * per_pixel / bin_length)
            if bin_idx >= config.bin_count:
                continue
            theta = Angle(math.atan2(-dx, -dy))
            idx = _round(abs((theta - bearings[0]).rad) / step)
            if not inside(idx, theta):
                continue
            lo = hi = idx
            while inside(lo - 1, theta):
                lo -= 1
            while inside(hi + 1, theta):
                hi += 1
            for beam in range(lo, hi + 1):
                cells[beam * config.bin_count + bin_idx].append((x, y))
    return width, height, cells


@pytest.fixture(scope="module", params=sorted(SCENARIOS))
def scenario(request):
    config = _config(**SCENARIOS[request.param])
    return config, SonarToImageLUT(config, WINDOW_SIZE), _reference_cells(config, WINDOW_SIZE)


def test_table_matches_pixel_loop(scenario):
    _, lut, (width, height, cells) = scenario
    assert (lut.window_width, lut.window_height) == (width, height)

    sizes = [len(c) for c in cells]
    np.testing.assert_array_equal(lut.offsets, np.concatenate([[0], np.cumsum(sizes)]))
    expected = np.array([p for c in cells for p in c], dtype=np.int32).reshape(-1, 2)
    np.testing.assert_array_equal(lut.data, expected)


def test_frame_of_ones_reproduces_reference_raster(scenario):
    config, lut, (width, height, cells) = scenario
    expected = np.zeros((height, width), dtype=np.uint8)
    for cell in cells:
        for x, y in cell:
            expected[y, x] = 255

    img = blank_raster(lut)
    lut.paint_frame(img, np.ones(config.beam_count * config.bin_count, dtype=np.uint8))
    np.testing.assert_array_equal(to_gray(img, scale=255), expected)


def test_window_sizes():
    assert SonarToImageLUT(_config(**SCENARIOS["range_exceeds_chord"]), WINDOW_SIZE).shape == (500, 87)
    for name in ("gaps", "beam_width_equals_step", "overlapping_beams"):
        lut = SonarToImageLUT(_config(**SCENARIOS[name]), WINDOW_SIZE)
        assert lut.window_width == WINDOW_SIZE
        assert lut.window_height < WINDOW_SIZE
