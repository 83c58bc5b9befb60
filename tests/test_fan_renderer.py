import logging

import numpy as np

from sonarfan.models.angle import Angle
from sonarfan.models.sonar import SonarSample
from sonarfan.renderers.fan_renderer import FanRenderer


def _sample(beam_width_deg=10, value=1):
    sample = SonarSample(bin_count=100, beam_count=3, beam_width=Angle.from_deg(beam_width_deg),
                         bin_duration=1.0, speed_of_sound=1.0,
                         bins=np.full(300, value, dtype=np.uint8))
    sample.set_regular_bearings(Angle.from_deg(-10), Angle.from_deg(10))
    return sample


def test_render_reuses_lut_for_matching_samples():
    renderer = FanRenderer(window_size=500)
    first = renderer.render(_sample())
    lut = renderer.lut
    second = renderer.render(_sample(value=2))
    assert renderer.lut is lut
    assert renderer.rebuilds == 1
    assert first.shape == second.shape == (500, 87, 3)
    assert first.dtype == np.uint8
    assert second.max() == 2


def test_render_rebuilds_on_geometry_change(caplog):
    renderer = FanRenderer(window_size=500)
    renderer.render(_sample())
    old = renderer.lut
    with caplog.at_level(logging.INFO, logger="sonarfan.renderers.fan_renderer"):
        renderer.render(_sample(beam_width_deg=30))
    assert renderer.lut is not old
    assert renderer.rebuilds == 2
    assert "Rebuilt sonar LUT" in caplog.text


def test_window_size_change_forces_rebuild():
    renderer = FanRenderer(window_size=500)
    renderer.render(_sample())
    renderer.set_window_size(250)
    img = renderer.render(_sample())
    assert renderer.rebuilds == 2
    assert img.shape[0] == 250


def test_render_into_existing_buffer():
    renderer = FanRenderer(window_size=500)
    lut = renderer.lut_for(_sample())
    buf = np.full((*lut.shape, 3), 5, dtype=np.uint8)
    out = renderer.render(_sample(value=1), buffer=buf)
    assert out is buf
    assert out.min() == 5
