"""Shared sonar geometries for the LUT tests."""
import pytest

from sonarfan.lut.index import SonarToImageLUT
from sonarfan.models.angle import Angle
from sonarfan.models.sonar import SonarConfiguration

WINDOW_SIZE = 500


def three_beam_config(beam_width_deg):
    # beams at -10, 0, +10 deg, 100 one-metre bins
    return SonarConfiguration.regular(
        bin_count=100, beam_count=3, beam_width=Angle.from_deg(beam_width_deg),
        bin_duration=1.0, speed_of_sound=1.0,
        start=Angle.from_deg(-10), step=Angle.from_deg(10))


@pytest.fixture(scope="session")
def narrow_fan():
    return three_beam_config(10)


@pytest.fixture(scope="session")
def narrow_lut(narrow_fan):
    return SonarToImageLUT(narrow_fan, WINDOW_SIZE)


@pytest.fixture(scope="session")
def overlap_lut():
    return SonarToImageLUT(three_beam_config(30), WINDOW_SIZE)


@pytest.fixture(scope="session")
def gap_lut():
    return SonarToImageLUT(three_beam_config(2), WINDOW_SIZE)


@pytest.fixture
def make_config():
    return three_beam_config
