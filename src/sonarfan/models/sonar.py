import datetime
from dataclasses import dataclass, field

import numpy as np

from .angle import Angle
from ..errors import InvalidConfiguration


def _seconds(duration):
    if isinstance(duration, datetime.timedelta):
        return duration.total_seconds()
    return float(duration)


def maximum_range(bin_duration, bin_count, speed_of_sound):
    return bin_duration * bin_count * speed_of_sound


def beam_step(bearings):
    """Radians between consecutive beams, from the first and last bearings."""
    return (bearings[-1] - bearings[0]).rad / (len(bearings) - 1)


def regular_bearings(start: Angle, step: Angle, beam_count):
    """Bearings start, start+step, ... for beam_count beams."""
    return tuple(start + step * i for i in range(int(beam_count)))


class SonarConfiguration:
    """
    Geometric parameters of one sonar setup. Everything the lookup table
    depends on lives here; intensities do not.
    """

    def __init__(self, bin_count, beam_count, beam_width, bin_duration,
                 speed_of_sound, bearings):
        self.bin_count = int(bin_count)
        self.beam_count = int(beam_count)
        self.beam_width = beam_width if isinstance(beam_width, Angle) else Angle(beam_width)
        self.bin_duration = _seconds(bin_duration)
        self.speed_of_sound = float(speed_of_sound)
        self.bearings = tuple(b if isinstance(b, Angle) else Angle(b) for b in bearings)

    @classmethod
    def regular(cls, bin_count, beam_count, beam_width, bin_duration,
                speed_of_sound, start, step):
        return cls(bin_count, beam_count, beam_width, bin_duration, speed_of_sound,
                   regular_bearings(start, step, beam_count))

    def validate(self):
        if self.beam_count < 2:
            raise InvalidConfiguration(f"beam_count must be >= 2, got {self.beam_count}")
        if self.bin_count < 1:
            raise InvalidConfiguration(f"bin_count must be >= 1, got {self.bin_count}")
        if len(self.bearings) != self.beam_count:
            raise InvalidConfiguration(
                f"beam_count is {self.beam_count} but {len(self.bearings)} bearings were given")
        if self.bearings[0] == self.bearings[-1]:
            raise InvalidConfiguration("first and last bearings are identical")
        if self.max_range <= 0:
            raise InvalidConfiguration(f"maximum range must be positive, got {self.max_range}")
        return self

    @property
    def max_range(self) -> float:
        return maximum_range(self.bin_duration, self.bin_count, self.speed_of_sound)

    @property
    def bin_length(self) -> float:
        return self.max_range / self.bin_count

    @property
    def step_angle(self) -> float:
        return beam_step(self.bearings)

    def __eq__(self, other):
        if not isinstance(other, SonarConfiguration):
            return NotImplemented
        return (self.bin_count == other.bin_count
                and self.beam_count == other.beam_count
                and self.beam_width == other.beam_width
                and self.bin_duration == other.bin_duration
                and self.speed_of_sound == other.speed_of_sound
                and self.bearings == other.bearings)

    __hash__ = None

    def __repr__(self):
        return (f"SonarConfiguration(bin_count={self.bin_count}, beam_count={self.beam_count}, "
                f"beam_width={self.beam_width!r}, bin_duration={self.bin_duration}, "
                f"speed_of_sound={self.speed_of_sound})")


@dataclass
class SonarSample:
    """One sonar telemetry record: geometry plus a frame of intensities."""

    bin_count: int
    beam_count: int
    beam_width: Angle
    bin_duration: object
    speed_of_sound: float
    bearings: list = field(default_factory=list)
    bins: np.ndarray = None
    time: datetime.datetime = None

    def __post_init__(self):
        if self.bins is None:
            self.bins = np.zeros(self.bin_count * self.beam_count, dtype=np.float32)
        else:
            self.bins = np.asarray(self.bins).reshape(-1)

    def configuration(self) -> SonarConfiguration:
        return SonarConfiguration(self.bin_count, self.beam_count, self.beam_width,
                                  self.bin_duration, self.speed_of_sound, self.bearings)

    def bin_index(self, beam_idx, bin_idx):
        return beam_idx * self.bin_count + bin_idx

    def set_regular_bearings(self, start: Angle, step: Angle):
        self.bearings = list(regular_bearings(start, step, self.beam_count))
