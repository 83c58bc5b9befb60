import math
import numpy as np

TWO_PI = 2 * math.pi


class Angle:
    """
    Immutable bearing value. Radians are kept normalized into (-pi, pi], so
    arithmetic wraps across the +-180 deg boundary instead of drifting.
    """
    __slots__ = ("_rad",)

    def __init__(self, rad=0.0):
        object.__setattr__(self, "_rad", Angle.normalize_rad(float(rad)))

    def __setattr__(self, name, value):
        raise AttributeError("Angle is immutable")

    def __reduce__(self):
        return (Angle, (self._rad,))

    @staticmethod
    def normalize_rad(rad):
        """Map radians into (-pi, pi]; accepts scalars or numpy arrays."""
        if isinstance(rad, np.ndarray):
            wrapped = np.mod(rad, TWO_PI)
            wrapped = np.where(wrapped > np.pi, wrapped - TWO_PI, wrapped)
            # in-range values pass through unchanged, as in the scalar branch
            return np.where((rad > np.pi) | (rad <= -np.pi), wrapped, rad)
        if -math.pi < rad <= math.pi:
            return rad
        out = math.fmod(rad, TWO_PI)
        if out > math.pi:
            out -= TWO_PI
        elif out <= -math.pi:
            out += TWO_PI
        return out

    @classmethod
    def from_rad(cls, rad):
        return cls(rad)

    @classmethod
    def from_deg(cls, deg):
        return cls(math.radians(deg))

    @property
    def rad(self) -> float:
        return self._rad

    @property
    def deg(self) -> float:
        return math.degrees(self._rad)

    def __add__(self, other):
        if not isinstance(other, Angle):
            return NotImplemented
        return Angle(self._rad + other._rad)

    def __sub__(self, other):
        if not isinstance(other, Angle):
            return NotImplemented
        return Angle(self._rad - other._rad)

    def __mul__(self, k):
        if isinstance(k, Angle):
            return NotImplemented
        return Angle(self._rad * k)

    __rmul__ = __mul__

    def __neg__(self):
        return Angle(-self._rad)

    def __eq__(self, other):
        if not isinstance(other, Angle):
            return NotImplemented
        return self._rad == other._rad

    def __hash__(self):
        return hash(self._rad)

    def __lt__(self, other):
        if not isinstance(other, Angle):
            return NotImplemented
        return self._rad < other._rad

    def __le__(self, other):
        if not isinstance(other, Angle):
            return NotImplemented
        return self._rad <= other._rad

    def __repr__(self):
        return f"Angle({self.deg:.6g} deg)"


class AngleSegment:
    """Closed angular interval [start, start + width], allowed to wrap past +pi once."""

    def __init__(self, start, width):
        # start may be an Angle or normalized radians, scalar or array
        self.width = width
        self.start_rad = start.rad if isinstance(start, Angle) else start
        self.end_rad = self.start_rad + self.width

    def is_inside(self, angle: Angle) -> bool:
        rad = angle.rad
        if rad < self.start_rad:
            rad += TWO_PI
        return rad <= self.end_rad

    def contains(self, rads):
        rads = np.asarray(rads, dtype=np.float64)
        rads = np.where(rads < self.start_rad, rads + TWO_PI, rads)
        return rads <= self.end_rad

    def __repr__(self):
        return f"AngleSegment(start={self.start_rad}, width={self.width})"
