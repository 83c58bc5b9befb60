class SonarFanError(Exception):
    """Base class for errors raised by sonarfan."""


class InvalidConfiguration(SonarFanError, ValueError):
    """The sonar geometry cannot be turned into a lookup table."""
