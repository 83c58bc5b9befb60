from pydantic import BaseModel, Field

from .models.angle import Angle
from .models.sonar import SonarConfiguration


class SonarSettings(BaseModel):
    bin_count: int = Field(100, ge=1, description="Range bins per beam")
    beam_count: int = Field(3, ge=2, description="Number of beams")
    beam_width_deg: float = Field(10.0, description="Full beam width")
    bin_duration_s: float = Field(1.0, gt=0, description="Time per range bin")
    speed_of_sound: float = Field(1.0, gt=0)
    bearing_start_deg: float = Field(-10.0, description="Bearing of the first beam")
    bearing_step_deg: float = Field(10.0, description="Bearing increment between beams")

    def to_configuration(self) -> SonarConfiguration:
        return SonarConfiguration.regular(
            self.bin_count, self.beam_count, Angle.from_deg(self.beam_width_deg),
            self.bin_duration_s, self.speed_of_sound,
            Angle.from_deg(self.bearing_start_deg), Angle.from_deg(self.bearing_step_deg))


class RenderSettings(BaseModel):
    window_size: int = Field(500, ge=1, description="Longest raster side in pixels")


class AppConfig(BaseModel):
    sonar: SonarSettings = SonarSettings()
    render: RenderSettings = RenderSettings()
