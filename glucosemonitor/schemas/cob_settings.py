"""COB engine settings schemas."""

from pydantic import BaseModel

from glucosemonitor.core.cob_engine.constants import (
    MAX_DURATION_MINUTES,
    MAX_GLUCOSE_FACTOR,
)
from glucosemonitor.core.cob_engine.enums import DecayCurve
from glucosemonitor.core.cob_engine.models import EngineConfig


class COBSettingsResponse(BaseModel):
    """Response schema for the engine configuration in effect."""

    model_config = {"from_attributes": True}

    carb_absorption_minutes: float
    insulin_action_minutes: float
    carb_peak_minutes: float
    insulin_peak_minutes: float
    carb_to_glucose_factor: float
    insulin_to_glucose_factor: float
    carb_curve: DecayCurve
    insulin_curve: DecayCurve
    customized: bool = False

    @classmethod
    def from_config(cls, config: EngineConfig, *, customized: bool) -> "COBSettingsResponse":
        return cls.model_validate({**config.model_dump(), "customized": customized})


class COBSettingsExistsResponse(BaseModel):
    """Whether custom settings are in effect."""

    exists: bool


class COBSettingsDefaults(BaseModel):
    """Default engine configuration and accepted bounds, for reference."""

    defaults: EngineConfig
    max_duration_minutes: float = MAX_DURATION_MINUTES
    max_glucose_factor: float = MAX_GLUCOSE_FACTOR
    curves: list[DecayCurve] = list(DecayCurve)
