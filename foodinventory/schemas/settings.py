from pydantic import BaseModel, ConfigDict, field_validator


class SettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    expiry_warning_days: int


class SettingsUpdate(BaseModel):
    expiry_warning_days: int

    @field_validator("expiry_warning_days")
    @classmethod
    def _at_least_one_day(cls, v: int) -> int:
        if v < 1:
            raise ValueError("expiry_warning_days must be >= 1")
        return v
