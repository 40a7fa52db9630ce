from pydantic import BaseModel, Field, field_validator
from typing import Dict
from datetime import datetime


class SettingValue(BaseModel):
    value: str = Field(..., min_length=1)

    @field_validator('value', mode='before')
    @classmethod
    def coerce_value(cls, v):
        # Numbers and booleans are stored as their string form
        if isinstance(v, (int, float, bool)):
            return str(v)
        return v


class SettingOut(BaseModel):
    key: str
    value: str
    updated_at: datetime

    class Config:
        from_attributes = True


class SettingsBulkUpdate(BaseModel):
    settings: Dict[str, str]

    @field_validator('settings', mode='before')
    @classmethod
    def coerce_values(cls, v):
        if isinstance(v, dict):
            return {k: str(val) if isinstance(val, (int, float, bool)) else val for k, val in v.items()}
        return v


class SettingsMap(BaseModel):
    settings: Dict[str, str]
