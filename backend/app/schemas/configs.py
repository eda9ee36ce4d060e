from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, field_validator
import json


class ConfigRead(BaseModel):
    key: str
    value: Any
    type: str
    description: str
    category: str
    updated_by: Optional[int] = None
    updated_at: datetime

    @field_validator("value", mode="before")
    @classmethod
    def decode_value(cls, v):
        # stored as JSON text; hand-edited rows may not be, return them raw
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return v
        return v

    model_config = {"from_attributes": True}


class ConfigUpdate(BaseModel):
    value: Any
    updated_by: Optional[int] = None
