from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    message: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime
