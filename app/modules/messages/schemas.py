from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)
    is_user_message: bool


class MessageUpdate(BaseModel):
    content: Optional[str] = None


class MessageResponse(BaseModel):
    id: str
    user_id: str
    content: str
    is_user_message: bool
    timestamp: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MessageResponse":
        return cls(**{**row, "id": str(row["id"]), "user_id": str(row["user_id"])})


class ClearMessagesResponse(BaseModel):
    deleted: int
