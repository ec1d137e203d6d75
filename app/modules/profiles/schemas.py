from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class ProfileUpdate(BaseModel):
    # Sending display_name: null clears it; omitting it leaves it unchanged
    display_name: Optional[str] = Field(default=None, max_length=100)


class ProfileResponse(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ProfileResponse":
        return cls(
            id=str(row["id"]),
            email=row["email"],
            display_name=row.get("user_name"),
            created_at=row["created_at"],
        )
