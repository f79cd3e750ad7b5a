from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# --- Users ---

class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8)


class UserUpdate(BaseModel):
    """Profile update; omitted fields stay as they are, as does an empty password."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_length(cls, value: Optional[str]) -> Optional[str]:
        if value and len(value) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return value


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    email: str
    task_count: int = 0


# --- Tasks ---

class TaskWrite(BaseModel):
    """Body of both create and full-replacement update."""
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_completed: bool = False
    owner_id: int
    order: int = 0


class TaskRead(BaseModel):
    # Frozen so the client store can snapshot its list without deep copies
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    title: str
    description: Optional[str] = None
    is_completed: bool = False
    order: int = 0
    owner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskOrderUpdate(BaseModel):
    id: int
    order: int
