"""
User data models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Never leaves the document store
PRIVATE_FIELDS = {"password_hash"}


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password_hash: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class User(BaseModel):
    id: str
    name: str
    email: str
    password_hash: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    def public_view(self) -> dict:
        """Snapshot safe to cache or return to clients."""
        return self.model_dump(mode="json", exclude=PRIVATE_FIELDS)
