"""Domain Entities - Accounts"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from typing import Optional


class User(BaseModel):
    """Account that owns bookings"""
    user_id: UUID = Field(default_factory=uuid4)
    username: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    disabled: bool = False

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    class Config:
        from_attributes = True


class UserInDB(User):
    """Account with its password hash"""
    hashed_password: str
