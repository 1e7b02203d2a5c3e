"""
Couple schemas for API validation.
"""
import re
from typing import Optional, Dict, Any
from pydantic import BaseModel, field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email_format(value: str) -> str:
    """Require a local@domain.tld shaped address."""
    if not value:
        raise ValueError("email is required")
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value


class CoupleCreate(BaseModel):
    """Schema for creating a single couple."""
    name: str
    email: str
    phone: Optional[str] = None
    partner1_name: Optional[str] = None
    partner2_name: Optional[str] = None
    wedding_date: Optional[str] = None
    budget: Optional[str] = None
    vibe_tags: Optional[str] = None
    venue_name: Optional[str] = None
    guest_count: Optional[str] = None
    venue_city: Optional[str] = None
    venue_state: Optional[str] = None

    class Config:
        str_strip_whitespace = True

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        return validate_email_format(v)

    @field_validator(
        "phone", "partner1_name", "partner2_name", "wedding_date", "budget",
        "vibe_tags", "venue_name", "guest_count", "venue_city", "venue_state",
    )
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def to_payload(self) -> Dict[str, Any]:
        """Edge function body; blank optional fields are omitted."""
        return self.model_dump(exclude_none=True)


class RecordCreateResponse(BaseModel):
    """Response for a single-record create."""
    message: str
    data: Optional[Any] = None
